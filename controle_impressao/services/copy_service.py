# controle_impressao/services/copy_service.py

from __future__ import annotations

from typing import Any

from controle_impressao.infrastructure.database.models.copy_model import CopyModel
from controle_impressao.repositories.copy_repository import CopyRepository


class CopyService:
    def __init__(self, *, copy_repo: CopyRepository) -> None:
        self._copy_repo = copy_repo

    def instance_copies_from_draft(self, copies: list[dict[str, Any]]) -> list[CopyModel]:
        """Cria os registros de cópia (ainda sem solicitação) a partir dos dados enviados."""
        out: list[CopyModel] = []
        for c in copies:
            out.append(
                CopyModel(
                    file_name=str(c["file_name"]).strip(),
                    file_type=c.get("file_type"),
                    page_count=int(c["page_count"]),
                    print_config=dict(c.get("print_config") or {}),
                    notes=c.get("notes"),
                    file_in_disk=False,
                    is_physical_file=False,
                )
            )
        return out

    def save(self, copy: CopyModel) -> CopyModel:
        # cópias de rascunho (edição) ainda não têm id: são persistidas no patch
        if copy.id is None:
            return copy
        return self._copy_repo.save(copy)

    def update_file_status(self, copy_id: int | None, status: bool) -> bool:
        if copy_id is None:
            return False
        return self._copy_repo.update_file_status(copy_id, status)

    def find_all_by_solicitation_id(self, solicitation_id: int, query: str | None = None) -> list[CopyModel]:
        return self._copy_repo.list_by_solicitation_id(solicitation_id, query)
