# controle_impressao/services/file_reconciler.py

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from controle_impressao.core.exceptions import BadRequestError, InternalError
from controle_impressao.infrastructure.database.models.copy_model import CopyModel
from controle_impressao.infrastructure.database.models.solicitation_model import SolicitationModel
from controle_impressao.infrastructure.storage.file_storage import FileStorage, UploadedFile
from controle_impressao.repositories.solicitation_repository import SolicitationRepository
from controle_impressao.services.access_control import solicitation_not_found
from controle_impressao.services.copy_service import CopyService


@dataclass(frozen=True)
class FolderRemoval:
    """Resultado da remoção da pasta de uma solicitação; `warning` só em caso de falha."""

    path: Path
    removed: bool
    warning: str | None = None


class FileReconciler:
    def __init__(
        self,
        *,
        storage: FileStorage,
        copy_service: CopyService,
        solicitation_repo: SolicitationRepository,
    ) -> None:
        self._storage = storage
        self._copy_service = copy_service
        self._solicitation_repo = solicitation_repo
        # ids das cópias cujo arquivo saiu do disco nesta instância
        self._taken_off_disk: list[int] = []

    def solicitation_dir(self, solicitation: SolicitationModel) -> Path:
        return self._storage.solicitation_dir(
            registration_number=solicitation.owner_registration_number,
            solicitation_id=solicitation.id,
        )

    @staticmethod
    def filter_upload_delete(
        updated: SolicitationModel, original: SolicitationModel
    ) -> tuple[list[CopyModel], list[CopyModel]]:
        """Compara as cópias por nome de arquivo.

        Retorna (a enviar, a remover): cópias novas na versão atualizada e
        cópias da versão original que deixaram de existir.
        """
        updated_names = {c.file_name for c in updated.copies}
        original_names = {c.file_name for c in original.copies}

        to_upload = [c for c in updated.copies if c.file_name not in original_names]
        to_delete = [c for c in original.copies if c.file_name not in updated_names]
        return to_upload, to_delete

    def save_files(
        self,
        solicitation: SolicitationModel,
        files: list[UploadedFile],
        is_new_request: bool,
    ) -> None:
        copies_to_upload: list[CopyModel] = list(solicitation.copies)
        copies_to_delete: list[CopyModel] = []

        if not is_new_request:
            base = self._solicitation_repo.get_by_id(solicitation.id)
            if base is None:
                raise solicitation_not_found(solicitation.id)

            # o dono não muda na edição (ex.: admin editando)
            solicitation.owner = base.owner
            copies_to_upload, copies_to_delete = self.filter_upload_delete(solicitation, base)

        if len(files) < len(copies_to_upload):
            raise BadRequestError(
                f"O número de arquivos enviados ({len(files)}) não corresponde ao "
                f"número de cópias para carregar ({len(copies_to_upload)})."
            )

        # anexos de mesmo nome já existem na solicitação: não sobrescreve
        if len(files) > len(copies_to_upload):
            logger.warning(
                "Solicitação {}: {} arquivo(s) enviados para {} cópia(s) novas; nada foi gravado",
                solicitation.id,
                len(files),
                len(copies_to_upload),
            )
            return

        directory = self.solicitation_dir(solicitation)

        try:
            self._storage.ensure_dir(directory)

            # pareamento posicional: arquivo i -> cópia i
            for uploaded, copy in zip(files, copies_to_upload):
                has_content = uploaded.size > 0
                if has_content:
                    path = self._storage.file_path(directory, copy.file_name)
                    self._storage.write(path, uploaded.data)
                    logger.info("Arquivo salvo: {}", path)

                copy.file_in_disk = has_content
                copy.is_physical_file = not has_content
                self._copy_service.save(copy)

        except Exception as e:
            # aborta e desfaz o que já foi gravado nesta chamada
            self.delete_files(copies_to_upload, directory)
            if isinstance(e, OSError):
                raise InternalError(f"Erro ao salvar os arquivos da solicitação: {e}") from e
            raise

        finally:
            if not is_new_request:
                self.delete_files(copies_to_delete, directory)

    def delete_files(self, copies: list[CopyModel], directory: Path) -> int:
        deleted = 0
        for copy in copies or []:
            path = self._storage.file_path(directory, copy.file_name)

            try:
                if self._storage.delete(path):
                    logger.info("Arquivo removido: {}", path)
                    deleted += 1
                else:
                    logger.info("Arquivo não encontrado: {}", path)
            except OSError as e:
                logger.error("Falha ao remover arquivo {}: {}", path, e)

            # arquivo fora do disco, mesmo que já não existisse
            copy.file_in_disk = False
            self._copy_service.update_file_status(copy.id, False)
            if copy.id is not None:
                self._taken_off_disk.append(copy.id)

        return deleted

    def taken_off_disk(self) -> list[int]:
        """Ids das cópias que `delete_files` marcou fora do disco."""
        return list(self._taken_off_disk)

    def remove_folder(self, directory: Path) -> FolderRemoval:
        try:
            removed = self._storage.remove_tree(directory)
        except OSError as e:
            logger.warning("Erro ao deletar diretório {}: {}", directory, e)
            return FolderRemoval(path=directory, removed=False, warning=str(e))

        if not removed:
            logger.info("Diretório não encontrado: {}", directory)
            return FolderRemoval(path=directory, removed=False)

        logger.info("Diretório removido: {}", directory)
        return FolderRemoval(path=directory, removed=True)
