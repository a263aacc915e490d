# controle_impressao/repositories/copy_repository.py
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from controle_impressao.core.base_repository import BaseRepository
from controle_impressao.infrastructure.database.models.copy_model import CopyModel


class CopyRepository(BaseRepository[CopyModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def list_by_solicitation_id(self, solicitation_id: int, query: str | None = None) -> list[CopyModel]:
        stmt = select(CopyModel).where(CopyModel.solicitation_id == solicitation_id)

        if query:
            stmt = stmt.where(
                func.lower(func.trim(CopyModel.file_name)).contains(query.strip().lower(), autoescape=True)
            )

        stmt = stmt.order_by(CopyModel.id.asc())
        return list(self._session.execute(stmt).scalars().all())

    def update_file_status(self, copy_id: int, status: bool) -> bool:
        stmt = (
            update(CopyModel)
            .where(CopyModel.id == copy_id)
            .values(file_in_disk=status)
            .execution_options(synchronize_session="fetch")
        )
        res = self._session.execute(stmt)
        return (res.rowcount or 0) > 0
