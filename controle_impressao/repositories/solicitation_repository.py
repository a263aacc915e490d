# controle_impressao/repositories/solicitation_repository.py

from __future__ import annotations

from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy import ColumnElement, and_, func, or_, select, true
from sqlalchemy.orm import Session

from controle_impressao.core.base_repository import BaseRepository
from controle_impressao.core.exceptions import BadRequestError
from controle_impressao.infrastructure.database.models.solicitation_model import SolicitationModel

# nomes aceitos em `sortColumn` -> coluna
_SORT_COLUMNS = {
    "id": SolicitationModel.id,
    "deadline": SolicitationModel.deadline,
    "creationDate": SolicitationModel.creation_date,
    "conclusionDate": SolicitationModel.conclusion_date,
    "archived": SolicitationModel.archived,
    "totalPageCount": SolicitationModel.total_page_count,
    # campos aninhados do dono
    "registrationNumber": SolicitationModel.owner_registration_number,
    "commonName": SolicitationModel.owner_common_name,
}


def build_solicitation_filters(
    *,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    text_query: str | None = None,
    is_concluded: bool | None = None,
    owner_registration: str | None = None,
) -> ColumnElement[bool]:
    """Monta o predicado de filtragem da listagem de solicitações.

    Filtros de data, conclusão e matrícula são combinados com AND. Os termos
    da busca textual (nome, matrícula, ID, prazo) são combinados com OR e o
    resultado entra no AND final.
    """
    clauses: list[ColumnElement[bool]] = []

    # 'start_date' e 'end_date' marcam o início dos seus dias
    if start_date is not None:
        clauses.append(SolicitationModel.creation_date >= start_date)

    if end_date is not None:
        # +1 dia para incluir as solicitações do próprio dia final
        clauses.append(SolicitationModel.creation_date <= end_date + timedelta(days=1))

    if is_concluded is not None:
        if is_concluded:
            clauses.append(SolicitationModel.conclusion_date.is_not(None))
        else:
            clauses.append(SolicitationModel.conclusion_date.is_(None))

    if owner_registration is not None:
        clauses.append(SolicitationModel.owner_registration_number == owner_registration)

    if text_query:
        q = text_query.strip()
        query_clauses: list[ColumnElement[bool]] = [
            func.lower(func.trim(SolicitationModel.owner_common_name)).contains(q.lower(), autoescape=True),
            func.trim(SolicitationModel.owner_registration_number).contains(q, autoescape=True),
        ]

        try:
            number = int(q)
        except ValueError:
            logger.debug("Query não é numérica: {}", text_query)
        else:
            query_clauses.append(SolicitationModel.id == number)
            query_clauses.append(SolicitationModel.deadline == number)

        clauses.append(or_(*query_clauses))

    if not clauses:
        return true()
    return and_(*clauses)


def resolve_sort(sort_column: str | None, sort_direction: str | None):
    if not sort_column:
        return SolicitationModel.id.asc()

    column = _SORT_COLUMNS.get(sort_column)
    if column is None:
        raise BadRequestError(f"Coluna de ordenação inválida: '{sort_column}'.")

    if (sort_direction or "").lower() == "desc":
        return column.desc()
    return column.asc()


class SolicitationRepository(BaseRepository[SolicitationModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_id(self, solicitation_id: int) -> SolicitationModel | None:
        return self._session.get(SolicitationModel, solicitation_id)

    def delete(self, model: SolicitationModel) -> None:
        self._session.delete(model)
        self._session.flush()

    def list_filtered(self, predicate: ColumnElement[bool]) -> list[SolicitationModel]:
        stmt = select(SolicitationModel).where(predicate).order_by(SolicitationModel.id.asc())
        return list(self._session.execute(stmt).scalars().all())

    def list_page(
        self,
        predicate: ColumnElement[bool],
        *,
        order_by,
        limit: int,
        offset: int,
    ) -> tuple[list[SolicitationModel], int]:
        total_stmt = select(func.count()).select_from(SolicitationModel).where(predicate)
        total = int(self._session.execute(total_stmt).scalar_one())

        # id como desempate para paginação estável
        page_stmt = (
            select(SolicitationModel)
            .where(predicate)
            .order_by(order_by, SolicitationModel.id.asc())
            .limit(int(limit))
            .offset(int(offset))
        )
        rows = list(self._session.execute(page_stmt).scalars().all())
        return rows, total

    def list_stale_ids(self, *, closed_before: datetime) -> list[int]:
        stmt = (
            select(SolicitationModel.id)
            .where(
                SolicitationModel.archived.is_(False),
                SolicitationModel.conclusion_date.is_not(None),
                SolicitationModel.conclusion_date < closed_before,
            )
            .order_by(SolicitationModel.id.asc())
        )
        return [int(i) for i in self._session.execute(stmt).scalars().all()]

    def get_for_update(self, solicitation_id: int) -> SolicitationModel | None:
        # sqlite ignora o FOR UPDATE
        stmt = (
            select(SolicitationModel)
            .where(SolicitationModel.id == solicitation_id)
            .with_for_update(skip_locked=True)
        )
        return self._session.execute(stmt).scalars().first()
