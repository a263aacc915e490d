# controle_impressao/services/access_control.py

from __future__ import annotations

from controle_impressao.core.enums import MUTATING_EVENT_TYPES, EventType
from controle_impressao.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from controle_impressao.entities.user import User
from controle_impressao.infrastructure.database.models.solicitation_model import SolicitationModel
from controle_impressao.repositories.solicitation_repository import SolicitationRepository


def solicitation_not_found(solicitation_id: int) -> NotFoundError:
    return NotFoundError(f"Solicitação (ID {int(solicitation_id):06d}) não encontrada.")


def is_owner_or_staff(user: User, solicitation: SolicitationModel) -> bool:
    if user.is_admin_or_manager():
        return True
    return (
        user.registration_number is not None
        and user.registration_number == solicitation.owner_registration_number
    )


class AccessControlService:
    """Ponto único de verificação de acesso a uma solicitação.

    Toda rota que lê ou altera uma solicitação passa por `can_interact` antes de
    qualquer efeito colateral.
    """

    def __init__(self, *, solicitation_repo: SolicitationRepository) -> None:
        self._solicitation_repo = solicitation_repo

    def can_interact(self, solicitation_id: int, user: User, event_type: EventType) -> SolicitationModel:
        solicitation = self._solicitation_repo.get_by_id(solicitation_id)
        if solicitation is None:
            raise solicitation_not_found(solicitation_id)

        # edição/exclusão bloqueadas após o arquivamento
        if event_type in MUTATING_EVENT_TYPES and solicitation.archived:
            raise ForbiddenError("Não é possível alterar solicitações arquivadas.")

        if not is_owner_or_staff(user, solicitation):
            raise UnauthorizedError("Usuário não autorizado a acessar esta solicitação.")

        return solicitation
