import pytest

from controle_impressao.core.enums import EventType
from controle_impressao.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from controle_impressao.repositories.solicitation_repository import SolicitationRepository
from controle_impressao.services.access_control import AccessControlService, is_owner_or_staff


@pytest.fixture
def access_control(session):
    return AccessControlService(solicitation_repo=SolicitationRepository(session))


class TestCanInteract:
    """Owner/staff checks and the archived lock."""

    def test_owner_can_view_and_edit(self, access_control, create_solicitation, owner):
        # Setup
        solicitation = create_solicitation()

        # Execute / Assert
        for event_type in (EventType.REQUEST_VIEWING, EventType.REQUEST_EDITING, EventType.REQUEST_DELETING):
            assert access_control.can_interact(solicitation.id, owner, event_type) is solicitation

    def test_staff_can_interact_with_any_solicitation(
        self, access_control, create_solicitation, admin_user, manager_user
    ):
        solicitation = create_solicitation()

        assert access_control.can_interact(solicitation.id, admin_user, EventType.REQUEST_EDITING) is solicitation
        assert access_control.can_interact(solicitation.id, manager_user, EventType.REQUEST_TOGGLE) is solicitation

    def test_other_user_is_rejected_for_every_event_type(self, access_control, create_solicitation, other_user):
        solicitation = create_solicitation()

        for event_type in EventType:
            with pytest.raises(UnauthorizedError) as exc:
                access_control.can_interact(solicitation.id, other_user, event_type)
            assert "não autorizado" in str(exc.value)

    def test_archived_blocks_editing_and_deleting_even_for_admin(
        self, access_control, create_solicitation, session, admin_user, owner
    ):
        # Setup
        solicitation = create_solicitation()
        solicitation.archived = True
        session.flush()

        # Execute / Assert
        for user in (owner, admin_user):
            for event_type in (EventType.REQUEST_EDITING, EventType.REQUEST_DELETING):
                with pytest.raises(ForbiddenError) as exc:
                    access_control.can_interact(solicitation.id, user, event_type)
                assert exc.value.status_code == 403

    def test_archived_can_still_be_viewed(self, access_control, create_solicitation, session, owner):
        solicitation = create_solicitation()
        solicitation.archived = True
        session.flush()

        assert access_control.can_interact(solicitation.id, owner, EventType.REQUEST_VIEWING) is solicitation

    def test_missing_solicitation_is_not_found(self, access_control, owner):
        with pytest.raises(NotFoundError) as exc:
            access_control.can_interact(42, owner, EventType.REQUEST_VIEWING)

        assert str(exc.value) == "Solicitação (ID 000042) não encontrada."
        assert exc.value.status_code == 404


class TestIsOwnerOrStaff:
    """The ownership predicate."""

    def test_user_without_registration_is_never_owner(self, create_solicitation):
        from controle_impressao.entities.user import User

        solicitation = create_solicitation()
        anonymous = User(common_name="Sem matrícula", registration_number=None, email=None)

        assert is_owner_or_staff(anonymous, solicitation) is False

    def test_owner_matches_by_registration(self, create_solicitation, owner, other_user):
        solicitation = create_solicitation()

        assert is_owner_or_staff(owner, solicitation) is True
        assert is_owner_or_staff(other_user, solicitation) is False
