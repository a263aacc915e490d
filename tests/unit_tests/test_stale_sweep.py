from unittest.mock import MagicMock

import pytest

from controle_impressao.core.enums import EventType, Role
from controle_impressao.jobs import stale_sweep
from controle_impressao.services.builders import build_solicitation_service
from controle_impressao.services.solicitation_service import SolicitationService


@pytest.fixture
def closed_with_file(solicitation_service, create_solicitation, upload, admin_user, clock):
    """A solicitation with one file on disk, closed at the current clock time."""
    solicitation = create_solicitation("a.pdf")
    solicitation_service.save_files(solicitation, [upload("a.pdf")], True)
    solicitation_service.toggle_conclusion_date(solicitation, admin_user)
    return solicitation


class TestRemoveStaleFiles:
    """Archiving solicitations closed longer than the retention window."""

    def test_archives_after_retention(self, solicitation_service, closed_with_file, storage, clock, owner):
        # Setup
        directory = storage.solicitation_dir(
            registration_number=owner.registration_number, solicitation_id=closed_with_file.id
        )
        clock.advance(hours=73)

        # Execute
        deleted = solicitation_service.remove_stale_files()

        # Assert
        assert deleted == 1
        assert closed_with_file.archived is True
        assert closed_with_file.copies[0].file_in_disk is False
        assert not directory.exists()

        latest = closed_with_file.timeline[0]
        assert latest.event_type == EventType.REQUEST_ARCHIVING
        assert latest.user.role == Role.SYSTEM
        assert latest.creation_date == clock.now()

    def test_second_sweep_is_a_no_op(self, solicitation_service, closed_with_file, clock):
        clock.advance(hours=73)
        solicitation_service.remove_stale_files()
        timeline_size = len(closed_with_file.timeline)

        assert solicitation_service.remove_stale_files() == 0
        assert len(closed_with_file.timeline) == timeline_size

    def test_recently_closed_and_open_are_kept(
        self, solicitation_service, create_solicitation, closed_with_file, clock
    ):
        still_open = create_solicitation("b.pdf")
        clock.advance(hours=71)

        assert solicitation_service.remove_stale_files() == 0
        assert closed_with_file.archived is False
        assert still_open.archived is False

    def test_only_solicitations_closed_before_cutoff_are_archived(
        self, solicitation_service, closed_with_file, clock
    ):
        clock.advance(hours=73)
        cutoff = solicitation_service.stale_cutoff()

        solicitation_service.remove_stale_files()

        assert closed_with_file.conclusion_date < cutoff

    def test_archive_stale_rechecks_eligibility(self, solicitation_service, closed_with_file, clock, session):
        clock.advance(hours=73)
        cutoff = solicitation_service.stale_cutoff()

        # reaberta entre a listagem e o arquivamento
        closed_with_file.conclusion_date = None
        session.flush()

        assert solicitation_service.archive_stale(closed_with_file.id, closed_before=cutoff) is None
        assert closed_with_file.archived is False


class TestRunStaleSweep:
    """The scheduled job: one transaction per solicitation."""

    @pytest.fixture
    def build_service(self, storage, sink, clock):
        def _build(session):
            return build_solicitation_service(session, storage=storage, sink=sink, clock=clock, retention_hours=72)

        return _build

    @pytest.fixture
    def seeded_ids(self, session_scope, build_service, make_copy, owner, admin_user, clock):
        ids = []
        with session_scope() as session:
            svc = build_service(session)
            for _ in range(2):
                solicitation = svc.create(deadline=24, total_page_count=3, copies=[make_copy("a.pdf")], owner=owner)
                svc.toggle_conclusion_date(solicitation, admin_user)
                ids.append(solicitation.id)
        clock.advance(hours=80)
        return ids

    def test_archives_every_stale_solicitation(self, monkeypatch, session_scope, build_service, seeded_ids):
        # Setup
        monkeypatch.setattr(stale_sweep, "db_session", session_scope)

        # Execute
        stale_sweep.run_stale_sweep(build_service)

        # Assert
        with session_scope() as session:
            svc = build_service(session)
            assert all(svc.find_by_id(i).archived for i in seeded_ids)
            assert svc.find_stale_ids(svc.stale_cutoff()) == []

    def test_failure_on_one_solicitation_does_not_stop_the_sweep(
        self, monkeypatch, session_scope, build_service, seeded_ids
    ):
        # Setup
        monkeypatch.setattr(stale_sweep, "db_session", session_scope)
        failing_id, other_id = seeded_ids
        real_archive = SolicitationService.archive_stale

        def flaky_archive(self, solicitation_id, *, closed_before):
            if solicitation_id == failing_id:
                raise RuntimeError("falha simulada")
            return real_archive(self, solicitation_id, closed_before=closed_before)

        monkeypatch.setattr(SolicitationService, "archive_stale", flaky_archive)

        # Execute
        stale_sweep.run_stale_sweep(build_service)

        # Assert
        with session_scope() as session:
            svc = build_service(session)
            assert svc.find_by_id(failing_id).archived is False
            assert svc.find_by_id(other_id).archived is True


class TestStartStaleSweep:
    """Scheduling on the Socket.IO runtime."""

    def test_disabled_by_settings(self, monkeypatch):
        socketio = MagicMock()
        monkeypatch.setattr(stale_sweep.settings, "cleanup_enabled", False)

        assert stale_sweep.start_stale_sweep(socketio) is False
        socketio.start_background_task.assert_not_called()

    def test_enabled_starts_background_task(self, monkeypatch):
        socketio = MagicMock()
        monkeypatch.setattr(stale_sweep.settings, "cleanup_enabled", True)
        monkeypatch.setattr(stale_sweep.settings, "cleanup_retention_hours", 72)
        monkeypatch.setattr(stale_sweep.settings, "cleanup_interval_hours", 6)

        assert stale_sweep.start_stale_sweep(socketio) is True
        socketio.start_background_task.assert_called_once_with(stale_sweep._sweep_loop, socketio, 6 * 3600)
