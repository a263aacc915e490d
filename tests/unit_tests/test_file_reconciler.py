from pathlib import Path

import pytest

from controle_impressao.core.exceptions import BadRequestError, InternalError
from controle_impressao.infrastructure.storage.local_file_storage import LocalFileStorage, LocalFileStorageConfig
from controle_impressao.services.builders import build_solicitation_service
from controle_impressao.services.file_reconciler import FileReconciler


class FlakyStorage(LocalFileStorage):
    """Local storage whose write fails for one file name."""

    def __init__(self, *, config: LocalFileStorageConfig, fail_on: str) -> None:
        super().__init__(config=config)
        self._fail_on = fail_on

    def write(self, path: Path, data: bytes) -> int:
        if path.name == self._fail_on:
            raise OSError("disco cheio")
        return super().write(path, data)


def _dir_of(storage, solicitation) -> Path:
    return storage.solicitation_dir(
        registration_number=solicitation.owner_registration_number,
        solicitation_id=solicitation.id,
    )


class TestSaveFilesOnCreate:
    """Writing the attachments of a new solicitation."""

    def test_files_are_written_and_flags_set(self, solicitation_service, create_solicitation, storage, upload):
        # Setup
        solicitation = create_solicitation("a.pdf", "b.pdf")

        # Execute
        solicitation_service.save_files(solicitation, [upload("a.pdf"), upload("b.pdf")], True)

        # Assert
        directory = _dir_of(storage, solicitation)
        for copy in solicitation.copies:
            assert copy.file_in_disk is True
            assert copy.is_physical_file is False
            assert (directory / copy.file_name).is_file()

    def test_layout_is_registration_then_id(self, solicitation_service, create_solicitation, storage, upload, owner):
        solicitation = create_solicitation("a.pdf")

        solicitation_service.save_files(solicitation, [upload("a.pdf")], True)

        expected = storage.base_path / owner.registration_number / str(solicitation.id) / "a.pdf"
        assert expected.is_file()

    def test_zero_byte_upload_marks_physical_copy(self, solicitation_service, create_solicitation, storage, upload):
        # Setup
        solicitation = create_solicitation("digital.pdf", "fisico.pdf")

        # Execute
        solicitation_service.save_files(solicitation, [upload("digital.pdf"), upload("fisico.pdf", b"")], True)

        # Assert
        digital, physical = solicitation.copies
        assert (digital.file_in_disk, digital.is_physical_file) == (True, False)
        assert (physical.file_in_disk, physical.is_physical_file) == (False, True)
        assert not (_dir_of(storage, solicitation) / "fisico.pdf").exists()

    def test_files_pair_with_copies_by_position(self, solicitation_service, create_solicitation, storage, upload):
        solicitation = create_solicitation("a.pdf", "b.pdf")

        solicitation_service.save_files(solicitation, [upload("x.pdf", b"AAA"), upload("y.pdf", b"BBB")], True)

        directory = _dir_of(storage, solicitation)
        assert (directory / "a.pdf").read_bytes() == b"AAA"
        assert (directory / "b.pdf").read_bytes() == b"BBB"

    def test_fewer_files_than_copies_is_rejected(self, solicitation_service, create_solicitation, storage, upload):
        solicitation = create_solicitation("a.pdf", "b.pdf")

        with pytest.raises(BadRequestError) as exc:
            solicitation_service.save_files(solicitation, [upload("a.pdf")], True)

        assert "(1)" in str(exc.value)
        assert "(2)" in str(exc.value)
        assert not _dir_of(storage, solicitation).exists()

    def test_more_files_than_copies_writes_nothing(self, solicitation_service, create_solicitation, storage, upload):
        solicitation = create_solicitation("a.pdf")

        result = solicitation_service.save_files(solicitation, [upload("a.pdf"), upload("b.pdf")], True)

        assert result is None
        assert not _dir_of(storage, solicitation).exists()
        assert solicitation.copies[0].file_in_disk is False

    def test_failed_write_removes_files_written_in_the_same_call(
        self, session, sink, clock, tmp_path, make_copy, owner, upload
    ):
        # Setup
        flaky = FlakyStorage(config=LocalFileStorageConfig(base_path=str(tmp_path / "flaky")), fail_on="b.pdf")
        svc = build_solicitation_service(session, storage=flaky, sink=sink, clock=clock, retention_hours=72)
        solicitation = svc.create(
            deadline=24,
            total_page_count=6,
            copies=[make_copy("a.pdf"), make_copy("b.pdf")],
            owner=owner,
        )

        # Execute
        with pytest.raises(InternalError) as exc:
            svc.save_files(solicitation, [upload("a.pdf"), upload("b.pdf")], True)

        # Assert
        directory = _dir_of(flaky, solicitation)
        assert not (directory / "a.pdf").exists()
        assert not (directory / "b.pdf").exists()
        assert all(c.file_in_disk is False for c in solicitation.copies)
        assert exc.value.status_code == 500
        assert "disco cheio" in str(exc.value)


class TestSaveFilesOnEdit:
    """Diffing copies by file name when a solicitation is edited."""

    def test_replacing_a_copy_uploads_new_and_deletes_removed(
        self, solicitation_service, create_solicitation, storage, upload, make_copy, owner
    ):
        # Setup
        solicitation = create_solicitation("a.pdf", "b.pdf")
        solicitation_service.save_files(solicitation, [upload("a.pdf"), upload("b.pdf")], True)
        copy_a = next(c for c in solicitation.copies if c.file_name == "a.pdf")
        directory = _dir_of(storage, solicitation)

        # Execute
        draft = solicitation_service.build_transient_solicitation(
            solicitation.id,
            deadline=12,
            total_page_count=6,
            copies=[make_copy("b.pdf"), make_copy("c.pdf")],
        )
        solicitation_service.save_files(draft, [upload("c.pdf")], False)
        a_in_disk_after_save = copy_a.file_in_disk
        updated = solicitation_service.patch(solicitation.id, draft, owner)

        # Assert
        assert not (directory / "a.pdf").exists()
        assert (directory / "b.pdf").is_file()
        assert (directory / "c.pdf").is_file()
        assert a_in_disk_after_save is False

        by_name = {c.file_name: c for c in updated.copies}
        assert sorted(by_name) == ["b.pdf", "c.pdf"]
        assert by_name["b.pdf"].file_in_disk is True
        assert by_name["c.pdf"].file_in_disk is True
        assert by_name["c.pdf"].id is not None

    def test_edit_keeps_owner_of_base_record(
        self, solicitation_service, create_solicitation, upload, make_copy, admin_user, owner
    ):
        solicitation = create_solicitation("a.pdf")
        solicitation_service.save_files(solicitation, [upload("a.pdf")], True)

        draft = solicitation_service.build_transient_solicitation(
            solicitation.id, deadline=6, total_page_count=3, copies=[make_copy("a.pdf")]
        )
        solicitation_service.save_files(draft, [], False)

        assert draft.owner_registration_number == owner.registration_number
        assert draft.owner_registration_number != admin_user.registration_number


class TestFilterUploadDelete:
    """The name diff used by the edit flow."""

    def test_diff_by_file_name(self, solicitation_service, create_solicitation, make_copy):
        original = create_solicitation("a.pdf", "b.pdf")
        updated = solicitation_service.build_transient_solicitation(
            original.id, deadline=1, total_page_count=1, copies=[make_copy("b.pdf"), make_copy("c.pdf")]
        )

        to_upload, to_delete = FileReconciler.filter_upload_delete(updated, original)

        assert [c.file_name for c in to_upload] == ["c.pdf"]
        assert [c.file_name for c in to_delete] == ["a.pdf"]


class TestRemoveFolder:
    """Folder removal outcome."""

    def test_missing_folder_is_not_a_warning(self, session, storage, tmp_path):
        from controle_impressao.repositories.copy_repository import CopyRepository
        from controle_impressao.repositories.solicitation_repository import SolicitationRepository
        from controle_impressao.services.copy_service import CopyService

        reconciler = FileReconciler(
            storage=storage,
            copy_service=CopyService(copy_repo=CopyRepository(session)),
            solicitation_repo=SolicitationRepository(session),
        )
        directory = storage.solicitation_dir(registration_number="123", solicitation_id=1)

        result = reconciler.remove_folder(directory)

        assert result.removed is False
        assert result.warning is None

    def test_existing_folder_is_removed(self, solicitation_service, create_solicitation, storage, upload):
        solicitation = create_solicitation("a.pdf")
        solicitation_service.save_files(solicitation, [upload("a.pdf")], True)
        directory = _dir_of(storage, solicitation)

        result = solicitation_service.remove_request(solicitation.id, False, solicitation.owner)

        assert result.removed is True
        assert result.warning is None
        assert not directory.exists()
