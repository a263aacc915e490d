# controle_impressao/services/solicitation_service.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from io import BytesIO
from typing import Any

from loguru import logger

from controle_impressao.core.clock import Clock
from controle_impressao.core.enums import EventType
from controle_impressao.core.exceptions import (
    FileGoneError,
    FileNotOnDiskError,
    ForbiddenError,
    NotFoundError,
    PhysicalFileError,
    UnauthorizedError,
)
from controle_impressao.core.pagination import Page
from controle_impressao.entities.user import SYSTEM_USER, User
from controle_impressao.infrastructure.database.models.copy_model import CopyModel
from controle_impressao.infrastructure.database.models.event_model import EventModel
from controle_impressao.infrastructure.database.models.solicitation_model import SolicitationModel
from controle_impressao.infrastructure.storage.file_storage import FileStorage, UploadedFile
from controle_impressao.repositories.solicitation_repository import (
    SolicitationRepository,
    build_solicitation_filters,
    resolve_sort,
)
from controle_impressao.services.access_control import (
    AccessControlService,
    is_owner_or_staff,
    solicitation_not_found,
)
from controle_impressao.services.copy_service import CopyService
from controle_impressao.services.event_service import EventService, PendingNotification, SolicitationSnapshot
from controle_impressao.services.file_reconciler import FileReconciler


@dataclass(frozen=True)
class FileDownload:
    file_name: str
    content_type: str
    stream: BytesIO


@dataclass(frozen=True)
class RequestRemoval:
    """Resultado da exclusão; `notification` é enviada pelo chamador depois do commit."""

    removed: bool
    warning: str | None = None
    notification: PendingNotification | None = None


class SolicitationService:
    def __init__(
        self,
        *,
        solicitation_repo: SolicitationRepository,
        copy_service: CopyService,
        access_control: AccessControlService,
        file_reconciler: FileReconciler,
        event_service: EventService,
        storage: FileStorage,
        clock: Clock,
        retention_hours: int,
    ) -> None:
        self._solicitation_repo = solicitation_repo
        self._copy_service = copy_service
        self._access_control = access_control
        self._file_reconciler = file_reconciler
        self._event_service = event_service
        self._storage = storage
        self._clock = clock
        self._retention = timedelta(hours=retention_hours)

    # -------- Helpers --------
    def _get_or_404(self, solicitation_id: int) -> SolicitationModel:
        solicitation = self._solicitation_repo.get_by_id(solicitation_id)
        if solicitation is None:
            raise solicitation_not_found(solicitation_id)
        return solicitation

    def _append_event(
        self,
        solicitation: SolicitationModel,
        *,
        user: User,
        event_type: EventType,
        content: str | None = None,
    ) -> EventModel:
        event = EventModel.build(
            user=user,
            event_type=event_type,
            creation_date=self._clock.now(),
            content=content,
        )
        # linha do tempo: mais recente primeiro
        solicitation.timeline.insert(0, event)
        return event

    # -------- Consultas --------
    def find_all(
        self,
        *,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        text_query: str | None = None,
        is_concluded: bool | None = None,
        owner_registration: str | None = None,
    ) -> list[SolicitationModel]:
        predicate = build_solicitation_filters(
            start_date=start_date,
            end_date=end_date,
            text_query=text_query,
            is_concluded=is_concluded,
            owner_registration=owner_registration,
        )
        return self._solicitation_repo.list_filtered(predicate)

    def find_page(
        self,
        *,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        text_query: str | None = None,
        is_concluded: bool | None = None,
        owner_registration: str | None = None,
        page_no: int = 0,
        page_size: int = 10,
        sort_column: str | None = None,
        sort_direction: str | None = None,
    ) -> Page[SolicitationModel]:
        predicate = build_solicitation_filters(
            start_date=start_date,
            end_date=end_date,
            text_query=text_query,
            is_concluded=is_concluded,
            owner_registration=owner_registration,
        )
        page_no = max(0, int(page_no))
        page_size = max(1, int(page_size))

        rows, total = self._solicitation_repo.list_page(
            predicate,
            order_by=resolve_sort(sort_column, sort_direction),
            limit=page_size,
            offset=page_no * page_size,
        )
        return Page(items=rows, total=total, page_no=page_no, page_size=page_size)

    def find_by_id(self, solicitation_id: int) -> SolicitationModel | None:
        return self._solicitation_repo.get_by_id(solicitation_id)

    def can_interact(self, solicitation_id: int, user: User, event_type: EventType) -> SolicitationModel:
        return self._access_control.can_interact(solicitation_id, user, event_type)

    def find_copies(self, solicitation_id: int, user: User, query: str | None = None) -> list[CopyModel]:
        self._access_control.can_interact(solicitation_id, user, EventType.REQUEST_VIEWING)
        return self._copy_service.find_all_by_solicitation_id(solicitation_id, query)

    # -------- Criação / edição --------
    def create(
        self,
        *,
        deadline: int,
        total_page_count: int,
        copies: list[dict[str, Any]],
        owner: User,
    ) -> SolicitationModel:
        now = self._clock.now()

        solicitation = SolicitationModel(
            deadline=int(deadline),
            total_page_count=int(total_page_count),
            creation_date=now,
            conclusion_date=None,
            archived=False,
        )
        solicitation.owner = owner
        solicitation.copies = self._copy_service.instance_copies_from_draft(copies)
        solicitation.timeline = [
            EventModel.build(user=owner, event_type=EventType.REQUEST_OPENING, creation_date=now)
        ]

        # solicitação + cópias + evento no mesmo flush
        return self._solicitation_repo.add(solicitation)

    def build_transient_solicitation(
        self,
        solicitation_id: int,
        *,
        deadline: int,
        total_page_count: int,
        copies: list[dict[str, Any]],
    ) -> SolicitationModel:
        """Rascunho da edição: não é anexado à sessão, só carrega os novos dados."""
        return SolicitationModel(
            id=int(solicitation_id),
            deadline=int(deadline),
            total_page_count=int(total_page_count),
            copies=self._copy_service.instance_copies_from_draft(copies),
        )

    def save_files(self, solicitation: SolicitationModel, files: list[UploadedFile], is_new_request: bool) -> None:
        self._file_reconciler.save_files(solicitation, files, is_new_request)

    def files_taken_off_disk(self) -> list[int]:
        return self._file_reconciler.taken_off_disk()

    def mark_files_gone(self, copy_ids: list[int]) -> None:
        for copy_id in copy_ids:
            self._copy_service.update_file_status(copy_id, False)

    def patch(self, solicitation_id: int, data: SolicitationModel, user: User) -> SolicitationModel:
        existing = self._get_or_404(solicitation_id)

        # id, dono, datas, arquivamento e linha do tempo vêm do registro salvo
        existing.deadline = int(data.deadline)
        existing.total_page_count = int(data.total_page_count)

        current_by_name = {c.file_name: c for c in existing.copies}
        merged: list[CopyModel] = []
        for incoming in data.copies:
            current = current_by_name.get(incoming.file_name)
            if current is None:
                current = CopyModel(
                    file_name=incoming.file_name,
                    file_in_disk=bool(incoming.file_in_disk),
                    is_physical_file=bool(incoming.is_physical_file),
                )
            current.file_type = incoming.file_type
            current.page_count = incoming.page_count
            current.print_config = dict(incoming.print_config or {})
            current.notes = incoming.notes
            merged.append(current)

        # cópias fora da nova lista são removidas (delete-orphan)
        existing.copies = merged

        self._append_event(existing, user=user, event_type=EventType.REQUEST_EDITING)
        return self._solicitation_repo.save(existing)

    # -------- Status / comentários --------
    def toggle_conclusion_date(
        self, solicitation: SolicitationModel, user: User, notify: bool = False
    ) -> PendingNotification | None:
        if solicitation.archived:
            raise ForbiddenError("Não é possível alterar solicitações arquivadas.")

        if solicitation.conclusion_date is None:
            solicitation.conclusion_date = self._clock.now()
            event_type = EventType.REQUEST_CLOSING
        else:
            solicitation.conclusion_date = None
            event_type = EventType.REQUEST_OPENING

        self._append_event(solicitation, user=user, event_type=event_type)
        self._solicitation_repo.save(solicitation)

        if notify:
            return self.prepare_notification(solicitation, user)
        return None

    def add_new_comment(self, comment: str, solicitation: SolicitationModel, user: User) -> EventModel:
        event = self._append_event(solicitation, user=user, event_type=EventType.COMMENT, content=comment)
        self._solicitation_repo.save(solicitation)
        return event

    def prepare_notification(self, solicitation: SolicitationModel, user: User) -> PendingNotification | None:
        return self._event_service.prepare_latest_event(solicitation, user)

    def send_notification(self, pending: PendingNotification | None) -> bool:
        if pending is None:
            return False
        return self._event_service.send(pending)

    # -------- Exclusão --------
    def remove_request(self, solicitation_id: int, notify: bool, user: User) -> RequestRemoval:
        solicitation = self._get_or_404(solicitation_id)

        # captura antes de excluir: a notificação sai depois do commit
        notification = None
        if notify:
            notification = self._event_service.prepare_loose_event(
                SolicitationSnapshot.of(solicitation), user, EventType.REQUEST_DELETING
            )

        directory = self._file_reconciler.solicitation_dir(solicitation)
        self._file_reconciler.delete_files(list(solicitation.copies), directory)
        folder = self._file_reconciler.remove_folder(directory)
        self._solicitation_repo.delete(solicitation)

        return RequestRemoval(removed=folder.removed, warning=folder.warning, notification=notification)

    # -------- Download --------
    def get_file_response(self, user: User, solicitation_id: int, file_name: str) -> FileDownload:
        solicitation = self._get_or_404(solicitation_id)

        if not is_owner_or_staff(user, solicitation):
            raise UnauthorizedError("Usuário não autorizado a acessar esta solicitação.")

        copy = next((c for c in solicitation.copies if c.file_name == file_name), None)
        if copy is None:
            raise NotFoundError(f"Arquivo '{file_name}' não encontrado na solicitação.")

        if copy.is_physical_file:
            raise PhysicalFileError(f"O arquivo '{file_name}' é físico e não está disponível para download.")
        if not copy.file_in_disk:
            raise FileGoneError(f"O arquivo '{file_name}' não está mais disponível.")

        path = self._storage.file_path(self._file_reconciler.solicitation_dir(solicitation), copy.file_name)
        if not self._storage.exists(path):
            raise FileNotOnDiskError(f"Arquivo '{file_name}' não encontrado no disco.")

        return FileDownload(
            file_name=copy.file_name,
            content_type=copy.file_type or "application/octet-stream",
            stream=BytesIO(self._storage.read_bytes(path)),
        )

    # -------- Arquivamento --------
    def stale_cutoff(self) -> datetime:
        return self._clock.now() - self._retention

    def find_stale_ids(self, closed_before: datetime) -> list[int]:
        return self._solicitation_repo.list_stale_ids(closed_before=closed_before)

    def archive_stale(self, solicitation_id: int, *, closed_before: datetime) -> int | None:
        """Remove os arquivos de uma solicitação fechada antes de `closed_before` e a arquiva.

        Retorna quantos arquivos foram removidos, ou None se ela não é mais elegível.
        """
        solicitation = self._solicitation_repo.get_for_update(solicitation_id)
        if (
            solicitation is None
            or solicitation.archived
            or solicitation.conclusion_date is None
            or solicitation.conclusion_date >= closed_before
        ):
            return None

        directory = self._file_reconciler.solicitation_dir(solicitation)
        deleted = self._file_reconciler.delete_files(list(solicitation.copies), directory)
        self._file_reconciler.remove_folder(directory)

        solicitation.archived = True
        self._append_event(solicitation, user=SYSTEM_USER, event_type=EventType.REQUEST_ARCHIVING)
        self._solicitation_repo.save(solicitation)

        logger.info("Solicitação {} arquivada ({} arquivo(s) removidos)", solicitation_id, deleted)
        return deleted

    def remove_stale_files(self) -> int:
        closed_before = self.stale_cutoff()
        total = 0
        for solicitation_id in self.find_stale_ids(closed_before):
            total += self.archive_stale(solicitation_id, closed_before=closed_before) or 0
        return total
