# controle_impressao/services/builders.py

from __future__ import annotations

from sqlalchemy.orm import Session

from controle_impressao.config.settings import settings
from controle_impressao.core.clock import Clock, SystemClock
from controle_impressao.core.interfaces.notification_sink import NotificationSink
from controle_impressao.infrastructure.notifications.smtp_notification_sink import SmtpNotificationSink
from controle_impressao.infrastructure.storage.file_storage import FileStorage
from controle_impressao.infrastructure.storage.local_file_storage import LocalFileStorage, LocalFileStorageConfig
from controle_impressao.repositories.copy_repository import CopyRepository
from controle_impressao.repositories.solicitation_repository import SolicitationRepository
from controle_impressao.services.access_control import AccessControlService
from controle_impressao.services.copy_service import CopyService
from controle_impressao.services.event_service import EventService
from controle_impressao.services.file_reconciler import FileReconciler
from controle_impressao.services.file_validation_service import FileValidationService
from controle_impressao.services.solicitation_service import SolicitationService


def build_storage() -> LocalFileStorage:
    return LocalFileStorage(config=LocalFileStorageConfig(base_path=settings.files_base_path))


def build_file_validation_service() -> FileValidationService:
    return FileValidationService(
        max_file_size_mb=settings.max_file_size_mb,
        allowed_mime_types=settings.allowed_mime_types,
    )


def build_solicitation_service(
    session: Session,
    *,
    storage: FileStorage | None = None,
    sink: NotificationSink | None = None,
    clock: Clock | None = None,
    retention_hours: int | None = None,
) -> SolicitationService:
    storage = storage or build_storage()
    clock = clock or SystemClock()

    solicitation_repo = SolicitationRepository(session)
    copy_service = CopyService(copy_repo=CopyRepository(session))

    return SolicitationService(
        solicitation_repo=solicitation_repo,
        copy_service=copy_service,
        access_control=AccessControlService(solicitation_repo=solicitation_repo),
        file_reconciler=FileReconciler(
            storage=storage,
            copy_service=copy_service,
            solicitation_repo=solicitation_repo,
        ),
        event_service=EventService(
            sink=sink or SmtpNotificationSink(),
            subject=settings.mail_subject,
            frontend_url=settings.frontend_url,
            clock=clock,
        ),
        storage=storage,
        clock=clock,
        retention_hours=retention_hours if retention_hours is not None else settings.cleanup_retention_hours,
    )
