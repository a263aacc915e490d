# controle_impressao/services/event_service.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from controle_impressao.core.clock import Clock, SystemClock
from controle_impressao.core.enums import EventType
from controle_impressao.core.exceptions import NotificationError
from controle_impressao.core.interfaces.notification_sink import NotificationMessage, NotificationSink
from controle_impressao.entities.user import User
from controle_impressao.infrastructure.database.models.event_model import EventModel
from controle_impressao.infrastructure.database.models.solicitation_model import SolicitationModel

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
EMAIL_TEMPLATE = "email_notification.html"

# ambiente único: o template é compilado uma vez e fica em cache
_TEMPLATES = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)

# arquivamento, comentário, visualização e toggle não geram e-mail
NOTIFIABLE_EVENT_TYPES = frozenset(
    {
        EventType.REQUEST_OPENING,
        EventType.REQUEST_CLOSING,
        EventType.REQUEST_EDITING,
        EventType.REQUEST_DELETING,
    }
)

_EVENT_MESSAGES = {
    EventType.COMMENT: "Um novo comentário foi adicionado à solicitação {number}.",
    EventType.REQUEST_TOGGLE: "O status da solicitação {number} foi alterado.",
    EventType.REQUEST_OPENING: "A solicitação {number} foi aberta.",
    EventType.REQUEST_CLOSING: "A solicitação {number} foi fechada.",
    EventType.REQUEST_EDITING: "A solicitação {number} foi editada.",
    EventType.REQUEST_DELETING: "A solicitação {number} foi excluída.",
    EventType.REQUEST_ARCHIVING: "A solicitação {number} foi arquivada.",
}


def solicitation_number(solicitation_id: int) -> str:
    return f"Nº{int(solicitation_id):06d}"


@dataclass(frozen=True)
class SolicitationSnapshot:
    """Estado mínimo de uma solicitação para notificar depois de excluída."""

    id: int
    owner: User
    timeline_users: tuple[User, ...]

    @classmethod
    def of(cls, solicitation: SolicitationModel) -> "SolicitationSnapshot":
        return cls(
            id=int(solicitation.id),
            owner=solicitation.owner,
            timeline_users=tuple(e.user for e in solicitation.timeline),
        )


@dataclass(frozen=True)
class PendingNotification:
    snapshot: SolicitationSnapshot
    triggering_user: User
    actor: User
    event_type: EventType
    content: str | None
    event_date: datetime


class EventService:
    def __init__(
        self,
        *,
        sink: NotificationSink | None,
        subject: str,
        frontend_url: str,
        clock: Clock | None = None,
    ) -> None:
        self._sink = sink
        self._subject = subject
        self._frontend_url = frontend_url.rstrip("/")
        self._clock = clock or SystemClock()
        self._templates = _TEMPLATES

    @staticmethod
    def get_latest_event(solicitation: SolicitationModel) -> EventModel | None:
        events = list(solicitation.timeline or [])
        if not events:
            return None
        return max(events, key=lambda e: (e.creation_date, e.id or 0))

    @staticmethod
    def can_send_notification(event_type: EventType) -> bool:
        return event_type in NOTIFIABLE_EVENT_TYPES

    @staticmethod
    def get_interested_users(snapshot: SolicitationSnapshot, triggering_user: User) -> list[User]:
        if not snapshot.timeline_users:
            return []

        # ações do sistema só interessam ao dono
        if triggering_user.is_system():
            return [snapshot.owner]

        # quem disparou a ação também é notificado
        out: list[User] = []
        for user in snapshot.timeline_users:
            if user not in out:
                out.append(user)
        return out

    @staticmethod
    def recipient_emails(users: list[User]) -> list[str]:
        out: list[str] = []
        for user in users:
            if user.email and user.email not in out:
                out.append(user.email)
        return out

    def prepare_latest_event(
        self, solicitation: SolicitationModel, triggering_user: User
    ) -> PendingNotification | None:
        """Captura o último evento enquanto a sessão está aberta; o envio fica para depois do commit."""
        latest = self.get_latest_event(solicitation)
        if latest is None or not self.can_send_notification(latest.event_type):
            return None

        return PendingNotification(
            snapshot=SolicitationSnapshot.of(solicitation),
            triggering_user=triggering_user,
            actor=latest.user,
            event_type=latest.event_type,
            content=latest.content,
            event_date=latest.creation_date,
        )

    def prepare_loose_event(
        self,
        snapshot: SolicitationSnapshot,
        triggering_user: User,
        event_type: EventType,
    ) -> PendingNotification:
        """Evento que não está na linha do tempo (ex.: exclusão)."""
        return PendingNotification(
            snapshot=snapshot,
            triggering_user=triggering_user,
            actor=triggering_user,
            event_type=event_type,
            content=None,
            event_date=self._clock.now(),
        )

    def send_notification_for_latest_event(self, solicitation: SolicitationModel, triggering_user: User) -> bool:
        pending = self.prepare_latest_event(solicitation, triggering_user)
        if pending is None:
            return False
        return self.send(pending)

    def send_notification_for_loose_event(
        self,
        snapshot: SolicitationSnapshot,
        triggering_user: User,
        event_type: EventType,
    ) -> bool:
        return self.send(self.prepare_loose_event(snapshot, triggering_user, event_type))
    def render_body(
        self,
        *,
        solicitation_id: int,
        actor: User,
        event_type: EventType,
        content: str | None,
        event_date: datetime,
    ) -> str:
        number = solicitation_number(solicitation_id)
        message = _EVENT_MESSAGES.get(event_type, "Uma atualização ocorreu na solicitação {number}.")

        if actor.is_system():
            sender = "automaticamente"
        else:
            sender = f"por {actor.common_name} {actor.registration_number}"

        template = self._templates.get_template(EMAIL_TEMPLATE)
        return template.render(
            event_message=message.format(number=number),
            sender=sender,
            event_date=event_date.strftime("%d/%m/%Y %H:%M"),
            show_content=bool(content),
            event_content=content,
            show_redirect=event_type != EventType.REQUEST_DELETING,
            solicitation_link=f"{self._frontend_url}/solicitacoes/ver/{solicitation_id}",
            current_year=event_date.year,
        )

    def send(self, pending: PendingNotification) -> bool:
        snapshot = pending.snapshot
        event_type = pending.event_type
        emails = self.recipient_emails(self.get_interested_users(snapshot, pending.triggering_user))
        if not emails:
            logger.info(
                "Nenhum usuário interessado a ser notificado para a solicitação {} ({})",
                snapshot.id,
                event_type.value,
            )
            return False

        if self._sink is None:
            logger.warning("Notificações desativadas; solicitação {} ({})", snapshot.id, event_type.value)
            return False

        body = self.render_body(
            solicitation_id=snapshot.id,
            actor=pending.actor,
            event_type=event_type,
            content=pending.content,
            event_date=pending.event_date,
        )

        try:
            self._sink.send(NotificationMessage(recipients=tuple(emails), subject=self._subject, body=body))
        except NotificationError as e:
            logger.error(
                "Erro ao enviar notificação da solicitação {} ({}): {}", snapshot.id, event_type.value, e
            )
            return False

        logger.info(
            "Notificação enviada para a solicitação {} ({}) a {} usuário(s)",
            snapshot.id,
            event_type.value,
            len(emails),
        )
        return True
