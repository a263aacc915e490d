# controle_impressao/core/interfaces/notification_sink.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class NotificationMessage:
    recipients: tuple[str, ...]
    subject: str
    body: str
    is_html: bool = True


class NotificationSink(Protocol):
    def send(self, message: NotificationMessage) -> None:
        """Entrega síncrona; levanta NotificationError em caso de falha."""
        ...
