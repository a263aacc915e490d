# controle_impressao/infrastructure/notifications/smtp_notification_sink.py
from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText

from loguru import logger

from controle_impressao.config.settings import settings
from controle_impressao.core.exceptions import NotificationError
from controle_impressao.core.interfaces.notification_sink import NotificationMessage, NotificationSink


@dataclass(frozen=True)
class SmtpConfig:
    host: str | None
    port: int
    user: str | None
    password: str | None
    use_tls: bool
    mail_from: str | None

    @classmethod
    def from_settings(cls) -> "SmtpConfig":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            mail_from=settings.mail_from,
        )


class SmtpNotificationSink(NotificationSink):
    def __init__(self, *, config: SmtpConfig | None = None, timeout: int = 10) -> None:
        self._config = config or SmtpConfig.from_settings()
        self._timeout = timeout

    def send(self, message: NotificationMessage) -> None:
        cfg = self._config
        if not cfg.host:
            raise NotificationError("SMTP não configurado (SMTP_HOST vazio).")
        if not message.recipients:
            return

        from_email = cfg.mail_from or cfg.user or "no-reply@localhost"

        msg = MIMEText(message.body, "html" if message.is_html else "plain", "utf-8")
        msg["Subject"] = message.subject
        msg["From"] = from_email
        msg["To"] = ", ".join(message.recipients)

        try:
            with smtplib.SMTP(cfg.host, cfg.port, timeout=self._timeout) as s:
                if cfg.use_tls:
                    s.starttls()
                if cfg.user and cfg.password:
                    s.login(cfg.user, cfg.password)
                s.sendmail(from_email, list(message.recipients), msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Falha ao enviar e-mail: {e}") from e

        logger.debug("E-mail '{}' enviado para {} destinatário(s)", message.subject, len(message.recipients))
