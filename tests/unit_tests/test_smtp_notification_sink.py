import smtplib
from unittest.mock import patch

import pytest

from controle_impressao.core.exceptions import NotificationError
from controle_impressao.core.interfaces.notification_sink import NotificationMessage
from controle_impressao.infrastructure.notifications.smtp_notification_sink import SmtpConfig, SmtpNotificationSink

MESSAGE = NotificationMessage(
    recipients=("maria@escola.edu.br", "ana@escola.edu.br"),
    subject="[Impressão] Notificação",
    body="<p>A solicitação Nº000001 foi fechada.</p>",
)


def _config(**overrides) -> SmtpConfig:
    values = {
        "host": "smtp.escola.local",
        "port": 587,
        "user": "impressao",
        "password": "senha",
        "use_tls": True,
        "mail_from": "impressao@escola.edu.br",
    }
    values.update(overrides)
    return SmtpConfig(**values)


@pytest.fixture
def mock_smtp():
    with patch("controle_impressao.infrastructure.notifications.smtp_notification_sink.smtplib.SMTP") as smtp:
        yield smtp


class TestSmtpNotificationSink:
    """Delivery over SMTP."""

    def test_sends_html_message(self, mock_smtp):
        # Execute
        SmtpNotificationSink(config=_config(), timeout=5).send(MESSAGE)

        # Assert
        mock_smtp.assert_called_once_with("smtp.escola.local", 587, timeout=5)
        server = mock_smtp.return_value.__enter__.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("impressao", "senha")

        from_email, recipients, raw = server.sendmail.call_args[0]
        assert from_email == "impressao@escola.edu.br"
        assert recipients == list(MESSAGE.recipients)
        assert "text/html" in raw

    def test_without_tls_and_credentials(self, mock_smtp):
        SmtpNotificationSink(config=_config(use_tls=False, user=None, password=None)).send(MESSAGE)

        server = mock_smtp.return_value.__enter__.return_value
        server.starttls.assert_not_called()
        server.login.assert_not_called()
        server.sendmail.assert_called_once()

    def test_missing_host_raises_notification_error(self, mock_smtp):
        with pytest.raises(NotificationError):
            SmtpNotificationSink(config=_config(host=None)).send(MESSAGE)

        mock_smtp.assert_not_called()

    def test_smtp_failure_is_wrapped(self, mock_smtp):
        mock_smtp.side_effect = smtplib.SMTPConnectError(421, "indisponível")

        with pytest.raises(NotificationError):
            SmtpNotificationSink(config=_config()).send(MESSAGE)

    def test_no_recipients_is_a_no_op(self, mock_smtp):
        empty = NotificationMessage(recipients=(), subject="s", body="b")

        SmtpNotificationSink(config=_config()).send(empty)

        mock_smtp.assert_not_called()
