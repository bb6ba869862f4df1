# tests/infra/test_email_sender.py
"""
Тесты отправки писем через SMTP.
"""

from __future__ import annotations

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from src.config.loader import SmtpSettings
from src.infra.email_sender import TEMP_PASSWORD_SUBJECT, EmailSender


@pytest.fixture
def smtp_server() -> MagicMock:
    server = MagicMock()
    server.__enter__ = MagicMock(return_value=server)
    server.__exit__ = MagicMock(return_value=False)
    return server


class TestEmailSender:
    
    def test_build_message(self, smtp_settings: SmtpSettings) -> None:
        message = EmailSender(smtp_settings)._build_message("ana@example.com", "Hi", "text", "<b>html</b>")
        
        assert message["To"] == "ana@example.com"
        assert message["Subject"] == "Hi"
        assert message.get_content_subtype() == "alternative"
        assert len(message.get_payload()) == 2
    
    @pytest.mark.asyncio
    async def test_send_temporary_password(self, smtp_settings: SmtpSettings, smtp_server: MagicMock) -> None:
        with patch("smtplib.SMTP", return_value=smtp_server) as smtp_cls:
            sent = await EmailSender(smtp_settings).send_temporary_password("ana@example.com", "ana", "Tmp12345ab")
        
        assert sent is True
        smtp_cls.assert_called_once_with("smtp.test", 2525, timeout=smtp_settings.SMTP_TIMEOUT)
        smtp_server.starttls.assert_called_once()
        smtp_server.login.assert_called_once_with("mailer", "secret")
        message = smtp_server.send_message.call_args.args[0]
        assert message["Subject"] == TEMP_PASSWORD_SUBJECT
        assert "Tmp12345ab" in message.get_payload()[0].get_payload(decode=True).decode()
    
    @pytest.mark.asyncio
    async def test_smtp_failure_returns_false(self, smtp_settings: SmtpSettings, smtp_server: MagicMock) -> None:
        smtp_server.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
        with patch("smtplib.SMTP", return_value=smtp_server):
            assert await EmailSender(smtp_settings).send("ana@example.com", "s", "t", "h") is False
    
    @pytest.mark.asyncio
    async def test_connection_refused_returns_false(self, smtp_settings: SmtpSettings) -> None:
        with patch("smtplib.SMTP", side_effect=ConnectionRefusedError("refused")):
            assert await EmailSender(smtp_settings).send("ana@example.com", "s", "t", "h") is False
    
    @pytest.mark.asyncio
    async def test_no_tls_no_login(self, smtp_server: MagicMock) -> None:
        config = SmtpSettings(SMTP_HOST="smtp.test", SMTP_USE_TLS=False, SMTP_USERNAME="")
        with patch("smtplib.SMTP", return_value=smtp_server):
            assert await EmailSender(config).send("ana@example.com", "s", "t", "h") is True
        
        smtp_server.starttls.assert_not_called()
        smtp_server.login.assert_not_called()
