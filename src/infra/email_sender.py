# src/infra/email_sender.py
"""
Отправка писем через SMTP.
smtplib блокирующий, поэтому отправка выполняется в отдельном потоке.
"""

from __future__ import annotations

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from src.common.logger import log_error, log_info
from src.config.loader import SmtpSettings


TEMP_PASSWORD_SUBJECT = "Temporary password - Fleet Control"

_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><title>Temporary password</title></head>
<body style="font-family: Arial, sans-serif; color: #333;">
  <h2>Hello {username},</h2>
  <p>A temporary password was generated for your account <strong>{username}</strong>.</p>
  <p style="background:#e9ecef; padding:15px; border-left:4px solid #007bff;">
    <strong>Temporary password: {password}</strong>
  </p>
  <ul>
    <li>Change this password after your next sign in.</li>
    <li>Do not share it with anyone.</li>
    <li>If you did not request it, contact your administrator.</li>
  </ul>
  <p style="color:#666;">This is an automatic message, please do not reply.</p>
</body>
</html>
"""

_TEXT_TEMPLATE = """\
Hello {username},

A temporary password was generated for your account {username}.

Temporary password: {password}

Change this password after your next sign in and do not share it.
If you did not request it, contact your administrator.
"""


class EmailSender:
    """SMTP-отправитель с настройками из секции smtp."""
    
    def __init__(self, config: SmtpSettings) -> None:
        self.config = config
    
    def _build_message(self, to_email: str, subject: str, text: str, html: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["From"] = formataddr((self.config.SMTP_FROM_NAME, self.config.SMTP_FROM_EMAIL))
        message["To"] = to_email
        message["Subject"] = subject
        message.attach(MIMEText(text, "plain", "utf-8"))
        message.attach(MIMEText(html, "html", "utf-8"))
        return message
    
    def _send_sync(self, message: MIMEMultipart, to_email: str) -> None:
        with smtplib.SMTP(self.config.SMTP_HOST, self.config.SMTP_PORT, timeout=self.config.SMTP_TIMEOUT) as server:
            if self.config.SMTP_USE_TLS:
                server.starttls()
            if self.config.SMTP_USERNAME:
                server.login(self.config.SMTP_USERNAME, self.config.SMTP_PASSWORD)
            server.send_message(message, to_addrs=[to_email])
    
    async def send(self, to_email: str, subject: str, text: str, html: str) -> bool:
        """
        Отправляет письмо.
        
        Returns:
            True при успехе, False если SMTP-сервер отказал или недоступен
        """
        message = self._build_message(to_email, subject, text, html)
        try:
            await asyncio.to_thread(self._send_sync, message, to_email)
        except (smtplib.SMTPException, OSError) as e:
            await log_error(f"Ошибка отправки письма на {to_email}: {e}")
            return False
        
        await log_info(f"Письмо «{subject}» отправлено на {to_email}")
        return True
    
    async def send_temporary_password(self, to_email: str, username: str, password: str) -> bool:
        """Письмо с временным паролем."""
        return await self.send(
            to_email,
            TEMP_PASSWORD_SUBJECT,
            _TEXT_TEMPLATE.format(username=username, password=password),
            _HTML_TEMPLATE.format(username=username, password=password),
        )
