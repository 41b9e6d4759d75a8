"""Email service for sending password reset links."""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from src.config import Settings

logger = logging.getLogger(__name__)


def build_reset_link(frontend_url: str, reset_token: str) -> str:
    return f"{frontend_url.rstrip('/')}/reset-password?token={reset_token}"


class ResetLinkMailer:
    """Delivers password reset links.

    In development (no SMTP user configured), logs the reset link instead.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    async def __call__(self, to_email: str, reset_token: str) -> bool:
        return await self.send_password_reset_email(to_email, reset_token)

    async def send_password_reset_email(self, to_email: str, reset_token: str) -> bool:
        """Send password reset email with reset link.

        Returns True if email sent successfully, False otherwise.
        """
        reset_link = build_reset_link(self.settings.frontend_url, reset_token)

        if not self.settings.smtp_user:
            logger.info("[DEV] Password reset link for %s: %s", to_email, reset_link)
            return True

        try:
            await asyncio.to_thread(self._send, to_email, reset_link)
            return True
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send reset email to %s", to_email)
            return False

    def _send(self, to_email: str, reset_link: str) -> None:
        minutes = self.settings.reset_token_ttl_minutes
        msg = MIMEMultipart("alternative")
        msg["Subject"] = "Campus - Password Reset Request"
        msg["From"] = self.settings.email_from
        msg["To"] = to_email

        text_body = f"""
You requested a password reset for your account.

Click the link below to reset your password (valid for {minutes} minutes):
{reset_link}

If you did not request this reset, please ignore this email.
"""

        html_body = f"""
<html>
<body>
<h2>Password Reset Request</h2>
<p>You requested a password reset for your account.</p>
<p><a href="{reset_link}">Click here to reset your password</a></p>
<p><small>This link is valid for {minutes} minutes.</small></p>
<p>If you did not request this reset, please ignore this email.</p>
</body>
</html>
"""

        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port) as server:
            server.starttls()
            server.login(self.settings.smtp_user, self.settings.smtp_password)
            server.send_message(msg)
