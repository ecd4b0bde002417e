"""
Outgoing e-mail.

Messages are rendered from small HTML templates and sent over SMTP with
``smtplib``. The blocking send runs in a worker thread. With
``EMAIL_ENABLED=false`` messages are only logged. Failures are logged and
never propagate to the request.
"""

from __future__ import annotations

import asyncio
import html
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

from pdfshare.server.core.config import EmailConfig

from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class OutgoingMail:
    to: str
    subject: str
    html: str


class EmailService:
    """Renders and delivers notification e-mails."""

    def __init__(self, config: EmailConfig) -> None:
        self.config = config
        self.app_url = config.app_url.rstrip("/")

    # ── Transport ──

    def _build_message(self, mail: OutgoingMail) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = mail.subject
        msg["From"] = self.config.user or "no-reply@localhost"
        msg["To"] = mail.to
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(mail.html, subtype="html")
        return msg

    def _send_sync(self, mail: OutgoingMail) -> None:
        with smtplib.SMTP(self.config.host or "localhost", self.config.port, timeout=30) as server:
            if self.config.use_tls:
                server.starttls()
            if self.config.user and self.config.password:
                server.login(self.config.user, self.config.password)
            server.send_message(self._build_message(mail))

    async def send(self, mail: OutgoingMail) -> bool:
        """Deliver one message; returns whether it was handed to the SMTP server."""
        if not self.config.enabled:
            logger.info(f"E-mail disabled; would send '{mail.subject}' to {mail.to}")
            return False
        try:
            await asyncio.to_thread(self._send_sync, mail)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send '{mail.subject}' to {mail.to}: {e}")
            return False
        logger.info(f"Sent '{mail.subject}' to {mail.to}")
        return True

    # ── Templates ──

    async def send_verification_email(self, to: str, token: str) -> bool:
        url = f"{self.app_url}/auth/verify-email?token={token}"
        body = (
            "<p>Please verify your email address by clicking the link below:</p>"
            f'<a href="{html.escape(url)}">Verify Email</a>'
        )
        return await self.send(OutgoingMail(to, "Verify Your Email Address", body))

    async def send_invitation_email(self, to: str, token: str, file_name: str) -> bool:
        url = f"{self.app_url}/register?invitationToken={token}"
        body = (
            f"<p>You have been invited to collaborate on &quot;{html.escape(file_name)}&quot;. "
            f'Please register using this link: <a href="{html.escape(url)}">Register</a></p>'
        )
        return await self.send(OutgoingMail(to, f"Invitation to Collaborate on {file_name}", body))

    async def send_access_notification(self, to: str, file_name: str, role: str) -> bool:
        body = (
            f"<p>You have been granted {html.escape(role)} access to &quot;{html.escape(file_name)}&quot;. "
            "Log in to view the file.</p>"
        )
        return await self.send(OutgoingMail(to, f"Access Granted to {file_name}", body))

    async def send_role_changed(self, to: str, file_name: str, role: Optional[str]) -> bool:
        """Tell a member their role changed, or that access was removed when ``role`` is None."""
        if role is None:
            body = f"<p>Your access to &quot;{html.escape(file_name)}&quot; has been removed.</p>"
            return await self.send(OutgoingMail(to, f"Access Removed from {file_name}", body))
        body = f"<p>Your role on &quot;{html.escape(file_name)}&quot; is now {html.escape(role)}.</p>"
        return await self.send(OutgoingMail(to, f"Role Updated on {file_name}", body))
