"""Shared helpers for API tests: a recording mailer and account/file shortcuts."""

import re
from typing import Dict, List

from httpx import AsyncClient

from pdfshare.core.mailer import EmailService, OutgoingMail
from pdfshare.server.core.config import EmailConfig

PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\ntrailer << /Root 1 0 R >>\n%%EOF\n"

_TOKEN_RE = re.compile(r"token=([0-9a-fA-F-]{36})")


class RecordingMailer(EmailService):
    """EmailService that keeps every rendered message in memory."""

    def __init__(self) -> None:
        super().__init__(EmailConfig(enabled=False, app_url="http://localhost:3000"))
        self.sent: List[OutgoingMail] = []

    async def send(self, mail: OutgoingMail) -> bool:
        self.sent.append(mail)
        return True

    def to(self, email: str) -> List[OutgoingMail]:
        return [m for m in self.sent if m.to == email]

    def last_token(self, email: str) -> str:
        for mail in reversed(self.to(email)):
            match = _TOKEN_RE.search(mail.html)
            if match:
                return match.group(1)
        raise AssertionError(f"No token mailed to {email}")


async def register_user(client: AsyncClient, mailer: RecordingMailer, email: str, name: str = "Test User") -> None:
    """Register and verify an account."""
    response = await client.post(
        "/api/auth/register", json={"email": email, "password": "password123", "name": name}
    )
    assert response.status_code == 201, response.text
    response = await client.get("/api/auth/verify-email", params={"token": mailer.last_token(email)})
    assert response.status_code == 200, response.text
    client.cookies.clear()


async def login(client: AsyncClient, email: str, password: str = "password123") -> Dict[str, str]:
    """Log in and return bearer headers; cookies are dropped so requests only use the header."""
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


async def signup(client: AsyncClient, mailer: RecordingMailer, email: str, name: str = "Test User") -> Dict[str, str]:
    await register_user(client, mailer, email, name)
    return await login(client, email)


async def upload_pdf(client: AsyncClient, headers: Dict[str, str], name: str = "doc.pdf") -> dict:
    response = await client.post(
        "/api/file/upload", headers=headers, files={"file": (name, PDF_BYTES, "application/pdf")}
    )
    assert response.status_code == 201, response.text
    return response.json()


async def share(client: AsyncClient, headers: Dict[str, str], file_id: int, email: str, role: str) -> None:
    response = await client.post(
        "/api/file/invite", headers=headers, json={"fileId": file_id, "emails": [email], "role": role}
    )
    assert response.status_code == 200, response.text
