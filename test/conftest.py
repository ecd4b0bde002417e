from __future__ import annotations

import os
import smtplib

import httpx
import pytest

# Settings are read at import time, so the test environment is fixed before
# anything from pdfshare is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_URL"] = ""
os.environ["EMAIL_ENABLED"] = "false"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["APP_URL"] = "http://localhost:3000"
os.environ["PDFSHARE_ENVIRONMENT"] = "test"
os.environ["LOGFIRE_ENABLED"] = "false"
os.environ["ENABLE_FILE_LOGGING"] = "false"

LOCAL_URL_PREFIXES = ("http://test", "http://localhost", "http://127.0.0.1", "/")


@pytest.fixture(autouse=True)
def _offline_guard(monkeypatch: pytest.MonkeyPatch):
    """Fail loudly when a test reaches a real mail server or a remote URL."""
    send_async = httpx.AsyncClient.send
    send_sync = httpx.Client.send

    def _check(request: httpx.Request) -> None:
        url = str(request.url)
        if not url.startswith(LOCAL_URL_PREFIXES):
            raise RuntimeError(f"Outbound HTTP blocked in tests: {url}")

    async def guarded_async_send(self, request, *args, **kwargs):
        _check(request)
        return await send_async(self, request, *args, **kwargs)

    def guarded_sync_send(self, request, *args, **kwargs):
        _check(request)
        return send_sync(self, request, *args, **kwargs)

    def blocked_smtp(*args, **kwargs):
        raise RuntimeError(f"SMTP connection blocked in tests: {args}")

    monkeypatch.setattr(httpx.AsyncClient, "send", guarded_async_send)
    monkeypatch.setattr(httpx.Client, "send", guarded_sync_send)
    monkeypatch.setattr(smtplib, "SMTP", blocked_smtp)
