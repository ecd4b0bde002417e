"""Helpers for streaming stored PDFs back to clients."""

from __future__ import annotations

from typing import Dict, Iterator, Optional
from urllib.parse import quote

from fastapi.responses import StreamingResponse

CHUNK_SIZE = 64 * 1024


def _chunks(data: bytes) -> Iterator[bytes]:
    for start in range(0, len(data), CHUNK_SIZE):
        yield data[start : start + CHUNK_SIZE]


def pdf_response(data: bytes, filename: str, extra_headers: Optional[Dict[str, str]] = None) -> StreamingResponse:
    """Stream ``data`` as a PDF attachment named ``filename``."""
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").replace('"', "") or "document.pdf"
    headers = {
        "Content-Disposition": f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}",
        "Content-Length": str(len(data)),
    }
    if extra_headers:
        headers.update(extra_headers)
    return StreamingResponse(_chunks(data), media_type="application/pdf", headers=headers)
