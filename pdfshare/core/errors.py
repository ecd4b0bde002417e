"""Error types for pdfshare.

Defines a small hierarchy of exceptions raised by the services. Each error
carries the HTTP status the server maps it to, so the service layer stays
free of web framework imports.
"""

from __future__ import annotations


class PdfShareError(Exception):
    """Base error for all pdfshare exceptions."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailedError(PdfShareError):
    """Raised when a request is well-formed but violates a business rule."""

    status_code = 400


class AuthenticationError(PdfShareError):
    """Raised for missing, invalid or expired credentials."""

    status_code = 401


class PermissionDeniedError(PdfShareError):
    """Raised when the caller's role does not allow the operation."""

    status_code = 403


class NotFoundError(PdfShareError):
    """Raised when a referenced record does not exist."""

    status_code = 404


class ConflictError(PdfShareError):
    """Raised when the request conflicts with the stored state."""

    status_code = 409


class PayloadTooLargeError(PdfShareError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413


class UnsupportedMediaTypeError(PdfShareError):
    """Raised when an upload is not a PDF document."""

    status_code = 415


class StorageError(PdfShareError):
    """Raised when the document storage backend fails."""

    status_code = 502


class FileNotFound(NotFoundError):
    """Raised when a file id does not resolve to a stored file."""

    def __init__(self) -> None:
        super().__init__("File not found")
