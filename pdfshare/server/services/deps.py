"""
Service Dependencies.

Provides the process-wide cache, storage and mail singletons, the per-request
repository bundle, the authenticated user and the service objects used by the
API endpoints. Tests replace any of them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pdfshare.core.cache import CacheService, build_cache_backend
from pdfshare.core.database import get_session
from pdfshare.core.database.entities import User
from pdfshare.core.database.repositories import RepoBundle, build_repos_from_session
from pdfshare.core.errors import AuthenticationError
from pdfshare.core.logging_config import get_logger
from pdfshare.core.mailer import EmailService
from pdfshare.core.security import decode_token
from pdfshare.core.storage import StorageBackend, build_storage
from pdfshare.server.core.config import settings
from pdfshare.server.core.constant import ACCESS_TOKEN_COOKIE

from .annotations import AnnotationService
from .auth import AuthService
from .files import FileService
from .sharing import SharingService

logger = get_logger(__name__)

_cache: Optional[CacheService] = None
_storage: Optional[StorageBackend] = None
_mailer: Optional[EmailService] = None


def get_cache() -> CacheService:
    global _cache
    if _cache is None:
        _cache = CacheService(build_cache_backend(settings.redis_url))
    return _cache


def get_storage() -> StorageBackend:
    global _storage
    if _storage is None:
        _storage = build_storage(settings)
    return _storage


def get_mailer() -> EmailService:
    global _mailer
    if _mailer is None:
        _mailer = EmailService(settings.email)
    return _mailer


async def close_resources() -> None:
    """Release the process-wide clients on shutdown."""
    global _cache, _storage, _mailer
    if _cache is not None:
        await _cache.close()
    _cache = _storage = _mailer = None


def get_repos(session: AsyncSession = Depends(get_session)) -> RepoBundle:
    return build_repos_from_session(session=session)


RepoDep = Annotated[RepoBundle, Depends(get_repos)]
CacheDep = Annotated[CacheService, Depends(get_cache)]
StorageDep = Annotated[StorageBackend, Depends(get_storage)]
MailerDep = Annotated[EmailService, Depends(get_mailer)]


def _extract_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(ACCESS_TOKEN_COOKIE) or None


async def get_current_user(request: Request, repos: RepoDep) -> User:
    """
    Resolve the authenticated user.

    The access token is read from the ``Authorization: Bearer`` header and,
    failing that, from the ``access_token`` cookie.

    Raises:
        AuthenticationError: Missing or invalid token, or the user no longer exists
    """
    token = _extract_token(request)
    if not token:
        raise AuthenticationError("Not authenticated")
    claims = decode_token(token, "access")
    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Invalid token") from e
    user = await repos.users.get_by_id(user_id)
    if user is None:
        raise AuthenticationError("User not found")
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_auth_service(repos: RepoDep, mailer: MailerDep, cache: CacheDep) -> AuthService:
    return AuthService(repos, mailer, cache)


def get_file_service(repos: RepoDep, cache: CacheDep, storage: StorageDep) -> FileService:
    return FileService(repos, cache, storage, max_file_size_bytes=settings.max_file_size_bytes)


def get_sharing_service(
    repos: RepoDep, cache: CacheDep, mailer: MailerDep, files: FileService = Depends(get_file_service)
) -> SharingService:
    return SharingService(repos, cache, mailer, files, app_url=settings.app_url)


def get_annotation_service(
    repos: RepoDep, cache: CacheDep, files: FileService = Depends(get_file_service)
) -> AnnotationService:
    return AnnotationService(repos, cache, files)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
FileServiceDep = Annotated[FileService, Depends(get_file_service)]
SharingServiceDep = Annotated[SharingService, Depends(get_sharing_service)]
AnnotationServiceDep = Annotated[AnnotationService, Depends(get_annotation_service)]
