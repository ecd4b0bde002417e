"""
File service.

Upload, listing, metadata, download and deletion of PDF documents, plus the
role resolution every file endpoint relies on. A user's role on a file is
``owner`` when they uploaded it, otherwise their membership role, otherwise
``none``.
"""

from __future__ import annotations

import json
import re
from typing import List, Optional, Tuple, Union

from pdfshare.core.cache import CacheService
from pdfshare.core.database.entities import File, User
from pdfshare.core.database.repositories import RepoBundle
from pdfshare.core.errors import FileNotFound, PermissionDeniedError
from pdfshare.core.logging_config import get_logger
from pdfshare.core.models.domain import FileRole
from pdfshare.core.models.io import (
    DownloadWithAnnotations,
    FileInfo,
    FileListItem,
    FileUser,
    OwnerInfo,
)
from pdfshare.core.monitoring import log_file_event
from pdfshare.core.storage import StorageBackend, validate_pdf_upload
from pdfshare.server.core import constant

logger = get_logger(__name__)

FileId = Union[int, str]


def parse_file_id(raw: FileId) -> int:
    """Turn a path or body file id into an integer; anything else is an unknown file."""
    if isinstance(raw, int) and not isinstance(raw, bool):
        value = raw
    else:
        text = str(raw).strip()
        if not re.fullmatch(r"[0-9]+", text):
            raise FileNotFound()
        value = int(text)
    if value <= 0 or value > constant.MAX_RECORD_ID:
        raise FileNotFound()
    return value


class FileService:
    """Service for file documents and role checks."""

    def __init__(
        self,
        repos: RepoBundle,
        cache: CacheService,
        storage: StorageBackend,
        max_file_size_bytes: int = 20 * 1024 * 1024,
    ):
        self.repos = repos
        self.cache = cache
        self.storage = storage
        self.max_file_size_bytes = max_file_size_bytes

    # =============================================
    # Access control
    # =============================================

    async def get_file(self, raw_id: FileId) -> File:
        file = await self.repos.files.get_by_id(parse_file_id(raw_id))
        if file is None:
            raise FileNotFound()
        return file

    async def resolve_role(self, file: File, email: str) -> FileRole:
        if file.owner_email == email:
            return FileRole.OWNER
        member = await self.repos.members.get(file.id, email)
        if member is None:
            return FileRole.NONE
        return FileRole(member.role)

    async def require_reader(self, raw_id: FileId, user: User) -> Tuple[File, FileRole]:
        file = await self.get_file(raw_id)
        role = await self.resolve_role(file, user.email)
        if not role.can_read:
            raise PermissionDeniedError("You do not have permission to access this file")
        return file, role

    async def require_editor(self, raw_id: FileId, user: User) -> Tuple[File, FileRole]:
        file, role = await self.require_reader(raw_id, user)
        if not role.can_edit:
            raise PermissionDeniedError("You do not have permission to edit this file")
        return file, role

    async def require_owner(
        self, raw_id: FileId, user: User, message: str = "Only the owner can perform this action"
    ) -> File:
        file = await self.get_file(raw_id)
        if not (await self.resolve_role(file, user.email)).can_share:
            raise PermissionDeniedError(message)
        return file

    # =============================================
    # Upload & listing
    # =============================================

    async def upload(
        self, user: User, filename: Optional[str], content_type: Optional[str], data: bytes
    ) -> File:
        """
        Validate and store an uploaded PDF owned by ``user``.

        Raises:
            ValidationFailedError: Empty upload
            PayloadTooLargeError: Over the configured size limit
            UnsupportedMediaTypeError: Not a PDF
            StorageError: The storage backend failed
        """
        validate_pdf_upload(data, filename, content_type, self.max_file_size_bytes)
        name = (filename or "document.pdf").strip() or "document.pdf"
        key = await self.storage.save(data, name, "application/pdf")
        try:
            file = await self.repos.files.create(
                File(
                    name=name,
                    content_type="application/pdf",
                    size_bytes=len(data),
                    storage_key=key,
                    owner_id=user.id,
                    owner_email=user.email,
                )
            )
        except Exception:
            await self.storage.delete(key)
            raise
        await self.cache.invalidate_user_lists([user.email])
        log_file_event("uploaded", file.id, actor=user.email, size_bytes=len(data))
        logger.info(f"File {file.id} uploaded by {user.email}")
        return file

    async def list_files(self, user: User, page: int = 0, sort: str = "DESC") -> List[FileListItem]:
        """One page of the files owned by or shared with ``user``, ordered by last update."""
        sort = "ASC" if sort.upper() == "ASC" else "DESC"
        key = self.cache.user_files_key(user.email, page, sort)
        cached = await self.cache.get(key)
        if cached is not None:
            return [FileListItem.model_validate(item) for item in cached]

        files = await self.repos.files.list_accessible(
            user.email,
            offset=page * constant.FILES_PER_PAGE,
            limit=constant.FILES_PER_PAGE,
            descending=sort == "DESC",
        )
        owners = await self.repos.users.get_by_emails(f.owner_email for f in files)
        items = []
        for f in files:
            owner = owners.get(f.owner_email)
            items.append(
                FileListItem(
                    id=f.id,
                    name=f.name,
                    owner=owner.name if owner else constant.UNREGISTERED_USER_NAME,
                    role=await self.resolve_role(f, user.email),
                    updated_at=f.updated_at,
                )
            )
        await self.cache.set(key, [item.model_dump(mode="json") for item in items], constant.USER_FILE_LIST_TTL)
        return items

    async def total_files(self, user: User) -> int:
        return await self.repos.files.count_accessible(user.email)

    # =============================================
    # Metadata
    # =============================================

    async def file_info(self, raw_id: FileId, user: User) -> FileInfo:
        file, _ = await self.require_reader(raw_id, user)
        key = self.cache.file_info_key(file.id)
        cached = await self.cache.get(key)
        if cached is not None:
            return FileInfo.model_validate(cached)

        owner = await self.repos.users.get_by_email(file.owner_email)
        members = await self.repos.members.list_for_file(file.id)
        info = FileInfo(
            id=file.id,
            name=file.name,
            created_at=file.created_at,
            updated_at=file.updated_at,
            owner=OwnerInfo(
                email=file.owner_email,
                name=owner.name if owner else constant.UNREGISTERED_USER_NAME,
            ),
            viewers=[m.email for m in members if m.role == FileRole.VIEWER.value],
            editors=[m.email for m in members if m.role == FileRole.EDITOR.value],
        )
        await self.cache.set(key, info.model_dump(mode="json"), constant.FILE_INFO_TTL)
        return info

    async def file_users(self, raw_id: FileId, user: User) -> List[FileUser]:
        """Owner first, then viewers, then editors."""
        file = await self.require_owner(raw_id, user, "Only the owner can view file users")
        key = self.cache.file_users_key(file.id)
        cached = await self.cache.get(key)
        if cached is not None:
            return [FileUser.model_validate(item) for item in cached]

        members = await self.repos.members.list_for_file(file.id)
        members.sort(key=lambda m: 0 if m.role == FileRole.VIEWER.value else 1)
        accounts = await self.repos.users.get_by_emails([file.owner_email, *(m.email for m in members)])

        def entry(email: str, role: FileRole) -> FileUser:
            account = accounts.get(email)
            return FileUser(
                id=account.id if account else None,
                email=email,
                role=role,
                name=account.name if account else constant.UNREGISTERED_USER_NAME,
            )

        users = [entry(file.owner_email, FileRole.OWNER)]
        users.extend(entry(m.email, FileRole(m.role)) for m in members)
        await self.cache.set(key, [u.model_dump(mode="json") for u in users], constant.FILE_USERS_TTL)
        return users

    async def user_role(self, raw_id: FileId, user: User) -> FileRole:
        file_id = parse_file_id(raw_id)
        key = self.cache.user_file_role_key(file_id, user.email)
        cached = await self.cache.get(key)
        if cached is not None:
            return FileRole(cached)

        file = await self.get_file(file_id)
        role = await self.resolve_role(file, user.email)
        if role is FileRole.NONE:
            raise PermissionDeniedError("You do not have access to this file")
        await self.cache.set(key, role.value, constant.USER_FILE_ROLE_TTL)
        return role

    # =============================================
    # Download & delete
    # =============================================

    async def download(self, raw_id: FileId, user: User) -> Tuple[File, bytes, Optional[str]]:
        """
        Read a stored PDF for a user with any role.

        Returns:
            The file, its bytes, and for owners and editors the JSON-encoded
            annotation list sent in the ``X-Annotations`` header
        """
        file, role = await self.require_reader(raw_id, user)
        data = await self.storage.open(file.storage_key)
        annotations = json.dumps([file.xfdf]) if role.can_edit else None
        log_file_event("downloaded", file.id, actor=user.email)
        return file, data, annotations

    async def read_content(self, file: File) -> bytes:
        return await self.storage.open(file.storage_key)

    async def download_with_annotations(self, raw_id: FileId, user: User) -> DownloadWithAnnotations:
        file, _ = await self.require_editor(raw_id, user)
        url = self.storage.download_url(file.storage_key) or f"{constant.API_PREFIX}/file/{file.id}/download"
        return DownloadWithAnnotations(
            file_id=file.id,
            file_name=file.name,
            download_url=url,
            annotations=file.xfdf,
            has_annotations=file.has_annotations,
            version=file.version,
        )

    async def delete(self, raw_id: FileId, user: User) -> None:
        """Delete a file, its stored PDF and everything attached to it."""
        file = await self.require_owner(raw_id, user, "Only the owner can delete the file")
        member_emails = await self.repos.members.list_emails_for_file(file.id)
        storage_key = file.storage_key
        file_id = file.id
        await self.repos.files.delete(file_id)
        await self.storage.delete(storage_key)
        await self.cache.invalidate_file_cache(file_id)
        await self.cache.invalidate_user_lists([user.email, *member_emails])
        log_file_event("deleted", file_id, actor=user.email)
        logger.info(f"File {file_id} deleted by {user.email}")
