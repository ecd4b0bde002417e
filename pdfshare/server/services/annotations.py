"""
Annotation service.

The document XFDF lives on the file row together with a version counter that
is incremented on every save. Individual annotation records are kept in their
own table and may be changed by their creator or the file owner.
"""

from __future__ import annotations

from typing import List, Optional

from pdfshare.core.cache import CacheService
from pdfshare.core.database.entities import Annotation, File, User
from pdfshare.core.database.repositories import RepoBundle
from pdfshare.core.errors import ConflictError, FileNotFound, NotFoundError, PermissionDeniedError
from pdfshare.core.logging_config import get_logger
from pdfshare.core.models.io import AnnotationRead, XfdfRead
from pdfshare.server.core import constant

from .files import FileId, FileService

logger = get_logger(__name__)


def _xfdf_read(file: File) -> XfdfRead:
    return XfdfRead(
        id=file.id,
        file=file.id,
        xfdf=file.xfdf,
        version=file.version,
        created_at=file.created_at,
        updated_at=file.updated_at,
    )


def _annotation_read(annotation: Annotation) -> AnnotationRead:
    return AnnotationRead(
        id=annotation.id,
        file_id=annotation.file_id,
        creator=annotation.creator_email,
        xml=annotation.xml,
        created_at=annotation.created_at,
        updated_at=annotation.updated_at,
    )


class AnnotationService:
    """Service for document XFDF and individual annotations."""

    def __init__(self, repos: RepoBundle, cache: CacheService, files: FileService):
        self.repos = repos
        self.cache = cache
        self.files = files

    async def get_xfdf(self, raw_id: FileId, user: User) -> XfdfRead:
        file, _ = await self.files.require_reader(raw_id, user)
        key = self.cache.file_annotations_key(file.id)
        cached = await self.cache.get(key)
        if cached is not None:
            return XfdfRead.model_validate(cached)
        result = _xfdf_read(file)
        await self.cache.set(key, result.model_dump(mode="json"), constant.FILE_ANNOTATIONS_TTL)
        return result

    async def save_xfdf(self, raw_id: FileId, xfdf: str, user: User, version: Optional[int] = None) -> XfdfRead:
        """
        Replace the document XFDF and bump its version.

        Raises:
            ConflictError: ``version`` was given and is not the stored version
        """
        file, _ = await self.files.require_editor(raw_id, user)
        updated = await self.repos.files.save_xfdf(file.id, xfdf, expected_version=version)
        if updated is None:
            current = await self.repos.files.get_by_id(file.id)
            if current is None:
                raise FileNotFound()
            raise ConflictError(
                f"Annotations were modified by someone else (current version {current.version})"
            )
        await self.cache.delete(
            self.cache.file_annotations_key(file.id),
            self.cache.file_info_key(file.id),
        )
        logger.info(f"Saved annotations of file {file.id} (version {updated.version}) by {user.email}")
        return _xfdf_read(updated)

    async def list_annotations(self, raw_id: FileId, user: User) -> List[AnnotationRead]:
        file, _ = await self.files.require_reader(raw_id, user)
        return [_annotation_read(a) for a in await self.repos.annotations.list_for_file(file.id)]

    async def create_annotation(self, raw_id: FileId, xml: str, user: User) -> AnnotationRead:
        file, _ = await self.files.require_editor(raw_id, user)
        annotation = await self.repos.annotations.create(
            Annotation(file_id=file.id, creator_id=user.id, creator_email=user.email, xml=xml)
        )
        return _annotation_read(annotation)

    async def _owned_annotation(self, raw_id: FileId, annotation_id: int, user: User) -> Annotation:
        file, _ = await self.files.require_reader(raw_id, user)
        annotation = await self.repos.annotations.get_by_id(annotation_id)
        if annotation is None or annotation.file_id != file.id:
            raise NotFoundError("Annotation not found")
        if annotation.creator_email != user.email and file.owner_email != user.email:
            raise PermissionDeniedError("Only the creator or the file owner can modify this annotation")
        return annotation

    async def update_annotation(self, raw_id: FileId, annotation_id: int, xml: str, user: User) -> AnnotationRead:
        annotation = await self._owned_annotation(raw_id, annotation_id, user)
        annotation.xml = xml
        return _annotation_read(await self.repos.annotations.update(annotation))

    async def delete_annotation(self, raw_id: FileId, annotation_id: int, user: User) -> None:
        annotation = await self._owned_annotation(raw_id, annotation_id, user)
        await self.repos.annotations.delete(annotation.id)
