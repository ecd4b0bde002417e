"""
File repository interface and implementation.

This module provides data access operations for files and their members,
including the listing of every file a user can reach, the versioned
annotation save and the cascading delete.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, or_
from sqlalchemy import update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.annotations import Annotation
from ..entities.files import File, FileMember
from ..entities.invitations import Invitation
from ..entities.shareable_links import ShareableLink
from .base import AsyncBaseRepository


class FileRepository(AsyncBaseRepository[File]):
    """Repository for file data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, File)

    @staticmethod
    def _accessible_by(email: str):
        member_files = select(FileMember.file_id).where(FileMember.email == email)
        return or_(File.owner_email == email, File.id.in_(member_files))  # type: ignore[union-attr]

    async def list_accessible(
        self, email: str, offset: int = 0, limit: Optional[int] = None, descending: bool = True
    ) -> List[File]:
        """List files owned by or shared with ``email``, ordered by last update.

        Args:
            email: The user's e-mail
            offset: Records to skip
            limit: Maximum records to return
            descending: Newest first when True

        Returns:
            List of File instances
        """
        if descending:
            order = (File.updated_at.desc(), File.id.desc())  # type: ignore[attr-defined,union-attr]
        else:
            order = (File.updated_at.asc(), File.id.asc())  # type: ignore[attr-defined,union-attr]
        stmt = select(File).where(self._accessible_by(email)).order_by(*order)
        stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_accessible(self, email: str) -> int:
        """Count files owned by or shared with ``email``."""
        stmt = select(func.count()).select_from(File).where(self._accessible_by(email))
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def save_xfdf(self, file_id: int, xfdf: str, expected_version: Optional[int] = None) -> Optional[File]:
        """Store a new annotation document and bump the version.

        The increment happens in the database, so concurrent saves never lose
        a version number.

        Args:
            file_id: File to update
            xfdf: New XFDF document
            expected_version: When given, only update if the stored version matches

        Returns:
            The refreshed file, or None when the file is gone or the version did not match
        """
        stmt = (
            sa_update(File)
            .where(File.id == file_id)
            .values(xfdf=xfdf, version=File.version + 1, updated_at=utc_now())
        )
        if expected_version is not None:
            stmt = stmt.where(File.version == expected_version)
        result = await self.session.execute(stmt)
        await self.session.commit()
        if result.rowcount == 0:
            return None
        refreshed = await self.session.execute(
            select(File).where(File.id == file_id).execution_options(populate_existing=True)
        )
        return refreshed.scalar_one_or_none()

    async def touch(self, file: File) -> File:
        """Mark a file as updated without other changes."""
        return await self.update(file)

    async def delete(self, entity_id: int) -> bool:
        """Delete a file together with its members, invitations, links and annotations.

        Args:
            entity_id: File ID to delete

        Returns:
            True if deleted, False if not found
        """
        file = await self.get_by_id(entity_id)
        if file is None:
            return False
        for model in (FileMember, Invitation, ShareableLink, Annotation):
            await self.session.execute(sa_delete(model).where(model.file_id == entity_id))
        await self.session.delete(file)
        await self.session.commit()
        return True


class FileMemberRepository(AsyncBaseRepository[FileMember]):
    """Repository for file membership (editor/viewer) records."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, FileMember)

    async def get(self, file_id: int, email: str) -> Optional[FileMember]:
        """Get the membership of ``email`` on a file."""
        stmt = select(FileMember).where((FileMember.file_id == file_id) & (FileMember.email == email))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_file(self, file_id: int) -> List[FileMember]:
        """All members of a file in the order they were added."""
        stmt = select(FileMember).where(FileMember.file_id == file_id).order_by(FileMember.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_emails_for_file(self, file_id: int) -> List[str]:
        return [member.email for member in await self.list_for_file(file_id)]

    async def set_role(self, file_id: int, email: str, role: Optional[str]) -> Optional[FileMember]:
        """Assign, change or (with ``role=None``) revoke a member's role.

        Args:
            file_id: The file
            email: Member e-mail
            role: ``editor``, ``viewer`` or None to remove

        Returns:
            The stored membership, or None when removed
        """
        member = await self.get(file_id, email)
        if role is None:
            if member is not None:
                await self.session.delete(member)
                await self.session.commit()
            return None
        if member is None:
            member = FileMember(file_id=file_id, email=email, role=role)
        else:
            member.role = role
        self.session.add(member)
        await self.session.commit()
        await self.session.refresh(member)
        return member
