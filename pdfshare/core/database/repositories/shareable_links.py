"""
Shareable link repository.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.shareable_links import ShareableLink
from .base import AsyncBaseRepository


class ShareableLinkRepository(AsyncBaseRepository[ShareableLink]):
    """Repository for shareable link tokens."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ShareableLink)

    async def get_by_token(self, token: str) -> Optional[ShareableLink]:
        stmt = select(ShareableLink).where(ShareableLink.token == token)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_file(self, file_id: int) -> List[ShareableLink]:
        """Links of a file, newest first."""
        stmt = (
            select(ShareableLink)
            .where(ShareableLink.file_id == file_id)
            .order_by(ShareableLink.created_at.desc(), ShareableLink.id.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def set_enabled_for_file(self, file_id: int, enabled: bool) -> int:
        """Enable or disable every link of a file; returns the number of links touched."""
        stmt = (
            sa_update(ShareableLink)
            .where(ShareableLink.file_id == file_id)
            .values(enabled=enabled, updated_at=utc_now())
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0
