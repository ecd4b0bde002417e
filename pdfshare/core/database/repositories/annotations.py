"""
Annotation repository.
"""

from __future__ import annotations

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.annotations import Annotation
from .base import AsyncBaseRepository


class AnnotationRepository(AsyncBaseRepository[Annotation]):
    """Repository for individual annotation records."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Annotation)

    async def list_for_file(self, file_id: int) -> List[Annotation]:
        """Annotations of a file in creation order."""
        stmt = select(Annotation).where(Annotation.file_id == file_id).order_by(Annotation.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
