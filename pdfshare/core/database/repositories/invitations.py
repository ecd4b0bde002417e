"""
Invitation repository.
"""

from __future__ import annotations

from typing import List

from sqlalchemy import delete as sa_delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.invitations import Invitation
from .base import AsyncBaseRepository


class InvitationRepository(AsyncBaseRepository[Invitation]):
    """Repository for pending invitations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Invitation)

    async def list_for_email(self, email: str) -> List[Invitation]:
        stmt = select(Invitation).where(Invitation.email == email).order_by(Invitation.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_for_email(self, email: str) -> int:
        """Drop every pending invitation of ``email``; returns the number removed."""
        result = await self.session.execute(sa_delete(Invitation).where(Invitation.email == email))
        await self.session.commit()
        return result.rowcount or 0
