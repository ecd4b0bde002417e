"""
User repository.

Lookups by e-mail, verification token and batches of e-mails (used to
resolve display names of file members).
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.users import User
from .base import AsyncBaseRepository


class UserRepository(AsyncBaseRepository[User]):
    """Repository for user data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by (lowercased) e-mail address."""
        stmt = select(User).where(User.email == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_verification_token(self, token: str) -> Optional[User]:
        """Get the user holding a pending e-mail verification token."""
        stmt = select(User).where(User.verification_token == token)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_emails(self, emails: Iterable[str]) -> Dict[str, User]:
        """Map each registered e-mail of ``emails`` to its user."""
        wanted = {email.lower() for email in emails}
        if not wanted:
            return {}
        stmt = select(User).where(User.email.in_(wanted))  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return {user.email: user for user in result.scalars().all()}
