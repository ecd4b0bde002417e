"""
Account service: sign-up, e-mail verification, login and token rotation.
"""

from __future__ import annotations

import uuid
from typing import Tuple

from pdfshare.core.cache import CacheService
from pdfshare.core.database.entities import User
from pdfshare.core.database.repositories import RepoBundle
from pdfshare.core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationFailedError
from pdfshare.core.logging_config import get_logger
from pdfshare.core.mailer import EmailService
from pdfshare.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_secret,
    hash_token,
    verify_secret,
    verify_token_hash,
)

logger = get_logger(__name__)

TokenPair = Tuple[str, str]


class AuthService:
    """Service for user accounts and session tokens."""

    def __init__(self, repos: RepoBundle, mailer: EmailService, cache: CacheService):
        self.repos = repos
        self.mailer = mailer
        self.cache = cache

    async def register(self, email: str, password: str, name: str) -> User:
        """
        Create an unverified account and send the verification mail.

        Pending invitations for the address are dropped: the invited roles were
        already granted to the e-mail when the invitation was sent.

        Raises:
            ConflictError: The address already belongs to an account
        """
        existing = await self.repos.users.get_by_email(email)
        if existing is not None and (existing.password_hash or existing.google_id):
            raise ConflictError("Email already registered")

        token = str(uuid.uuid4())
        if existing is None:
            user = User(email=email, name=name)
        else:
            user = existing
            user.name = name
        user.password_hash = hash_secret(password)
        user.is_email_verified = False
        user.verification_token = token
        user = await self.repos.users.create(user)

        invited_files = {invitation.file_id for invitation in await self.repos.invitations.list_for_email(email)}
        if invited_files:
            await self.repos.invitations.delete_for_email(email)
            # member lists still show the address as unregistered
            for file_id in invited_files:
                await self.cache.invalidate_file_cache(file_id)
            logger.info(f"Cleared pending invitations of {email} on {len(invited_files)} files")

        await self.mailer.send_verification_email(email, token)
        logger.info(f"Registered user {user.id} ({email})")
        return user

    async def verify_email(self, token: str) -> Tuple[User, TokenPair]:
        user = await self.repos.users.get_by_verification_token(token)
        if user is None:
            raise ValidationFailedError("Invalid or expired verification token")
        user.is_email_verified = True
        user.verification_token = None
        tokens = await self._issue_tokens(user)
        logger.info(f"Verified e-mail of user {user.id}")
        return user, tokens

    async def resend_verification(self, email: str) -> None:
        user = await self.repos.users.get_by_email(email)
        if user is None:
            raise ValidationFailedError("User not found")
        if user.is_email_verified:
            raise ValidationFailedError("Email already verified")
        if user.google_id and not user.password_hash:
            raise ValidationFailedError("Google accounts do not require email verification")
        user.verification_token = str(uuid.uuid4())
        await self.repos.users.update(user)
        await self.mailer.send_verification_email(email, user.verification_token)

    async def login(self, email: str, password: str) -> Tuple[User, TokenPair]:
        """
        Check credentials and issue a token pair.

        Raises:
            AuthenticationError: Unknown user, wrong password or unverified e-mail
        """
        user = await self.repos.users.get_by_email(email)
        if user is None or not verify_secret(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        if not user.is_email_verified:
            raise AuthenticationError("Email not verified")
        return user, await self._issue_tokens(user)

    async def refresh(self, refresh_token: str) -> Tuple[User, TokenPair]:
        """Exchange a refresh token for a new pair; the old refresh token stops working."""
        claims = decode_token(refresh_token, "refresh")
        try:
            user_id = int(claims["sub"])
        except (TypeError, ValueError) as e:
            raise AuthenticationError("Invalid refresh token") from e
        user = await self.repos.users.get_by_id(user_id)
        if user is None or not verify_token_hash(refresh_token, user.refresh_token_hash):
            raise AuthenticationError("Invalid refresh token")
        return user, await self._issue_tokens(user)

    async def logout(self, user: User) -> None:
        user.refresh_token_hash = None
        await self.repos.users.update(user)
        logger.info(f"User {user.id} logged out")

    async def get_by_email(self, email: str) -> User:
        user = await self.repos.users.get_by_email(email)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _issue_tokens(self, user: User) -> TokenPair:
        access = create_access_token(user.id, user.email)
        refresh = create_refresh_token(user.id, user.email)
        user.refresh_token_hash = hash_token(refresh)
        await self.repos.users.update(user)
        return access, refresh
