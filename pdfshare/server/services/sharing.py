"""
Sharing service.

Invitations, role changes and shareable links. Membership is keyed by
e-mail, so people who have not signed up yet can be given a role; they
receive an invitation mail and see the file once they register.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from pdfshare.core.cache import CacheService
from pdfshare.core.database.base import to_naive_utc, utc_now
from pdfshare.core.database.entities import File, Invitation, ShareableLink, User
from pdfshare.core.database.repositories import RepoBundle
from pdfshare.core.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from pdfshare.core.logging_config import get_logger
from pdfshare.core.mailer import EmailService
from pdfshare.core.models.domain import MemberRole, RoleAssignment
from pdfshare.core.models.io import LinkAccessResponse, RoleChange, ShareableLinkRead
from pdfshare.core.monitoring import log_file_event

from .files import FileId, FileService

logger = get_logger(__name__)


class SharingService:
    """Service for granting and revoking access to files."""

    def __init__(
        self,
        repos: RepoBundle,
        cache: CacheService,
        mailer: EmailService,
        files: FileService,
        app_url: str = "http://localhost:3000",
    ):
        self.repos = repos
        self.cache = cache
        self.mailer = mailer
        self.files = files
        self.app_url = app_url.rstrip("/")

    async def _invalidate(self, file: File, emails: Iterable[str]) -> None:
        await self.cache.invalidate_file_cache(file.id)
        await self.cache.invalidate_user_lists([file.owner_email, *emails])

    # =============================================
    # Invitations & roles
    # =============================================

    async def invite(self, raw_id: FileId, emails: List[str], role: MemberRole, owner: User) -> None:
        """
        Grant ``role`` to each e-mail and notify them.

        Registered users get an access notification; unknown addresses get an
        invitation row and a sign-up link. The owner's own address is skipped.
        """
        file = await self.files.require_owner(raw_id, owner, "Only the owner can invite users")
        targets = [email for email in emails if email != file.owner_email]
        registered = await self.repos.users.get_by_emails(targets)

        for email in targets:
            await self.repos.members.set_role(file.id, email, role.value)
            if email in registered:
                await self.mailer.send_access_notification(email, file.name, role.value)
                continue
            invitation = await self.repos.invitations.create(
                Invitation(file_id=file.id, email=email, role=role.value, token=str(uuid.uuid4()))
            )
            await self.mailer.send_invitation_email(email, invitation.token, file.name)

        await self._invalidate(file, targets)
        log_file_event("shared", file.id, actor=owner.email, recipients=len(targets), role=role.value)

    @staticmethod
    def _check_change(file: File, change: RoleChange) -> None:
        if change.email == file.owner_email:
            raise ValidationFailedError("Cannot change the owner role")

    async def _apply_change(self, file: File, change: RoleChange) -> None:
        new_role: Optional[str] = None if change.role is RoleAssignment.NONE else change.role.value
        await self.repos.members.set_role(file.id, change.email, new_role)
        if await self.repos.users.get_by_email(change.email) is not None:
            await self.mailer.send_role_changed(change.email, file.name, new_role)
        log_file_event("role_changed", file.id, email=change.email, role=change.role.value)

    async def change_role(self, raw_id: FileId, change: RoleChange, owner: User) -> str:
        """Change or remove one member's role; returns the confirmation message."""
        file = await self.files.require_owner(raw_id, owner, "Only the owner can change roles")
        self._check_change(file, change)
        await self._apply_change(file, change)
        await self._invalidate(file, [change.email])
        if change.role is RoleAssignment.NONE:
            return "Role removed successfully"
        return "Role changed successfully"

    async def change_roles(self, raw_id: FileId, changes: List[RoleChange], owner: User) -> None:
        """Apply several role changes; all are validated before any is applied."""
        file = await self.files.require_owner(raw_id, owner, "Only the owner can change roles")
        for change in changes:
            self._check_change(file, change)
        for change in changes:
            await self._apply_change(file, change)
        await self._invalidate(file, [c.email for c in changes])

    # =============================================
    # Shareable links
    # =============================================

    def link_url(self, token: str) -> str:
        return f"{self.app_url}/share?token={token}"

    def to_read(self, link: ShareableLink) -> ShareableLinkRead:
        return ShareableLinkRead(
            id=link.id,
            file_id=link.file_id,
            role=MemberRole(link.role),
            token=link.token,
            enabled=link.enabled,
            url=self.link_url(link.token),
            created_at=link.created_at,
            expires_at=link.expires_at,
        )

    async def create_link(
        self, raw_id: FileId, role: MemberRole, owner: User, expires_at: Optional[datetime] = None
    ) -> ShareableLinkRead:
        file = await self.files.require_owner(raw_id, owner, "Only the owner can create shareable links")
        expires = to_naive_utc(expires_at)
        if expires is not None and expires <= utc_now():
            raise ValidationFailedError("Expiration date must be in the future")
        link = await self.repos.links.create(
            ShareableLink(
                file_id=file.id,
                role=role.value,
                token=str(uuid.uuid4()),
                created_by=owner.id,
                expires_at=expires,
            )
        )
        log_file_event("link_created", file.id, actor=owner.email, role=role.value)
        return self.to_read(link)

    async def list_links(self, raw_id: FileId, owner: User) -> List[ShareableLinkRead]:
        file = await self.files.require_owner(raw_id, owner, "Only the owner can view shareable links")
        return [self.to_read(link) for link in await self.repos.links.list_for_file(file.id)]

    async def toggle_links(self, raw_id: FileId, enabled: bool, owner: User) -> int:
        """Enable or disable every link of a file; returns how many were touched."""
        file = await self.files.require_owner(raw_id, owner, "Only the owner can manage shareable links")
        updated = await self.repos.links.set_enabled_for_file(file.id, enabled)
        logger.info(f"{'Enabled' if enabled else 'Disabled'} {updated} links of file {file.id}")
        return updated

    async def delete_link(self, link_id: int, owner: User) -> None:
        link = await self.repos.links.get_by_id(link_id)
        if link is None:
            raise NotFoundError("Shareable link not found")
        await self.files.require_owner(link.file_id, owner, "Only the owner can delete shareable links")
        await self.repos.links.delete(link_id)

    async def resolve_link(self, token: str) -> Tuple[ShareableLink, File]:
        """
        Look up an active link and its file.

        Raises:
            NotFoundError: Unknown token or the file is gone
            PermissionDeniedError: The link is disabled or expired
        """
        link = await self.repos.links.get_by_token(token)
        if link is None:
            raise NotFoundError("Shareable link not found")
        if not link.is_active(utc_now()):
            reason = "disabled" if not link.enabled else "has expired"
            raise PermissionDeniedError(f"Shareable link is {reason}")
        file = await self.files.get_file(link.file_id)
        return link, file

    async def access_via_link(self, token: str, user: User) -> LinkAccessResponse:
        """
        Redeem a link for the signed-in user.

        The link role is granted unless the user already holds the same or a
        higher role; the owner stays owner.
        """
        link, file = await self.resolve_link(token)
        granted = MemberRole(link.role).as_file_role()
        current = await self.files.resolve_role(file, user.email)
        if current.rank >= granted.rank:
            role = current
        else:
            await self.repos.members.set_role(file.id, user.email, granted.value)
            await self._invalidate(file, [user.email])
            log_file_event("link_redeemed", file.id, actor=user.email, role=granted.value)
            role = granted
        return LinkAccessResponse(file_id=file.id, file_name=file.name, role=role)

    async def public_link_access(self, token: str) -> Tuple[File, LinkAccessResponse]:
        link, file = await self.resolve_link(token)
        role = MemberRole(link.role).as_file_role()
        return file, LinkAccessResponse(file_id=file.id, file_name=file.name, role=role)
