"""
Repository bundle for dependency injection.

This module provides a convenience bundle of all repository instances
bound to one session, used by the service layer.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from .annotations import AnnotationRepository
from .files import FileMemberRepository, FileRepository
from .invitations import InvitationRepository
from .shareable_links import ShareableLinkRepository
from .users import UserRepository


@dataclass(frozen=True)
class RepoBundle:
    """Convenience bundle of all SQL repositories for dependency injection."""

    users: UserRepository
    files: FileRepository
    members: FileMemberRepository
    invitations: InvitationRepository
    links: ShareableLinkRepository
    annotations: AnnotationRepository


def build_repos_from_session(*, session: AsyncSession) -> RepoBundle:
    """Build a RepoBundle from an existing session.

    Args:
        session: Existing async session

    Returns:
        Bundle containing all repository instances
    """
    return RepoBundle(
        users=UserRepository(session),
        files=FileRepository(session),
        members=FileMemberRepository(session),
        invitations=InvitationRepository(session),
        links=ShareableLinkRepository(session),
        annotations=AnnotationRepository(session),
    )
