"""
Database repository layer using SQLModel.

All repositories are built on SQLModel for:
- Type-safe ORM operations with Pydantic validation
- Async-first database access patterns
- Consistent CRUD interface via AsyncBaseRepository
- Query building utilities for filtering and pagination

Modules:
- base: AsyncBaseRepository and QueryBuilder utilities
- users: User lookups
- files: Files and file members
- invitations: Pending invitations
- shareable_links: Shareable link tokens
- annotations: Individual annotation records
- bundle: RepoBundle for dependency injection
"""

from .annotations import AnnotationRepository
from .bundle import RepoBundle, build_repos_from_session
from .files import FileMemberRepository, FileRepository
from .invitations import InvitationRepository
from .shareable_links import ShareableLinkRepository
from .users import UserRepository

__all__ = [
    "AnnotationRepository",
    "FileMemberRepository",
    "FileRepository",
    "InvitationRepository",
    "RepoBundle",
    "ShareableLinkRepository",
    "UserRepository",
    "build_repos_from_session",
]
