"""
Database entity models.

Modules:
- users: Registered accounts and their verification/refresh state
- files: Uploaded documents and their member roles
- invitations: Pending invitations for e-mails without an account
- shareable_links: Role-scoped link tokens
- annotations: Individual annotation records
"""

from . import annotations, files, invitations, shareable_links, users
from .annotations import Annotation
from .files import File, FileMember
from .invitations import Invitation
from .shareable_links import ShareableLink
from .users import User

__all__ = [
    "Annotation",
    "File",
    "FileMember",
    "Invitation",
    "ShareableLink",
    "User",
    "annotations",
    "files",
    "invitations",
    "shareable_links",
    "users",
]
