"""
Role enumerations.

A user's relation to a file is one of ``owner``, ``editor``, ``viewer`` or
``none``. Only ``editor`` and ``viewer`` can be granted; ownership is fixed at
upload time.
"""

from __future__ import annotations

from enum import Enum


class FileRole(str, Enum):
    """Effective role of a user on a file."""

    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"
    NONE = "none"

    @property
    def rank(self) -> int:
        """Privilege rank; higher includes the permissions of lower ranks."""
        return _RANKS[self]

    @property
    def can_read(self) -> bool:
        return self.rank >= _RANKS[FileRole.VIEWER]

    @property
    def can_edit(self) -> bool:
        return self.rank >= _RANKS[FileRole.EDITOR]

    @property
    def can_share(self) -> bool:
        return self is FileRole.OWNER


_RANKS = {
    FileRole.NONE: 0,
    FileRole.VIEWER: 1,
    FileRole.EDITOR: 2,
    FileRole.OWNER: 3,
}


class MemberRole(str, Enum):
    """Role that can be granted to a non-owner through an invitation or a link."""

    EDITOR = "editor"
    VIEWER = "viewer"

    def as_file_role(self) -> FileRole:
        return FileRole(self.value)


class RoleAssignment(str, Enum):
    """Target of a role change; ``none`` revokes access."""

    EDITOR = "editor"
    VIEWER = "viewer"
    NONE = "none"
