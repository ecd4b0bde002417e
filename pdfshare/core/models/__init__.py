"""Domain enums and API I/O schemas."""

from .domain import FileRole, MemberRole, RoleAssignment

__all__ = ["FileRole", "MemberRole", "RoleAssignment"]
