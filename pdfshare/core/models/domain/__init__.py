"""Domain-level types shared by the persistence and service layers."""

from .enums import FileRole, MemberRole, RoleAssignment

__all__ = ["FileRole", "MemberRole", "RoleAssignment"]
