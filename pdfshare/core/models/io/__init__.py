"""
API I/O schemas.

Request and response models for the auth, file, sharing and annotation
endpoints. Responses serialize with camelCase aliases.
"""

from .annotations import AnnotationRead, AnnotationWrite, XfdfRead, XfdfSave
from .auth import (
    LoginRequest,
    MeResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    TokenResponse,
    UserPublic,
)
from .base import CamelModel, MessageResponse
from .files import (
    DownloadWithAnnotations,
    FileInfo,
    FileListItem,
    FileRead,
    FileUser,
    OwnerInfo,
    TotalFilesResponse,
    UserRoleResponse,
)
from .sharing import (
    AccessViaLinkRequest,
    ChangeRoleRequest,
    ChangeRolesRequest,
    CreateShareableLinkRequest,
    InviteRequest,
    LinkAccessResponse,
    RoleChange,
    ShareableLinkRead,
    ToggleShareableLinkRequest,
    ToggleShareableLinkResponse,
)

__all__ = [
    "AccessViaLinkRequest",
    "AnnotationRead",
    "AnnotationWrite",
    "CamelModel",
    "ChangeRoleRequest",
    "ChangeRolesRequest",
    "CreateShareableLinkRequest",
    "DownloadWithAnnotations",
    "FileInfo",
    "FileListItem",
    "FileRead",
    "FileUser",
    "InviteRequest",
    "LinkAccessResponse",
    "LoginRequest",
    "MeResponse",
    "MessageResponse",
    "OwnerInfo",
    "RefreshRequest",
    "RegisterRequest",
    "RegisterResponse",
    "ResendVerificationRequest",
    "RoleChange",
    "ShareableLinkRead",
    "TokenResponse",
    "TotalFilesResponse",
    "ToggleShareableLinkRequest",
    "ToggleShareableLinkResponse",
    "UserPublic",
    "UserRoleResponse",
    "XfdfRead",
    "XfdfSave",
]
