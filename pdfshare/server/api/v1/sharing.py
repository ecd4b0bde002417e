"""
Sharing Endpoints.

Invite people to a file, change their roles and manage shareable links.
Opening a link works with or without an account: signed-in users are granted
the link's role, anonymous callers can read the file metadata or download it.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Path, Query, status

from pdfshare.core.errors import ValidationFailedError
from pdfshare.core.logging_config import get_logger
from pdfshare.core.models.io import (
    AccessViaLinkRequest,
    ChangeRoleRequest,
    ChangeRolesRequest,
    CreateShareableLinkRequest,
    InviteRequest,
    LinkAccessResponse,
    MessageResponse,
    ShareableLinkRead,
    ToggleShareableLinkRequest,
    ToggleShareableLinkResponse,
)
from pdfshare.server.core import constant
from pdfshare.server.services.deps import CurrentUserDep, FileServiceDep, SharingServiceDep

from ._download import pdf_response

logger = get_logger(__name__)

router = APIRouter(tags=["sharing"])


@router.post(
    "/invite",
    response_model=MessageResponse,
    summary="Invite Users",
    description="Grant a role on a file to one or more e-mail addresses. Owner only.",
    responses={403: {"description": "Only the owner"}, 404: {"description": "File not found"}},
)
async def invite(body: InviteRequest, user: CurrentUserDep, service: SharingServiceDep) -> MessageResponse:
    """
    Invite people to a file.

    - **fileId**: The file to share.
    - **emails**: Addresses to invite (``email`` is accepted for a single address).
    - **role**: ``viewer`` or ``editor``.

    Registered users are notified; unregistered addresses receive a sign-up
    invitation.
    """
    await service.invite(body.file_id, body.normalized_emails(), body.role, user)
    return MessageResponse(message="Invitations sent successfully")


@router.post(
    "/change-role",
    response_model=MessageResponse,
    summary="Change Role",
    description="Change or remove (role 'none') a member's role. Owner only.",
    responses={400: {"description": "Cannot change the owner role"}, 403: {"description": "Only the owner"}},
)
async def change_role(body: ChangeRoleRequest, user: CurrentUserDep, service: SharingServiceDep) -> MessageResponse:
    message = await service.change_role(body.file_id, body, user)
    return MessageResponse(message=message)


@router.post(
    "/change-roles",
    response_model=MessageResponse,
    summary="Change Several Roles",
    description="Apply several role changes at once. Nothing is applied if any change is invalid.",
    responses={400: {"description": "Cannot change the owner role"}, 403: {"description": "Only the owner"}},
)
async def change_roles(body: ChangeRolesRequest, user: CurrentUserDep, service: SharingServiceDep) -> MessageResponse:
    await service.change_roles(body.file_id, body.changes, user)
    return MessageResponse(message="Roles changed successfully")


@router.post(
    "/shareable-link/create",
    response_model=ShareableLinkRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Shareable Link",
    responses={400: {"description": "Expiration in the past"}, 403: {"description": "Only the owner"}},
)
async def create_shareable_link(
    body: CreateShareableLinkRequest, user: CurrentUserDep, service: SharingServiceDep
) -> ShareableLinkRead:
    """
    Create a link granting ``role`` on the file.

    - **fileId**: The file to share.
    - **role**: ``viewer`` or ``editor``.
    - **expiresAt**: Optional expiry; the link never expires when omitted.
    """
    return await service.create_link(body.file_id, body.role, user, body.expires_at)


@router.get(
    "/{file_id}/shareable-links",
    response_model=List[ShareableLinkRead],
    summary="List Shareable Links",
    responses={403: {"description": "Only the owner"}},
)
async def list_shareable_links(
    file_id: str, user: CurrentUserDep, service: SharingServiceDep
) -> List[ShareableLinkRead]:
    return await service.list_links(file_id, user)


@router.put(
    "/shareable-link/toggle",
    response_model=ToggleShareableLinkResponse,
    summary="Enable or Disable Shareable Links",
    description="Enable or disable every shareable link of a file. Owner only.",
)
async def toggle_shareable_links(
    body: ToggleShareableLinkRequest, user: CurrentUserDep, service: SharingServiceDep
) -> ToggleShareableLinkResponse:
    updated = await service.toggle_links(body.file_id, body.enabled, user)
    state = "enabled" if body.enabled else "disabled"
    return ToggleShareableLinkResponse(message=f"Shareable links {state} successfully", updated=updated)


@router.delete(
    "/shareable-link/{link_id}",
    response_model=MessageResponse,
    summary="Delete Shareable Link",
    responses={403: {"description": "Only the owner"}, 404: {"description": "Link not found"}},
)
async def delete_shareable_link(
    user: CurrentUserDep,
    service: SharingServiceDep,
    link_id: int = Path(..., ge=1, le=constant.MAX_RECORD_ID),
) -> MessageResponse:
    await service.delete_link(link_id, user)
    return MessageResponse(message="Shareable link deleted successfully")


@router.post(
    "/access-via-link",
    response_model=LinkAccessResponse,
    summary="Redeem Shareable Link",
    description="Grant the caller the link's role on the file unless they already hold an equal or higher role.",
    responses={403: {"description": "Link disabled or expired"}, 404: {"description": "Unknown link"}},
)
async def access_via_link(
    body: AccessViaLinkRequest, user: CurrentUserDep, service: SharingServiceDep
) -> LinkAccessResponse:
    return await service.access_via_link(body.token, user)


@router.get(
    "/access-via-link",
    response_model=LinkAccessResponse,
    summary="Open Shareable Link",
    description="Read the file behind a link without signing in; action=download streams the PDF.",
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Link details or the PDF document"},
        400: {"description": "Unsupported action"},
        403: {"description": "Link disabled or expired"},
        404: {"description": "Unknown link"},
    },
)
async def open_link(
    service: SharingServiceDep,
    files: FileServiceDep,
    token: str = Query(..., min_length=1),
    action: Optional[str] = Query(None, description="'download' to stream the PDF"),
):
    if action not in (None, "", "download"):
        raise ValidationFailedError(f"Unsupported action: {action}")
    file, access = await service.public_link_access(token)
    if action == "download":
        data = await files.read_content(file)
        return pdf_response(data, file.name)
    return access
