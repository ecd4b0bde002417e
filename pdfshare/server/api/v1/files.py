"""
File Endpoints.

Upload, list, inspect, download and delete PDF documents. Every endpoint
requires authentication; the caller's role on the file decides what is
allowed.
"""

from __future__ import annotations

from typing import List, Literal

from fastapi import APIRouter
from fastapi import File as FormFile
from fastapi import Query, UploadFile, status
from fastapi.responses import StreamingResponse

from pdfshare.core.logging_config import get_logger
from pdfshare.core.models.io import (
    DownloadWithAnnotations,
    FileInfo,
    FileListItem,
    FileRead,
    FileUser,
    MessageResponse,
    TotalFilesResponse,
    UserRoleResponse,
)
from pdfshare.server.core import constant
from pdfshare.server.services.deps import CurrentUserDep, FileServiceDep

from ._download import pdf_response

logger = get_logger(__name__)

router = APIRouter(tags=["files"])


@router.post(
    "/upload",
    response_model=FileRead,
    status_code=status.HTTP_201_CREATED,
    summary="Upload PDF",
    description="Upload a PDF document owned by the caller.",
    responses={
        400: {"description": "No file uploaded"},
        413: {"description": "File exceeds the size limit"},
        415: {"description": "Not a PDF document"},
    },
)
async def upload_file(
    user: CurrentUserDep,
    service: FileServiceDep,
    file: UploadFile = FormFile(..., description="PDF document"),
) -> FileRead:
    """
    Upload a PDF.

    - **file**: Multipart form field holding the document.
    """
    data = await file.read(service.max_file_size_bytes + 1)
    stored = await service.upload(user, file.filename, file.content_type, data)
    return FileRead.model_validate(stored)


@router.get(
    "/list",
    response_model=List[FileListItem],
    summary="List Files",
    description="List files owned by or shared with the caller, 10 per page, ordered by last update.",
)
async def list_files(
    user: CurrentUserDep,
    service: FileServiceDep,
    page: int = Query(0, ge=0, le=constant.MAX_PAGE, description="Zero-based page number"),
    sort: Literal["ASC", "DESC"] = Query("DESC", description="Order by last update"),
) -> List[FileListItem]:
    return await service.list_files(user, page, sort)


@router.get("/total-files", response_model=TotalFilesResponse, summary="Count Files")
async def total_files(user: CurrentUserDep, service: FileServiceDep) -> TotalFilesResponse:
    return TotalFilesResponse(total_files=await service.total_files(user))


@router.get(
    "/{file_id}/info",
    response_model=FileInfo,
    summary="File Information",
    responses={403: {"description": "No access"}, 404: {"description": "File not found"}},
)
async def file_info(file_id: str, user: CurrentUserDep, service: FileServiceDep) -> FileInfo:
    """
    Get file metadata with the owner and the e-mails of viewers and editors.
    """
    return await service.file_info(file_id, user)


@router.get(
    "/{file_id}/download",
    summary="Download PDF",
    description="Stream the PDF. Owners and editors also receive the annotations in the X-Annotations header.",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "The PDF document"},
        403: {"description": "No access"},
        404: {"description": "File not found"},
    },
)
async def download_file(file_id: str, user: CurrentUserDep, service: FileServiceDep):
    file, data, annotations = await service.download(file_id, user)
    headers = {"X-Annotations": annotations} if annotations is not None else None
    return pdf_response(data, file.name, headers)


@router.get(
    "/{file_id}/download-with-annotations",
    response_model=DownloadWithAnnotations,
    summary="Download Information with Annotations",
    responses={403: {"description": "Only owners and editors"}},
)
async def download_with_annotations(
    file_id: str, user: CurrentUserDep, service: FileServiceDep
) -> DownloadWithAnnotations:
    return await service.download_with_annotations(file_id, user)


@router.get(
    "/{file_id}/users",
    response_model=List[FileUser],
    summary="File Users",
    description="List the owner and every member of the file. Owner only.",
    responses={403: {"description": "Only the owner"}},
)
async def file_users(file_id: str, user: CurrentUserDep, service: FileServiceDep) -> List[FileUser]:
    return await service.file_users(file_id, user)


@router.get(
    "/{file_id}/user-role",
    response_model=UserRoleResponse,
    summary="Caller's Role",
    responses={403: {"description": "No access"}},
)
async def user_role(file_id: str, user: CurrentUserDep, service: FileServiceDep) -> UserRoleResponse:
    return UserRoleResponse(role=await service.user_role(file_id, user))


@router.delete(
    "/{file_id}",
    response_model=MessageResponse,
    summary="Delete File",
    description="Delete the file with its members, invitations, links and annotations. Owner only.",
    responses={403: {"description": "Only the owner"}, 404: {"description": "File not found"}},
)
async def delete_file(file_id: str, user: CurrentUserDep, service: FileServiceDep) -> MessageResponse:
    await service.delete(file_id, user)
    return MessageResponse(message="File deleted successfully")
