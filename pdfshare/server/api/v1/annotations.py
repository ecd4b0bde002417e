"""
Annotation Endpoints.

The viewer loads and saves the whole document XFDF through ``annotation``
and ``annotation/save``; individual annotation records are managed under
``annotations`` / ``annotation/{annotation_id}``.
"""

from __future__ import annotations

from typing import Annotated, List

from fastapi import APIRouter, Path, status

from pdfshare.core.models.io import AnnotationRead, AnnotationWrite, MessageResponse, XfdfRead, XfdfSave
from pdfshare.server.core import constant
from pdfshare.server.services.deps import AnnotationServiceDep, CurrentUserDep

router = APIRouter(tags=["annotations"])

AnnotationId = Annotated[int, Path(ge=1, le=constant.MAX_RECORD_ID, description="Annotation record id")]


@router.get(
    "/{file_id}/annotation",
    response_model=XfdfRead,
    summary="Get Document Annotations",
    responses={403: {"description": "No access"}, 404: {"description": "File not found"}},
)
async def get_annotation(file_id: str, user: CurrentUserDep, service: AnnotationServiceDep) -> XfdfRead:
    return await service.get_xfdf(file_id, user)


@router.post(
    "/{file_id}/annotation/save",
    response_model=XfdfRead,
    summary="Save Document Annotations",
    responses={
        403: {"description": "Only owners and editors"},
        409: {"description": "The stored version differs from the given version"},
    },
)
async def save_annotation(
    file_id: str, body: XfdfSave, user: CurrentUserDep, service: AnnotationServiceDep
) -> XfdfRead:
    """
    Save the document XFDF.

    - **xfdf**: The complete annotation document.
    - **version**: Optional version the client last loaded; a mismatch is rejected.
    """
    return await service.save_xfdf(file_id, body.xfdf, user, version=body.version)


@router.get(
    "/{file_id}/annotations",
    response_model=List[AnnotationRead],
    summary="List Annotations",
)
async def list_annotations(
    file_id: str, user: CurrentUserDep, service: AnnotationServiceDep
) -> List[AnnotationRead]:
    return await service.list_annotations(file_id, user)


@router.post(
    "/{file_id}/annotation",
    response_model=AnnotationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Annotation",
    responses={403: {"description": "Only owners and editors"}},
)
async def create_annotation(
    file_id: str, body: AnnotationWrite, user: CurrentUserDep, service: AnnotationServiceDep
) -> AnnotationRead:
    return await service.create_annotation(file_id, body.xml, user)


@router.put(
    "/{file_id}/annotation/{annotation_id}",
    response_model=AnnotationRead,
    summary="Update Annotation",
    responses={403: {"description": "Only the creator or the file owner"}},
)
async def update_annotation(
    file_id: str, annotation_id: AnnotationId, body: AnnotationWrite, user: CurrentUserDep, service: AnnotationServiceDep
) -> AnnotationRead:
    return await service.update_annotation(file_id, annotation_id, body.xml, user)


@router.delete(
    "/{file_id}/annotation/{annotation_id}",
    response_model=MessageResponse,
    summary="Delete Annotation",
    responses={403: {"description": "Only the creator or the file owner"}},
)
async def delete_annotation(
    file_id: str, annotation_id: AnnotationId, user: CurrentUserDep, service: AnnotationServiceDep
) -> MessageResponse:
    await service.delete_annotation(file_id, annotation_id, user)
    return MessageResponse(message="Annotation deleted successfully")
