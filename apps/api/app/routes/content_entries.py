"""Content entry routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.routes.dependencies import get_authenticated_principal, get_content_entry_service, get_query_options
from app.schemas.content_entry import ContentEntry
from app.schemas.error import ErrorResponse, NoLeakNotFoundError, RevisionConflictError
from app.schemas.user import UserQueryOptions
from app.services.content_entries import ContentEntryService

router = APIRouter(
    prefix="/content-entries",
    tags=["Content entries"],
    dependencies=[Depends(get_authenticated_principal)],
)


@router.get("", response_model=list[ContentEntry], responses={401: {"model": ErrorResponse}})
def list_content_entries(
    options: Annotated[UserQueryOptions, Depends(get_query_options)],
    service: Annotated[ContentEntryService, Depends(get_content_entry_service)],
    content_type: Annotated[str | None, Query(min_length=1)] = None,
) -> list[ContentEntry]:
    return service.list_entries(content_type=content_type, options=options)


@router.put(
    "",
    response_model=ContentEntry,
    responses={401: {"model": ErrorResponse}, 409: {"model": RevisionConflictError}},
)
def save_content_entry(
    payload: ContentEntry,
    service: Annotated[ContentEntryService, Depends(get_content_entry_service)],
) -> ContentEntry:
    return service.save_entry(payload)


@router.get(
    "/{entryId}",
    response_model=ContentEntry,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
def get_content_entry(
    entry_id: Annotated[str, Path(alias="entryId", min_length=1)],
    service: Annotated[ContentEntryService, Depends(get_content_entry_service)],
) -> ContentEntry:
    return service.get_entry(entry_id)


@router.delete(
    "/{entryId}",
    response_model=ContentEntry,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
def delete_content_entry(
    entry_id: Annotated[str, Path(alias="entryId", min_length=1)],
    service: Annotated[ContentEntryService, Depends(get_content_entry_service)],
) -> ContentEntry:
    return service.delete_entry(entry_id)
