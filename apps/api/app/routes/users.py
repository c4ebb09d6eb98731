"""Site user routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.routes.dependencies import get_query_options, get_user_service
from app.schemas.error import ErrorResponse, NoLeakNotFoundError
from app.schemas.user import (
    TanamUser,
    TanamUserRoleType,
    UserQueryOptions,
    UserRoleCheckResponse,
    UserThemeRequest,
    UserThemeResponse,
)
from app.services.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/me",
    response_model=TanamUser,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
def get_current_user(service: Annotated[UserService, Depends(get_user_service)]) -> TanamUser:
    return service.get_current_user()


@router.get("/me/theme", response_model=UserThemeResponse, responses={401: {"model": ErrorResponse}})
def get_user_theme(service: Annotated[UserService, Depends(get_user_service)]) -> UserThemeResponse:
    return UserThemeResponse(theme=service.get_user_theme())


@router.put(
    "/me/theme",
    response_model=UserThemeResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
def set_user_theme(
    payload: UserThemeRequest,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserThemeResponse:
    return UserThemeResponse(theme=service.set_user_theme(payload.theme))


@router.get("/me/roles/{role}", response_model=UserRoleCheckResponse, responses={401: {"model": ErrorResponse}})
def has_role(
    role: TanamUserRoleType,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserRoleCheckResponse:
    return UserRoleCheckResponse(role=role, granted=service.has_role(role))


@router.get("", response_model=list[TanamUser], responses={401: {"model": ErrorResponse}})
def list_users(
    options: Annotated[UserQueryOptions, Depends(get_query_options)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> list[TanamUser]:
    return service.get_users(options)


@router.get(
    "/{uid}",
    response_model=TanamUser,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
def get_user(
    uid: Annotated[str, Path(min_length=1)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> TanamUser:
    return service.get_user(uid)
