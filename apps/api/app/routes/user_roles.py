"""User role (invitation) routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from app.routes.dependencies import get_query_options, get_user_service
from app.schemas.error import ErrorResponse
from app.schemas.user import InviteUserRequest, TanamUserRole, UserQueryOptions
from app.services.users import UserService

router = APIRouter(prefix="/user-roles", tags=["User roles"])


@router.get("", response_model=list[TanamUserRole], responses={401: {"model": ErrorResponse}})
def list_user_roles(
    options: Annotated[UserQueryOptions, Depends(get_query_options)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> list[TanamUserRole]:
    return service.get_user_roles(options)


@router.post(
    "",
    response_model=TanamUserRole,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}},
)
def invite_user(
    payload: InviteUserRequest,
    service: Annotated[UserService, Depends(get_user_service)],
) -> TanamUserRole:
    return service.invite_user(
        TanamUserRole(id=payload.id, name=payload.name, email=payload.email, role=payload.role)
    )


@router.delete(
    "/{roleId}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={401: {"model": ErrorResponse}},
)
def delete_user_role(
    role_id: Annotated[str, Path(alias="roleId", min_length=1)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> Response:
    service.delete_user_role(role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
