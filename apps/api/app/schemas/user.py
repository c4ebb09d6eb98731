"""User, user role and query option schemas."""

from datetime import datetime
from enum import Enum
import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.document import DocumentId, DocumentModel

logger = logging.getLogger(__name__)

SortOrder = Literal["asc", "desc"]
AdminTheme = Literal["default", "light", "dark"]


class TanamUserRoleType(str, Enum):
    SUPER_ADMIN = "superAdmin"
    ADMIN = "admin"
    PUBLISHER = "publisher"
    AUTHOR = "author"


class UserPrefs(DocumentModel):
    # Unknown preference keys round-trip untouched.
    model_config = ConfigDict(extra="allow")

    # Written by other clients; unrecognized values resolve to the default theme.
    theme: Any = None


def _is_role_value(value: Any) -> bool:
    return isinstance(value, str) and any(value == role.value for role in TanamUserRoleType)


class TanamUser(DocumentModel):
    uid: str
    name: str | None = None
    email: str | None = None
    photo_url: str | None = None
    roles: list[TanamUserRoleType] = Field(default_factory=list)
    prefs: UserPrefs | None = None

    @field_validator("roles", mode="before")
    @classmethod
    def _drop_unknown_roles(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        known = [role for role in value if _is_role_value(role)]
        if len(known) != len(value):
            logger.warning("user.unknown_roles_ignored count=%s", len(value) - len(known))
        return known


class TanamUserRole(DocumentModel):
    id: DocumentId | None = None
    uid: str | None = None
    name: str | None = None
    email: str | None = None
    role: TanamUserRoleType
    created_at: datetime | None = None
    updated_at: datetime | None = None


class InviteUserRequest(DocumentModel):
    id: DocumentId | None = None
    name: str | None = None
    email: str = Field(min_length=3)
    role: TanamUserRoleType


class QueryOrderBy(BaseModel):
    field: str = Field(min_length=1)
    sort_order: SortOrder = "asc"


class UserQueryOptions(BaseModel):
    """Listing options; applied as order-by, then start-after cursor, then limit."""

    order_by: QueryOrderBy | None = None
    start_after: Any | None = None
    limit: int | None = Field(default=None, ge=1)


class UserThemeRequest(BaseModel):
    theme: AdminTheme


class UserThemeResponse(BaseModel):
    theme: str


class UserRoleCheckResponse(BaseModel):
    role: TanamUserRoleType
    granted: bool
