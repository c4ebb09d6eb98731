"""Authentication schemas."""

from pydantic import BaseModel, Field


class AuthPrincipal(BaseModel):
    """Normalized authenticated identity used by business services."""

    user_id: str = Field(min_length=1)
    role: str = Field(default="author", min_length=1)
    photo_url: str | None = None
