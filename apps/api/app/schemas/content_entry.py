"""Content entry schemas."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from app.schemas.document import DocumentId, DocumentModel


class ContentEntryStatus(str, Enum):
    PUBLISHED = "published"
    UNPUBLISHED = "unpublished"
    DELETED = "deleted"


class ContentEntryUrl(DocumentModel):
    root: str
    path: str


class ContentEntry(DocumentModel):
    """A content document as rendered into templates and listed in the admin."""

    id: DocumentId | None = None
    content_type: str = Field(min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)
    title: str
    url: ContentEntryUrl
    revision: int = Field(default=0, ge=0)
    status: ContentEntryStatus = ContentEntryStatus.UNPUBLISHED
    tags: list[str] = Field(default_factory=list)
    standalone: bool = False
    publish_time: datetime | None = None
    updated_at: datetime | None = None
    created_at: datetime | None = None
