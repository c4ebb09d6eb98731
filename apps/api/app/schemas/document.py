"""Base model for records persisted as store documents."""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# One path segment: ids become the last segment of a store path.
DocumentId = Annotated[str, Field(min_length=1, pattern=r"^[^/]+$")]


class DocumentModel(BaseModel):
    """Stored field names are camelCase; Python attributes stay snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
