"""Tenant/site scoping for store paths."""

from dataclasses import dataclass

from app.adapters.store.base import join_path

USERS_COLLECTION = "users"
USER_ROLES_COLLECTION = "user-roles"
CONTENT_ENTRIES_COLLECTION = "documents"


@dataclass(frozen=True, slots=True)
class SiteScope:
    """Roots every collection under ``/{tenant_root}/{site_id}``."""

    site_id: str
    tenant_root: str = "tanam"

    def __post_init__(self) -> None:
        if not self.site_id or "/" in self.site_id:
            raise ValueError("site_id must be a single non-empty path segment")

    @property
    def root(self) -> str:
        return join_path(self.tenant_root, self.site_id)

    def collection_path(self, name: str) -> str:
        return join_path(self.root, name)

    def document_path(self, collection: str, document_id: str) -> str:
        if not document_id or "/" in document_id:
            raise ValueError("document_id must be a single non-empty path segment")
        return join_path(self.root, collection, document_id)
