"""Content entry service layer."""

from __future__ import annotations

from datetime import UTC, datetime
import logging
from typing import Any

from app.adapters.store.base import DocumentSnapshot, DocumentStore
from app.core.logging_safety import safe_log_identifier
from app.domain.queries import apply_query_options
from app.domain.revisions import next_revision
from app.domain.site import CONTENT_ENTRIES_COLLECTION, SiteScope
from app.errors import not_found_error
from app.schemas.content_entry import ContentEntry, ContentEntryStatus
from app.schemas.user import UserQueryOptions

logger = logging.getLogger(__name__)


class ContentEntryService:
    def __init__(self, store: DocumentStore, scope: SiteScope) -> None:
        self._store = store
        self._scope = scope

    def get_entry(self, entry_id: str) -> ContentEntry:
        entry = self._to_entry(self._store.get(self._entry_path(entry_id)))
        if entry is None:
            raise not_found_error()
        return entry

    def list_entries(
        self,
        *,
        content_type: str | None = None,
        options: UserQueryOptions | None = None,
    ) -> list[ContentEntry]:
        query = self._store.collection(self._scope.collection_path(CONTENT_ENTRIES_COLLECTION))
        if content_type is not None:
            query = query.where_equal("contentType", content_type)
        query = apply_query_options(query, options)
        return [entry for entry in map(self._to_entry, self._store.run_query(query)) if entry is not None]

    def save_entry(self, entry: ContentEntry) -> ContentEntry:
        """Create or overwrite an entry, advancing its revision.

        The stored revision is read, checked and advanced inside one store
        transaction, so concurrent saves of the same entry never move the
        revision backwards. A stale submitted revision raises 409 and writes
        nothing.
        """
        now = datetime.now(UTC)
        entry_id = entry.id or self._store.create_id()

        def build(current: dict[str, Any] | None) -> dict[str, Any]:
            stored = ContentEntry.model_validate({**current, "id": entry_id}) if current is not None else None
            publish_time = entry.publish_time
            if entry.status == ContentEntryStatus.PUBLISHED and publish_time is None:
                publish_time = stored.publish_time if stored is not None and stored.publish_time else now
            record = entry.model_copy(
                update={
                    "id": entry_id,
                    "revision": next_revision(stored.revision if stored is not None else None, entry.revision),
                    "publish_time": publish_time,
                    "created_at": stored.created_at if stored is not None and stored.created_at else now,
                    "updated_at": now,
                }
            )
            return record.to_document()

        record = ContentEntry.model_validate(self._store.set_with_conflict_retry(self._entry_path(entry_id), build))
        logger.info(
            "content_entry.saved entry_id=%s revision=%s status=%s",
            safe_log_identifier(entry_id, prefix="eid"),
            record.revision,
            record.status.value,
        )
        return record

    def delete_entry(self, entry_id: str) -> ContentEntry:
        """Soft-delete: the entry stays stored with status ``deleted``."""
        stored = self.get_entry(entry_id)
        return self.save_entry(stored.model_copy(update={"status": ContentEntryStatus.DELETED}))

    def _entry_path(self, entry_id: str) -> str:
        return self._scope.document_path(CONTENT_ENTRIES_COLLECTION, entry_id)

    @staticmethod
    def _to_entry(snapshot: DocumentSnapshot) -> ContentEntry | None:
        data = snapshot.to_dict()
        if data is None:
            return None
        data.setdefault("id", snapshot.id)
        return ContentEntry.model_validate(data)
