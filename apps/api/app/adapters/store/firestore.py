"""Cloud Firestore document store adapter."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from app.adapters.store.base import (
    BuildFn,
    DocumentCallback,
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    DocumentStoreError,
    MergeFn,
    Query,
    QueryCallback,
    Subscription,
    TransactionConflictError,
)
from app.core.logging_safety import safe_document_path

logger = logging.getLogger(__name__)

_DOCUMENT_ID_FIELD = "__name__"
# google.cloud.firestore raises a plain ValueError once a transaction runs out of attempts.
_ATTEMPTS_EXHAUSTED_PREFIX = "Failed to commit transaction"

# (transaction, document reference, current data or None) -> written data
_TransactionWrite = Callable[[Any, Any, dict[str, Any] | None], dict[str, Any]]


def _to_snapshot(snapshot: Any) -> DocumentSnapshot:
    data = snapshot.to_dict() if snapshot.exists else None
    return DocumentSnapshot(id=snapshot.id, path=snapshot.reference.path, data=data)


class FirestoreDocumentStore(DocumentStore):
    """Delegates every operation to a ``google.cloud.firestore.Client``."""

    def __init__(self, *, project_id: str | None = None, max_attempts: int = 5, client: Any | None = None) -> None:
        self._project_id = project_id
        self._max_attempts = max_attempts
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            try:
                import firebase_admin
                from firebase_admin import firestore as firebase_firestore
            except ImportError as exc:  # pragma: no cover - depends on optional package
                raise DocumentStoreError("Firestore client is unavailable") from exc

            if not firebase_admin._apps:
                options = {"projectId": self._project_id} if self._project_id else None
                firebase_admin.initialize_app(options=options)
            self._client = firebase_firestore.client()
        return self._client

    def get(self, path: str) -> DocumentSnapshot:
        return _to_snapshot(self.client.document(path).get())

    def set(self, path: str, data: dict[str, Any]) -> None:
        self.client.document(path).set(data)

    def delete(self, path: str) -> None:
        self.client.document(path).delete()

    def run_query(self, query: Query) -> list[DocumentSnapshot]:
        return [_to_snapshot(snapshot) for snapshot in self._build_query(query).stream()]

    def watch_document(self, path: str, callback: DocumentCallback) -> Subscription:
        subscription = Subscription()
        document_ref = self.client.document(path)

        def on_snapshot(snapshots: list[Any], _changes: Any, _read_time: Any) -> None:
            if not subscription.active:
                return
            if snapshots:
                callback(_to_snapshot(snapshots[0]))
            else:
                callback(DocumentSnapshot(id=document_ref.id, path=path, data=None))

        watch = document_ref.on_snapshot(on_snapshot)
        subscription.bind(watch.unsubscribe)
        return subscription

    def watch_query(self, query: Query, callback: QueryCallback) -> Subscription:
        subscription = Subscription()

        def on_snapshot(snapshots: list[Any], _changes: Any, _read_time: Any) -> None:
            if subscription.active:
                callback([_to_snapshot(snapshot) for snapshot in snapshots])

        watch = self._build_query(query).on_snapshot(on_snapshot)
        subscription.bind(watch.unsubscribe)
        return subscription

    def update_with_conflict_retry(self, path: str, merge_fn: MergeFn) -> dict[str, Any]:
        def merge(trx: Any, document_ref: Any, current: dict[str, Any] | None) -> dict[str, Any]:
            if current is None:
                raise DocumentNotFoundError(path)
            updates = merge_fn(current)
            trx.update(document_ref, updates)
            return {**current, **updates}

        return self._transact(path, merge)

    def set_with_conflict_retry(self, path: str, build_fn: BuildFn) -> dict[str, Any]:
        def build(trx: Any, document_ref: Any, current: dict[str, Any] | None) -> dict[str, Any]:
            document = build_fn(current)
            trx.set(document_ref, document)
            return document

        return self._transact(path, build)

    def _transact(self, path: str, write: _TransactionWrite) -> dict[str, Any]:
        from google.cloud import firestore

        document_ref = self.client.document(path)
        transaction = self.client.transaction(max_attempts=self._max_attempts)

        @firestore.transactional
        def apply(trx: Any) -> dict[str, Any]:
            snapshot = document_ref.get(transaction=trx)
            current = (snapshot.to_dict() or {}) if snapshot.exists else None
            return write(trx, document_ref, current)

        try:
            written = apply(transaction)
        except ValueError as exc:
            if not str(exc).startswith(_ATTEMPTS_EXHAUSTED_PREFIX):
                raise
            logger.warning(
                "store.transaction_exhausted path=%s attempts=%s",
                safe_document_path(path),
                self._max_attempts,
            )
            raise TransactionConflictError(path, self._max_attempts) from exc
        logger.debug("store.transaction_committed path=%s", safe_document_path(path))
        return written

    def _build_query(self, query: Query) -> Any:
        from google.cloud.firestore import FieldFilter, Query as FirestoreQuery

        collection = self.client.collection(query.collection_path)
        built: Any = collection
        ordered = False
        for clause in query.clauses:
            if clause.kind == "where_equal":
                field_path, expected = clause.args
                built = built.where(filter=FieldFilter(field_path, "==", expected))
            elif clause.kind == "order_by":
                field_path, direction = clause.args
                firestore_direction = FirestoreQuery.DESCENDING if direction == "desc" else FirestoreQuery.ASCENDING
                built = built.order_by(field_path, direction=firestore_direction)
                ordered = True
            elif clause.kind == "start_after":
                (cursor,) = clause.args
                values = list(cursor) if isinstance(cursor, (list, tuple)) else [cursor]
                if not ordered:
                    # Unordered queries page by document id.
                    built = built.order_by(_DOCUMENT_ID_FIELD)
                    values = [collection.document(str(values[0]))]
                    ordered = True
                built = built.start_after(values)
            elif clause.kind == "limit":
                (count,) = clause.args
                built = built.limit(count)
        return built


__all__ = ["FirestoreDocumentStore"]
