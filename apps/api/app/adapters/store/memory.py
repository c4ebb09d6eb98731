"""In-memory document store used for local development and tests."""

from __future__ import annotations

import copy
import functools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from app.adapters.store.base import (
    BuildFn,
    DocumentCallback,
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    MergeFn,
    Query,
    QueryCallback,
    SortDirection,
    Subscription,
    TransactionConflictError,
    parent_path,
)
from app.core.logging_safety import safe_document_path

logger = logging.getLogger(__name__)

_DEFAULT_MAX_ATTEMPTS = 5


@dataclass(slots=True)
class StoredDocument:
    data: dict[str, Any]
    version: int


@dataclass(slots=True, eq=False)
class _Watcher:
    kind: Literal["document", "query"]
    target: str | Query
    callback: Any
    subscription: Subscription


def _field_value(data: dict[str, Any], field_path: str) -> tuple[bool, Any]:
    current: Any = data
    for part in field_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return False, None
        current = current[part]
    return True, current


def _sort_value(value: Any) -> tuple[int, Any]:
    # Cross-type ordering mirrors Firestore: null < bool < number < timestamp < string < other.
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, datetime):
        return (3, value.timestamp())
    if isinstance(value, str):
        return (4, value)
    return (5, str(value))


def _compare_values(left: Any, right: Any) -> int:
    left_key, right_key = _sort_value(left), _sort_value(right)
    return (left_key > right_key) - (left_key < right_key)


def _directed(result: int, direction: SortDirection) -> int:
    return -result if direction == "desc" else result


@dataclass(slots=True)
class InMemoryDocumentStore(DocumentStore):
    """Simple, deterministic document store with optimistic transaction conflicts."""

    max_attempts: int = _DEFAULT_MAX_ATTEMPTS
    documents: dict[str, StoredDocument] = field(default_factory=dict)
    write_count: int = 0
    read_count: int = 0
    transaction_attempts: int = 0
    _clock: int = 0
    _watchers: list[_Watcher] = field(default_factory=list)
    _lock: threading.RLock = field(default_factory=threading.RLock)

    def get(self, path: str) -> DocumentSnapshot:
        with self._lock:
            self.read_count += 1
            return self._snapshot(path)

    def set(self, path: str, data: dict[str, Any]) -> None:
        with self._lock:
            self._write(path, copy.deepcopy(data))
        self._notify(path)

    def delete(self, path: str) -> None:
        with self._lock:
            if self.documents.pop(path, None) is None:
                return
            self.write_count += 1
        self._notify(path)

    def run_query(self, query: Query) -> list[DocumentSnapshot]:
        with self._lock:
            self.read_count += 1
            return self._execute(query)

    def watch_document(self, path: str, callback: DocumentCallback) -> Subscription:
        subscription = self._register(_Watcher("document", path, callback, Subscription()))
        callback(self.get(path))
        return subscription

    def watch_query(self, query: Query, callback: QueryCallback) -> Subscription:
        subscription = self._register(_Watcher("query", query, callback, Subscription()))
        callback(self.run_query(query))
        return subscription

    def update_with_conflict_retry(self, path: str, merge_fn: MergeFn) -> dict[str, Any]:
        def merge(current: dict[str, Any] | None) -> dict[str, Any]:
            if current is None:
                raise DocumentNotFoundError(path)
            return {**current, **merge_fn(copy.deepcopy(current))}

        return self._transact(path, merge)

    def set_with_conflict_retry(self, path: str, build_fn: BuildFn) -> dict[str, Any]:
        return self._transact(path, build_fn)

    def _transact(self, path: str, build_fn: BuildFn) -> dict[str, Any]:
        for attempt in range(1, self.max_attempts + 1):
            with self._lock:
                self.transaction_attempts += 1
                read_version = self._version(path)
                stored = self.documents.get(path)
                current = copy.deepcopy(stored.data) if stored is not None else None

            # Other writers may interleave here; the version check below catches them.
            document = build_fn(current)

            with self._lock:
                if self._version(path) != read_version:
                    logger.info(
                        "store.transaction_conflict path=%s attempt=%s",
                        safe_document_path(path),
                        attempt,
                    )
                    continue
                document = copy.deepcopy(document)
                self._write(path, document)
            self._notify(path)
            return copy.deepcopy(document)

        logger.warning(
            "store.transaction_exhausted path=%s attempts=%s",
            safe_document_path(path),
            self.max_attempts,
        )
        raise TransactionConflictError(path, self.max_attempts)

    def _version(self, path: str) -> int:
        # Missing documents read as version 0 so a concurrent create conflicts.
        stored = self.documents.get(path)
        return stored.version if stored is not None else 0

    def _snapshot(self, path: str) -> DocumentSnapshot:
        stored = self.documents.get(path)
        document_id = path.rsplit("/", 1)[-1]
        data = copy.deepcopy(stored.data) if stored is not None else None
        return DocumentSnapshot(id=document_id, path=path, data=data)

    def _write(self, path: str, data: dict[str, Any]) -> None:
        # Versions come from one store-wide clock so a delete and re-create never
        # repeats a version an open transaction has read.
        self._clock += 1
        self.documents[path] = StoredDocument(data=data, version=self._clock)
        self.write_count += 1

    def _register(self, watcher: _Watcher) -> Subscription:
        def unsubscribe() -> None:
            with self._lock:
                if watcher in self._watchers:
                    self._watchers.remove(watcher)

        with self._lock:
            self._watchers.append(watcher)
        watcher.subscription.bind(unsubscribe)
        return watcher.subscription

    def _notify(self, path: str) -> None:
        collection_path = parent_path(path)
        with self._lock:
            watchers = list(self._watchers)
        for watcher in watchers:
            if not watcher.subscription.active:
                continue
            if watcher.kind == "document" and watcher.target == path:
                watcher.callback(self.get(path))
            elif watcher.kind == "query" and watcher.target.collection_path == collection_path:
                watcher.callback(self.run_query(watcher.target))

    def _execute(self, query: Query) -> list[DocumentSnapshot]:
        prefix = f"{query.collection_path}/"
        snapshots = [
            self._snapshot(path)
            for path in self.documents
            if path.startswith(prefix) and "/" not in path[len(prefix):]
        ]
        snapshots.sort(key=lambda snapshot: snapshot.id)
        orderings: list[tuple[str, SortDirection]] = []

        for clause in query.clauses:
            if clause.kind == "where_equal":
                field_path, expected = clause.args
                snapshots = [s for s in snapshots if _field_value(s.data, field_path) == (True, expected)]
            elif clause.kind == "order_by":
                field_path, direction = clause.args
                orderings.append((field_path, direction))
                snapshots = [s for s in snapshots if _field_value(s.data, field_path)[0]]
                snapshots.sort(key=functools.cmp_to_key(functools.partial(_compare_snapshots, orderings)))
            elif clause.kind == "start_after":
                (cursor,) = clause.args
                values = list(cursor) if isinstance(cursor, (list, tuple)) else [cursor]
                snapshots = [s for s in snapshots if _compare_to_cursor(s, orderings, values) > 0]
            elif clause.kind == "limit":
                (count,) = clause.args
                snapshots = snapshots[:count]

        return snapshots


def _compare_snapshots(
    orderings: list[tuple[str, SortDirection]],
    left: DocumentSnapshot,
    right: DocumentSnapshot,
) -> int:
    for field_path, direction in orderings:
        result = _compare_values(_field_value(left.data, field_path)[1], _field_value(right.data, field_path)[1])
        if result:
            return _directed(result, direction)
    tiebreak_direction = orderings[-1][1] if orderings else "asc"
    return _directed(_compare_values(left.id, right.id), tiebreak_direction)


def _compare_to_cursor(
    snapshot: DocumentSnapshot,
    orderings: list[tuple[str, SortDirection]],
    values: list[Any],
) -> int:
    if not orderings:
        return _compare_values(snapshot.id, values[0])
    for (field_path, direction), value in zip(orderings, values):
        result = _compare_values(_field_value(snapshot.data, field_path)[1], value)
        if result:
            return _directed(result, direction)
    return 0


__all__ = ["InMemoryDocumentStore", "StoredDocument"]
