"""Document store interfaces shared by every backend."""

from __future__ import annotations

import copy
import secrets
import string
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any, Literal

SortDirection = Literal["asc", "desc"]
ClauseKind = Literal["where_equal", "order_by", "start_after", "limit"]

_AUTO_ID_ALPHABET = string.ascii_letters + string.digits
_AUTO_ID_LENGTH = 20


class DocumentStoreError(Exception):
    """Base error for document store failures raised by this package."""


class DocumentNotFoundError(DocumentStoreError):
    """Raised when an operation requires an existing document."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__("Document does not exist")


class TransactionConflictError(DocumentStoreError):
    """Raised when a read-modify-write keeps conflicting after all attempts."""

    def __init__(self, path: str, attempts: int) -> None:
        self.path = path
        self.attempts = attempts
        super().__init__(f"Transaction failed to commit in {attempts} attempts")


def join_path(*segments: str) -> str:
    parts: list[str] = []
    for segment in segments:
        parts.extend(part for part in str(segment).split("/") if part)
    return "/".join(parts)


def parent_path(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""


@dataclass(frozen=True, slots=True)
class QueryClause:
    kind: ClauseKind
    args: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class Query:
    """Immutable query over one collection; clauses run in the order they were added."""

    collection_path: str
    clauses: tuple[QueryClause, ...] = field(default=())

    def where_equal(self, field_path: str, value: Any) -> Query:
        return self._with(QueryClause("where_equal", (field_path, value)))

    def order_by(self, field_path: str, direction: SortDirection = "asc") -> Query:
        return self._with(QueryClause("order_by", (field_path, direction)))

    def start_after(self, value: Any) -> Query:
        return self._with(QueryClause("start_after", (value,)))

    def limit(self, count: int) -> Query:
        return self._with(QueryClause("limit", (count,)))

    def _with(self, clause: QueryClause) -> Query:
        return replace(self, clauses=(*self.clauses, clause))


@dataclass(frozen=True, slots=True)
class DocumentSnapshot:
    id: str
    path: str
    data: dict[str, Any] | None = None

    @property
    def exists(self) -> bool:
        return self.data is not None

    def to_dict(self) -> dict[str, Any] | None:
        return copy.deepcopy(self.data) if self.data is not None else None


class Subscription:
    """Handle for a live watch. ``cancel`` stops every later emission."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active = True
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def active(self) -> bool:
        return self._active

    def bind(self, unsubscribe: Callable[[], None]) -> None:
        with self._lock:
            if self._active:
                self._unsubscribe = unsubscribe
                return
        unsubscribe()

    def cancel(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
            unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()


DocumentCallback = Callable[[DocumentSnapshot], None]
QueryCallback = Callable[[list[DocumentSnapshot]], None]
MergeFn = Callable[[dict[str, Any]], dict[str, Any]]
BuildFn = Callable[[dict[str, Any] | None], dict[str, Any]]


class DocumentStore(ABC):
    """Collection-based document store with live watches and single-document transactions."""

    def collection(self, path: str) -> Query:
        return Query(collection_path=path)

    def create_id(self) -> str:
        """Return a 20 character auto id in the same alphabet Firestore uses."""
        return "".join(secrets.choice(_AUTO_ID_ALPHABET) for _ in range(_AUTO_ID_LENGTH))

    @abstractmethod
    def get(self, path: str) -> DocumentSnapshot:
        """Fetch one document; a missing document yields a snapshot with ``exists == False``."""

    @abstractmethod
    def set(self, path: str, data: dict[str, Any]) -> None:
        """Create or fully overwrite a document."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete a document. Deleting a missing document is not an error."""

    @abstractmethod
    def run_query(self, query: Query) -> list[DocumentSnapshot]:
        """Run a query once."""

    @abstractmethod
    def watch_document(self, path: str, callback: DocumentCallback) -> Subscription:
        """Deliver the document now and again on every change until cancelled."""

    @abstractmethod
    def watch_query(self, query: Query, callback: QueryCallback) -> Subscription:
        """Deliver query results now and again on every change until cancelled."""

    @abstractmethod
    def update_with_conflict_retry(self, path: str, merge_fn: MergeFn) -> dict[str, Any]:
        """Atomically read a document, compute field updates and write them back.

        ``merge_fn`` receives the current data and returns top-level field updates.
        It may be called more than once when the write conflicts. Returns the
        merged document data.
        """

    @abstractmethod
    def set_with_conflict_retry(self, path: str, build_fn: BuildFn) -> dict[str, Any]:
        """Atomically read a document, build its replacement and write it with ``set``.

        ``build_fn`` receives the current data, or ``None`` when the document does
        not exist yet, and returns the full document to store. A document created
        or changed by another writer in between makes the attempt conflict and
        ``build_fn`` runs again on the fresh data. Returns the written data.
        """


__all__ = [
    "BuildFn",
    "DocumentCallback",
    "DocumentNotFoundError",
    "DocumentSnapshot",
    "DocumentStore",
    "DocumentStoreError",
    "MergeFn",
    "Query",
    "QueryCallback",
    "QueryClause",
    "SortDirection",
    "Subscription",
    "TransactionConflictError",
    "join_path",
    "parent_path",
]
