"""Document store adapters."""

from .base import (
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    DocumentStoreError,
    Query,
    Subscription,
    TransactionConflictError,
    join_path,
)
from .firestore import FirestoreDocumentStore
from .memory import InMemoryDocumentStore

__all__ = [
    "DocumentNotFoundError",
    "DocumentSnapshot",
    "DocumentStore",
    "DocumentStoreError",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    "Query",
    "Subscription",
    "TransactionConflictError",
    "join_path",
]
