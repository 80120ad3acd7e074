"""
Document store layer.

Exports the store interface, its adapters and the collection names.
The Firestore adapter is imported from its module directly so the
google-cloud client is only loaded when that backend is selected.
"""

from conference_backend.src.store.base import (
    UNSET,
    Document,
    DocumentStore,
    QueryFilter,
    WriteBatch,
    strip_unset,
)
from conference_backend.src.store.memory_store import InMemoryDocumentStore
from conference_backend.src.store.sql_store import SqlDocumentStore

__all__ = [
    "UNSET",
    "Document",
    "DocumentStore",
    "QueryFilter",
    "WriteBatch",
    "strip_unset",
    "InMemoryDocumentStore",
    "SqlDocumentStore",
]
