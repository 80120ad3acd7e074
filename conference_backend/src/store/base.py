"""
Abstract document store interface.

Defines the contract every document store adapter implements. The
orchestrators only talk to this interface so the same lifecycle code runs
against Firestore in production, a SQL table, or an in-memory store in tests.

Design:
- Documents are JSON-compatible dicts addressed by (collection, doc_id)
- Queries support equality and array-contains filters on dotted field paths
- Writes are staged in a WriteBatch and applied atomically by commit()
- Payloads are canonicalized at the write boundary: UNSET values are
  stripped recursively, None is kept as an explicit null
"""

import copy
import secrets
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


class _Unset:
    """Marker for a field that must not be written at all."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


UNSET = _Unset()

FILTER_EQUALS = "=="
FILTER_ARRAY_CONTAINS = "array-contains"
SUPPORTED_FILTER_OPS = (FILTER_EQUALS, FILTER_ARRAY_CONTAINS)

_AUTO_ID_ALPHABET = string.ascii_letters + string.digits
AUTO_ID_LENGTH = 20


def strip_unset(value: Any) -> Any:
    """
    Recursively remove UNSET values from a payload.

    Dict entries whose value is UNSET are dropped, as are UNSET list items.
    None is preserved.

    Args:
        value: Any JSON-like value

    Returns:
        A new value with every UNSET removed
    """
    if isinstance(value, dict):
        return {
            k: strip_unset(v) for k, v in value.items() if v is not UNSET
        }
    if isinstance(value, (list, tuple)):
        return [strip_unset(v) for v in value if v is not UNSET]
    return value


def get_field(data: Dict[str, Any], path: str) -> Any:
    """Resolve a dotted field path, returning UNSET when any segment is missing."""
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return UNSET
        current = current[part]
    return current


def merge_documents(existing: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``patch`` into a copy of ``existing`` (nested maps merge, other values replace)."""
    merged = copy.deepcopy(existing)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_documents(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def generate_auto_id() -> str:
    """Generate a 20-character random document id."""
    return "".join(secrets.choice(_AUTO_ID_ALPHABET) for _ in range(AUTO_ID_LENGTH))


@dataclass
class Document:
    """A stored document and its id."""

    id: str
    data: Dict[str, Any]

    def get(self, path: str, default: Any = None) -> Any:
        value = get_field(self.data, path)
        return default if value is UNSET else value


@dataclass(frozen=True)
class QueryFilter:
    """A single query predicate on a (possibly dotted) field path."""

    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in SUPPORTED_FILTER_OPS:
            raise ValueError(
                f"Unsupported filter operator '{self.op}'. "
                f"Supported: {', '.join(SUPPORTED_FILTER_OPS)}"
            )

    def matches(self, data: Dict[str, Any]) -> bool:
        actual = get_field(data, self.field)
        if actual is UNSET:
            return False
        if self.op == FILTER_EQUALS:
            return actual == self.value
        return isinstance(actual, list) and self.value in actual


def matches_all(data: Dict[str, Any], filters: Iterable[QueryFilter]) -> bool:
    return all(f.matches(data) for f in filters)


@dataclass
class WriteOperation:
    """One staged write: a set (optionally merging) or a delete."""

    kind: str
    collection: str
    doc_id: str
    data: Optional[Dict[str, Any]] = None
    merge: bool = False


class WriteBatch:
    """
    Collects write operations and applies them atomically.

    Obtained from DocumentStore.batch(). Payloads are stripped of UNSET
    values when staged.
    """

    def __init__(self, store: "DocumentStore"):
        self._store = store
        self._operations: List[WriteOperation] = []
        self._committed = False

    def set(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        merge: bool = False,
    ) -> "WriteBatch":
        self._operations.append(
            WriteOperation("set", collection, doc_id, strip_unset(data), merge)
        )
        return self

    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        self._operations.append(WriteOperation("delete", collection, doc_id))
        return self

    @property
    def operations(self) -> List[WriteOperation]:
        return list(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def commit(self) -> None:
        """
        Apply all staged operations atomically.

        Raises:
            RuntimeError: If the batch was already committed
            ValueError: If the batch exceeds the store's operation limit
        """
        if self._committed:
            raise RuntimeError("WriteBatch has already been committed")
        if len(self._operations) > self._store.max_batch_operations:
            raise ValueError(
                f"Batch of {len(self._operations)} operations exceeds the "
                f"store limit of {self._store.max_batch_operations}"
            )
        self._committed = True
        if self._operations:
            self._store._commit(list(self._operations))


class DocumentStore(ABC):
    """
    Abstract base class for document store adapters.

    Subclasses implement reads and _commit(); single-document writes are
    expressed as one-operation batches so every write goes through the
    same canonicalization path.
    """

    max_batch_operations: int = 500

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Load one document, or None if it does not exist."""
        pass

    @abstractmethod
    def query(
        self,
        collection: str,
        filters: Iterable[QueryFilter],
        limit: Optional[int] = None,
    ) -> List[Document]:
        """Return the documents of ``collection`` matching every filter."""
        pass

    @abstractmethod
    def list_all(self, collection: str) -> List[Document]:
        """Return every document of ``collection``."""
        pass

    @abstractmethod
    def _commit(self, operations: List[WriteOperation]) -> None:
        """Apply the operations atomically. Deleting a missing document is a no-op."""
        pass

    def new_id(self, collection: str) -> str:
        """Generate a fresh document id for ``collection``."""
        return generate_auto_id()

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def set(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        merge: bool = False,
    ) -> None:
        self.batch().set(collection, doc_id, data, merge=merge).commit()

    def delete(self, collection: str, doc_id: str) -> None:
        self.batch().delete(collection, doc_id).commit()

    def find(
        self,
        collection: str,
        field_path: str,
        value: Any,
        op: str = FILTER_EQUALS,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """Shorthand for a single-filter query."""
        return self.query(collection, [QueryFilter(field_path, op, value)], limit=limit)
