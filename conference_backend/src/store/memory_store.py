"""
In-memory document store.

Used by the test suite and for local development
(CONFERENCE_STORE_BACKEND=memory). Documents are deep-copied on the way
in and out so callers never share state with the store.
"""

import copy
import threading
from typing import Any, Dict, Iterable, List, Optional

from conference_backend.src.store.base import (
    Document,
    DocumentStore,
    QueryFilter,
    WriteOperation,
    matches_all,
    merge_documents,
)


class InMemoryDocumentStore(DocumentStore):
    """Thread-safe dict-of-dicts document store."""

    def __init__(self, max_batch_operations: int = 500):
        self.max_batch_operations = max_batch_operations
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            data = self._collections.get(collection, {}).get(doc_id)
            if data is None:
                return None
            return Document(id=doc_id, data=copy.deepcopy(data))

    def query(
        self,
        collection: str,
        filters: Iterable[QueryFilter],
        limit: Optional[int] = None,
    ) -> List[Document]:
        filters = list(filters)
        results = []
        with self._lock:
            for doc_id, data in self._collections.get(collection, {}).items():
                if matches_all(data, filters):
                    results.append(Document(id=doc_id, data=copy.deepcopy(data)))
                    if limit is not None and len(results) >= limit:
                        break
        return results

    def list_all(self, collection: str) -> List[Document]:
        with self._lock:
            return [
                Document(id=doc_id, data=copy.deepcopy(data))
                for doc_id, data in self._collections.get(collection, {}).items()
            ]

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._collections.get(collection, {}))

    def _commit(self, operations: List[WriteOperation]) -> None:
        with self._lock:
            # Stage on copies so a failure leaves the store untouched
            staged = {
                name: dict(docs) for name, docs in self._collections.items()
            }
            for op in operations:
                docs = staged.setdefault(op.collection, {})
                if op.kind == "delete":
                    docs.pop(op.doc_id, None)
                elif op.merge and op.doc_id in docs:
                    docs[op.doc_id] = merge_documents(docs[op.doc_id], op.data or {})
                else:
                    docs[op.doc_id] = copy.deepcopy(op.data or {})
            self._collections = staged
