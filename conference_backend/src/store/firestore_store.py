"""
Google Cloud Firestore document store.

Production adapter (CONFERENCE_STORE_BACKEND=firestore). Queries are
pushed down to Firestore with FieldFilter; batches map onto native
Firestore write batches, which are atomic and capped at 500 operations.

Credentials follow Application Default Credentials
(GOOGLE_APPLICATION_CREDENTIALS or the runtime service account).
"""

from typing import Iterable, List, Optional

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import firestore
from google.cloud.firestore_v1 import FieldFilter

from conference_backend.src.store.base import (
    Document,
    DocumentStore,
    QueryFilter,
    WriteOperation,
)
from conference_backend.src.utils.logging_config import get_logger


logger = get_logger("store")

FIRESTORE_MAX_BATCH_OPERATIONS = 500


class FirestoreDocumentStore(DocumentStore):
    """
    Document store backed by a Firestore database.

    Args:
        project_id: Google Cloud project id (None to use the ambient project)
        database: Firestore database name
        client: Pre-built firestore.Client, mainly for tests
    """

    max_batch_operations = FIRESTORE_MAX_BATCH_OPERATIONS

    def __init__(
        self,
        project_id: Optional[str] = None,
        database: Optional[str] = None,
        client: Optional[firestore.Client] = None,
    ):
        if client is None:
            kwargs = {}
            if project_id:
                kwargs["project"] = project_id
            if database:
                kwargs["database"] = database
            client = firestore.Client(**kwargs)
        self.client = client

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        snapshot = self.client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return Document(id=snapshot.id, data=snapshot.to_dict() or {})

    def query(
        self,
        collection: str,
        filters: Iterable[QueryFilter],
        limit: Optional[int] = None,
    ) -> List[Document]:
        query = self.client.collection(collection)
        for query_filter in filters:
            query = query.where(
                filter=FieldFilter(query_filter.field, query_filter.op, query_filter.value)
            )
        if limit is not None:
            query = query.limit(limit)
        return [
            Document(id=snapshot.id, data=snapshot.to_dict() or {})
            for snapshot in query.stream()
        ]

    def list_all(self, collection: str) -> List[Document]:
        return [
            Document(id=snapshot.id, data=snapshot.to_dict() or {})
            for snapshot in self.client.collection(collection).stream()
        ]

    def new_id(self, collection: str) -> str:
        return self.client.collection(collection).document().id

    def _commit(self, operations: List[WriteOperation]) -> None:
        batch = self.client.batch()
        for op in operations:
            ref = self.client.collection(op.collection).document(op.doc_id)
            if op.kind == "delete":
                batch.delete(ref)
            else:
                batch.set(ref, op.data or {}, merge=op.merge)
        try:
            batch.commit()
        except GoogleAPICallError as e:
            logger.error(
                f"Firestore batch commit failed: {e}",
                extra={"operation_count": len(operations)},
            )
            raise
