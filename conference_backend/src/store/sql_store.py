"""
SQL-backed document store.

Persists documents in the ``documents`` table (see models/document.py)
through SQLAlchemy. Each batch commit runs in a single database
transaction, so a batch is applied entirely or not at all.

Filters are evaluated in Python after loading the collection, which keeps
the adapter portable across PostgreSQL and SQLite JSON dialects.
"""

import copy
from typing import Callable, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from conference_backend.src.models.document import StoredDocument
from conference_backend.src.store.base import (
    Document,
    DocumentStore,
    QueryFilter,
    WriteOperation,
    matches_all,
    merge_documents,
)
from conference_backend.src.utils.formatting import utc_now
from conference_backend.src.utils.logging_config import get_logger


logger = get_logger("store")


class SqlDocumentStore(DocumentStore):
    """
    Document store on top of a SQLAlchemy session factory.

    Args:
        session_factory: Callable returning a new Session (e.g. SessionLocal)
        max_batch_operations: Upper bound on operations per commit
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        max_batch_operations: int = 500,
    ):
        self._session_factory = session_factory
        self.max_batch_operations = max_batch_operations

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._session_factory() as session:
            row = self._load_row(session, collection, doc_id)
            if row is None:
                return None
            return Document(id=row.doc_id, data=copy.deepcopy(row.data))

    def query(
        self,
        collection: str,
        filters: Iterable[QueryFilter],
        limit: Optional[int] = None,
    ) -> List[Document]:
        filters = list(filters)
        results = []
        for document in self.list_all(collection):
            if matches_all(document.data, filters):
                results.append(document)
                if limit is not None and len(results) >= limit:
                    break
        return results

    def list_all(self, collection: str) -> List[Document]:
        with self._session_factory() as session:
            rows = session.execute(
                select(StoredDocument)
                .where(StoredDocument.collection == collection)
                .order_by(StoredDocument.id)
            ).scalars().all()
            return [Document(id=row.doc_id, data=copy.deepcopy(row.data)) for row in rows]

    def _commit(self, operations: List[WriteOperation]) -> None:
        session = self._session_factory()
        try:
            for op in operations:
                row = self._load_row(session, op.collection, op.doc_id)
                if op.kind == "delete":
                    if row is not None:
                        session.delete(row)
                        session.flush()
                    continue

                payload = op.data or {}
                if row is None:
                    session.add(StoredDocument(
                        collection=op.collection,
                        doc_id=op.doc_id,
                        data=copy.deepcopy(payload),
                    ))
                    session.flush()
                else:
                    # Reassign so the JSON column is flagged dirty
                    row.data = (
                        merge_documents(row.data, payload) if op.merge
                        else copy.deepcopy(payload)
                    )
                    row.updated_at = utc_now()
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.error(
                "SQL batch commit failed",
                extra={"operation_count": len(operations)},
                exc_info=True,
            )
            raise
        finally:
            session.close()

    @staticmethod
    def _load_row(session: Session, collection: str, doc_id: str) -> Optional[StoredDocument]:
        return session.execute(
            select(StoredDocument).where(
                StoredDocument.collection == collection,
                StoredDocument.doc_id == doc_id,
            )
        ).scalar_one_or_none()
