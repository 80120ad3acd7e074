"""
Stored document model.

One row per document of the conference document store. The
(collection, doc_id) pair is the natural key; the body is an opaque JSON
map whose shape belongs to the collection.
"""

from sqlalchemy import Column, DateTime, Index, Integer, String, UniqueConstraint

from conference_backend.src.models import Base
from conference_backend.src.models.types import JSONBType
from conference_backend.src.utils.formatting import utc_now


class StoredDocument(Base):
    """
    A JSON document addressed by collection name and document id.

    Attributes:
        id: Surrogate primary key
        collection: Collection name (e.g. "conference", "session")
        doc_id: Document id, unique within its collection
        data: Document body
        created_at: Creation timestamp
        updated_at: Last write timestamp
    """

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(100), nullable=False)
    doc_id = Column(String(255), nullable=False)
    data = Column(JSONBType, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    __table_args__ = (
        UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),
        Index("ix_documents_collection", "collection"),
    )

    def __repr__(self) -> str:
        return f"<StoredDocument(collection='{self.collection}', doc_id='{self.doc_id}')>"
