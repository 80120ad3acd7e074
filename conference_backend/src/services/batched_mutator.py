"""
Batched mutator for large document fan-outs.

Splits homogeneous delete or upsert sets into chunks that fit the store's
atomic batch limit and commits them one after another.

Design:
- Chunks are committed sequentially; the next chunk starts only after the
  previous commit returned
- A failing chunk raises BatchCommitError; chunks committed before it are
  NOT rolled back
- Deleting an id that does not exist is a no-op
- Upsert payloads are stripped of UNSET values by the WriteBatch
"""

from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple, TypeVar

from conference_backend.src.config.settings import FIRESTORE_BATCH_SAFE_LIMIT
from conference_backend.src.services.exceptions import BatchCommitError
from conference_backend.src.store.base import DocumentStore, WriteBatch
from conference_backend.src.utils.logging_config import get_logger


logger = get_logger("store")

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> List[Sequence[T]]:
    """Split ``items`` into consecutive slices of at most ``size`` elements."""
    if size < 1:
        raise ValueError("Chunk size must be at least 1")
    return [items[i:i + size] for i in range(0, len(items), size)]


class BatchedMutator:
    """
    Commits document mutations in bounded, sequential batches.

    Attributes:
        store: Target document store
        batch_limit: Maximum operations per commit (never above the store's own limit)
    """

    def __init__(self, store: DocumentStore, batch_limit: int = FIRESTORE_BATCH_SAFE_LIMIT):
        if batch_limit < 1:
            raise ValueError("batch_limit must be at least 1")
        self.store = store
        self.batch_limit = min(batch_limit, store.max_batch_operations)

    def delete_documents(
        self,
        collection: str,
        doc_ids: Iterable[str],
        stage: str = "",
        known_existing: bool = False,
    ) -> int:
        """
        Delete documents by id.

        Ids without a document are skipped and not counted.

        Args:
            collection: Collection name
            doc_ids: Document ids (duplicates are removed, order kept)
            stage: Label used in logs and errors (defaults to the collection)
            known_existing: Ids come from a query just run; skip the existence reads

        Returns:
            Number of documents deleted
        """
        unique_ids = list(dict.fromkeys(i for i in doc_ids if i))
        if not known_existing:
            unique_ids = [i for i in unique_ids if self.store.get(collection, i) is not None]
        return self.run_in_chunks(
            unique_ids,
            stage or collection,
            lambda batch, doc_id: batch.delete(collection, doc_id),
        )

    def upsert_documents(
        self,
        collection: str,
        documents: Iterable[Tuple[str, Dict[str, Any]]],
        merge: bool = False,
        stage: str = "",
    ) -> int:
        """
        Write (doc_id, payload) pairs.

        Args:
            collection: Collection name
            documents: Iterable of (doc_id, payload) pairs
            merge: Merge into existing documents instead of overwriting
            stage: Label used in logs and errors (defaults to the collection)

        Returns:
            Number of documents written
        """
        return self.run_in_chunks(
            list(documents),
            stage or collection,
            lambda batch, item: batch.set(collection, item[0], item[1], merge=merge),
        )

    def run_in_chunks(
        self,
        items: Sequence[T],
        stage: str,
        stage_item: Callable[[WriteBatch, T], Any],
        ops_per_item: int = 1,
    ) -> int:
        """
        Stage items into batches and commit them sequentially.

        Each item may produce several operations (e.g. a person and its email
        index); ``ops_per_item`` keeps every batch under the limit.

        Args:
            items: Work items
            stage: Label used in logs and errors
            stage_item: Callback adding an item's operations to a batch
            ops_per_item: Number of operations each item stages

        Returns:
            Number of items processed

        Raises:
            BatchCommitError: If a chunk fails to commit
        """
        if not items:
            return 0

        chunk_size = max(1, self.batch_limit // max(1, ops_per_item))
        committed = 0

        for index, chunk in enumerate(chunked(list(items), chunk_size)):
            batch = self.store.batch()
            for item in chunk:
                stage_item(batch, item)
            try:
                batch.commit()
            except Exception as e:
                logger.error(
                    f"Batch commit failed during {stage}",
                    extra={
                        "stage": stage,
                        "chunk_index": index,
                        "chunk_size": len(chunk),
                        "committed": committed,
                        "error": str(e),
                    },
                )
                raise BatchCommitError(stage, index, committed, cause=e) from e
            committed += len(chunk)

        logger.debug(
            f"Committed {committed} items for {stage}",
            extra={"stage": stage, "committed": committed},
        )
        return committed
