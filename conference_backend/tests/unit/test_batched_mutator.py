"""
Unit tests for BatchedMutator.

Tests chunking against the batch limit, sequential commits, idempotent
deletes, partial progress on failure and UNSET stripping.
"""

import pytest

from conference_backend.src.services.batched_mutator import BatchedMutator, chunked
from conference_backend.src.services.exceptions import BatchCommitError, InternalError
from conference_backend.src.store.base import UNSET
from conference_backend.src.store.memory_store import InMemoryDocumentStore


class RecordingStore(InMemoryDocumentStore):
    """In-memory store recording the size of every commit."""

    def __init__(self, fail_on_commit=None):
        super().__init__()
        self.commit_sizes = []
        self.fail_on_commit = fail_on_commit

    def _commit(self, operations):
        if self.fail_on_commit is not None and len(self.commit_sizes) == self.fail_on_commit:
            self.commit_sizes.append(-len(operations))
            raise RuntimeError("backend unavailable")
        self.commit_sizes.append(len(operations))
        super()._commit(operations)


@pytest.fixture
def recording_store():
    return RecordingStore()


class TestChunked:
    """Tests for the chunked() helper."""

    def test_splits_into_bounded_slices(self):
        assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]

    def test_empty_input(self):
        assert chunked([], 3) == []

    def test_rejects_zero_size(self):
        with pytest.raises(ValueError):
            chunked([1], 0)


class TestDeleteDocuments:
    """Tests for BatchedMutator.delete_documents()."""

    def test_thousand_ids_commit_in_three_chunks(self, recording_store):
        """1000 ids with a limit of 450 produce commits of 450, 450 and 100."""
        for i in range(1000):
            recording_store.set("session", f"s{i}", {"n": i})
        recording_store.commit_sizes.clear()

        mutator = BatchedMutator(recording_store, batch_limit=450)
        deleted = mutator.delete_documents("session", [f"s{i}" for i in range(1000)])

        assert deleted == 1000
        assert recording_store.commit_sizes == [450, 450, 100]
        assert recording_store.count("session") == 0

    def test_missing_ids_are_noops(self, recording_store):
        mutator = BatchedMutator(recording_store, batch_limit=450)

        assert mutator.delete_documents("session", ["ghost-1", "ghost-2"]) == 0
        assert recording_store.commit_sizes == []

    def test_counts_only_existing_documents(self, recording_store):
        recording_store.set("session", "s1", {})
        recording_store.commit_sizes.clear()
        mutator = BatchedMutator(recording_store)

        assert mutator.delete_documents("session", ["s1", "ghost"]) == 1
        assert recording_store.commit_sizes == [1]
        assert recording_store.count("session") == 0

    def test_known_existing_skips_reads(self, recording_store, mocker):
        recording_store.set("session", "s1", {})
        get = mocker.spy(recording_store, "get")
        mutator = BatchedMutator(recording_store)

        assert mutator.delete_documents("session", ["s1"], known_existing=True) == 1
        get.assert_not_called()

    def test_duplicate_and_empty_ids_removed(self, recording_store):
        recording_store.set("session", "a", {})
        recording_store.commit_sizes.clear()
        mutator = BatchedMutator(recording_store)

        assert mutator.delete_documents("session", ["a", "a", "", None]) == 1
        assert recording_store.commit_sizes == [1]

    def test_no_ids_no_commit(self, recording_store):
        mutator = BatchedMutator(recording_store)

        assert mutator.delete_documents("session", []) == 0
        assert recording_store.commit_sizes == []

    def test_limit_capped_by_store(self):
        store = InMemoryDocumentStore(max_batch_operations=10)
        mutator = BatchedMutator(store, batch_limit=450)

        assert mutator.batch_limit == 10

    def test_invalid_limit(self, recording_store):
        with pytest.raises(ValueError):
            BatchedMutator(recording_store, batch_limit=0)


class TestPartialFailure:
    """Committed chunks stay committed when a later chunk fails."""

    def test_failure_keeps_earlier_chunks(self):
        store = RecordingStore()
        for i in range(10):
            store.set("activity", f"a{i}", {"n": i})
        store.commit_sizes.clear()
        store.fail_on_commit = 1
        mutator = BatchedMutator(store, batch_limit=4)

        with pytest.raises(BatchCommitError) as exc_info:
            mutator.delete_documents("activity", [f"a{i}" for i in range(10)])

        error = exc_info.value
        assert isinstance(error, InternalError)
        assert error.chunk_index == 1
        assert error.committed == 4
        assert error.status_code == 500
        # First chunk deleted, the rest untouched
        assert store.count("activity") == 6
        assert store.get("activity", "a0") is None
        assert store.get("activity", "a4") is not None


class TestUpsertDocuments:
    """Tests for BatchedMutator.upsert_documents()."""

    def test_upsert_strips_unset_recursively(self, store):
        mutator = BatchedMutator(store)

        mutator.upsert_documents("activity", [
            ("a1", {"name": "Run", "slotId": UNSET, "meta": {"x": UNSET, "y": None}, "tags": [1, UNSET]}),
        ])

        stored = store.get("activity", "a1").data
        assert stored == {"name": "Run", "meta": {"y": None}, "tags": [1]}

    def test_upsert_merge(self, store):
        store.set("platform-config", "p", {"a": 1, "nested": {"x": 1}})
        mutator = BatchedMutator(store)

        mutator.upsert_documents("platform-config", [("p", {"nested": {"y": 2}})], merge=True)

        assert store.get("platform-config", "p").data == {"a": 1, "nested": {"x": 1, "y": 2}}


class TestRunInChunks:
    """Tests for multi-operation items."""

    def test_two_ops_per_item_halves_chunk_size(self, recording_store):
        mutator = BatchedMutator(recording_store, batch_limit=450)
        items = list(range(500))

        def stage(batch, item):
            batch.set("person", f"p{item}", {"n": item})
            batch.set("person_emails", f"e{item}", {"n": item})

        processed = mutator.run_in_chunks(items, "persons", stage, ops_per_item=2)

        assert processed == 500
        assert recording_store.commit_sizes == [450, 450, 100]
