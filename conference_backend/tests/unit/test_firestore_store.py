"""
Unit tests for FirestoreDocumentStore.

The Firestore client is mocked; tests check how reads, queries and
batches are translated into client calls.
"""

from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import ServiceUnavailable

from conference_backend.src.store.base import FILTER_ARRAY_CONTAINS, UNSET
from conference_backend.src.store.firestore_store import FirestoreDocumentStore


def _snapshot(doc_id, data, exists=True):
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = exists
    snapshot.to_dict.return_value = data
    return snapshot


@pytest.fixture
def mock_client():
    return MagicMock()


@pytest.fixture
def firestore_store(mock_client):
    return FirestoreDocumentStore(client=mock_client)


class TestConstruction:

    def test_builds_client_from_settings(self, mocker):
        client_cls = mocker.patch("conference_backend.src.store.firestore_store.firestore.Client")

        store = FirestoreDocumentStore(project_id="my-project", database="conf-db")

        client_cls.assert_called_once_with(project="my-project", database="conf-db")
        assert store.client is client_cls.return_value

    def test_ambient_project(self, mocker):
        client_cls = mocker.patch("conference_backend.src.store.firestore_store.firestore.Client")

        FirestoreDocumentStore()

        client_cls.assert_called_once_with()

    def test_batch_limit(self, firestore_store):
        assert firestore_store.max_batch_operations == 500


class TestReads:

    def test_get_existing(self, firestore_store, mock_client):
        mock_client.collection.return_value.document.return_value.get.return_value = _snapshot(
            "c1", {"name": "DevCon"}
        )

        document = firestore_store.get("conference", "c1")

        mock_client.collection.assert_called_with("conference")
        mock_client.collection.return_value.document.assert_called_with("c1")
        assert document.id == "c1"
        assert document.data == {"name": "DevCon"}

    def test_get_missing(self, firestore_store, mock_client):
        mock_client.collection.return_value.document.return_value.get.return_value = _snapshot(
            "c1", None, exists=False
        )

        assert firestore_store.get("conference", "c1") is None

    def test_query_pushes_filters_and_limit(self, firestore_store, mock_client, mocker):
        field_filter = mocker.patch("conference_backend.src.store.firestore_store.FieldFilter")
        collection_ref = mock_client.collection.return_value
        limited = collection_ref.where.return_value.limit.return_value
        limited.stream.return_value = [_snapshot("p1", {"email": "a@example.com"})]

        results = firestore_store.find(
            "person", "speaker.submittedConferenceIds", "c1", op=FILTER_ARRAY_CONTAINS, limit=10
        )

        field_filter.assert_called_once_with("speaker.submittedConferenceIds", "array-contains", "c1")
        collection_ref.where.assert_called_once_with(filter=field_filter.return_value)
        collection_ref.where.return_value.limit.assert_called_once_with(10)
        assert [d.id for d in results] == ["p1"]

    def test_list_all(self, firestore_store, mock_client):
        mock_client.collection.return_value.stream.return_value = [
            _snapshot("a", {"n": 1}),
            _snapshot("b", None),
        ]

        documents = firestore_store.list_all("activity")

        assert [(d.id, d.data) for d in documents] == [("a", {"n": 1}), ("b", {})]

    def test_new_id_uses_client_auto_id(self, firestore_store, mock_client):
        mock_client.collection.return_value.document.return_value.id = "AutoGeneratedId0001"

        assert firestore_store.new_id("activity") == "AutoGeneratedId0001"
        mock_client.collection.return_value.document.assert_called_with()


class TestBatches:

    def test_commit_maps_to_native_batch(self, firestore_store, mock_client):
        native = mock_client.batch.return_value

        batch = firestore_store.batch()
        batch.set("activity", "a1", {"name": "Run", "slotId": UNSET})
        batch.set("platform-config", "PlatformConfig", {"singleConferenceId": "c2"}, merge=True)
        batch.delete("session", "s1")
        batch.commit()

        assert native.set.call_count == 2
        first_set = native.set.call_args_list[0]
        assert first_set.args[1] == {"name": "Run"}
        assert first_set.kwargs == {"merge": False}
        assert native.set.call_args_list[1].kwargs == {"merge": True}
        native.delete.assert_called_once()
        native.commit.assert_called_once()

    def test_commit_failure_propagates(self, firestore_store, mock_client):
        mock_client.batch.return_value.commit.side_effect = ServiceUnavailable("down")

        with pytest.raises(ServiceUnavailable):
            firestore_store.set("activity", "a1", {})
