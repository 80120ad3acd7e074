"""
Repository for per-conference side configuration documents.

Conference-Hall and Voxxrin configs exist under two storage conventions:
a generated document id with a ``conferenceId`` field, or a document whose
id is the conference id itself. Both lookups live here so callers never
repeat them.
"""

from typing import List, Optional

from conference_backend.src.store import collections
from conference_backend.src.store.base import Document, DocumentStore


CONFERENCE_ID_FIELD = "conferenceId"


class SideConfigRepository:
    """
    Dual-convention lookup for one side-config collection.

    Args:
        store: Document store
        collection: Collection name (conference-hall-config, voxxrin-config)
    """

    def __init__(self, store: DocumentStore, collection: str):
        self.store = store
        self.collection = collection

    def find_by_conference_id(self, conference_id: str) -> Optional[Document]:
        """
        First match for ``conference_id``: by field, then by document id.

        Returns:
            The config document, or None
        """
        matches = self.store.find(self.collection, CONFERENCE_ID_FIELD, conference_id, limit=1)
        if matches:
            return matches[0]
        return self.store.get(self.collection, conference_id)

    def find_all_ids(self, conference_id: str) -> List[str]:
        """
        Every document id attached to ``conference_id`` under either convention.

        Returns:
            De-duplicated ids, field matches first
        """
        ids = [doc.id for doc in self.store.find(self.collection, CONFERENCE_ID_FIELD, conference_id)]
        if self.store.get(self.collection, conference_id) is not None:
            ids.append(conference_id)
        return list(dict.fromkeys(ids))


def conference_hall_configs(store: DocumentStore) -> SideConfigRepository:
    return SideConfigRepository(store, collections.CONFERENCE_HALL_CONFIG)


def voxxrin_configs(store: DocumentStore) -> SideConfigRepository:
    return SideConfigRepository(store, collections.VOXXRIN_CONFIG)
