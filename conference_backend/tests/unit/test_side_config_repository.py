"""
Unit tests for SideConfigRepository dual lookup.
"""

from conference_backend.src.services.side_config_repository import (
    SideConfigRepository,
    conference_hall_configs,
    voxxrin_configs,
)
from conference_backend.src.store import collections


class TestFindByConferenceId:

    def test_field_match_wins(self, store):
        store.set(collections.CONFERENCE_HALL_CONFIG, "generated-id", {"conferenceId": "conf-1", "v": "field"})
        store.set(collections.CONFERENCE_HALL_CONFIG, "conf-1", {"v": "doc-id"})

        found = conference_hall_configs(store).find_by_conference_id("conf-1")

        assert found.id == "generated-id"
        assert found.data["v"] == "field"

    def test_falls_back_to_document_id(self, store):
        store.set(collections.VOXXRIN_CONFIG, "conf-1", {"v": "doc-id"})

        found = voxxrin_configs(store).find_by_conference_id("conf-1")

        assert found.id == "conf-1"

    def test_none_when_absent(self, store):
        assert conference_hall_configs(store).find_by_conference_id("conf-1") is None


class TestFindAllIds:

    def test_union_is_deduplicated(self, store):
        repo = SideConfigRepository(store, collections.CONFERENCE_HALL_CONFIG)
        store.set(collections.CONFERENCE_HALL_CONFIG, "g1", {"conferenceId": "conf-1"})
        store.set(collections.CONFERENCE_HALL_CONFIG, "conf-1", {"conferenceId": "conf-1"})
        store.set(collections.CONFERENCE_HALL_CONFIG, "g2", {"conferenceId": "conf-2"})

        assert repo.find_all_ids("conf-1") == ["g1", "conf-1"]

    def test_empty(self, store):
        assert voxxrin_configs(store).find_all_ids("conf-1") == []
