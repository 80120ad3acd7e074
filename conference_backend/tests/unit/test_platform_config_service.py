"""
Unit tests for PlatformConfigService.
"""

from conference_backend.src.services.platform_config_service import PlatformConfigService
from conference_backend.src.store import collections


class TestRepointSingleConference:

    def test_repoints_when_pointer_matches(self, store):
        store.set(collections.PLATFORM_CONFIG, "PlatformConfig", {
            "onlyPlatformAdminCanCreateConference": True,
            "singleConferenceId": "conf-1",
            "other": "kept",
        })
        service = PlatformConfigService(store)

        assert service.repoint_single_conference("conf-1", "conf-2") is True
        assert service.get() == {
            "onlyPlatformAdminCanCreateConference": True,
            "singleConferenceId": "conf-2",
            "other": "kept",
        }

    def test_no_change_when_pointer_differs(self, store):
        store.set(collections.PLATFORM_CONFIG, "PlatformConfig", {
            "onlyPlatformAdminCanCreateConference": True,
            "singleConferenceId": "conf-9",
        })
        service = PlatformConfigService(store)

        assert service.repoint_single_conference("conf-1", "conf-2") is False
        assert service.get()["singleConferenceId"] == "conf-9"

    def test_no_change_outside_single_conference_mode(self, store):
        store.set(collections.PLATFORM_CONFIG, "PlatformConfig", {
            "onlyPlatformAdminCanCreateConference": False,
            "singleConferenceId": "conf-1",
        })
        service = PlatformConfigService(store)

        assert service.repoint_single_conference("conf-1", "conf-2") is False

    def test_missing_config(self, store):
        service = PlatformConfigService(store)

        assert service.get() == {}
        assert service.repoint_single_conference("conf-1", "conf-2") is False
        assert store.get(collections.PLATFORM_CONFIG, "PlatformConfig") is None

    def test_custom_document_id(self, store):
        service = PlatformConfigService(store, doc_id="Custom")
        service.merge_write({"singleConferenceId": "x"})

        assert store.get(collections.PLATFORM_CONFIG, "Custom").data == {"singleConferenceId": "x"}
