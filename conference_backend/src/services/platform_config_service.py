"""
Service for the platform-wide configuration singleton.

The platform config is one well-known document. In single-conference mode
(``onlyPlatformAdminCanCreateConference``) it points at the conference the
platform serves through ``singleConferenceId``.
"""

from typing import Any, Dict, Optional

from conference_backend.src.store import collections
from conference_backend.src.store.base import DocumentStore
from conference_backend.src.utils.logging_config import get_logger


logger = get_logger("services")

DEFAULT_PLATFORM_CONFIG_DOC_ID = "PlatformConfig"


class PlatformConfigService:
    """Reads and merge-writes the platform config document."""

    def __init__(self, store: DocumentStore, doc_id: str = DEFAULT_PLATFORM_CONFIG_DOC_ID):
        self.store = store
        self.doc_id = doc_id

    def get(self) -> Dict[str, Any]:
        """Current platform config ({} when the document does not exist)."""
        document = self.store.get(collections.PLATFORM_CONFIG, self.doc_id)
        return document.data if document else {}

    def merge_write(self, patch: Dict[str, Any]) -> None:
        """Merge ``patch`` into the platform config, creating it if needed."""
        self.store.set(collections.PLATFORM_CONFIG, self.doc_id, patch, merge=True)

    def is_single_conference_mode(self, config: Optional[Dict[str, Any]] = None) -> bool:
        config = self.get() if config is None else config
        return bool(config.get("onlyPlatformAdminCanCreateConference"))

    def repoint_single_conference(self, source_conference_id: str, target_conference_id: str) -> bool:
        """
        Move the single-conference pointer from source to target.

        Only applies when single-conference mode is on and the pointer
        currently equals ``source_conference_id``.

        Returns:
            True if the pointer was updated
        """
        config = self.get()
        if not self.is_single_conference_mode(config):
            return False
        if str(config.get("singleConferenceId") or "").strip() != source_conference_id:
            return False

        self.merge_write({"singleConferenceId": target_conference_id})
        logger.info(
            "Single-conference pointer moved",
            extra={
                "source_conference_id": source_conference_id,
                "target_conference_id": target_conference_id,
            },
        )
        return True
