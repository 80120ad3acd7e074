"""
Conference deletion service.

Removes a conference and every record scoped to it.

Design:
- Dependents are deleted first, collection by collection, through the
  BatchedMutator; the conference document is always deleted last so an
  interrupted run leaves a conference that can be deleted again
- Person records are removed only when they belong to this conference
  alone (see candidate_selector), together with their email index record
- Every step is idempotent: deleting an already-deleted conference
  returns zero counts
- There is no transaction across collections and no compensation; a
  failed step is logged and re-raised, and re-running delete finishes it
"""

from typing import List, Optional

from conference_backend.src.config.settings import FIRESTORE_BATCH_SAFE_LIMIT
from conference_backend.src.schemas.lifecycle import DeleteConferenceReport
from conference_backend.src.services.batched_mutator import BatchedMutator
from conference_backend.src.services.candidate_selector import (
    CandidateSelector,
    PersonCandidate,
)
from conference_backend.src.services.side_config_repository import (
    conference_hall_configs,
    voxxrin_configs,
)
from conference_backend.src.store import collections
from conference_backend.src.store.base import DocumentStore, WriteBatch
from conference_backend.src.utils.formatting import format_iso_timestamp
from conference_backend.src.utils.logging_config import get_logger


logger = get_logger("services")

# A person delete stages two operations: the person and its email index
PERSON_OPERATIONS = 2


class DeleteService:
    """
    Deletes a conference with its full cascade.

    Attributes:
        store: Document store
        mutator: Batched mutator for fan-out deletes
        candidates: Person candidate selector
    """

    def __init__(self, store: DocumentStore, batch_limit: int = FIRESTORE_BATCH_SAFE_LIMIT):
        self.store = store
        self.mutator = BatchedMutator(store, batch_limit=batch_limit)
        self.candidates = CandidateSelector(store)

    def delete(self, conference_id: str, requester_email: Optional[str] = None) -> DeleteConferenceReport:
        """
        Delete ``conference_id`` and its dependents.

        Args:
            conference_id: Conference to delete
            requester_email: Organizer performing the delete (logging only)

        Returns:
            DeleteConferenceReport with one counter per collection

        Raises:
            BatchCommitError: If a chunk fails; earlier chunks stay deleted
        """
        log_context = {
            "operation": "deleteConference",
            "conference_id": conference_id,
            "requester_email": requester_email,
        }
        logger.info("Conference delete started", extra=log_context)

        try:
            sessions = self._delete_matching(
                collections.SESSION, collections.SESSION_CONFERENCE_ID_FIELD, conference_id
            )
            scoped = {
                collection: self._delete_matching(collection, "conferenceId", conference_id)
                for collection in collections.CONFERENCE_SCOPED
            }

            hall_configs = self.mutator.delete_documents(
                collections.CONFERENCE_HALL_CONFIG,
                conference_hall_configs(self.store).find_all_ids(conference_id),
                known_existing=True,
            )
            voxxrin = self.mutator.delete_documents(
                collections.VOXXRIN_CONFIG,
                voxxrin_configs(self.store).find_all_ids(conference_id),
                known_existing=True,
            )
            dashboards = self._delete_dashboards(conference_id)

            persons = self._delete_persons(self.candidates.find_person_candidates(conference_id))

            conference_deleted = 0
            if self.store.get(collections.CONFERENCE, conference_id) is not None:
                self.store.delete(collections.CONFERENCE, conference_id)
                conference_deleted = 1
        except Exception:
            logger.error("Conference delete failed", extra=log_context, exc_info=True)
            raise

        report = DeleteConferenceReport(
            conference_deleted=conference_deleted,
            sessions_deleted=sessions,
            conference_speakers_deleted=scoped[collections.CONFERENCE_SPEAKER],
            persons_deleted=persons,
            activities_deleted=scoped[collections.ACTIVITY],
            activity_participations_deleted=scoped[collections.ACTIVITY_PARTICIPATION],
            session_allocations_deleted=scoped[collections.SESSION_ALLOCATION],
            conference_hall_configs_deleted=hall_configs,
            voxxrin_configs_deleted=voxxrin,
            conference_secrets_deleted=scoped[collections.CONFERENCE_SECRET],
            dashboards_deleted=dashboards,
            deleted_at=format_iso_timestamp(),
        )
        logger.info(
            "Conference deleted",
            extra={**log_context, "report": report.model_dump(by_alias=True)},
        )
        return report

    def _delete_matching(self, collection: str, field_path: str, conference_id: str) -> int:
        ids = [doc.id for doc in self.store.find(collection, field_path, conference_id)]
        return self.mutator.delete_documents(collection, ids, known_existing=True)

    def _delete_dashboards(self, conference_id: str) -> int:
        """Delete the dashboard snapshot and its history entries."""
        history = self._delete_matching(
            collections.CONFERENCE_DASHBOARD_HISTORY, "conferenceId", conference_id
        )
        snapshot_ids = [
            doc.id for doc in self.store.find(collections.CONFERENCE_DASHBOARD, "conferenceId", conference_id)
        ]
        if self.store.get(collections.CONFERENCE_DASHBOARD, conference_id) is not None:
            snapshot_ids.append(conference_id)
        return history + self.mutator.delete_documents(
            collections.CONFERENCE_DASHBOARD, snapshot_ids, known_existing=True
        )

    def _delete_persons(self, candidates: List[PersonCandidate]) -> int:
        def stage(batch: WriteBatch, candidate: PersonCandidate) -> None:
            batch.delete(collections.PERSON, candidate.id)
            if candidate.email_index_id:
                batch.delete(collections.PERSON_EMAILS, candidate.email_index_id)

        return self.mutator.run_in_chunks(
            candidates, "delete persons", stage, ops_per_item=PERSON_OPERATIONS
        )
