"""
Selection of person records removable with a conference.

A person is removed together with a conference only when nothing else
references it: no user account, and the conference being deleted is the
only one the person ever submitted to.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from conference_backend.src.store import collections
from conference_backend.src.store.base import FILTER_ARRAY_CONTAINS, DocumentStore


SUBMITTED_CONFERENCE_IDS_FIELD = "speaker.submittedConferenceIds"


@dataclass(frozen=True)
class PersonCandidate:
    """A person document to delete and the email used by its index record."""

    id: str
    email: str

    @property
    def email_index_id(self) -> str:
        return normalize_email(self.email)


def normalize_email(email: Any) -> str:
    """Lowercased, trimmed email ("" for missing values)."""
    return str(email or "").strip().lower()


def normalize_conference_ids(values: Any) -> List[str]:
    """Trimmed, non-empty string ids from a list field."""
    if not isinstance(values, list):
        return []
    return [str(v).strip() for v in values if v is not None and str(v).strip()]


def is_person_candidate(person: Dict[str, Any], conference_id: str) -> bool:
    """
    Decide whether a person may be deleted with ``conference_id``.

    True iff ``hasAccount`` is falsy and the person's submitted conference
    ids are exactly ``[conference_id]``.
    """
    if person.get("hasAccount"):
        return False
    speaker = person.get("speaker") if isinstance(person.get("speaker"), dict) else {}
    return normalize_conference_ids(speaker.get("submittedConferenceIds")) == [conference_id]


class CandidateSelector:
    """Finds person candidates for a conference teardown."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def find_person_candidates(self, conference_id: str) -> List[PersonCandidate]:
        """
        Return persons removable with ``conference_id``.

        Args:
            conference_id: Conference being deleted

        Returns:
            List of PersonCandidate
        """
        persons = self.store.find(
            collections.PERSON,
            SUBMITTED_CONFERENCE_IDS_FIELD,
            conference_id,
            op=FILTER_ARRAY_CONTAINS,
        )
        return [
            PersonCandidate(id=person.id, email=normalize_email(person.data.get("email")))
            for person in persons
            if is_person_candidate(person.data, conference_id)
        ]
