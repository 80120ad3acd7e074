"""
Session status values and their dashboard buckets.

The transition table mirrors the review workflow; transitions into
SCHEDULED and PROGRAMMED come from the planning workflow and are not
listed as outgoing edges of any review status.
"""

import enum
from typing import Dict, FrozenSet, Optional, Set


class SessionStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    REJECTED = "REJECTED"
    ACCEPTED = "ACCEPTED"
    WAITLISTED = "WAITLISTED"
    SPEAKER_CONFIRMED = "SPEAKER_CONFIRMED"
    SCHEDULED = "SCHEDULED"
    DECLINED_BY_SPEAKER = "DECLINED_BY_SPEAKER"
    PROGRAMMED = "PROGRAMMED"
    CANCELLED = "CANCELLED"


ALLOWED_TRANSITIONS: Dict[SessionStatus, FrozenSet[SessionStatus]] = {
    SessionStatus.DRAFT: frozenset({SessionStatus.SUBMITTED}),
    SessionStatus.SUBMITTED: frozenset({
        SessionStatus.REJECTED,
        SessionStatus.ACCEPTED,
        SessionStatus.WAITLISTED,
    }),
    SessionStatus.WAITLISTED: frozenset({SessionStatus.REJECTED, SessionStatus.ACCEPTED}),
    SessionStatus.ACCEPTED: frozenset({SessionStatus.SPEAKER_CONFIRMED}),
    SessionStatus.SCHEDULED: frozenset({
        SessionStatus.DECLINED_BY_SPEAKER,
        SessionStatus.PROGRAMMED,
    }),
    SessionStatus.PROGRAMMED: frozenset({SessionStatus.CANCELLED}),
    SessionStatus.REJECTED: frozenset(),
    SessionStatus.SPEAKER_CONFIRMED: frozenset(),
    SessionStatus.DECLINED_BY_SPEAKER: frozenset(),
    SessionStatus.CANCELLED: frozenset(),
}

BUCKET_SUBMITTED = "submitted"
BUCKET_CONFIRMED = "confirmed"

CONFIRMED_STATUSES = frozenset({
    SessionStatus.SPEAKER_CONFIRMED,
    SessionStatus.SCHEDULED,
    SessionStatus.PROGRAMMED,
})


def parse_status(value: Optional[str]) -> Optional[SessionStatus]:
    """Parse a stored status (trimmed, case-insensitive); None when unknown."""
    normalized = str(value or "").strip().upper()
    try:
        return SessionStatus(normalized)
    except ValueError:
        return None


def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def is_terminal(status: SessionStatus) -> bool:
    return not ALLOWED_TRANSITIONS.get(status)


def classify_status(value: Optional[str]) -> Set[str]:
    """
    Dashboard buckets a stored status belongs to.

    Every known status except DRAFT counts as submitted; confirmed
    statuses also count as confirmed. Unknown and empty statuses belong
    to no bucket. The allocated bucket depends on allocation records,
    not on status.
    """
    status = parse_status(value)
    if status is None or status == SessionStatus.DRAFT:
        return set()
    buckets = {BUCKET_SUBMITTED}
    if status in CONFIRMED_STATUSES:
        buckets.add(BUCKET_CONFIRMED)
    return buckets
