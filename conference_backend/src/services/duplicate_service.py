"""
Conference duplication service.

Creates a new conference from an existing one, optionally carrying over
rooms, tracks, planning structure (slots and disabled rooms), sponsoring
and activities.

Design:
- Every input check runs before the first write
- The new conference document is written first; side configs, the
  platform pointer and activities follow
- A failure after the conference document was written leaves a partial
  clone in place; it is logged with the new id and not compensated
- Duplicating twice creates two independent conferences
"""

import copy
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from conference_backend.src.config.settings import FIRESTORE_BATCH_SAFE_LIMIT
from conference_backend.src.schemas.lifecycle import (
    DuplicateConferenceReport,
    DuplicateConferenceRequest,
)
from conference_backend.src.services.batched_mutator import BatchedMutator
from conference_backend.src.services.date_shift import (
    add_days,
    compute_day_offset,
    earliest_day_date,
    format_date,
    parse_date_prefix,
    try_shift_calendar_date,
)
from conference_backend.src.services.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from conference_backend.src.services.platform_config_service import PlatformConfigService
from conference_backend.src.services.side_config_repository import (
    conference_hall_configs,
    voxxrin_configs,
)
from conference_backend.src.store import collections
from conference_backend.src.store.base import UNSET, DocumentStore
from conference_backend.src.utils.formatting import format_epoch_millis, format_iso_timestamp
from conference_backend.src.utils.logging_config import get_logger


logger = get_logger("services")

DEFAULT_BEGIN_TIME = "09:00"
DEFAULT_END_TIME = "18:00"


@dataclass(frozen=True)
class DuplicateParameters:
    """Validated duplicate request."""

    name: str
    edition: Any
    start_date: str
    rooms: bool
    tracks: bool
    planning_structure: bool
    activities: bool
    sponsors: bool


def parse_edition(value: Any) -> Optional[float]:
    """Numeric value of an edition, or None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def _stored_edition(number: float) -> Any:
    return int(number) if number.is_integer() else number


def validate_duplicate_request(request: DuplicateConferenceRequest) -> DuplicateParameters:
    """
    Check and normalize a duplicate request.

    Raises:
        ValidationError: On the first invalid field
    """
    name = str(request.name or "").strip()
    if not name:
        raise ValidationError("Missing conference name", field="name")

    edition = parse_edition(request.edition)
    if edition is None:
        raise ValidationError("Missing conference edition", field="edition")

    start_date = str(request.start_date or "").strip()
    if not start_date:
        raise ValidationError("Missing conference startDate", field="startDate")
    if parse_date_prefix(start_date) is None:
        raise ValidationError(
            "Invalid startDate format (expected YYYY-MM-DD)", field="startDate"
        )

    if request.duplicate_planning_structure and not request.duplicate_rooms:
        raise ValidationError(
            "Planning structure requires rooms to be duplicated",
            field="duplicatePlanningStructure",
        )

    return DuplicateParameters(
        name=name,
        edition=_stored_edition(edition),
        start_date=start_date[:10],
        rooms=request.duplicate_rooms,
        tracks=request.duplicate_tracks,
        planning_structure=request.duplicate_planning_structure,
        activities=request.duplicate_activities,
        sponsors=request.duplicate_sponsors,
    )


def _day_sort_key(day: Dict[str, Any]) -> float:
    try:
        return float(day.get("dayIndex") or 0)
    except (TypeError, ValueError):
        return 0.0


def build_days(
    source_days: List[Dict[str, Any]],
    start_date: str,
    copy_planning_structure: bool,
) -> List[Dict[str, Any]]:
    """
    Build the days of the new conference.

    Day ``i`` is dated ``start_date + i`` and keeps the begin/end times of
    the i-th source day (ordered by dayIndex). Slots and disabled rooms are
    copied only with the planning structure.
    """
    base_date = parse_date_prefix(start_date)
    if base_date is None:
        raise ValidationError("Invalid startDate", field="startDate")

    sorted_days = sorted(
        (day for day in source_days if isinstance(day, dict)),
        key=_day_sort_key,
    )
    try:
        add_days(base_date, max(len(sorted_days) - 1, 0))
    except OverflowError:
        raise ValidationError(
            "startDate is too late for a conference of this length", field="startDate"
        )
    first_day = sorted_days[0] if sorted_days else {}

    days = []
    for index, template in enumerate(sorted_days):
        days.append({
            "id": template.get("id") or f"d{index + 1}",
            "dayIndex": index,
            "date": format_date(add_days(base_date, index)),
            "beginTime": template.get("beginTime") or first_day.get("beginTime") or DEFAULT_BEGIN_TIME,
            "endTime": template.get("endTime") or first_day.get("endTime") or DEFAULT_END_TIME,
            "slots": copy.deepcopy(template.get("slots") or []) if copy_planning_structure else [],
            "disabledRoomIds": (
                copy.deepcopy(template.get("disabledRoomIds") or []) if copy_planning_structure else []
            ),
        })
    return days


class DuplicateService:
    """
    Duplicates a conference and selected dependent data.

    Attributes:
        store: Document store
        mutator: Batched mutator used for activity fan-out
        platform_config: Platform config service (single-conference pointer)
    """

    def __init__(
        self,
        store: DocumentStore,
        batch_limit: int = FIRESTORE_BATCH_SAFE_LIMIT,
        platform_config: Optional[PlatformConfigService] = None,
    ):
        self.store = store
        self.mutator = BatchedMutator(store, batch_limit=batch_limit)
        self.platform_config = platform_config or PlatformConfigService(store)

    def duplicate(
        self,
        source_conference_id: str,
        request: DuplicateConferenceRequest,
        requester_email: Optional[str] = None,
        source_conference: Optional[Dict[str, Any]] = None,
    ) -> DuplicateConferenceReport:
        """
        Duplicate ``source_conference_id``.

        Args:
            source_conference_id: Conference to copy
            request: Target name, edition, start date and copy flags
            requester_email: Organizer performing the copy (logging only)
            source_conference: Already loaded source document, if any

        Returns:
            DuplicateConferenceReport

        Raises:
            NotFoundError: If the source conference does not exist
            ValidationError: If the request is invalid
            ConflictError: If (name, edition) is already used
        """
        if source_conference is None:
            document = self.store.get(collections.CONFERENCE, source_conference_id)
            if document is None:
                raise NotFoundError("Conference", source_conference_id)
            source_conference = document.data

        params = validate_duplicate_request(request)
        self._ensure_name_edition_available(params.name, params.edition)

        source_days = source_conference.get("days")
        source_days = source_days if isinstance(source_days, list) else []
        days = build_days(source_days, params.start_date, params.planning_structure)

        new_conference_id = self.store.new_id(collections.CONFERENCE)
        new_conference = self._build_conference(source_conference, new_conference_id, params, days)

        log_context = {
            "operation": "duplicateConference",
            "conference_id": source_conference_id,
            "new_conference_id": new_conference_id,
            "requester_email": requester_email,
        }

        self.store.set(collections.CONFERENCE, new_conference_id, new_conference)
        logger.info(
            "Duplicated conference document created",
            extra={**log_context, "day_count": len(days)},
        )

        try:
            self._clone_side_configs(source_conference_id, new_conference_id)
            self.platform_config.repoint_single_conference(source_conference_id, new_conference_id)

            activities_created = 0
            if params.activities:
                activities_created = self._clone_activities(
                    source_conference_id,
                    new_conference_id,
                    target_start_date=params.start_date,
                    source_start_date=earliest_day_date(source_days),
                    keep_slot_id=params.planning_structure,
                )
        except Exception:
            logger.error(
                "Conference duplication failed after the new conference was created",
                extra=log_context,
                exc_info=True,
            )
            raise

        report = DuplicateConferenceReport(
            new_conference_id=new_conference_id,
            activities_created=activities_created,
            created_at=format_iso_timestamp(),
        )
        logger.info(
            "Conference duplicated",
            extra={**log_context, "activities_created": activities_created},
        )
        return report

    def _ensure_name_edition_available(self, name: str, edition: Any) -> None:
        """Raise ConflictError if a conference already uses (name, edition)."""
        wanted = float(edition)
        for document in self.store.find(collections.CONFERENCE, "name", name):
            if parse_edition(document.data.get("edition")) == wanted:
                raise ConflictError(
                    "A conference with the same name and edition already exists",
                    existing_id=document.id,
                )

    @staticmethod
    def _build_conference(
        source: Dict[str, Any],
        new_conference_id: str,
        params: DuplicateParameters,
        days: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        conference = copy.deepcopy(source)
        sponsoring = source.get("sponsoring")
        conference.update({
            "id": new_conference_id,
            "lastUpdated": format_epoch_millis(),
            "name": params.name,
            "edition": params.edition,
            "rooms": copy.deepcopy(source.get("rooms") or []) if params.rooms else [],
            "tracks": copy.deepcopy(source.get("tracks") or []) if params.tracks else [],
            "days": days,
            "sponsoring": (
                copy.deepcopy(sponsoring)
                if params.sponsors and sponsoring is not None
                else UNSET
            ),
        })
        return conference

    def _clone_side_configs(self, source_conference_id: str, new_conference_id: str) -> None:
        for repository in (conference_hall_configs(self.store), voxxrin_configs(self.store)):
            document = repository.find_by_conference_id(source_conference_id)
            if document is None:
                logger.info(
                    f"No {repository.collection} document to duplicate",
                    extra={"conference_id": source_conference_id},
                )
                continue

            clone = copy.deepcopy(document.data)
            clone.update({
                "id": new_conference_id,
                "conferenceId": new_conference_id,
                "lastUpdated": format_epoch_millis(),
            })
            self.store.set(repository.collection, new_conference_id, clone)
            logger.info(
                f"{repository.collection} duplicated",
                extra={
                    "conference_id": source_conference_id,
                    "new_conference_id": new_conference_id,
                    "source_doc_id": document.id,
                },
            )

    def _clone_activities(
        self,
        source_conference_id: str,
        new_conference_id: str,
        target_start_date: str,
        source_start_date: Optional[str],
        keep_slot_id: bool,
    ) -> int:
        activities = self.store.find(collections.ACTIVITY, "conferenceId", source_conference_id)
        if not activities:
            return 0

        day_offset = (
            compute_day_offset(target_start_date, source_start_date) if source_start_date else 0
        )

        clones = []
        for activity in activities:
            clone = copy.deepcopy(activity.data)
            new_id = self.store.new_id(collections.ACTIVITY)
            clone["id"] = new_id
            clone["conferenceId"] = new_conference_id
            for field_name in ("start", "end"):
                value = clone.get(field_name)
                if not isinstance(value, str):
                    continue
                shifted, ok = try_shift_calendar_date(value, day_offset)
                if not ok:
                    logger.warning(
                        "Activity date left unshifted: unexpected format",
                        extra={"activity_id": activity.id, "field": field_name, "value": value},
                    )
                clone[field_name] = shifted
            if not keep_slot_id:
                clone["slotId"] = UNSET
            clones.append((new_id, clone))

        return self.mutator.upsert_documents(
            collections.ACTIVITY, clones, stage="duplicate activities"
        )
