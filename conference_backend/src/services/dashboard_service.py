"""
Conference dashboard service.

Computes the dashboard read model of a conference from its sessions,
session allocations and planning slots, stores it, and appends a history
entry. Also runs the daily sweep over all upcoming conferences.

Design:
- compute_dashboard() is a pure function of current state
- The dashboard document (id = conference id) is overwritten on every
  recompute; one immutable history entry is appended in the same batch
- The daily sweep processes one conference at a time, skips conferences
  that already started, isolates per-conference failures and stops when
  its wall-clock budget is spent
"""

import time
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo

from conference_backend.src.schemas.conference import Conference
from conference_backend.src.schemas.dashboard import (
    ConferenceDashboard,
    ConferenceHallStats,
    CountsBySessionType,
    DailySweepReport,
    DashboardRefreshReport,
    DashboardTrigger,
    ScheduleStats,
    SlotStats,
    SpeakerStats,
)
from conference_backend.src.services.date_shift import earliest_day_date, parse_date_prefix
from conference_backend.src.services.exceptions import NotFoundError
from conference_backend.src.services.session_status import (
    BUCKET_CONFIRMED,
    BUCKET_SUBMITTED,
    classify_status,
)
from conference_backend.src.services.side_config_repository import conference_hall_configs
from conference_backend.src.store import collections
from conference_backend.src.store.base import Document, DocumentStore
from conference_backend.src.utils.formatting import format_iso_timestamp
from conference_backend.src.utils.logging_config import get_logger


logger = get_logger("services")

DEFAULT_TIMEZONE = "Europe/Paris"
DEFAULT_SWEEP_BUDGET_SECONDS = 540
SPEAKER_FIELDS = ("speaker1Id", "speaker2Id", "speaker3Id")


# ============================================================================
# Computation
# ============================================================================


def _session_type_id(session: Dict[str, Any]) -> str:
    conference_block = session.get("conference") or {}
    return str(conference_block.get("sessionTypeId") or "").strip()


def _speaker_ids(session: Dict[str, Any]) -> List[str]:
    ids = [str(session.get(f) or "").strip() for f in SPEAKER_FIELDS]
    return list(dict.fromkeys(i for i in ids if i))


def compute_dashboard(
    conference_id: str,
    conference: Dict[str, Any],
    sessions: Iterable[Document],
    allocations: Iterable[Dict[str, Any]],
    slot_types: Iterable[Dict[str, Any]],
    hall_config: Optional[Dict[str, Any]],
    trigger: DashboardTrigger,
    now: datetime,
    tz: str = DEFAULT_TIMEZONE,
) -> ConferenceDashboard:
    """
    Build the dashboard of one conference.

    Args:
        conference_id: Conference id
        conference: Conference document
        sessions: Session documents of the conference
        allocations: Session allocation documents of the conference
        slot_types: Slot type documents (a slot counts when its type is a session type)
        hall_config: Conference-Hall config document, if any
        trigger: Recompute trigger
        now: Current time (timezone-aware)
        tz: Zone used to decide "today"

    Returns:
        ConferenceDashboard
    """
    allocations = list(allocations)
    allocated_session_ids = {
        str(a.get("sessionId")) for a in allocations if a.get("sessionId")
    }

    submitted = CountsBySessionType()
    confirmed = CountsBySessionType()
    allocated = CountsBySessionType()
    speaker_ids = set()
    with_2 = 0
    with_3 = 0

    for session in sessions:
        type_id = _session_type_id(session.data)
        buckets = classify_status((session.data.get("conference") or {}).get("status"))

        if BUCKET_SUBMITTED in buckets:
            submitted.add(type_id)
            speakers = _speaker_ids(session.data)
            speaker_ids.update(speakers)
            if len(speakers) == 2:
                with_2 += 1
            elif len(speakers) == 3:
                with_3 += 1
        if BUCKET_CONFIRMED in buckets:
            confirmed.add(type_id)
        if session.id in allocated_session_ids:
            allocated.add(type_id)

    slots = _slot_stats(conference, allocations, slot_types)

    start_date = earliest_day_date(conference.get("days")) or ""
    today = now.astimezone(ZoneInfo(tz)).date()
    start = parse_date_prefix(start_date)
    days_before = (start - today).days if start else 0

    return ConferenceDashboard(
        conference_id=conference_id,
        trigger=trigger,
        computed_at=format_iso_timestamp(now),
        submitted=submitted,
        confirmed=confirmed,
        allocated=allocated,
        speakers=SpeakerStats(
            total=len(speaker_ids),
            sessions_with_2_speakers=with_2,
            sessions_with_3_speakers=with_3,
        ),
        slots=slots,
        conference_hall=ConferenceHallStats(
            last_import_at=str((hall_config or {}).get("lastCommunication") or "")
        ),
        schedule=ScheduleStats(
            conference_start_date=start_date,
            days_before_conference=days_before,
        ),
    )


def _slot_stats(
    conference: Dict[str, Any],
    allocations: List[Dict[str, Any]],
    slot_types: Iterable[Dict[str, Any]],
) -> SlotStats:
    """Count session slots and how many of them hold an allocation."""
    slot_types = list(slot_types)
    session_slot_type_ids = {
        str(st.get("id")) for st in slot_types if st.get("isSession")
    }

    allocated_pairs = {
        (str(a.get("dayId") or ""), str(a.get("slotId")))
        for a in allocations
        if a.get("slotId")
    }
    allocated_any_day = {slot_id for day_id, slot_id in allocated_pairs if not day_id}

    total = 0
    allocated = 0
    for day in Conference.model_validate(conference).days:
        for slot in day.slots:
            if slot_types and slot.slot_type_id not in session_slot_type_ids:
                continue
            total += 1
            if (day.id, slot.id) in allocated_pairs or slot.id in allocated_any_day:
                allocated += 1

    ratio = round(allocated / total, 4) if total else 0.0
    return SlotStats(allocated=allocated, total=total, ratio=ratio)


# ============================================================================
# Service
# ============================================================================


class DashboardService:
    """
    Recomputes and stores conference dashboards.

    Attributes:
        store: Document store
        timezone: Platform timezone used for "today"
        clock: Returns the current time (timezone-aware)
    """

    def __init__(
        self,
        store: DocumentStore,
        timezone_name: str = DEFAULT_TIMEZONE,
        clock: Optional[Callable[[], datetime]] = None,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.timezone = timezone_name
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.monotonic = monotonic

    def today(self) -> date:
        return self.clock().astimezone(ZoneInfo(self.timezone)).date()

    def get_dashboard(self, conference_id: str) -> Optional[Dict[str, Any]]:
        """Stored dashboard document, or None if never computed."""
        document = self.store.get(collections.CONFERENCE_DASHBOARD, conference_id)
        return document.data if document else None

    def recompute_and_persist(
        self,
        conference_id: str,
        trigger: DashboardTrigger,
        conference: Optional[Dict[str, Any]] = None,
    ) -> DashboardRefreshReport:
        """
        Recompute the dashboard of ``conference_id`` and store it.

        Args:
            conference_id: Conference id
            trigger: What caused the recompute
            conference: Already loaded conference document, if any

        Returns:
            DashboardRefreshReport with the history entry id and the dashboard

        Raises:
            NotFoundError: If the conference does not exist
        """
        if conference is None:
            document = self.store.get(collections.CONFERENCE, conference_id)
            if document is None:
                raise NotFoundError("Conference", conference_id)
            conference = document.data

        sessions = self.store.find(
            collections.SESSION, collections.SESSION_CONFERENCE_ID_FIELD, conference_id
        )
        allocations = [
            doc.data
            for doc in self.store.find(collections.SESSION_ALLOCATION, "conferenceId", conference_id)
        ]
        slot_types = [
            {"id": doc.id, **doc.data} for doc in self.store.list_all(collections.SLOT_TYPE)
        ]
        hall_config = conference_hall_configs(self.store).find_by_conference_id(conference_id)

        dashboard = compute_dashboard(
            conference_id=conference_id,
            conference=conference,
            sessions=sessions,
            allocations=allocations,
            slot_types=slot_types,
            hall_config=hall_config.data if hall_config else None,
            trigger=trigger,
            now=self.clock(),
            tz=self.timezone,
        )

        history_id = self.store.new_id(collections.CONFERENCE_DASHBOARD_HISTORY)
        document = dashboard.to_document()
        batch = self.store.batch()
        batch.set(collections.CONFERENCE_DASHBOARD, conference_id, document)
        batch.set(
            collections.CONFERENCE_DASHBOARD_HISTORY,
            history_id,
            {**document, "historyId": history_id},
        )
        batch.commit()

        logger.info(
            "Conference dashboard recomputed",
            extra={
                "conference_id": conference_id,
                "trigger": dashboard.trigger,
                "history_id": history_id,
            },
        )
        return DashboardRefreshReport(history_id=history_id, dashboard=dashboard)

    def run_daily_sweep(self, budget_seconds: float = DEFAULT_SWEEP_BUDGET_SECONDS) -> DailySweepReport:
        """
        Recompute dashboards of every conference that has not started yet.

        Conferences whose earliest day is today or earlier (or that have no
        dated day) are skipped. A failing conference is counted and logged;
        the sweep continues with the next one.

        Args:
            budget_seconds: Wall-clock budget; remaining conferences are
                reported when it runs out

        Returns:
            DailySweepReport
        """
        started_at = format_iso_timestamp(self.clock())
        started = self.monotonic()
        today = self.today()
        conferences = self.store.list_all(collections.CONFERENCE)
        report = DailySweepReport(total=len(conferences), started_at=started_at)

        for index, conference in enumerate(conferences):
            if self.monotonic() - started >= budget_seconds:
                report.budget_exhausted = True
                report.remaining = len(conferences) - index
                logger.warning(
                    "Daily dashboard sweep stopped: time budget exhausted",
                    extra={
                        "budget_seconds": budget_seconds,
                        "reached_index": index,
                        "remaining": report.remaining,
                    },
                )
                break

            start = parse_date_prefix(earliest_day_date(conference.data.get("days")))
            if start is None or start <= today:
                report.skipped += 1
                continue

            try:
                self.recompute_and_persist(
                    conference.id,
                    DashboardTrigger.SCHEDULED_DAILY,
                    conference=conference.data,
                )
                report.processed += 1
            except Exception as e:
                report.failed += 1
                logger.error(
                    "Daily dashboard recompute failed",
                    extra={"conference_id": conference.id, "error": str(e)},
                    exc_info=True,
                )

        report.finished_at = format_iso_timestamp(self.clock())
        logger.info(
            "Daily dashboard sweep completed",
            extra={
                "total": report.total,
                "processed": report.processed,
                "skipped": report.skipped,
                "failed": report.failed,
                "remaining": report.remaining,
            },
        )
        return report
