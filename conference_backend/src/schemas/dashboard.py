"""
Pydantic schemas for the conference dashboard read model.

The dashboard document is stored and returned with camelCase field names;
``model_dump(by_alias=True)`` produces the stored shape.
"""

import enum
from typing import Dict

from pydantic import BaseModel, Field


DASHBOARD_SCHEMA_VERSION = 1
UNKNOWN_SESSION_TYPE_ID = "__unknown__"


class DashboardTrigger(str, enum.Enum):
    """What caused a dashboard recompute."""

    MANUAL_REFRESH = "MANUAL_REFRESH"
    SCHEDULED_DAILY = "SCHEDULED_DAILY"
    AUTO_EVENT = "AUTO_EVENT"


class CountsBySessionType(BaseModel):
    total: int = 0
    by_session_type_id: Dict[str, int] = Field(default_factory=dict, alias="bySessionTypeId")

    model_config = {"populate_by_name": True}

    def add(self, session_type_id: str) -> None:
        key = session_type_id or UNKNOWN_SESSION_TYPE_ID
        self.total += 1
        self.by_session_type_id[key] = self.by_session_type_id.get(key, 0) + 1


class SpeakerStats(BaseModel):
    total: int = 0
    sessions_with_2_speakers: int = Field(default=0, alias="sessionsWith2Speakers")
    sessions_with_3_speakers: int = Field(default=0, alias="sessionsWith3Speakers")

    model_config = {"populate_by_name": True}


class SlotStats(BaseModel):
    allocated: int = 0
    total: int = 0
    ratio: float = 0.0


class ConferenceHallStats(BaseModel):
    last_import_at: str = Field(default="", alias="lastImportAt")

    model_config = {"populate_by_name": True}


class ScheduleStats(BaseModel):
    conference_start_date: str = Field(default="", alias="conferenceStartDate")
    days_before_conference: int = Field(default=0, alias="daysBeforeConference")

    model_config = {"populate_by_name": True}


class ConferenceDashboard(BaseModel):
    """Derived statistics snapshot of one conference."""

    conference_id: str = Field(..., alias="conferenceId")
    schema_version: int = Field(default=DASHBOARD_SCHEMA_VERSION, alias="schemaVersion")
    trigger: DashboardTrigger
    computed_at: str = Field(..., alias="computedAt")
    submitted: CountsBySessionType = Field(default_factory=CountsBySessionType)
    confirmed: CountsBySessionType = Field(default_factory=CountsBySessionType)
    allocated: CountsBySessionType = Field(default_factory=CountsBySessionType)
    speakers: SpeakerStats = Field(default_factory=SpeakerStats)
    slots: SlotStats = Field(default_factory=SlotStats)
    conference_hall: ConferenceHallStats = Field(
        default_factory=ConferenceHallStats, alias="conferenceHall"
    )
    schedule: ScheduleStats = Field(default_factory=ScheduleStats)

    model_config = {"populate_by_name": True, "use_enum_values": True}

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class DashboardRefreshReport(BaseModel):
    """Outcome of one recompute: the history entry id and the new snapshot."""

    history_id: str = Field(..., alias="historyId")
    dashboard: ConferenceDashboard

    model_config = {"populate_by_name": True}


class DailySweepReport(BaseModel):
    """Aggregate outcome of the scheduled sweep."""

    total: int = 0
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    remaining: int = 0
    budget_exhausted: bool = Field(default=False, alias="budgetExhausted")
    started_at: str = Field(default="", alias="startedAt")
    finished_at: str = Field(default="", alias="finishedAt")

    model_config = {"populate_by_name": True}
