"""
Pydantic schemas for reading conference documents.

Only the fields the lifecycle operations look at are declared; every
other field is kept as-is (extra="allow") because conference documents
are cloned opaquely. Stored documents are loosely typed, so null lists
read as empty and numeric identifiers read as strings.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def _id_text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class Slot(BaseModel):
    """
    A time slot of a day in one room.

    ``overflow_room_ids`` never contains ``room_id`` and has no duplicates.
    """

    id: str = ""
    room_id: Optional[str] = Field(default=None, alias="roomId")
    slot_type_id: Optional[str] = Field(default=None, alias="slotTypeId")
    session_type_id: Optional[str] = Field(default=None, alias="sessionTypeId")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    duration: Optional[float] = None
    overflow_room_ids: List[str] = Field(default_factory=list, alias="overflowRoomIds")

    model_config = {"populate_by_name": True, "extra": "allow"}

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return _id_text(value)

    @field_validator("room_id", "slot_type_id", "session_type_id", "start_time", mode="before")
    @classmethod
    def coerce_references(cls, value):
        return None if value is None else _id_text(value)

    @field_validator("duration", mode="before")
    @classmethod
    def coerce_duration(cls, value):
        try:
            return None if value is None else float(value)
        except (TypeError, ValueError):
            return None

    @field_validator("overflow_room_ids", mode="before")
    @classmethod
    def coerce_overflow_rooms(cls, value):
        return [_id_text(room_id) for room_id in _as_list(value)]

    @model_validator(mode="after")
    def normalize_overflow_rooms(self) -> "Slot":
        seen = []
        for room_id in self.overflow_room_ids:
            if room_id and room_id != self.room_id and room_id not in seen:
                seen.append(room_id)
        self.overflow_room_ids = seen
        return self


class Day(BaseModel):
    """A conference day."""

    id: str = ""
    day_index: int = Field(default=0, alias="dayIndex")
    date: Optional[str] = None
    begin_time: Optional[str] = Field(default=None, alias="beginTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    slots: List[Slot] = Field(default_factory=list)
    disabled_room_ids: List[str] = Field(default_factory=list, alias="disabledRoomIds")

    model_config = {"populate_by_name": True, "extra": "allow"}

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return _id_text(value)

    @field_validator("date", "begin_time", "end_time", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return None if value is None else _id_text(value)

    @field_validator("day_index", mode="before")
    @classmethod
    def coerce_day_index(cls, value):
        return 0 if value is None else value

    @field_validator("slots", mode="before")
    @classmethod
    def coerce_slots(cls, value):
        return [slot for slot in _as_list(value) if isinstance(slot, dict)]

    @field_validator("disabled_room_ids", mode="before")
    @classmethod
    def coerce_disabled_rooms(cls, value):
        return [_id_text(room_id) for room_id in _as_list(value)]


class Conference(BaseModel):
    """Conference root document (partial view)."""

    id: str = ""
    name: Optional[str] = None
    organizer_emails: List[str] = Field(default_factory=list, alias="organizerEmails")
    days: List[Day] = Field(default_factory=list)

    model_config = {"populate_by_name": True, "extra": "allow"}

    @field_validator("organizer_emails", mode="before")
    @classmethod
    def coerce_organizer_emails(cls, value):
        return [email for email in _as_list(value) if isinstance(email, str)]

    @field_validator("days", mode="before")
    @classmethod
    def coerce_days(cls, value):
        return [day for day in _as_list(value) if isinstance(day, dict)]
