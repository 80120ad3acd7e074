"""
Pydantic schemas for conference lifecycle requests and reports.

Provides data validation and serialization for:
- Delete / refresh / download requests (conferenceId only)
- Duplicate requests
- Delete and duplicate reports

Design:
- Wire names are camelCase (aliases); Python attributes are snake_case
- Duplicate request fields are accepted loosely here and validated by
  DuplicateService so every rule yields the same 400/409 contract
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Request Schemas
# ============================================================================


class ConferenceIdRequest(BaseModel):
    """Body of operations addressing one conference."""

    conference_id: Optional[Any] = Field(default=None, alias="conferenceId")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class DuplicateConferenceRequest(BaseModel):
    """
    Body of the duplicate operation.

    Example:
        >>> DuplicateConferenceRequest.model_validate({
        ...     "conferenceId": "conf-1",
        ...     "name": "DevCon",
        ...     "edition": 6,
        ...     "startDate": "2025-03-01",
        ...     "duplicateRooms": True,
        ... })
    """

    conference_id: Optional[Any] = Field(default=None, alias="conferenceId")
    name: Optional[Any] = None
    edition: Optional[Any] = None
    start_date: Optional[Any] = Field(default=None, alias="startDate")
    duplicate_rooms: bool = Field(default=False, alias="duplicateRooms")
    duplicate_tracks: bool = Field(default=False, alias="duplicateTracks")
    duplicate_planning_structure: bool = Field(default=False, alias="duplicatePlanningStructure")
    duplicate_activities: bool = Field(default=False, alias="duplicateActivities")
    duplicate_sponsors: bool = Field(default=False, alias="duplicateSponsors")

    model_config = {"populate_by_name": True, "extra": "ignore"}


# ============================================================================
# Report Schemas
# ============================================================================


class DuplicateConferenceReport(BaseModel):
    """Outcome of a duplicate operation."""

    new_conference_id: str = Field(..., alias="newConferenceId")
    activities_created: int = Field(default=0, alias="activitiesCreated")
    created_at: str = Field(..., alias="createdAt")

    model_config = {"populate_by_name": True}


class DeleteConferenceReport(BaseModel):
    """Per-collection counts of a delete operation."""

    conference_deleted: int = Field(default=0, alias="conferenceDeleted")
    sessions_deleted: int = Field(default=0, alias="sessionsDeleted")
    conference_speakers_deleted: int = Field(default=0, alias="conferenceSpeakersDeleted")
    persons_deleted: int = Field(default=0, alias="personsDeleted")
    activities_deleted: int = Field(default=0, alias="activitiesDeleted")
    activity_participations_deleted: int = Field(default=0, alias="activityParticipationsDeleted")
    session_allocations_deleted: int = Field(default=0, alias="sessionAllocationsDeleted")
    conference_hall_configs_deleted: int = Field(default=0, alias="conferenceHallConfigsDeleted")
    voxxrin_configs_deleted: int = Field(default=0, alias="voxxrinConfigsDeleted")
    conference_secrets_deleted: int = Field(default=0, alias="conferenceSecretsDeleted")
    dashboards_deleted: int = Field(default=0, alias="dashboardsDeleted")
    deleted_at: str = Field(..., alias="deletedAt")

    model_config = {"populate_by_name": True}

    def total_dependents(self) -> int:
        return (
            self.sessions_deleted
            + self.conference_speakers_deleted
            + self.persons_deleted
            + self.activities_deleted
            + self.activity_participations_deleted
            + self.session_allocations_deleted
            + self.conference_hall_configs_deleted
            + self.voxxrin_configs_deleted
            + self.conference_secrets_deleted
            + self.dashboards_deleted
        )
