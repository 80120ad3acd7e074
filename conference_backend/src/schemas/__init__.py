"""
Pydantic schemas for API request/response validation.
"""

from conference_backend.src.schemas.conference import Conference, Day, Slot
from conference_backend.src.schemas.dashboard import (
    ConferenceDashboard,
    DailySweepReport,
    DashboardRefreshReport,
    DashboardTrigger,
)
from conference_backend.src.schemas.lifecycle import (
    ConferenceIdRequest,
    DeleteConferenceReport,
    DuplicateConferenceReport,
    DuplicateConferenceRequest,
)

__all__ = [
    "Conference",
    "Day",
    "Slot",
    "ConferenceDashboard",
    "DailySweepReport",
    "DashboardRefreshReport",
    "DashboardTrigger",
    "ConferenceIdRequest",
    "DeleteConferenceReport",
    "DuplicateConferenceReport",
    "DuplicateConferenceRequest",
]
