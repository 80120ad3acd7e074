"""
Scheduled jobs of the conference backend.
"""

from conference_backend.src.scheduler.daily_dashboard import (
    DailyDashboardScheduler,
    compute_next_run,
)

__all__ = [
    "DailyDashboardScheduler",
    "compute_next_run",
]
