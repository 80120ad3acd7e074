"""
Daily dashboard scheduler.

Runs the dashboard sweep once a day at a fixed local time (03:00
Europe/Paris by default) inside the API process.

Design:
- One asyncio task sleeps until the next run or until shutdown
- The sweep is blocking store I/O and runs in a worker thread
- A failing sweep is logged; the loop keeps its schedule
"""

import asyncio
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from conference_backend.src.schemas.dashboard import DailySweepReport
from conference_backend.src.services.dashboard_service import DashboardService
from conference_backend.src.utils.logging_config import get_logger


logger = get_logger("scheduler")


def compute_next_run(now: datetime, hour: int, minute: int, tz: str) -> datetime:
    """
    Next occurrence of hour:minute local time strictly after ``now``.

    Args:
        now: Current time (timezone-aware)
        hour: Local hour (0-23)
        minute: Local minute (0-59)
        tz: IANA zone name

    Returns:
        Timezone-aware datetime in ``tz``
    """
    zone = ZoneInfo(tz)
    local_now = now.astimezone(zone)
    candidate = datetime.combine(local_now.date(), time(hour, minute), tzinfo=zone)
    if candidate <= local_now:
        candidate = datetime.combine(
            local_now.date() + timedelta(days=1), time(hour, minute), tzinfo=zone
        )
    return candidate


class DailyDashboardScheduler:
    """
    Background loop triggering DashboardService.run_daily_sweep().

    Attributes:
        service_factory: Builds the DashboardService used for each sweep
        hour, minute, tz: Local time of the daily run
        budget_seconds: Wall-clock budget handed to each sweep
    """

    def __init__(
        self,
        service_factory: Callable[[], DashboardService],
        hour: int = 3,
        minute: int = 0,
        tz: str = "Europe/Paris",
        budget_seconds: int = 540,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._service_factory = service_factory
        self.hour = hour
        self.minute = minute
        self.tz = tz
        self.budget_seconds = budget_seconds
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._shutdown_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self.last_report: Optional[DailySweepReport] = None

    def start(self) -> None:
        """Start the loop on the running event loop."""
        if self._task is None or self._task.done():
            self._shutdown_event.clear()
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Request shutdown and wait for the loop to finish."""
        self._shutdown_event.set()
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def run(self) -> None:
        logger.info(
            f"Daily dashboard scheduler started ({self.hour:02d}:{self.minute:02d} {self.tz})"
        )
        try:
            while not self._shutdown_event.is_set():
                next_run = compute_next_run(self._clock(), self.hour, self.minute, self.tz)
                delay = max(0.0, (next_run - self._clock()).total_seconds())
                logger.debug(f"Next dashboard sweep at {next_run.isoformat()}")

                if await self._wait(delay):
                    break
                await self.run_once()
        except asyncio.CancelledError:
            logger.info("Daily dashboard scheduler cancelled")
            raise

        logger.info("Daily dashboard scheduler stopped")

    async def run_once(self) -> Optional[DailySweepReport]:
        """Run one sweep in a worker thread; errors are logged, not raised."""
        try:
            service = self._service_factory()
            self.last_report = await asyncio.to_thread(
                service.run_daily_sweep, self.budget_seconds
            )
            return self.last_report
        except Exception as e:
            logger.error(f"Daily dashboard sweep failed: {e}", exc_info=True)
            return None

    async def _wait(self, delay: float) -> bool:
        """Sleep ``delay`` seconds; True if shutdown was requested meanwhile."""
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()
