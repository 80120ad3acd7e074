"""
Unit tests for the daily dashboard scheduler.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from conference_backend.src.schemas.dashboard import DailySweepReport
from conference_backend.src.scheduler.daily_dashboard import (
    DailyDashboardScheduler,
    compute_next_run,
)


PARIS = "Europe/Paris"


class TestComputeNextRun:

    def test_later_today(self):
        now = datetime(2024, 1, 15, 1, 0, tzinfo=timezone.utc)  # 02:00 in Paris

        next_run = compute_next_run(now, 3, 0, PARIS)

        assert next_run.astimezone(timezone.utc) == datetime(2024, 1, 15, 2, 0, tzinfo=timezone.utc)

    def test_tomorrow_when_time_passed(self):
        now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

        next_run = compute_next_run(now, 3, 0, PARIS)

        assert next_run.astimezone(timezone.utc) == datetime(2024, 1, 16, 2, 0, tzinfo=timezone.utc)

    def test_exactly_at_run_time_schedules_next_day(self):
        now = datetime(2024, 1, 15, 2, 0, tzinfo=timezone.utc)  # 03:00 in Paris

        next_run = compute_next_run(now, 3, 0, PARIS)

        assert next_run - now == timedelta(days=1)

    def test_summer_time_switch(self):
        # Clocks go from 02:00 to 03:00 on 2024-03-31 in Paris
        now = datetime(2024, 3, 30, 12, 0, tzinfo=timezone.utc)

        next_run = compute_next_run(now, 3, 0, PARIS)

        assert next_run.utcoffset() == timedelta(hours=2)
        assert next_run.astimezone(timezone.utc) == datetime(2024, 3, 31, 1, 0, tzinfo=timezone.utc)

    def test_other_zone(self):
        now = datetime(2024, 6, 1, 0, 0, tzinfo=timezone.utc)

        next_run = compute_next_run(now, 3, 30, "UTC")

        assert next_run.astimezone(timezone.utc) == datetime(2024, 6, 1, 3, 30, tzinfo=timezone.utc)


class TestDailyDashboardScheduler:

    @pytest.fixture
    def service(self):
        service = MagicMock()
        service.run_daily_sweep.return_value = DailySweepReport(total=2, processed=2)
        return service

    @pytest.mark.asyncio
    async def test_run_once_returns_report(self, service):
        scheduler = DailyDashboardScheduler(lambda: service, budget_seconds=120)

        report = await scheduler.run_once()

        service.run_daily_sweep.assert_called_once_with(120)
        assert report.processed == 2
        assert scheduler.last_report is report

    @pytest.mark.asyncio
    async def test_run_once_logs_and_swallows_errors(self, service):
        service.run_daily_sweep.side_effect = RuntimeError("store down")
        scheduler = DailyDashboardScheduler(lambda: service)

        assert await scheduler.run_once() is None
        assert scheduler.last_report is None

    @pytest.mark.asyncio
    async def test_loop_runs_sweep_then_stops(self, service, mocker):
        scheduler = DailyDashboardScheduler(lambda: service)
        mocker.patch.object(scheduler, "_wait", side_effect=[False, True])

        await scheduler.run()

        service.run_daily_sweep.assert_called_once()

    @pytest.mark.asyncio
    async def test_start_and_stop(self, service):
        scheduler = DailyDashboardScheduler(lambda: service)

        scheduler.start()
        await asyncio.sleep(0)
        assert scheduler.is_running

        await scheduler.stop()

        assert not scheduler.is_running
        service.run_daily_sweep.assert_not_called()

    @pytest.mark.asyncio
    async def test_wait_returns_false_on_timeout(self, service):
        scheduler = DailyDashboardScheduler(lambda: service)

        assert await scheduler._wait(0.01) is False
