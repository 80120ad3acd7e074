#!/usr/bin/env python3
"""
Run the daily dashboard sweep once from the command line.

Recomputes the dashboard of every conference that has not started yet,
exactly as the scheduled 03:00 run does. Useful after an outage or to
backfill dashboards.

Usage:
    python -m conference_backend.src.scripts.run_dashboard_sweep [--budget-seconds N]

Options:
    --budget-seconds  Wall-clock budget of the sweep (default: DASHBOARD_SWEEP_BUDGET_SECONDS)
    --conference-id   Refresh a single conference instead of sweeping
    --help            Show this help message

Exit codes:
    0  sweep finished without failures
    1  at least one conference failed, or the budget ran out
"""

import argparse
import signal
import sys
from typing import List, Optional

from conference_backend.src.config.settings import get_settings
from conference_backend.src.dependencies import get_document_store
from conference_backend.src.schemas.dashboard import DashboardTrigger
from conference_backend.src.services.dashboard_service import DashboardService
from conference_backend.src.services.exceptions import ServiceError


def signal_handler(signum, frame):
    """Handle CTRL+C gracefully."""
    print("\n\nSweep interrupted by user.")
    sys.exit(130)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Recompute conference dashboards.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
  %(prog)s --budget-seconds 120
  %(prog)s --conference-id devcon-2025
        """,
    )
    parser.add_argument(
        "--budget-seconds",
        type=int,
        default=None,
        help="Wall-clock budget of the sweep in seconds",
    )
    parser.add_argument(
        "--conference-id",
        default=None,
        help="Refresh only this conference",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    signal.signal(signal.SIGINT, signal_handler)
    args = parse_args(argv)
    settings = get_settings()

    service = DashboardService(
        get_document_store(),
        timezone_name=settings.dashboard_schedule_timezone,
    )

    if args.conference_id:
        try:
            report = service.recompute_and_persist(
                args.conference_id, DashboardTrigger.MANUAL_REFRESH
            )
        except ServiceError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        print(f"Dashboard refreshed for {args.conference_id} (history {report.history_id})")
        return 0

    budget = args.budget_seconds or settings.dashboard_sweep_budget_seconds
    report = service.run_daily_sweep(budget_seconds=budget)

    print(
        f"Processed: {report.processed}  Skipped: {report.skipped}  "
        f"Failed: {report.failed}  Remaining: {report.remaining}"
    )
    return 1 if report.failed or report.budget_exhausted else 0


if __name__ == "__main__":
    sys.exit(main())
