"""
Unit tests for the dashboard sweep command line script.
"""

import pytest

from conference_backend.src.scripts import run_dashboard_sweep
from conference_backend.src.store import collections


@pytest.fixture
def script_store(store, mocker):
    mocker.patch.object(run_dashboard_sweep, "get_document_store", return_value=store)
    return store


class TestRunDashboardSweep:

    def test_sweep_success(self, script_store, sample_conference, capsys):
        sample_conference(days=[])

        assert run_dashboard_sweep.main([]) == 0
        assert "Skipped: 1" in capsys.readouterr().out

    def test_single_conference(self, script_store, sample_conference, capsys):
        sample_conference()

        assert run_dashboard_sweep.main(["--conference-id", "conf-1"]) == 0
        assert script_store.get(collections.CONFERENCE_DASHBOARD, "conf-1") is not None
        assert "conf-1" in capsys.readouterr().out

    def test_single_conference_missing(self, script_store, capsys):
        assert run_dashboard_sweep.main(["--conference-id", "nope"]) == 1
        assert "Error" in capsys.readouterr().err

    def test_failures_give_non_zero_exit(self, script_store, sample_conference, mocker):
        sample_conference(days=[{"dayIndex": 0, "date": "2999-01-01"}])
        mocker.patch(
            "conference_backend.src.services.dashboard_service.DashboardService.recompute_and_persist",
            side_effect=RuntimeError("boom"),
        )

        assert run_dashboard_sweep.main(["--budget-seconds", "60"]) == 1
