"""Unit tests for progress and impact summaries."""
import pytest

from greenmove.application.progress import get_progress, summarize_impact
from greenmove.domain.errors import NotFoundError
from tests.conftest import DEFAULT_USER, log_activity


class TestGetProgress:
    def test_fresh_user(self, ledger):
        p = get_progress(ledger, DEFAULT_USER)
        assert p["level"] == 1
        assert p["total_points"] == 0
        assert p["required_for_next_level"] == 100
        assert p["rewards_unlocked"] == 0

    def test_after_level_up(self, ledger):
        log_activity(ledger, quantity=7, day=0)
        log_activity(ledger, quantity=2, day=1)
        p = get_progress(ledger, DEFAULT_USER)
        assert p["level"] == 2
        assert p["total_points"] == 165
        assert p["points_to_next_level"] == 35
        assert p["rewards_unlocked"] == 2
        assert p["total_carbon_saved"] == pytest.approx(8.1)

    def test_unknown_user(self, ledger):
        with pytest.raises(NotFoundError):
            get_progress(ledger, "ghost")


class TestSummarizeImpact:
    def test_empty(self, ledger):
        s = summarize_impact(ledger, DEFAULT_USER)
        assert s["total_activities"] == 0
        assert s["average_carbon_per_activity"] == 0.0
        assert s["by_category"] == []

    def test_breakdown(self, ledger):
        log_activity(ledger, "Transport", "Bike", 5, "miles", day=0)
        log_activity(ledger, "Transport", "Walk", 5, "miles", day=1)
        log_activity(ledger, "Food", "Plant-based Meal", 2, "meals", day=2)

        s = summarize_impact(ledger, DEFAULT_USER)
        assert s["total_activities"] == 3
        assert s["total_carbon_saved"] == pytest.approx(14.0)
        assert s["average_carbon_per_activity"] == pytest.approx(14.0 / 3)

        by_category = {c["name"]: c for c in s["by_category"]}
        assert by_category["Transport"]["count"] == 2
        assert by_category["Transport"]["carbon_saved"] == pytest.approx(9.0)
        assert by_category["Food"]["carbon_saved"] == pytest.approx(5.0)
        assert {t["name"]: t["count"] for t in s["by_type"]} == {
            "Bike": 1, "Walk": 1, "Plant-based Meal": 1,
        }
