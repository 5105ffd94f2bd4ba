"""Tests for the scoring engine."""

from __future__ import annotations

import pytest

from healthmon.core.scoring import (
    WEIGHTS,
    collaboration_score,
    overall_score,
    productivity_score,
    quality_score,
    reliability_score,
    score,
    status_for,
)
from healthmon.models.health import HealthStatus
from healthmon.models.metrics import MetricsRecord
from healthmon.models.policy import Thresholds


def _record(**counters) -> MetricsRecord:
    return MetricsRecord(name="Test AI", email="test@agents.local", **counters)


class TestSubScores:
    def test_productivity_averages_commits_and_prs(self):
        t = Thresholds()
        assert productivity_score(_record(commits=3, pull_requests=1), t) == pytest.approx(55)

    def test_productivity_capped_at_100(self):
        t = Thresholds()
        assert productivity_score(_record(commits=50, pull_requests=20), t) == 100

    def test_quality_bug_penalty_and_debt(self):
        assert quality_score(_record(bugs_introduced=4, tech_debt_index=70)) == pytest.approx(45)

    def test_quality_floors_each_component(self):
        assert quality_score(_record(bugs_introduced=25, tech_debt_index=150)) == 0

    def test_collaboration_ratio_of_review_target(self):
        t = Thresholds()
        assert collaboration_score(_record(code_reviews=0), t) == 0
        assert collaboration_score(_record(code_reviews=6), t) == 100

    def test_reliability_scales_velocity(self):
        assert reliability_score(_record(velocity=2)) == pytest.approx(20)
        assert reliability_score(_record(velocity=12)) == 100

    def test_zero_minimum_scores_full(self):
        t = Thresholds(min_commits_per_window=0, min_prs_per_window=0, review_target=0)
        rec = _record()
        assert productivity_score(rec, t) == 100
        assert collaboration_score(rec, t) == 100


class TestOverall:
    def test_weights_sum_to_one(self):
        assert sum(WEIGHTS.values()) == pytest.approx(1.0)

    def test_overall_is_weighted_sum(self):
        breakdown = {"productivity": 80, "quality": 60, "collaboration": 40, "reliability": 20}
        assert overall_score(breakdown) == pytest.approx(24 + 21 + 8 + 3)

    def test_sub_scores_not_rounded(self):
        health = score(_record(commits=5, pull_requests=2, code_reviews=1, velocity=7))
        assert health.collaboration == pytest.approx(100 / 3)
        expected = sum(getattr(health, k) * w for k, w in WEIGHTS.items())
        assert health.overall == pytest.approx(expected)

    def test_all_scores_within_bounds(self):
        for counters in (
            {},
            {"commits": 1000, "pull_requests": 1000, "code_reviews": 1000, "velocity": 1000},
            {"bugs_introduced": 1000, "tech_debt_index": 1000},
        ):
            health = score(_record(**counters))
            for value in (*health.breakdown.values(), health.overall):
                assert 0 <= value <= 100


class TestStatus:
    @pytest.mark.parametrize(
        "overall,expected",
        [
            (0, HealthStatus.CRITICAL),
            (59.99, HealthStatus.CRITICAL),
            (60, HealthStatus.WARNING),
            (79.99, HealthStatus.WARNING),
            (80, HealthStatus.HEALTHY),
            (100, HealthStatus.HEALTHY),
        ],
    )
    def test_thresholds(self, overall, expected):
        assert status_for(overall) == expected

    def test_monotonic(self):
        previous = status_for(0)
        for step in range(1, 1001):
            current = status_for(step / 10)
            assert current.rank >= previous.rank
            previous = current

    def test_custom_thresholds(self):
        t = Thresholds(critical_overall_threshold=40, warning_overall_threshold=50)
        assert status_for(45, t) == HealthStatus.WARNING
        assert status_for(55, t) == HealthStatus.HEALTHY


class TestScenarios:
    def test_struggling_agent(self, struggling_record):
        health = score(struggling_record)
        assert health.productivity == pytest.approx(55)
        assert health.quality == pytest.approx(45)
        assert health.collaboration == 0
        assert health.reliability == pytest.approx(20)
        assert health.overall == pytest.approx(35.25)
        assert health.status == HealthStatus.CRITICAL

    def test_improved_agent(self, improved_record):
        health = score(improved_record)
        assert health.overall == pytest.approx(97.625)
        assert health.status == HealthStatus.HEALTHY

    def test_display_rounds(self, struggling_record):
        display = score(struggling_record).display()
        assert display["overall"] == 35
        assert display["status"] == "critical"
