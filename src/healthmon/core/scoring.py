"""Scoring engine: raw activity counters to a four-dimensional health score.

Sub-scores are kept unrounded so that the overall score is exactly the
weighted sum of the four. Rounding is a presentation concern
(HealthScore.display).
"""

from __future__ import annotations

from typing import Optional

from ..models.health import HealthScore, HealthStatus
from ..models.metrics import MetricsRecord
from ..models.policy import Thresholds

WEIGHTS: dict[str, float] = {
    "productivity": 0.30,
    "quality": 0.35,
    "collaboration": 0.20,
    "reliability": 0.15,
}

BUG_PENALTY = 10
VELOCITY_SCALE = 10


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def _ratio_score(actual: float, minimum: float) -> float:
    """Percentage of a per-window minimum, capped at 100."""
    if minimum <= 0:
        return 100.0
    return min(actual / minimum * 100, 100.0)


def productivity_score(metrics: MetricsRecord, thresholds: Thresholds) -> float:
    commit_score = _ratio_score(metrics.commits, thresholds.min_commits_per_window)
    pr_score = _ratio_score(metrics.pull_requests, thresholds.min_prs_per_window)
    return _clamp((commit_score + pr_score) / 2)


def quality_score(metrics: MetricsRecord) -> float:
    bug_score = max(0.0, 100.0 - metrics.bugs_introduced * BUG_PENALTY)
    debt_score = max(0.0, 100.0 - metrics.tech_debt_index)
    return _clamp((bug_score + debt_score) / 2)


def collaboration_score(metrics: MetricsRecord, thresholds: Thresholds) -> float:
    return _clamp(_ratio_score(metrics.code_reviews, thresholds.review_target))


def reliability_score(metrics: MetricsRecord) -> float:
    return _clamp(min(metrics.velocity * VELOCITY_SCALE, 100.0))


def overall_score(breakdown: dict[str, float]) -> float:
    return sum(breakdown[key] * weight for key, weight in WEIGHTS.items())


def status_for(overall: float, thresholds: Optional[Thresholds] = None) -> HealthStatus:
    """Classify an overall score. Monotonic in ``overall``."""
    thresholds = thresholds or Thresholds()
    if overall < thresholds.critical_overall_threshold:
        return HealthStatus.CRITICAL
    if overall < thresholds.warning_overall_threshold:
        return HealthStatus.WARNING
    return HealthStatus.HEALTHY


def score(metrics: MetricsRecord, thresholds: Optional[Thresholds] = None) -> HealthScore:
    """Score one agent's metrics for one observation window."""
    thresholds = thresholds or Thresholds()
    breakdown = {
        "productivity": productivity_score(metrics, thresholds),
        "quality": quality_score(metrics),
        "collaboration": collaboration_score(metrics, thresholds),
        "reliability": reliability_score(metrics),
    }
    overall = _clamp(overall_score(breakdown))
    return HealthScore(
        **breakdown,
        overall=overall,
        status=status_for(overall, thresholds),
    )
