"""Root-cause diagnoser.

Emits one RootCause per category whose sub-score is strictly below the
trigger threshold, in fixed category order. Severity is fixed per category
regardless of how far below the threshold the score is.
"""

from __future__ import annotations

from typing import Callable, Optional

from ..models.health import HealthScore
from ..models.metrics import MetricsRecord
from ..models.plan import CATEGORY_ORDER, Category, RootCause, Severity
from ..models.policy import Thresholds

CATEGORY_SEVERITY: dict[Category, Severity] = {
    Category.PRODUCTIVITY: Severity.HIGH,
    Category.QUALITY: Severity.CRITICAL,
    Category.COLLABORATION: Severity.MEDIUM,
    Category.RELIABILITY: Severity.MEDIUM,
}

GENERIC_ISSUES: dict[Category, str] = {
    Category.PRODUCTIVITY: "Low commit and PR velocity",
    Category.QUALITY: "High bug introduction rate or technical debt",
    Category.COLLABORATION: "Insufficient code reviews",
    Category.RELIABILITY: "Inconsistent velocity",
}


def _productivity(m: MetricsRecord, t: Thresholds) -> tuple[list[str], dict]:
    issues = []
    if m.commits < t.min_commits_per_window:
        issues.append("Insufficient commit frequency")
    if m.pull_requests < t.min_prs_per_window:
        issues.append("Low PR submission rate")
    return issues, {
        "commits": m.commits,
        "pull_requests": m.pull_requests,
        "lines_changed": m.lines_changed,
    }


def _quality(m: MetricsRecord, t: Thresholds) -> tuple[list[str], dict]:
    issues = []
    if m.bugs_introduced > t.bug_alert_count:
        issues.append(f"High bug introduction rate ({m.bugs_introduced} bugs)")
    if m.tech_debt_index > t.tech_debt_alert:
        issues.append(f"Elevated technical debt score ({m.tech_debt_index:g})")
    return issues, {
        "bugs_introduced": m.bugs_introduced,
        "tech_debt_index": m.tech_debt_index,
    }


def _collaboration(m: MetricsRecord, t: Thresholds) -> tuple[list[str], dict]:
    return (
        [f"Insufficient code reviews ({m.code_reviews} reviews)"],
        {"code_reviews": m.code_reviews},
    )


def _reliability(m: MetricsRecord, t: Thresholds) -> tuple[list[str], dict]:
    return (
        ["Inconsistent velocity or task completion"],
        {"velocity": m.velocity},
    )


EVIDENCE: dict[Category, Callable[[MetricsRecord, Thresholds], tuple[list[str], dict]]] = {
    Category.PRODUCTIVITY: _productivity,
    Category.QUALITY: _quality,
    Category.COLLABORATION: _collaboration,
    Category.RELIABILITY: _reliability,
}


def diagnose(
    metrics: MetricsRecord,
    health: HealthScore,
    thresholds: Optional[Thresholds] = None,
) -> list[RootCause]:
    """Explain why an agent scores poorly. Healthy agents yield []."""
    thresholds = thresholds or Thresholds()
    causes: list[RootCause] = []

    for category in CATEGORY_ORDER:
        sub_score = getattr(health, category.score_field)
        if sub_score >= thresholds.sub_score_trigger_threshold:
            continue

        issues, evidence = EVIDENCE[category](metrics, thresholds)
        causes.append(
            RootCause(
                category=category,
                severity=CATEGORY_SEVERITY[category],
                score=sub_score,
                issues=issues or [GENERIC_ISSUES[category]],
                metrics=evidence,
            )
        )

    return causes
