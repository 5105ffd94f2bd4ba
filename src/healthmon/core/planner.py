"""Improvement plan builder: diagnosis plus recommendations for one agent."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..models.agent import Agent
from ..models.health import HealthScore
from ..models.metrics import MetricsRecord
from ..models.plan import ExpectedImpact, ImprovementPlan, RootCause, Severity
from ..models.policy import RecommendationPolicy, Thresholds
from .diagnosis import diagnose
from .documents import document_id_for, render_instruction_block
from .recommendations import recommend

SEVERITY_IMPACT: dict[Severity, int] = {
    Severity.CRITICAL: 30,
    Severity.HIGH: 20,
    Severity.MEDIUM: 10,
}
MAX_ESTIMATED_INCREASE = 40


def target_score(current: float, policy: Optional[RecommendationPolicy] = None) -> float:
    """min(current + 25, 85). Both constants are policy, not derived."""
    policy = policy or RecommendationPolicy()
    return min(current + policy.target_increment, policy.target_cap)


def calculate_expected_impact(root_causes: list[RootCause]) -> ExpectedImpact:
    total = sum(SEVERITY_IMPACT.get(c.severity, 0) for c in root_causes)
    return ExpectedImpact(
        estimated_score_increase=min(total, MAX_ESTIMATED_INCREASE),
        time_to_improvement="1-2 sprints",
        confidence="medium" if len(root_causes) > 2 else "high",
    )


def build_plan(
    metrics: MetricsRecord,
    health: HealthScore,
    thresholds: Optional[Thresholds] = None,
    policy: Optional[RecommendationPolicy] = None,
    agent: Optional[Agent] = None,
    document_id: Optional[str] = None,
    root_causes: Optional[list[RootCause]] = None,
) -> Optional[ImprovementPlan]:
    """Build the plan for one scored agent.

    Returns None when the diagnosis is empty: a healthy agent gets no plan.
    """
    policy = policy or RecommendationPolicy()
    if root_causes is None:
        root_causes = diagnose(metrics, health, thresholds)
    if not root_causes:
        return None

    agent = agent or metrics.agent
    plan = ImprovementPlan(
        agent=agent,
        current_score=health.overall,
        target_score=target_score(health.overall, policy),
        root_causes=root_causes,
        recommendations=recommend(root_causes, metrics, policy),
        expected_impact=calculate_expected_impact(root_causes),
        document_id=document_id or document_id_for(agent),
        created_at=datetime.now(),
    )
    plan.instruction_block = render_instruction_block(plan)
    return plan
