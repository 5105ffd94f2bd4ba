"""Team ranker: order scored agents and partition them by status."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Union

from ..models.health import HealthScore, HealthStatus, ScoredAgent, TeamAnalysis
from ..models.metrics import MetricsRecord
from .errors import EmptyTeamError

ScoredInput = Union[ScoredAgent, tuple[MetricsRecord, HealthScore]]


def _as_scored(item: ScoredInput) -> ScoredAgent:
    if isinstance(item, ScoredAgent):
        return item
    metrics, health = item
    return ScoredAgent(metrics=metrics, health=health)


def rank(scored: Iterable[ScoredInput]) -> TeamAnalysis:
    """Rank agents worst first.

    ``sorted`` is stable, so agents with equal overall scores keep their
    input order.
    """
    entries = [_as_scored(item) for item in scored]
    if not entries:
        raise EmptyTeamError()

    ranked = sorted(entries, key=lambda s: s.health.overall)
    average = sum(s.health.overall for s in ranked) / len(ranked)

    return TeamAnalysis(
        timestamp=datetime.now(),
        team_size=len(ranked),
        team_average=average,
        ranked=ranked,
        lowest=ranked[0],
        highest=ranked[-1],
        critical=[s for s in ranked if s.health.status == HealthStatus.CRITICAL],
        warning=[s for s in ranked if s.health.status == HealthStatus.WARNING],
        healthy=[s for s in ranked if s.health.status == HealthStatus.HEALTHY],
    )
