"""Tests for the team ranker."""

from __future__ import annotations

import pytest

from healthmon.core.errors import EmptyTeamError
from healthmon.core.ranking import rank
from healthmon.core.scoring import score
from healthmon.models.health import ScoredAgent
from healthmon.models.metrics import MetricsRecord


def _scored(name: str, commits: int) -> tuple[MetricsRecord, object]:
    record = MetricsRecord(
        name=name,
        email=f"{name.lower()}@agents.local",
        commits=commits,
        pull_requests=2,
        code_reviews=3,
        velocity=8,
    )
    return record, score(record)


class TestRank:
    def test_worst_first(self, team_records):
        analysis = rank((r, score(r)) for r in team_records)
        overall = [s.overall for s in analysis.ranked]
        assert overall == sorted(overall)
        assert analysis.lowest.metrics.name == "Backend AI"
        assert analysis.highest.metrics.name == "Frontend AI"

    def test_team_average(self, team_records):
        scored = [(r, score(r)) for r in team_records]
        analysis = rank(scored)
        expected = sum(h.overall for _, h in scored) / len(scored)
        assert analysis.team_average == pytest.approx(expected)
        assert analysis.team_size == 3

    def test_partitions_by_status(self, team_records):
        analysis = rank((r, score(r)) for r in team_records)
        assert [s.metrics.name for s in analysis.critical] == ["Backend AI"]
        assert [s.metrics.name for s in analysis.warning] == ["DevOps AI"]
        assert [s.metrics.name for s in analysis.healthy] == ["Frontend AI"]
        assert [s.metrics.name for s in analysis.unhealthy] == ["Backend AI", "DevOps AI"]

    def test_stable_for_ties(self):
        entries = [_scored(name, 4) for name in ("Alpha", "Bravo", "Charlie")]
        entries.insert(1, _scored("Low", 0))
        analysis = rank(entries)
        assert [s.metrics.name for s in analysis.ranked] == ["Low", "Alpha", "Bravo", "Charlie"]

    def test_accepts_scored_agents(self):
        record, health = _scored("Solo", 5)
        analysis = rank([ScoredAgent(metrics=record, health=health)])
        assert analysis.lowest == analysis.highest
        assert analysis.team_size == 1

    def test_empty_team_raises(self):
        with pytest.raises(EmptyTeamError):
            rank([])

    def test_to_record_shape(self, team_records):
        record = rank((r, score(r)) for r in team_records).to_record()
        assert record["teamSize"] == 3
        assert record["lowestPerformer"]["email"] == "backend-agent@agents.demo"
        assert record["criticalCount"] == 1
        assert len(record["agents"]) == 3
