"""Synthetic metrics generator for demos and dry runs.

Agents that have never been improved produce metrics scaled by their base
performance. Agents in the improved population draw from a high-performing
range instead. Which population an agent belongs to is decided by the
caller, usually from the improvement history.
"""

from __future__ import annotations

import random
from datetime import datetime
from typing import Iterable, Optional

from ..models.metrics import MetricsRecord
from .agents import DEMO_TEAM


class SyntheticMetricsGenerator:
    def __init__(self, team: Optional[list[dict]] = None, seed: Optional[int] = None):
        self.team = [dict(member) for member in (team or DEMO_TEAM)]
        for member in self.team:
            member.setdefault("base_performance", 0.7)
        self.rng = random.Random(seed)

    def _variance(self) -> float:
        return (self.rng.random() - 0.5) * 0.1

    def _baseline(self, member: dict, iteration: int) -> dict:
        perf = float(member["base_performance"])
        v = self._variance
        return {
            "commits": max(0, round((perf * 10 + v() * 3) * iteration)),
            "pull_requests": max(0, round((perf * 4 + v() * 2) * iteration)),
            "code_reviews": max(0, round((perf * 5 + v() * 2) * iteration)),
            "bugs_introduced": max(0, round(((1 - perf) * 5 + v() * 2) * iteration)),
            "tech_debt_index": max(0, round((1 - perf) * 100 + v() * 10)),
            "lines_added": max(0, round((perf * 500 + v() * 100) * iteration)),
            "lines_deleted": max(0, round((perf * 200 + v() * 50) * iteration)),
            "velocity": max(0.0, round(perf * 10 + v(), 1)),
        }

    def _improved(self) -> dict:
        r = self.rng
        return {
            "commits": r.randint(12, 16),
            "pull_requests": r.randint(5, 7),
            "code_reviews": r.randint(5, 7),
            "bugs_introduced": 0,
            "tech_debt_index": r.randint(0, 10),
            "lines_added": r.randint(400, 700),
            "lines_deleted": r.randint(150, 300),
            "velocity": round(r.uniform(8.5, 9.5), 1),
        }

    def generate_record(
        self,
        member: dict,
        iteration: int = 1,
        improved: bool = False,
    ) -> MetricsRecord:
        counters = self._improved() if improved else self._baseline(member, iteration)
        return MetricsRecord(
            name=member["name"],
            email=member["email"],
            role=member.get("role", "Developer"),
            window=f"iteration-{iteration}",
            **counters,
        )

    def generate(
        self,
        iteration: int = 1,
        improved: Optional[Iterable[str]] = None,
    ) -> list[MetricsRecord]:
        """One record per team member for an observation window."""
        improved_set = {e.lower() for e in (improved or [])}
        return [
            self.generate_record(m, iteration, m["email"].lower() in improved_set)
            for m in self.team
        ]

    def generate_payload(
        self,
        iteration: int = 1,
        improved: Optional[Iterable[str]] = None,
    ) -> dict:
        """Records in the scraper payload shape."""
        return {
            "success": True,
            "timestamp": datetime.now().strftime("%Y-%m-%dT%H:%M:%S"),
            "iteration": iteration,
            "agents": [r.model_dump(mode="json") for r in self.generate(iteration, improved)],
        }
