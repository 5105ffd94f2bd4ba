"""Health score and team analysis data models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .agent import Agent
from .metrics import MetricsRecord


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Ordinal where a larger value means a better status."""
        return {
            HealthStatus.CRITICAL: 0,
            HealthStatus.WARNING: 1,
            HealthStatus.HEALTHY: 2,
        }[self]


class HealthScore(BaseModel):
    productivity: float = Field(ge=0, le=100)
    quality: float = Field(ge=0, le=100)
    collaboration: float = Field(ge=0, le=100)
    reliability: float = Field(ge=0, le=100)
    overall: float = Field(ge=0, le=100)
    status: HealthStatus
    computed_at: datetime = Field(default_factory=datetime.now)

    @property
    def breakdown(self) -> dict[str, float]:
        return {
            "productivity": self.productivity,
            "quality": self.quality,
            "collaboration": self.collaboration,
            "reliability": self.reliability,
        }

    def display(self) -> dict:
        """Rounded view for reports. Rounding happens here and nowhere else."""
        values = {k: round(v) for k, v in self.breakdown.items()}
        values["overall"] = round(self.overall)
        values["status"] = self.status.value
        return values

    def to_record(self) -> dict:
        return self.model_dump(mode="json")


class ScoredAgent(BaseModel):
    metrics: MetricsRecord
    health: HealthScore

    @property
    def agent(self) -> Agent:
        return self.metrics.agent

    @property
    def overall(self) -> float:
        return self.health.overall

    def to_record(self) -> dict:
        return {
            "name": self.metrics.name,
            "email": self.metrics.email,
            "role": self.metrics.role,
            "metrics": self.metrics.to_record(),
            "health": self.health.to_record(),
        }


class TeamAnalysis(BaseModel):
    timestamp: datetime = Field(default_factory=datetime.now)
    team_size: int
    team_average: float
    ranked: list[ScoredAgent]
    lowest: ScoredAgent
    highest: ScoredAgent
    critical: list[ScoredAgent] = []
    warning: list[ScoredAgent] = []
    healthy: list[ScoredAgent] = []

    @property
    def unhealthy(self) -> list[ScoredAgent]:
        """Critical and warning agents, worst first."""
        return [s for s in self.ranked if s.health.status != HealthStatus.HEALTHY]

    def to_record(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
            "teamSize": self.team_size,
            "teamAverageScore": round(self.team_average, 2),
            "lowestPerformer": {
                "name": self.lowest.metrics.name,
                "email": self.lowest.metrics.email,
                "score": round(self.lowest.overall, 2),
                "status": self.lowest.health.status.value,
                "breakdown": self.lowest.health.breakdown,
            },
            "highestPerformer": {
                "name": self.highest.metrics.name,
                "email": self.highest.metrics.email,
                "score": round(self.highest.overall, 2),
            },
            "criticalCount": len(self.critical),
            "warningCount": len(self.warning),
            "healthyCount": len(self.healthy),
            "agents": [s.to_record() for s in self.ranked],
        }
