"""Pipeline run data models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .agent import Agent
from .health import HealthScore, TeamAnalysis
from .plan import ImprovementPlan, MutationResult


class PipelineState(str, Enum):
    UNSCORED = "unscored"
    SCORED = "scored"
    DIAGNOSED = "diagnosed"
    PLANNED = "planned"
    HEALTHY_NO_ACTION = "healthy_no_action"
    DOCUMENT_UPDATED = "document_updated"
    DOCUMENT_UPDATE_FAILED = "document_update_failed"


TERMINAL_STATES = {
    PipelineState.HEALTHY_NO_ACTION,
    PipelineState.DOCUMENT_UPDATED,
    PipelineState.DOCUMENT_UPDATE_FAILED,
}


class AgentOutcome(BaseModel):
    agent: Agent
    state: PipelineState = PipelineState.UNSCORED
    health: Optional[HealthScore] = None
    plan: Optional[ImprovementPlan] = None
    mutation: Optional[MutationResult] = None

    def to_record(self) -> dict:
        return {
            "agent": self.agent.model_dump(mode="json"),
            "state": self.state.value,
            "health": self.health.to_record() if self.health else None,
            "plan": self.plan.to_record() if self.plan else None,
            "mutation": self.mutation.to_record() if self.mutation else None,
        }


class PipelineResult(BaseModel):
    id: str
    timestamp: datetime = Field(default_factory=datetime.now)
    project: str = ""
    dry_run: bool = False
    focus: str = "lowest"
    analysis: TeamAnalysis
    outcomes: list[AgentOutcome] = []

    @property
    def failed(self) -> list[AgentOutcome]:
        return [o for o in self.outcomes if o.state == PipelineState.DOCUMENT_UPDATE_FAILED]

    @property
    def updated(self) -> list[AgentOutcome]:
        return [o for o in self.outcomes if o.state == PipelineState.DOCUMENT_UPDATED]
