"""Diagnosis, recommendation and improvement plan data models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .agent import Agent


class Category(str, Enum):
    PRODUCTIVITY = "Productivity"
    QUALITY = "Quality"
    COLLABORATION = "Collaboration"
    RELIABILITY = "Reliability"

    @property
    def score_field(self) -> str:
        return self.value.lower()


CATEGORY_ORDER: list[Category] = [
    Category.PRODUCTIVITY,
    Category.QUALITY,
    Category.COLLABORATION,
    Category.RELIABILITY,
]


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


class RootCause(BaseModel):
    category: Category
    severity: Severity
    score: float
    issues: list[str] = []
    metrics: dict[str, float] = {}


class ActionItem(BaseModel):
    label: str
    template: str
    params: dict[str, int] = {}

    def render(self) -> str:
        return f"**{self.label}**: {self.template.format(**self.params)}"


class Recommendation(BaseModel):
    priority: Severity
    category: Category
    title: str
    role: str
    actions: list[ActionItem] = []
    instructions: list[str] = []
    expected_impact: str = ""


class ExpectedImpact(BaseModel):
    estimated_score_increase: int = 0
    time_to_improvement: str = "1-2 sprints"
    confidence: str = "high"


class ImprovementPlan(BaseModel):
    agent: Agent
    current_score: float
    target_score: float
    root_causes: list[RootCause] = []
    recommendations: list[Recommendation] = []
    expected_impact: ExpectedImpact = ExpectedImpact()
    document_id: str
    instruction_block: str = ""
    created_at: datetime = Field(default_factory=datetime.now)

    def to_record(self) -> dict:
        return self.model_dump(mode="json")


class MutationStatus(str, Enum):
    UPDATED = "updated"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FAILED = "failed"


class MutationResult(BaseModel):
    status: MutationStatus
    document_id: str
    path: Optional[str] = None
    replaced: bool = False
    changes: str = ""
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)
    improved_agent: Optional[Agent] = None

    @property
    def success(self) -> bool:
        return self.status == MutationStatus.UPDATED

    def to_record(self) -> dict:
        return self.model_dump(mode="json")
