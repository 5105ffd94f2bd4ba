"""Metrics record data model.

One record summarizes one agent's activity over one observation window.
Field aliases accept both the scraper's camelCase payload and snake_case.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .agent import Agent


class MetricsRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    role: str = "Developer"
    window: str = "current"

    commits: int = Field(default=0, ge=0)
    pull_requests: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("pull_requests", "pullRequests")
    )
    code_reviews: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("code_reviews", "codeReviews")
    )
    bugs_introduced: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("bugs_introduced", "bugsIntroduced")
    )
    lines_added: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("lines_added", "linesAdded")
    )
    lines_deleted: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices(
            "lines_deleted", "linesDeleted", "lines_removed", "linesRemoved"
        ),
    )
    tech_debt_index: float = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices(
            "tech_debt_index", "techDebtIndex", "tech_debt_score", "techDebtScore"
        ),
    )
    velocity: float = Field(default=0, ge=0)

    @field_validator("name", "email", "role", "window", mode="before")
    @classmethod
    def _strip(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @property
    def agent(self) -> Agent:
        return Agent(name=self.name, email=self.email, role=self.role)

    @property
    def lines_changed(self) -> int:
        return self.lines_added + self.lines_deleted

    def to_record(self) -> dict:
        return self.model_dump(mode="json")
