"""Scoring thresholds and recommendation policy."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Thresholds(BaseModel):
    min_commits_per_window: float = Field(default=5, ge=0)
    min_prs_per_window: float = Field(default=2, ge=0)
    review_target: float = Field(default=3, ge=0)
    critical_overall_threshold: float = 60
    warning_overall_threshold: float = 80
    sub_score_trigger_threshold: float = 60
    bug_alert_count: int = 2
    tech_debt_alert: float = 50

    @classmethod
    def from_config(cls, config: dict) -> "Thresholds":
        return cls(**(config.get("scoring") or {}))


class RecommendationPolicy(BaseModel):
    commit_goal: int = 12
    commit_floor: int = 5
    product_owner_commit_floor: int = 3
    review_goal: int = 5
    review_floor: int = 3
    target_increment: float = 25
    target_cap: float = 85

    @classmethod
    def from_config(cls, config: dict) -> "RecommendationPolicy":
        values: dict = {}
        values.update(config.get("recommendations") or {})
        values.update(config.get("planning") or {})
        return cls(**values)
