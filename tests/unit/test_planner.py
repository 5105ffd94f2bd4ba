"""Tests for improvement plan building."""

from __future__ import annotations

import pytest

from healthmon.core.diagnosis import diagnose
from healthmon.core.documents import IMPROVEMENT_MARKER
from healthmon.core.planner import build_plan, calculate_expected_impact, target_score
from healthmon.core.scoring import score
from healthmon.models.policy import RecommendationPolicy


class TestTargetScore:
    def test_increment(self):
        assert target_score(35.25) == pytest.approx(60.25)

    def test_cap(self):
        assert target_score(70) == 85

    def test_policy_override(self):
        policy = RecommendationPolicy(target_increment=10, target_cap=90)
        assert target_score(50, policy) == 60


class TestExpectedImpact:
    def test_capped_at_40(self, struggling_record):
        causes = diagnose(struggling_record, score(struggling_record))
        impact = calculate_expected_impact(causes)
        assert impact.estimated_score_increase == 40
        assert impact.confidence == "medium"
        assert impact.time_to_improvement == "1-2 sprints"

    def test_single_cause(self, warning_record):
        causes = diagnose(warning_record, score(warning_record))
        impact = calculate_expected_impact(causes)
        assert impact.estimated_score_increase == 10
        assert impact.confidence == "high"


class TestBuildPlan:
    def test_plan_for_struggling_agent(self, struggling_record):
        plan = build_plan(struggling_record, score(struggling_record))
        assert plan is not None
        assert plan.current_score == pytest.approx(35.25)
        assert plan.target_score == pytest.approx(60.25)
        assert len(plan.root_causes) == 4
        assert len(plan.recommendations) == 4
        assert plan.document_id == "backend-agent-agent"

    def test_healthy_agent_gets_no_plan(self, improved_record):
        assert build_plan(improved_record, score(improved_record)) is None

    def test_uses_given_root_causes(self, struggling_record):
        health = score(struggling_record)
        causes = diagnose(struggling_record, health)[:1]
        plan = build_plan(struggling_record, health, root_causes=causes)
        assert plan.root_causes == causes
        assert len(plan.recommendations) == 1

    def test_document_id_override(self, struggling_record):
        plan = build_plan(struggling_record, score(struggling_record), document_id="backend-agent")
        assert plan.document_id == "backend-agent"

    def test_instruction_block_rendered(self, struggling_record):
        plan = build_plan(struggling_record, score(struggling_record))
        block = plan.instruction_block
        assert block.startswith(IMPROVEMENT_MARKER)
        assert "**Current Health Score**: 35/100" in block
        assert "**Target Score**: 60/100" in block
        assert "#### Code Quality & Testing (Current: 45/100)" in block
        assert "**Commit Frequency**: Make 9+ atomic commits per sprint" in block
