"""Shared fixtures for Agent Health Monitor tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from healthmon.models.metrics import MetricsRecord


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a minimal project structure with two agent definitions."""
    project = tmp_path / "test-project"
    project.mkdir()
    agents_dir = project / ".claude" / "agents"
    agents_dir.mkdir(parents=True)
    (agents_dir / "backend-agent.md").write_text(
        "# Backend AI\n"
        "\n"
        "**Name**: Backend AI\n"
        "**Role**: Backend Developer\n"
        "**Email**: backend-agent@agents.demo\n"
        "\n"
        "## Responsibilities\n"
        "\n"
        "- Build and maintain the REST API\n",
        encoding="utf-8",
    )
    (agents_dir / "frontend-agent.md").write_text(
        "# Frontend AI\n"
        "\n"
        "**Name**: Frontend AI\n"
        "**Role**: Frontend Developer\n"
        "**Email**: frontend-agent@agents.demo\n",
        encoding="utf-8",
    )
    (agents_dir / "README.md").write_text("# Agents\n", encoding="utf-8")
    return project


@pytest.fixture
def initialized_project(tmp_project: Path) -> Path:
    """Create a project with .agent-health initialized."""
    ah_dir = tmp_project / ".agent-health"
    (ah_dir / "reports" / "archive").mkdir(parents=True)

    config = ah_dir / "config.yaml"
    config.write_text(
        'project:\n  name: "test-project"\n\nagents:\n  definitions_dir: .claude/agents\n',
        encoding="utf-8",
    )
    return tmp_project


@pytest.fixture
def struggling_record() -> MetricsRecord:
    """Backend agent that is below every per-window minimum."""
    return MetricsRecord(
        name="Backend AI",
        email="backend-agent@agents.demo",
        role="Backend Developer",
        commits=3,
        pull_requests=1,
        code_reviews=0,
        bugs_introduced=4,
        tech_debt_index=70,
        velocity=2,
    )


@pytest.fixture
def improved_record() -> MetricsRecord:
    """Frontend agent drawing from the improved population."""
    return MetricsRecord(
        name="Frontend AI",
        email="frontend-agent@agents.demo",
        role="Frontend Developer",
        commits=14,
        pull_requests=6,
        code_reviews=6,
        bugs_introduced=0,
        tech_debt_index=5,
        velocity=9,
    )


@pytest.fixture
def warning_record() -> MetricsRecord:
    """DevOps agent with an overall score in the warning band."""
    return MetricsRecord(
        name="DevOps AI",
        email="devops-agent@agents.demo",
        role="DevOps Engineer",
        commits=5,
        pull_requests=2,
        code_reviews=1,
        bugs_introduced=1,
        tech_debt_index=30,
        velocity=7,
    )


@pytest.fixture
def team_records(struggling_record, improved_record, warning_record) -> list[MetricsRecord]:
    return [improved_record, struggling_record, warning_record]


@pytest.fixture
def scraper_payload() -> dict:
    """Metrics in the camelCase scraper shape."""
    return {
        "success": True,
        "timestamp": "2026-10-01T12:00:00",
        "agents": [
            {
                "name": "Backend AI",
                "email": "backend-agent@agents.demo",
                "role": "Backend Developer",
                "commits": 3,
                "pullRequests": 1,
                "codeReviews": 0,
                "bugsIntroduced": 4,
                "linesAdded": 120,
                "linesDeleted": 30,
                "techDebtIndex": 70,
                "velocity": 2,
            },
            {
                "name": "Frontend AI",
                "email": "frontend-agent@agents.demo",
                "role": "Frontend Developer",
                "commits": 14,
                "pullRequests": 6,
                "codeReviews": 6,
                "bugsIntroduced": 0,
                "linesAdded": 600,
                "linesDeleted": 200,
                "techDebtIndex": 5,
                "velocity": 9,
            },
        ],
    }
