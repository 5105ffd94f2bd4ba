"""Tests for agent definition detection."""

from __future__ import annotations

from pathlib import Path

from healthmon.core.agents import (
    DEFAULT_ROLE,
    detect_agents,
    document_ids_by_email,
    parse_agent_definition,
)


class TestParseDefinition:
    def test_explicit_fields(self, tmp_project: Path):
        path = tmp_project / ".claude" / "agents" / "backend-agent.md"
        definition = parse_agent_definition(path)
        assert definition.agent.name == "Backend AI"
        assert definition.agent.role == "Backend Developer"
        assert definition.agent.email == "backend-agent@agents.demo"
        assert definition.document_id == "backend-agent"

    def test_github_email_label(self, tmp_path: Path):
        path = tmp_path / "qa-agent.md"
        path.write_text("**Name**: QA AI\n**GitHub Email**: qa@agents.demo\n", encoding="utf-8")
        assert parse_agent_definition(path).agent.email == "qa@agents.demo"

    def test_fallbacks(self, tmp_path: Path):
        path = tmp_path / "data-wrangler.md"
        path.write_text("# Notes\n\nCleans up CSV exports.\n", encoding="utf-8")
        agent = parse_agent_definition(path).agent
        assert agent.name == "Data Wrangler"
        assert agent.role == DEFAULT_ROLE
        assert agent.email == "data-wrangler@agents.local"

    def test_role_inferred_from_content(self, tmp_path: Path):
        path = tmp_path / "infra.md"
        path.write_text("You manage the DevOps pipeline and infrastructure.\n", encoding="utf-8")
        assert parse_agent_definition(path).agent.role == "DevOps Engineer"


class TestDetectAgents:
    def test_sorted_and_skips_readme(self, tmp_project: Path):
        definitions = detect_agents(tmp_project / ".claude" / "agents")
        assert [d.document_id for d in definitions] == ["backend-agent", "frontend-agent"]

    def test_skips_undecodable(self, tmp_project: Path):
        agents_dir = tmp_project / ".claude" / "agents"
        (agents_dir / "broken-agent.md").write_bytes(b"**Name**: \xff\xfe\n")
        definitions = detect_agents(agents_dir)
        assert [d.document_id for d in definitions] == ["backend-agent", "frontend-agent"]

    def test_missing_dir(self, tmp_path: Path):
        assert detect_agents(tmp_path / "nope") == []

    def test_document_ids_by_email(self, tmp_project: Path):
        ids = document_ids_by_email(detect_agents(tmp_project / ".claude" / "agents"))
        assert ids == {
            "backend-agent@agents.demo": "backend-agent",
            "frontend-agent@agents.demo": "frontend-agent",
        }
