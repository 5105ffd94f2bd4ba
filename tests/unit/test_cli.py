"""Tests for CLI entry points."""

from __future__ import annotations

import json
from datetime import datetime
from unittest.mock import patch

from click.testing import CliRunner

from healthmon.cli.ahm import ahm_cli
from healthmon.cli.check import check_cli
from healthmon.core.history import record_improvement
from healthmon.core.planner import build_plan
from healthmon.core.scoring import score
from healthmon.models.plan import MutationResult, MutationStatus


def _metrics_file(path, records):
    path.write_text(
        json.dumps([r.model_dump(mode="json") for r in records]),
        encoding="utf-8",
    )
    return path


class TestAnalyze:
    def test_requires_metrics(self, tmp_project):
        runner = CliRunner()
        result = runner.invoke(ahm_cli, ["analyze", "-p", str(tmp_project)])
        assert result.exit_code != 0

    @patch("healthmon.core.pipeline.run_analysis")
    def test_passes_options(self, mock_run, tmp_project, team_records):
        mock_run.return_value = 2
        metrics = _metrics_file(tmp_project / "m.json", team_records)

        runner = CliRunner()
        result = runner.invoke(
            ahm_cli,
            ["analyze", "-p", str(tmp_project), "-m", str(metrics), "--apply", "--focus", "unhealthy", "-f", "json"],
        )

        assert result.exit_code == 0
        kwargs = mock_run.call_args.kwargs
        assert kwargs["apply"] is True
        assert kwargs["focus"] == "unhealthy"
        assert kwargs["output_format"] == "json"
        assert kwargs["dry_run"] is False

    @patch("healthmon.core.pipeline.run_analysis")
    def test_apply_defaults_to_config(self, mock_run, tmp_project, team_records):
        mock_run.return_value = 0
        metrics = _metrics_file(tmp_project / "m.json", team_records)
        runner = CliRunner()
        runner.invoke(ahm_cli, ["analyze", "-p", str(tmp_project), "-m", str(metrics)])
        assert mock_run.call_args.kwargs["apply"] is None

    @patch("healthmon.core.pipeline.run_analysis")
    def test_ci_mode_exit_code(self, mock_run, tmp_project, team_records):
        mock_run.return_value = 2
        metrics = _metrics_file(tmp_project / "m.json", team_records)
        runner = CliRunner()
        result = runner.invoke(ahm_cli, ["analyze", "-p", str(tmp_project), "-m", str(metrics), "--ci"])
        assert result.exit_code == 2

    def test_end_to_end_dry_run(self, initialized_project, team_records):
        metrics = _metrics_file(initialized_project / "m.json", team_records)
        before = (initialized_project / ".claude" / "agents" / "backend-agent.md").read_text(encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(
            ahm_cli, ["analyze", "-p", str(initialized_project), "-m", str(metrics), "--apply", "--dry-run"]
        )

        assert result.exit_code == 0
        after = (initialized_project / ".claude" / "agents" / "backend-agent.md").read_text(encoding="utf-8")
        assert after == before


class TestSubcommands:
    @patch("healthmon.core.pipeline.initialize_project")
    def test_init(self, mock_init, tmp_project):
        runner = CliRunner()
        result = runner.invoke(ahm_cli, ["init", "-p", str(tmp_project)])
        assert result.exit_code == 0
        mock_init.assert_called_once()

    def test_detect(self, tmp_project):
        runner = CliRunner()
        result = runner.invoke(ahm_cli, ["detect", "-p", str(tmp_project)], env={"COLUMNS": "200"})
        assert result.exit_code == 0
        assert "Agents (2)" in result.output
        assert "Frontend AI" in result.output

    def test_detect_none(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(ahm_cli, ["detect", "-p", str(tmp_path)])
        assert result.exit_code == 0
        assert "No agent definitions" in result.output

    def test_generate(self, tmp_project):
        out = tmp_project / "metrics.json"
        runner = CliRunner()
        result = runner.invoke(
            ahm_cli, ["generate", "-p", str(tmp_project), "-i", "2", "--seed", "4", "-o", str(out)]
        )
        assert result.exit_code == 0
        payload = json.loads(out.read_text(encoding="utf-8"))
        assert payload["iteration"] == 2
        assert len(payload["agents"]) == 4

    def test_history(self, tmp_project, struggling_record):
        plan = build_plan(struggling_record, score(struggling_record))
        record_improvement(
            tmp_project,
            plan,
            MutationResult(
                status=MutationStatus.UPDATED,
                document_id="backend-agent",
                timestamp=datetime(2026, 10, 1, 9, 0),
            ),
        )
        runner = CliRunner()
        result = runner.invoke(ahm_cli, ["history", "-p", str(tmp_project)], env={"COLUMNS": "200"})
        assert result.exit_code == 0
        assert "Improvements (1)" in result.output
        assert "updated" in result.output

    def test_history_empty(self, tmp_project):
        runner = CliRunner()
        result = runner.invoke(ahm_cli, ["history", "-p", str(tmp_project)])
        assert "No improvements recorded" in result.output


class TestCheck:
    def test_ci_fails_on_critical(self, tmp_path, team_records):
        metrics = _metrics_file(tmp_path / "m.json", team_records)
        runner = CliRunner()
        result = runner.invoke(check_cli, ["-m", str(metrics), "--ci"])
        assert result.exit_code == 1
        assert "Backend AI" in result.output

    def test_ci_passes_healthy_team(self, tmp_path, improved_record):
        metrics = _metrics_file(tmp_path / "m.json", [improved_record])
        runner = CliRunner()
        result = runner.invoke(check_cli, ["-m", str(metrics), "--ci"])
        assert result.exit_code == 0

    def test_without_ci_always_zero(self, tmp_path, team_records):
        metrics = _metrics_file(tmp_path / "m.json", team_records)
        runner = CliRunner()
        result = runner.invoke(check_cli, ["-m", str(metrics)])
        assert result.exit_code == 0

    def test_invalid_metrics(self, tmp_path):
        metrics = tmp_path / "m.json"
        metrics.write_text('[{"name": "A", "email": "a@x", "commits": -3}]', encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(check_cli, ["-m", str(metrics), "--ci"])
        assert result.exit_code == 11
