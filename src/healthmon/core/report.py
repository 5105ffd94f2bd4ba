"""Team health report generation and exit code logic."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .. import __version__
from ..models.run import PipelineResult, PipelineState

STATUS_LABEL = {"healthy": "PASS", "warning": "REVIEW", "critical": "FAIL"}

DEFAULT_EXIT_CODES = {"ok": 0, "failed": 1, "critical": 2}


def get_exit_code(result: PipelineResult, exit_codes: Optional[dict] = None) -> int:
    """Map a run to an exit code.

    - failed: a definition document could not be updated
    - critical: at least one agent is in critical health
    - ok: everything else
    """
    codes = dict(DEFAULT_EXIT_CODES)
    codes.update(exit_codes or {})
    if result.failed:
        return int(codes["failed"])
    if result.analysis.critical:
        return int(codes["critical"])
    return int(codes["ok"])


def generate_team_report(result: PipelineResult, duration_seconds: float = 0) -> str:
    """Generate the TEAM-HEALTH-REPORT.md report."""
    analysis = result.analysis
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    lines: list[str] = []
    lines.append("# Team Health Report")
    lines.append("")
    if result.project:
        lines.append(f"**Project:** {result.project}")
    lines.append(f"**Date:** {timestamp}")
    lines.append(f"**Team Size:** {analysis.team_size}")
    lines.append(f"**Team Average:** {round(analysis.team_average, 1)}/100")
    if result.dry_run:
        lines.append("**Mode:** DRY RUN (no definitions updated)")
    lines.append(f"**Duration:** {round(duration_seconds, 1)}s")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append("| Status | Count |")
    lines.append("|--------|-------|")
    lines.append(f"| CRITICAL | {len(analysis.critical)} |")
    lines.append(f"| WARNING  | {len(analysis.warning)} |")
    lines.append(f"| HEALTHY  | {len(analysis.healthy)} |")
    lines.append("")
    lines.append(
        f"Lowest performer: **{analysis.lowest.metrics.name}** "
        f"({round(analysis.lowest.overall, 1)}/100). "
        f"Highest performer: **{analysis.highest.metrics.name}** "
        f"({round(analysis.highest.overall, 1)}/100)."
    )
    lines.append("")

    lines.append("## Agents")
    lines.append("")
    lines.append("| Agent | Role | Overall | Productivity | Quality | Collaboration | Reliability | Status |")
    lines.append("|-------|------|---------|--------------|---------|---------------|-------------|--------|")
    for scored in analysis.ranked:
        d = scored.health.display()
        status = STATUS_LABEL.get(d["status"], "?")
        lines.append(
            f"| {scored.metrics.name} | {scored.metrics.role} | {d['overall']} | "
            f"{d['productivity']} | {d['quality']} | {d['collaboration']} | "
            f"{d['reliability']} | {status} ({d['status']}) |"
        )
    lines.append("")

    if result.outcomes:
        lines.append("## Improvement Plans")
        lines.append("")
        for outcome in result.outcomes:
            lines.append(f"### {outcome.agent.name} [{outcome.state.value}]")
            if outcome.state == PipelineState.HEALTHY_NO_ACTION:
                lines.append("No root causes found. No action needed.")
                lines.append("")
                continue
            plan = outcome.plan
            if plan is None:
                lines.append("")
                continue
            lines.append(
                f"**Score:** {round(plan.current_score)}/100 -> target "
                f"{round(plan.target_score)}/100"
            )
            lines.append(f"**Document:** `{plan.document_id}`")
            if outcome.mutation and outcome.mutation.error:
                lines.append(f"**Error:** {outcome.mutation.error}")
            lines.append("")
            for cause in plan.root_causes:
                lines.append(
                    f"- **{cause.category.value}** [{cause.severity.value.upper()}] "
                    f"{round(cause.score)}/100: {', '.join(cause.issues)}"
                )
            for rec in plan.recommendations:
                lines.append(f"  - {rec.title} (priority: {rec.priority.value})")
            lines.append("")

    lines.append("---")
    lines.append(f"*Generated by Agent Health Monitor v{__version__} at {timestamp}*")

    return "\n".join(lines)
