"""Main analysis pipeline.

metrics -> scoring -> ranking -> diagnosis -> recommendations -> document.
Everything up to the document step is pure; the mutator is the only stage
that touches external state.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console

from .. import __version__
from ..formatters.junit import export_junit_results
from ..models.agent import Agent
from ..models.health import ScoredAgent, TeamAnalysis
from ..models.metrics import MetricsRecord
from ..models.policy import RecommendationPolicy, Thresholds
from ..models.run import AgentOutcome, PipelineResult, PipelineState
from .agents import detect_agents, document_ids_by_email
from .archive import export_analysis_archive, export_analysis_json
from .config import CONFIG_DIR, DEFAULT_CONFIG, get_definitions_dir, get_effective_config
from .diagnosis import diagnose
from .documents import DocumentMutator, FileDocumentStore
from .errors import EmptyTeamError, InvalidMetricsRecord
from .history import improved_agents, record_improvement
from .metrics import load_metrics_file
from .planner import build_plan
from .ranking import rank
from .report import generate_team_report, get_exit_code
from .scoring import score

console = Console()

FOCUS_CHOICES = ("lowest", "unhealthy", "all")


def initialize_project(project_path: Path) -> None:
    """Initialize .agent-health directory structure in a project."""
    ah_dir = project_path / CONFIG_DIR
    for subdir in ("reports", "reports/archive"):
        (ah_dir / subdir).mkdir(parents=True, exist_ok=True)

    config_path = ah_dir / "config.yaml"
    if not config_path.exists():
        config_path.write_text(
            "# Agent Health Monitor project configuration\n"
            "\n"
            f"monitor_version: \"{__version__}\"\n"
            "\n"
            "project:\n"
            f'  name: "{project_path.name}"\n'
            "\n"
            "agents:\n"
            "  definitions_dir: .claude/agents\n",
            encoding="utf-8",
        )

    console.print(f"  [green]Initialized[/green] {CONFIG_DIR}/ in {project_path.name}")


def select_targets(analysis: TeamAnalysis, focus: str) -> list[ScoredAgent]:
    """Agents the pipeline diagnoses, worst first."""
    if focus == "all":
        return list(analysis.ranked)
    if focus == "unhealthy":
        return analysis.unhealthy or [analysis.lowest]
    return [analysis.lowest]


def process_agent(
    scored: ScoredAgent,
    thresholds: Thresholds,
    policy: RecommendationPolicy,
    mutator: Optional[DocumentMutator] = None,
    agent: Optional[Agent] = None,
    document_id: Optional[str] = None,
) -> AgentOutcome:
    """Walk one agent through diagnosis, planning and document update."""
    outcome = AgentOutcome(
        agent=agent or scored.agent,
        state=PipelineState.SCORED,
        health=scored.health,
    )

    root_causes = diagnose(scored.metrics, scored.health, thresholds)
    outcome.state = PipelineState.DIAGNOSED
    if not root_causes:
        outcome.state = PipelineState.HEALTHY_NO_ACTION
        return outcome

    plan = build_plan(
        scored.metrics,
        scored.health,
        thresholds,
        policy,
        agent=outcome.agent,
        document_id=document_id,
        root_causes=root_causes,
    )

    outcome.plan = plan
    outcome.state = PipelineState.PLANNED
    if mutator is None:
        return outcome

    result = mutator.apply_plan(plan, plan.document_id)
    outcome.mutation = result
    if result.success:
        outcome.state = PipelineState.DOCUMENT_UPDATED
        outcome.agent = result.improved_agent or outcome.agent
    else:
        outcome.state = PipelineState.DOCUMENT_UPDATE_FAILED
    return outcome


def run_pipeline(
    records: list[MetricsRecord],
    config: Optional[dict] = None,
    mutator: Optional[DocumentMutator] = None,
    focus: Optional[str] = None,
    document_ids: Optional[dict[str, str]] = None,
    improved: Optional[dict[str, datetime]] = None,
    dry_run: bool = False,
    project: str = "",
) -> PipelineResult:
    """Score, rank and plan for a team; apply plans through ``mutator``.

    With ``dry_run`` or no mutator, targeted agents stop in the PLANNED
    state. Raises EmptyTeamError for an empty team.
    """
    config = config or DEFAULT_CONFIG
    thresholds = Thresholds.from_config(config)
    policy = RecommendationPolicy.from_config(config)
    focus = focus or config.get("pipeline", {}).get("focus", "lowest")
    document_ids = document_ids or {}
    improved = improved or {}

    analysis = rank((record, score(record, thresholds)) for record in records)
    targets = select_targets(analysis, focus)
    active_mutator = None if dry_run else mutator

    def _process(scored: ScoredAgent) -> AgentOutcome:
        agent = scored.agent
        agent.last_improved_at = improved.get(agent.email.lower())
        return process_agent(
            scored,
            thresholds,
            policy,
            mutator=active_mutator,
            agent=agent,
            document_id=document_ids.get(agent.email.lower()),
        )

    agents_config = config.get("agents", {})
    if agents_config.get("parallel") and active_mutator and len(targets) > 1:
        workers = max(1, int(agents_config.get("max_workers", 4)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(_process, targets))
    else:
        outcomes = [_process(scored) for scored in targets]

    return PipelineResult(
        id=analysis.timestamp.strftime("%Y%m%dT%H%M%S"),
        timestamp=analysis.timestamp,
        project=project,
        dry_run=dry_run,
        focus=focus,
        analysis=analysis,
        outcomes=outcomes,
    )


def _print_outcome(outcome: AgentOutcome) -> None:
    name = outcome.agent.name
    if outcome.state == PipelineState.HEALTHY_NO_ACTION:
        console.print(f"  [green]OK[/green] {name}: no root causes, no action needed")
    elif outcome.state == PipelineState.PLANNED and outcome.plan:
        console.print(
            f"  [cyan]PLAN[/cyan] {name}: {len(outcome.plan.root_causes)} root causes, "
            f"{len(outcome.plan.recommendations)} recommendations "
            f"(target {round(outcome.plan.target_score)}/100)"
        )
    elif outcome.state == PipelineState.DOCUMENT_UPDATE_FAILED and outcome.mutation:
        console.print(f"  [red]FAILED[/red] {name}: {outcome.mutation.error}")


def run_analysis(
    project_path: Path,
    metrics_path: Path,
    apply: Optional[bool] = None,
    dry_run: bool = False,
    focus: Optional[str] = None,
    output_format: str = "markdown",
) -> int:
    """CLI-facing analysis run. Returns exit code."""
    start_time = time.time()

    project_path = Path(project_path).resolve()
    if not project_path.exists():
        console.print(f"  [red]ERROR[/red] Project path does not exist: {project_path}")
        return 12

    if not (project_path / CONFIG_DIR).exists():
        initialize_project(project_path)

    config = get_effective_config(project_path)
    exit_codes = config.get("ci", {}).get("exit_codes", {})
    project_name = config.get("project", {}).get("name") or project_path.name
    if apply is None:
        apply = bool(config.get("pipeline", {}).get("auto_apply", False))

    try:
        records = load_metrics_file(Path(metrics_path))
    except InvalidMetricsRecord as e:
        console.print(f"  [red]ERROR[/red] {e}")
        return 11

    console.print()
    console.print(f"  [bold cyan]AGENT HEALTH MONITOR[/bold cyan] v{__version__}")
    console.print(f"  Project: [white]{project_name}[/white]")
    console.print(f"  Agents:  [white]{len(records)}[/white]")
    if dry_run:
        console.print("  Mode:    [yellow]DRY RUN[/yellow]")
    elif not apply:
        console.print("  Mode:    [dim]plan only (use --apply to update definitions)[/dim]")
    console.print()

    definitions_dir = get_definitions_dir(config)
    definitions = detect_agents(definitions_dir)
    mutator = DocumentMutator(FileDocumentStore(definitions_dir)) if apply else None

    try:
        result = run_pipeline(
            records,
            config=config,
            mutator=mutator,
            focus=focus,
            document_ids=document_ids_by_email(definitions),
            improved=improved_agents(project_path),
            dry_run=dry_run,
            project=project_name,
        )
    except EmptyTeamError as e:
        console.print(f"  [red]ERROR[/red] {e}")
        return 11

    analysis = result.analysis
    console.print(
        f"  [green]OK[/green] Team average {round(analysis.team_average, 1)}/100, "
        f"lowest {analysis.lowest.metrics.name} ({round(analysis.lowest.overall, 1)}), "
        f"highest {analysis.highest.metrics.name} ({round(analysis.highest.overall, 1)})"
    )
    for outcome in result.outcomes:
        _print_outcome(outcome)
        if outcome.mutation is not None:
            record_improvement(project_path, outcome.plan, outcome.mutation)

    reports_dir = project_path / CONFIG_DIR / "reports"
    reports_dir.mkdir(parents=True, exist_ok=True)

    if output_format == "json":
        out = export_analysis_json(result, reports_dir / "team-health.json")
    elif output_format == "junit":
        out = reports_dir / "agent-health-results.xml"
        export_junit_results(analysis, out, project_name=project_name)
    else:
        out = reports_dir / "TEAM-HEALTH-REPORT.md"
        report = generate_team_report(
            result, duration_seconds=time.time() - start_time
        )
        out.write_text(report, encoding="utf-8")
    console.print(f"  [green]OK[/green] Report: {out.relative_to(project_path)}")

    archive_path = export_analysis_archive(reports_dir, result)
    console.print(f"  [dim]Archived: {archive_path.relative_to(project_path)}[/dim]")

    return get_exit_code(result, exit_codes)
