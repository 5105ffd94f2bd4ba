"""Agent Health Monitor (ahm) - score, diagnose and improve an agent team."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.group()
def ahm_cli() -> None:
    """Agent Health Monitor - health scoring and improvement plans for AI agent teams."""


@ahm_cli.command()
@click.option("--project", "-p", type=click.Path(exists=True), required=True)
def init(project: str) -> None:
    """Initialize Agent Health Monitor in a project."""
    from ..core.pipeline import initialize_project

    initialize_project(Path(project))


@ahm_cli.command()
@click.option("--project", "-p", type=click.Path(exists=True), required=True, help="Project path")
@click.option("--metrics", "-m", type=click.Path(exists=True), required=True, help="Metrics file (JSON or YAML)")
@click.option("--apply", is_flag=True, help="Write improvement plans into agent definitions")
@click.option("--dry-run", is_flag=True, help="Plan only, never touch definitions")
@click.option("--focus", type=click.Choice(["lowest", "unhealthy", "all"]), help="Which agents to diagnose")
@click.option("--output-format", "-f", type=click.Choice(["markdown", "json", "junit"]), default="markdown")
@click.option("--ci", is_flag=True, help="CI mode: enable exit codes")
def analyze(
    project: str,
    metrics: str,
    apply: bool,
    dry_run: bool,
    focus: str | None,
    output_format: str,
    ci: bool,
) -> None:
    """Score the team and build an improvement plan for the lowest performer.

    Example: ahm analyze -p ./repo -m metrics.json --apply
    """
    from ..core.pipeline import run_analysis

    exit_code = run_analysis(
        project_path=Path(project),
        metrics_path=Path(metrics),
        apply=apply or None,
        dry_run=dry_run,
        focus=focus,
        output_format=output_format,
    )
    if ci:
        sys.exit(exit_code)


@ahm_cli.command()
@click.option("--project", "-p", type=click.Path(exists=True), required=True)
def detect(project: str) -> None:
    """List agent definition documents found in the project."""
    from ..core.agents import detect_agents
    from ..core.config import get_definitions_dir, get_effective_config

    project_path = Path(project).resolve()
    definitions_dir = get_definitions_dir(get_effective_config(project_path))
    definitions = detect_agents(definitions_dir)

    if not definitions:
        console.print(f"  [yellow]WARN[/yellow] No agent definitions in {definitions_dir}")
        return

    table = Table(title=f"Agents ({len(definitions)})")
    table.add_column("Document", style="cyan")
    table.add_column("Name")
    table.add_column("Role")
    table.add_column("Email", style="dim")
    for d in definitions:
        table.add_row(d.document_id, d.agent.name, d.agent.role, d.agent.email)
    console.print(table)


@ahm_cli.command()
@click.option("--project", "-p", type=click.Path(exists=True), required=True)
@click.option("--iteration", "-i", type=int, default=1, show_default=True, help="Observation window number")
@click.option("--seed", type=int, help="Random seed for reproducible output")
@click.option("--output", "-o", type=click.Path(), help="Output file (default: .agent-health/metrics.json)")
def generate(project: str, iteration: int, seed: int | None, output: str | None) -> None:
    """Generate synthetic metrics for the demo team.

    Agents with an applied improvement plan in the history draw from the
    improved population.
    """
    import json

    from ..core.config import CONFIG_DIR
    from ..core.generator import SyntheticMetricsGenerator
    from ..core.history import improved_agents

    project_path = Path(project).resolve()
    improved = improved_agents(project_path)
    generator = SyntheticMetricsGenerator(seed=seed)
    payload = generator.generate_payload(iteration, improved=improved.keys())

    out = Path(output) if output else project_path / CONFIG_DIR / "metrics.json"
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    console.print(
        f"  [green]OK[/green] {len(payload['agents'])} records for iteration {iteration} "
        f"({len(improved)} improved) -> {out}"
    )


@ahm_cli.command()
@click.option("--project", "-p", type=click.Path(exists=True), required=True)
@click.option("--agent", "-a", type=str, help="Only show entries for this agent email")
def history(project: str, agent: str | None) -> None:
    """Show recorded improvement plan applications."""
    from ..core.history import list_improvements

    entries = list_improvements(Path(project).resolve(), agent=agent)
    if not entries:
        console.print("  [dim]No improvements recorded.[/dim]")
        return

    table = Table(title=f"Improvements ({len(entries)})")
    table.add_column("Recorded", style="dim")
    table.add_column("Agent")
    table.add_column("Document", style="cyan")
    table.add_column("Score")
    table.add_column("Status")
    for e in entries:
        status = e.get("status", "")
        color = "green" if e.get("applied") else "red"
        table.add_row(
            str(e.get("recorded_at", "")),
            str(e.get("name") or e.get("agent", "")),
            str(e.get("document_id", "")),
            f"{e.get('current_score', '?')} -> {e.get('target_score', '?')}",
            f"[{color}]{status}[/{color}]",
        )
    console.print(table)


def main() -> None:
    ahm_cli()


if __name__ == "__main__":
    main()
