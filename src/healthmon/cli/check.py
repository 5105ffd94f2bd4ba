"""Agent Health Check (ahm-check) - score-only CI gate.

Scores and ranks the team without diagnosing or touching any definition.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

console = Console()

STATUS_STYLE = {"healthy": "green", "warning": "yellow", "critical": "red"}


@click.command(name="ahm-check")
@click.option("--metrics", "-m", type=click.Path(exists=True), required=True, help="Metrics file (JSON or YAML)")
@click.option("--project", "-p", type=click.Path(exists=True), help="Project path for threshold config")
@click.option("--ci", is_flag=True, help="CI mode: exit 1 if any agent is critical")
def check_cli(metrics: str, project: str | None, ci: bool) -> None:
    """Agent Health Check - score the team and fail on critical agents."""
    from ..core.config import DEFAULT_CONFIG, get_effective_config
    from ..core.errors import HealthMonitorError
    from ..core.metrics import load_metrics_file
    from ..core.ranking import rank
    from ..core.scoring import score
    from ..models.policy import Thresholds

    config = get_effective_config(Path(project).resolve()) if project else DEFAULT_CONFIG
    thresholds = Thresholds.from_config(config)

    try:
        records = load_metrics_file(Path(metrics))
        analysis = rank((r, score(r, thresholds)) for r in records)
    except HealthMonitorError as e:
        console.print(f"  [red]ERROR[/red] {e}")
        if ci:
            sys.exit(11)
        return

    table = Table(title=f"Team health (average {round(analysis.team_average, 1)}/100)")
    table.add_column("Agent")
    table.add_column("Role", style="dim")
    for column in ("Overall", "Prod", "Qual", "Collab", "Rel"):
        table.add_column(column, justify="right")
    table.add_column("Status")
    for scored in analysis.ranked:
        d = scored.health.display()
        style = STATUS_STYLE[d["status"]]
        table.add_row(
            scored.metrics.name,
            scored.metrics.role,
            str(d["overall"]),
            str(d["productivity"]),
            str(d["quality"]),
            str(d["collaboration"]),
            str(d["reliability"]),
            f"[{style}]{d['status']}[/{style}]",
        )
    console.print(table)

    if analysis.critical:
        names = ", ".join(s.metrics.name for s in analysis.critical)
        console.print(f"  [red]CRITICAL[/red] {len(analysis.critical)} agent(s): {names}")
    else:
        console.print("  [green]OK[/green] No critical agents")

    if ci:
        sys.exit(1 if analysis.critical else 0)


def main() -> None:
    check_cli()


if __name__ == "__main__":
    main()
