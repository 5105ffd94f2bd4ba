"""Improvement history: which agents have had plans applied, and when.

This is the persisted form of an agent's improved state. Metrics producers
read it to decide whether an agent belongs to the "already improved"
population.

History file: .agent-health/history.yaml
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import yaml

from ..models.agent import Agent
from ..models.metrics import MetricsRecord
from ..models.plan import ImprovementPlan, MutationResult
from .config import CONFIG_DIR


def _history_path(project_path: Path) -> Path:
    return project_path / CONFIG_DIR / "history.yaml"


def load_history(project_path: Path) -> dict:
    """Load improvement history from .agent-health/history.yaml."""
    history_path = _history_path(project_path)
    if not history_path.exists():
        return {"improvements": []}
    try:
        content = history_path.read_text(encoding="utf-8-sig")
        data = yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError):
        return {"improvements": []}
    if not isinstance(data, dict):
        return {"improvements": []}
    data.setdefault("improvements", [])
    return data


def save_history(project_path: Path, history: dict) -> Path:
    """Save improvement history to .agent-health/history.yaml."""
    history_path = _history_path(project_path)
    history_path.parent.mkdir(parents=True, exist_ok=True)

    content = yaml.dump(
        history,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=120,
    )
    history_path.write_text(content, encoding="utf-8")
    return history_path


def record_improvement(
    project_path: Path,
    plan: ImprovementPlan,
    result: MutationResult,
) -> dict:
    """Append one plan application (successful or not) to the history."""
    history = load_history(project_path)

    entry = {
        "agent": plan.agent.email,
        "name": plan.agent.name,
        "role": plan.agent.role,
        "document_id": result.document_id,
        "status": result.status.value,
        "applied": result.success,
        "current_score": round(plan.current_score, 2),
        "target_score": round(plan.target_score, 2),
        "root_causes": [c.category.value for c in plan.root_causes],
        "recommendations": [r.title for r in plan.recommendations],
        "error": result.error,
        "recorded_at": result.timestamp.strftime("%Y-%m-%dT%H:%M:%S"),
    }

    history["improvements"].append(entry)
    save_history(project_path, history)
    return entry


def improved_agents(project_path: Path) -> dict[str, datetime]:
    """Map of agent email to the time its document was last updated."""
    improved: dict[str, datetime] = {}
    for entry in load_history(project_path).get("improvements", []):
        if not entry.get("applied"):
            continue
        email = str(entry.get("agent", "")).lower()
        try:
            when = datetime.fromisoformat(str(entry.get("recorded_at", "")))
        except ValueError:
            continue
        if email and (email not in improved or when > improved[email]):
            improved[email] = when
    return improved


def apply_improvement_state(
    records: Iterable[MetricsRecord],
    project_path: Path,
) -> list[Agent]:
    """Agents for ``records`` with ``last_improved_at`` filled from history."""
    improved = improved_agents(project_path)
    agents = []
    for record in records:
        agent = record.agent
        agent.last_improved_at = improved.get(agent.email.lower())
        agents.append(agent)
    return agents


def list_improvements(project_path: Path, agent: Optional[str] = None) -> list[dict]:
    entries = load_history(project_path).get("improvements", [])
    if agent:
        entries = [e for e in entries if str(e.get("agent", "")).lower() == agent.lower()]
    return entries
