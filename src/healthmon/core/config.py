"""3-layer configuration system for the health monitor.

Loads and merges configuration from:
1. Default settings (built-in)
2. Project config (.agent-health/config.yaml)
3. CLI parameters (override)
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Optional

import yaml

CONFIG_DIR = ".agent-health"

DEFAULT_CONFIG: dict = {
    "project": {
        "name": "",
    },
    "scoring": {
        "min_commits_per_window": 5,
        "min_prs_per_window": 2,
        "review_target": 3,
        "critical_overall_threshold": 60,
        "warning_overall_threshold": 80,
        "sub_score_trigger_threshold": 60,
        "bug_alert_count": 2,
        "tech_debt_alert": 50,
    },
    "recommendations": {
        "commit_goal": 12,
        "commit_floor": 5,
        "product_owner_commit_floor": 3,
        "review_goal": 5,
        "review_floor": 3,
    },
    "planning": {
        "target_increment": 25,
        "target_cap": 85,
    },
    "agents": {
        "definitions_dir": ".claude/agents",
        "parallel": False,
        "max_workers": 4,
    },
    "pipeline": {
        "focus": "lowest",
        "auto_apply": False,
    },
    "output": {
        "format": "markdown",
    },
    "ci": {
        "exit_codes": {"ok": 0, "failed": 1, "critical": 2},
    },
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Arrays are replaced, not merged."""
    result = {}
    for key in base:
        result[key] = base[key]
    for key, value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def load_project_config(project_path: Path) -> dict:
    """Load project configuration from .agent-health/config.yaml."""
    config_path = project_path / CONFIG_DIR / "config.yaml"
    if not config_path.exists():
        return {}
    try:
        content = config_path.read_text(encoding="utf-8-sig")  # utf-8-sig strips BOM
        data = yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def get_effective_config(
    project_path: Path,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration for an analysis run."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    project_config = load_project_config(project_path)
    if project_config:
        config = deep_merge(config, project_config)

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    config["_project_path"] = str(project_path)

    return config


def get_definitions_dir(config: dict) -> Path:
    """Resolve the agent definitions directory against the project path."""
    project_path = Path(config.get("_project_path", "."))
    definitions = config.get("agents", {}).get("definitions_dir", ".claude/agents")
    return project_path / definitions
