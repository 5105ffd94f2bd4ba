"""Run archive: JSON records handed to the storage collaborator."""

from __future__ import annotations

import json
from pathlib import Path

from ..models.run import PipelineResult


def build_run_record(result: PipelineResult) -> dict:
    """Flat, JSON-compatible record of a whole pipeline run."""
    return {
        "version": "1.0.0",
        "run": {
            "id": result.id,
            "timestamp": result.timestamp.strftime("%Y-%m-%dT%H:%M:%S"),
            "project": result.project,
            "dryRun": result.dry_run,
            "focus": result.focus,
        },
        "analysis": result.analysis.to_record(),
        "outcomes": [o.to_record() for o in result.outcomes],
        "summary": {
            "targeted": len(result.outcomes),
            "updated": len(result.updated),
            "failed": len(result.failed),
        },
    }


def export_analysis_json(result: PipelineResult, output_path: Path) -> Path:
    """Write the run record to a JSON file (UTF-8, no BOM)."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(build_run_record(result), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return output_path


def export_analysis_archive(reports_dir: Path, result: PipelineResult) -> Path:
    """Archive a completed run into a single timestamped JSON file."""
    archive_dir = reports_dir / "archive"
    archive_dir.mkdir(parents=True, exist_ok=True)
    return export_analysis_json(result, archive_dir / f"{result.id}.json")


def list_archives(reports_dir: Path) -> list[Path]:
    archive_dir = reports_dir / "archive"
    if not archive_dir.exists():
        return []
    return sorted(archive_dir.glob("*.json"))
