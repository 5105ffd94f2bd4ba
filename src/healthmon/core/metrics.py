"""Metrics loading: turn a producer payload into validated records.

Accepts either a bare list of records or the scraper payload
``{"success": true, "agents": [...]}``, from JSON or YAML. Invalid entries
are rejected before scoring, never coerced.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..models.metrics import MetricsRecord
from .errors import InvalidMetricsRecord


def _format_errors(exc: ValidationError) -> list[str]:
    errors = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        errors.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid"))
    return errors


def validate_record(data: Any, index: int | None = None) -> MetricsRecord:
    if isinstance(data, MetricsRecord):
        return data
    if not isinstance(data, dict):
        label = f" #{index}" if index is not None else ""
        raise InvalidMetricsRecord(f"Metrics record{label} is not a mapping", index=index)
    try:
        return MetricsRecord.model_validate(data)
    except ValidationError as e:
        label = data.get("email") or data.get("name") or f"#{index}"
        errors = _format_errors(e)
        raise InvalidMetricsRecord(
            f"Invalid metrics record for {label}: {'; '.join(errors)}",
            index=index,
            errors=errors,
        ) from e


def parse_metrics(payload: Any) -> list[MetricsRecord]:
    """Validate every entry of a producer payload."""
    if isinstance(payload, dict):
        if payload.get("success") is False:
            raise InvalidMetricsRecord(
                f"Metrics producer failed: {payload.get('error', 'unknown error')}"
            )
        entries = payload.get("agents")
        if entries is None:
            raise InvalidMetricsRecord("Metrics payload has no 'agents' list")
    else:
        entries = payload

    if not isinstance(entries, list):
        raise InvalidMetricsRecord("Metrics payload must be a list of records")

    records = [validate_record(entry, i) for i, entry in enumerate(entries)]

    seen: set[tuple[str, str]] = set()
    for i, record in enumerate(records):
        key = (record.email.lower(), record.window)
        if key in seen:
            raise InvalidMetricsRecord(
                f"Duplicate metrics record for {record.email} in window {record.window}",
                index=i,
            )
        seen.add(key)

    return records


def load_metrics_file(path: Path) -> list[MetricsRecord]:
    """Load records from a .json, .yaml or .yml file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise InvalidMetricsRecord(f"Cannot read metrics file {path.name}: {e.strerror}") from e
    except UnicodeDecodeError as e:
        raise InvalidMetricsRecord(f"Metrics file {path.name} is not valid UTF-8: {e.reason}") from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            payload = yaml.safe_load(text)
        else:
            payload = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidMetricsRecord(f"Malformed metrics file {path.name}: {e}") from e

    return parse_metrics(payload)


def export_metrics_json(records: list[MetricsRecord], output_path: Path) -> Path:
    """Write records in the producer payload shape."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "success": True,
        "agents": [r.model_dump(mode="json") for r in records],
    }
    output_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return output_path
