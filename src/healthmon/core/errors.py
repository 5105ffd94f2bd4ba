"""Error taxonomy for the health monitor.

Scoring, ranking, diagnosis and recommendation are total over valid input.
Only loading (bad records), ranking (no agents) and the document mutator
(external storage) have failure modes.
"""

from __future__ import annotations

from typing import Any


class HealthMonitorError(Exception):
    """Base exception for all health monitor errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class InvalidMetricsRecord(HealthMonitorError):
    """Raised when a metrics record has negative counters or no agent identity."""

    def __init__(
        self,
        message: str = "Invalid metrics record",
        index: int | None = None,
        errors: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.index = index
        self.errors: list[str] = errors or []


class EmptyTeamError(HealthMonitorError):
    """Raised when ranking is attempted over zero agents."""

    def __init__(self, message: str = "Cannot rank an empty team") -> None:
        super().__init__(message)


class DocumentNotFound(HealthMonitorError):
    """Raised by a document store when the target document does not exist."""

    def __init__(self, document_id: str, path: str = "") -> None:
        super().__init__(f"Agent definition not found: {document_id}")
        self.document_id = document_id
        self.path = path


class DocumentWriteConflict(HealthMonitorError):
    """Raised when a document changed between read and write."""

    def __init__(self, document_id: str) -> None:
        super().__init__(f"Agent definition changed during update: {document_id}")
        self.document_id = document_id


class DocumentUnreadable(HealthMonitorError):
    """Raised when a document exists but cannot be decoded as text."""

    def __init__(self, document_id: str, reason: str = "") -> None:
        message = f"Agent definition is not valid UTF-8: {document_id}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.document_id = document_id
