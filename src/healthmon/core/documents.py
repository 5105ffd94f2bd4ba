"""Document mutator: write an improvement plan into an agent definition.

The plan is rendered to markdown here and only here. The rendered block is
merged under a fixed marker heading, so re-applying a plan replaces the
previous section instead of adding a second one. Everything outside the
marker section is preserved byte for byte.
"""

from __future__ import annotations

import hashlib
import re
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from rich.console import Console

from ..models.agent import Agent
from ..models.plan import ImprovementPlan, MutationResult, MutationStatus
from ..utils.sanitize import sanitize_error
from .errors import DocumentNotFound, DocumentUnreadable, DocumentWriteConflict

console = Console()

IMPROVEMENT_MARKER = "## Performance Improvement Plan"

_HEADING_RE = re.compile(r"^(#{1,6})\s")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "agent"


def document_id_for(agent: Agent) -> str:
    """Stable document id: ``{email local part}-agent``."""
    if "@" in agent.email:
        return f"{slugify(agent.email.split('@')[0])}-agent"
    return f"{slugify(agent.name)}-agent"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_instruction_block(plan: ImprovementPlan) -> str:
    """Render the plan as the markdown section stored in the definition."""
    applied = plan.created_at.strftime("%Y-%m-%d")
    lines: list[str] = [
        IMPROVEMENT_MARKER,
        "",
        f"*Applied: {applied} by Agent Health Monitor*",
        "",
        f"**Current Health Score**: {round(plan.current_score)}/100",
        f"**Target Score**: {round(plan.target_score)}/100",
        "",
        "### Critical Areas for Improvement",
    ]
    for cause in plan.root_causes:
        lines.append(
            f"- **{cause.category.value}** ({round(cause.score)}/100, "
            f"{cause.severity.value}): {', '.join(cause.issues)}"
        )

    if plan.recommendations:
        lines.append("")
        lines.append("### Improvement Actions")
        for rec in plan.recommendations:
            score = next(
                (c.score for c in plan.root_causes if c.category == rec.category), None
            )
            heading = f"#### {rec.title}"
            if score is not None:
                heading += f" (Current: {round(score)}/100)"
            lines.append("")
            lines.append(heading)
            lines.append(f"*Priority: {rec.priority.value}. Expected impact: {rec.expected_impact}*")
            for action in rec.actions:
                lines.append(f"- {action.render()}")

        lines.append("")
        lines.append("### New Guidelines")
        for rec in plan.recommendations:
            for instruction in rec.instructions:
                lines.append(f"- {instruction}")

    lines.append("")
    lines.append(
        f"*Expected: +{plan.expected_impact.estimated_score_increase} points in "
        f"{plan.expected_impact.time_to_improvement} "
        f"(confidence: {plan.expected_impact.confidence})*"
    )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Section merge
# ---------------------------------------------------------------------------


def find_improvement_sections(content: str) -> list[tuple[int, int]]:
    """Return (start, end) character offsets of every marker section.

    A section runs from the marker line to the next level 1 or 2 heading, or
    to the end of the document. Headings inside fenced code blocks are
    ignored.
    """
    sections: list[tuple[int, int]] = []
    fence: Optional[str] = None
    start: Optional[int] = None
    offset = 0

    for line in content.splitlines(keepends=True):
        stripped = line.rstrip("\r\n")
        fence_match = _FENCE_RE.match(stripped)
        if fence is not None:
            # Only a bare run of the opening character, at least as long, closes
            if (
                fence_match
                and fence_match.group(1)[0] == fence[0]
                and len(fence_match.group(1)) >= len(fence)
                and not fence_match.group(2).strip()
            ):
                fence = None
        elif fence_match and not (
            fence_match.group(1)[0] == "`" and "`" in fence_match.group(2)
        ):
            fence = fence_match.group(1)
        else:
            heading = _HEADING_RE.match(stripped)
            if heading and len(heading.group(1)) <= 2:
                if start is not None:
                    sections.append((start, offset))
                    start = None
                if stripped.rstrip() == IMPROVEMENT_MARKER:
                    start = offset
        offset += len(line)

    if start is not None:
        sections.append((start, len(content)))
    return sections


def merge_improvement_section(content: str, block: str) -> tuple[str, bool]:
    """Insert or replace the improvement section.

    Returns (new_content, replaced).
    """
    block = block.rstrip("\n")
    sections = find_improvement_sections(content)

    if not sections:
        if not content:
            return block + "\n", False
        prefix = content if content.endswith("\n") else content + "\n"
        return prefix + "\n" + block + "\n", False

    parts: list[str] = []
    cursor = 0
    for index, (start, end) in enumerate(sections):
        parts.append(content[cursor:start])
        if index == 0:
            tail = "\n\n" if end < len(content) else "\n"
            parts.append(block + tail)
        cursor = end
    parts.append(content[cursor:])
    return "".join(parts), True


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


def content_version(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for the storage that owns agent definition documents."""

    def read(self, document_id: str) -> tuple[str, str]:
        """Return (content, version).

        Raises DocumentNotFound or DocumentUnreadable.
        """
        ...

    def write(self, document_id: str, content: str, expected_version: str) -> str:
        """Replace content if still at ``expected_version``.

        Raises DocumentNotFound or DocumentWriteConflict.
        """
        ...

    def locate(self, document_id: str) -> Optional[str]: ...


class FileDocumentStore:
    """Markdown files named ``<document_id>.md`` in one directory."""

    def __init__(self, root: Path, suffix: str = ".md"):
        self.root = Path(root)
        self.suffix = suffix

    def path_for(self, document_id: str) -> Path:
        return self.root / f"{document_id}{self.suffix}"

    def locate(self, document_id: str) -> Optional[str]:
        return str(self.path_for(document_id))

    def read(self, document_id: str) -> tuple[str, str]:
        path = self.path_for(document_id)
        if not path.is_file():
            raise DocumentNotFound(document_id, str(path))
        # newline="" keeps CRLF documents byte-identical on write
        try:
            with path.open("r", encoding="utf-8", newline="") as fh:
                content = fh.read()
        except UnicodeDecodeError as e:
            raise DocumentUnreadable(document_id, e.reason) from e
        return content, content_version(content)

    def write(self, document_id: str, content: str, expected_version: str) -> str:
        current, version = self.read(document_id)
        if version != expected_version:
            raise DocumentWriteConflict(document_id)
        path = self.path_for(document_id)
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        return content_version(content)


# ---------------------------------------------------------------------------
# Mutator
# ---------------------------------------------------------------------------


class DocumentMutator:
    """Apply improvement plans, one writer at a time per document.

    Mutations for different documents may run concurrently.
    ``improved_agents`` lists the emails of agents whose documents this
    mutator has successfully updated.
    """

    def __init__(self, store: DocumentStore):
        self.store = store
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._improved: dict[str, datetime] = {}

    def _lock_for(self, document_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(document_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[document_id] = lock
            return lock

    @property
    def improved_agents(self) -> dict[str, datetime]:
        with self._locks_guard:
            return dict(self._improved)

    def _error(self, exc: Exception) -> str:
        root = getattr(self.store, "root", None)
        return sanitize_error(str(exc), root=root)

    def apply_plan(
        self,
        plan: ImprovementPlan,
        document_id: Optional[str] = None,
    ) -> MutationResult:
        """Merge the plan's instruction block into the agent's definition.

        Never raises for storage failures: the outcome is a tagged
        MutationResult so a batch can move on to the next agent.
        """
        document_id = document_id or plan.document_id or document_id_for(plan.agent)
        block = plan.instruction_block or render_instruction_block(plan)
        path = self.store.locate(document_id)

        with self._lock_for(document_id):
            try:
                content, version = self.store.read(document_id)
                new_content, replaced = merge_improvement_section(content, block)
                self.store.write(document_id, new_content, version)
            except DocumentNotFound as e:
                console.print(f"  [red]ERROR[/red] {self._error(e)}")
                return MutationResult(
                    status=MutationStatus.NOT_FOUND,
                    document_id=document_id,
                    path=path,
                    error=self._error(e),
                )
            except DocumentWriteConflict as e:
                console.print(f"  [yellow]WARN[/yellow] {self._error(e)}")
                return MutationResult(
                    status=MutationStatus.CONFLICT,
                    document_id=document_id,
                    path=path,
                    error=self._error(e),
                )
            except (OSError, DocumentUnreadable) as e:
                console.print(f"  [red]ERROR[/red] Failed to update {document_id}: {self._error(e)}")
                return MutationResult(
                    status=MutationStatus.FAILED,
                    document_id=document_id,
                    path=path,
                    error=self._error(e),
                )

        now = datetime.now()
        with self._locks_guard:
            self._improved[plan.agent.email] = now

        action = "Replaced" if replaced else "Added"
        console.print(f"  [green]OK[/green] {action} improvement plan in {document_id}")

        return MutationResult(
            status=MutationStatus.UPDATED,
            document_id=document_id,
            path=path,
            replaced=replaced,
            changes=block,
            timestamp=now,
            improved_agent=plan.agent.model_copy(update={"last_improved_at": now}),
        )
