"""Agent definitions: the demo team and detection of definition documents.

Definition documents are markdown files, one per agent, typically under
``.claude/agents/``. Identity fields are read from ``**Name**:``,
``**Role**:`` and ``**Email**:`` lines.
"""

from __future__ import annotations

import re
from pathlib import Path

from rich.console import Console

from ..models.agent import Agent, AgentDefinition

console = Console()

DEMO_TEAM: list[dict] = [
    {
        "name": "Product Owner AI",
        "email": "po-agent@agents.demo",
        "role": "Product Owner",
        "base_performance": 0.85,
    },
    {
        "name": "Backend AI",
        "email": "backend-agent@agents.demo",
        "role": "Backend Developer",
        "base_performance": 0.45,
    },
    {
        "name": "Frontend AI",
        "email": "frontend-agent@agents.demo",
        "role": "Frontend Developer",
        "base_performance": 0.75,
    },
    {
        "name": "DevOps AI",
        "email": "devops-agent@agents.demo",
        "role": "DevOps Engineer",
        "base_performance": 0.70,
    },
]

DEFAULT_ROLE = "Developer"
FALLBACK_EMAIL_DOMAIN = "agents.local"

_NAME_RE = re.compile(r"\*\*Name\*\*:\s*(.+)")
_ROLE_RE = re.compile(r"\*\*Role\*\*:\s*(.+)")
_EMAIL_RE = re.compile(r"\*\*(?:GitHub )?Email\*\*:\s*(.+)")

# Content keywords used when a definition has no explicit role line.
_ROLE_HINTS: list[tuple[str, tuple[str, ...]]] = [
    ("Frontend Developer", ("frontend", "front-end", "ui")),
    ("Backend Developer", ("backend", "back-end", "api")),
    ("Product Owner", ("product owner", "backlog")),
    ("DevOps Engineer", ("devops", "infrastructure")),
]


def _infer_role(content: str) -> str:
    lowered = content.lower()
    for role, hints in _ROLE_HINTS:
        for hint in hints:
            if re.search(rf"\b{re.escape(hint)}\b", lowered):
                return role
    return DEFAULT_ROLE


def parse_agent_definition(path: Path) -> AgentDefinition:
    """Extract agent identity from one definition document."""
    content = path.read_text(encoding="utf-8-sig")
    stem = path.stem

    name_match = _NAME_RE.search(content)
    if name_match:
        name = name_match.group(1).strip()
    else:
        name = " ".join(w.capitalize() for w in stem.split("-") if w)

    role_match = _ROLE_RE.search(content)
    role = role_match.group(1).strip() if role_match else _infer_role(content)

    email_match = _EMAIL_RE.search(content)
    email = email_match.group(1).strip() if email_match else f"{stem}@{FALLBACK_EMAIL_DOMAIN}"

    return AgentDefinition(
        agent=Agent(name=name, email=email, role=role),
        document_id=stem,
        path=str(path),
    )


def detect_agents(definitions_dir: Path) -> list[AgentDefinition]:
    """Find agent definition documents, sorted by file name."""
    if not definitions_dir.is_dir():
        return []

    definitions = []
    for path in sorted(definitions_dir.glob("*.md")):
        if path.name.lower() == "readme.md":
            continue
        try:
            definitions.append(parse_agent_definition(path))
        except UnicodeDecodeError:
            console.print(f"  [yellow]WARN[/yellow] Skipping {path.name}: not valid UTF-8")
    return definitions


def document_ids_by_email(definitions: list[AgentDefinition]) -> dict[str, str]:
    return {d.agent.email.lower(): d.document_id for d in definitions}
