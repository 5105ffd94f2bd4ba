"""Agent data models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Agent(BaseModel):
    name: str
    email: str
    role: str = "Developer"
    last_improved_at: Optional[datetime] = None

    @property
    def has_been_improved(self) -> bool:
        return self.last_improved_at is not None


class AgentDefinition(BaseModel):
    """An agent definition document found on disk."""

    agent: Agent
    document_id: str
    path: str
