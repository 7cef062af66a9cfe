"""
Life Planner — Persisted records.

What the stores hand back after saving a draft. Drafts are ephemeral;
these records are owned by whichever store wrote them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


def new_record_id() -> str:
    return uuid.uuid4().hex[:12]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class TaskRecord:
    """A to-do item created from chat."""

    id: str
    title: str
    due_date: str | None = None      # ISO date YYYY-MM-DD
    due_time: str | None = None      # HH:MM
    due_at: str | None = None        # ISO 8601 instant with offset, set with due_time
    priority: str = "none"           # "high" | "low" | "none"
    category: str = ""
    completed: bool = False
    user_id: str | None = None       # None → anonymous fallback store
    created_at: str = ""


@dataclass
class EventRecord:
    """A calendar entry. start / end are ISO 8601 instants with offset."""

    id: str
    summary: str
    start: str
    end: str
    category: str
    description: str = ""
    location: str = ""
    user_id: str | None = None
    created_at: str = ""


@dataclass
class Milestone:
    id: int                          # 1-based position within the goal
    text: str
    completed: bool = False


@dataclass
class GoalRecord:
    """A goal or habit with ordered milestones."""

    id: str
    title: str
    type: str = "goal"               # "goal" | "habit"
    category: str = "work"
    target: str | None = None
    deadline: str | None = None      # human-readable, e.g. "end of June"
    milestones: list[Milestone] = field(default_factory=list)
    progress: int = 0                # percent
    user_id: str | None = None
    created_at: str = ""
