"""
Life Planner — Draft records.

Drafts are the validated, not-yet-persisted output of extraction. They are
built and consumed inside a single process_action() call.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

CATEGORIES: tuple[str, ...] = (
    "work", "study", "personal", "leisure", "fitness", "health", "travel", "rest",
)
DEFAULT_CATEGORY = "personal"
PRIORITIES: tuple[str, ...] = ("high", "low", "none")


def coerce_category(value: object, default: str = "") -> str:
    """Return ``value`` if it names a known category, else ``default``."""
    if isinstance(value, str) and value.strip().lower() in CATEGORIES:
        return value.strip().lower()
    return default


def _not_blank(v: str) -> str:
    v2 = v.strip()
    if not v2:
        raise ValueError("must not be blank")
    return v2


class TaskDraft(BaseModel):
    title: str
    due_date: str | None = None      # YYYY-MM-DD
    due_time: str | None = None      # HH:MM, only kept alongside due_date
    due_at: datetime | None = None
    priority: Literal["high", "low", "none"] = "none"
    category: str = ""               # one of CATEGORIES or ""

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("category")
    @classmethod
    def known_category(cls, v: str) -> str:
        return coerce_category(v, default="")


class EventDraft(BaseModel):
    summary: str
    start: datetime
    end: datetime
    category: str = DEFAULT_CATEGORY
    description: str = ""
    location: str = ""

    @field_validator("summary")
    @classmethod
    def summary_not_blank(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("category")
    @classmethod
    def known_category(cls, v: str) -> str:
        return coerce_category(v, default=DEFAULT_CATEGORY)

    @model_validator(mode="after")
    def end_after_start(self) -> "EventDraft":
        if self.end <= self.start:
            raise ValueError("end must be strictly after start")
        return self


class MilestoneDraft(BaseModel):
    text: str
    completed: bool = False


class GoalDraft(BaseModel):
    type: Literal["goal", "habit"] = "goal"
    title: str
    category: str = "work"
    target: str | None = None
    deadline: str | None = None
    milestones: list[MilestoneDraft] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("category")
    @classmethod
    def known_category(cls, v: str) -> str:
        return coerce_category(v, default="work")
