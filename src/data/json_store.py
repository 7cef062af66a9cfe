"""
Life Planner — Local JSON record store.

The anonymous fallback store: records written here carry no user id. One
JSON array per record kind lives in the configured directory.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict
from pathlib import Path

from src.data.models import (
    EventRecord,
    GoalRecord,
    Milestone,
    TaskRecord,
    new_record_id,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


class JsonRecordStore:
    """File-backed storage for tasks, events and goals without identity."""

    def __init__(self, data_dir: str | None = None) -> None:
        if data_dir is None:
            from src.config import settings
            data_dir = settings.FALLBACK_DATA_DIR

        self._dir = Path(data_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, kind: str) -> Path:
        return self._dir / f"{kind}.json"

    def _read(self, kind: str) -> list[dict]:
        path = self._path(kind)
        if not path.exists():
            return []
        content = path.read_text(encoding="utf-8")
        if not content.strip():
            return []
        data = json.loads(content)
        if not isinstance(data, list):
            raise ValueError(f"{path} does not contain a JSON array")
        return data

    def _append(self, kind: str, record: dict) -> None:
        with self._lock:
            items = self._read(kind)
            items.append(record)
            self._path(kind).write_text(json.dumps(items, indent=2), encoding="utf-8")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_task(
        self,
        title: str,
        due_date: str | None = None,
        due_time: str | None = None,
        due_at: str | None = None,
        priority: str = "none",
        category: str = "",
    ) -> TaskRecord:
        task = TaskRecord(
            id=new_record_id(), title=title, due_date=due_date, due_time=due_time, due_at=due_at,
            priority=priority, category=category, created_at=utc_now_iso(),
        )
        self._append("tasks", asdict(task))
        logger.info("Task added to local store: %s '%s'", task.id, title)
        return task

    def add_event(
        self,
        summary: str,
        start: str,
        end: str,
        category: str,
        description: str = "",
        location: str = "",
    ) -> EventRecord:
        event = EventRecord(
            id=new_record_id(), summary=summary, start=start, end=end, category=category,
            description=description, location=location, created_at=utc_now_iso(),
        )
        self._append("events", asdict(event))
        logger.info("Event added to local store: %s '%s' at %s", event.id, summary, start)
        return event

    def add_goal(
        self,
        title: str,
        goal_type: str = "goal",
        category: str = "work",
        target: str | None = None,
        deadline: str | None = None,
        milestones: list[str] | None = None,
    ) -> GoalRecord:
        goal = GoalRecord(
            id=new_record_id(), type=goal_type, title=title, category=category,
            target=target, deadline=deadline,
            milestones=[Milestone(id=i, text=t) for i, t in enumerate(milestones or [], start=1)],
            created_at=utc_now_iso(),
        )
        self._append("goals", asdict(goal))
        logger.info("Goal added to local store: %s '%s' (%s)", goal.id, title, goal_type)
        return goal

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_tasks(self) -> list[TaskRecord]:
        return [TaskRecord(**item) for item in self._read("tasks")]

    def list_events(self) -> list[EventRecord]:
        return [EventRecord(**item) for item in self._read("events")]

    def list_goals(self) -> list[GoalRecord]:
        goals = []
        for item in self._read("goals"):
            milestones = [Milestone(**m) for m in item.pop("milestones", [])]
            goals.append(GoalRecord(milestones=milestones, **item))
        return goals
