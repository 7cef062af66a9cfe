"""Record store adapters — implement the store ports over SQLite and JSON files.

Both backends are synchronous; calls are wrapped with asyncio.to_thread so
the action pipeline never blocks the event loop. Backend failures surface as
PersistenceError.
"""

from __future__ import annotations

import asyncio
import logging

from src.core.drafts import EventDraft, GoalDraft, TaskDraft
from src.data.db import RecordDB
from src.data.json_store import JsonRecordStore
from src.data.models import EventRecord, GoalRecord, TaskRecord
from src.ports.store_port import PersistenceError

logger = logging.getLogger(__name__)


def _task_fields(draft: TaskDraft) -> dict:
    return {
        "title": draft.title,
        "due_date": draft.due_date,
        "due_time": draft.due_time,
        "due_at": draft.due_at.isoformat() if draft.due_at else None,
        "priority": draft.priority,
        "category": draft.category,
    }


def _event_fields(draft: EventDraft) -> dict:
    return {
        "summary": draft.summary,
        "start": draft.start.isoformat(),
        "end": draft.end.isoformat(),
        "category": draft.category,
        "description": draft.description,
        "location": draft.location,
    }


def _goal_fields(draft: GoalDraft) -> dict:
    return {
        "title": draft.title,
        "goal_type": draft.type,
        "category": draft.category,
        "target": draft.target,
        "deadline": draft.deadline,
        "milestones": [m.text for m in draft.milestones],
    }


class SQLiteActionStore:
    """User-scoped durable store backed by RecordDB."""

    def __init__(self, db: RecordDB | None = None) -> None:
        self._db = db or RecordDB()

    async def create_task(self, identity: str, draft: TaskDraft) -> TaskRecord:
        try:
            return await asyncio.to_thread(self._db.add_task, identity, **_task_fields(draft))
        except Exception as exc:
            raise PersistenceError(f"Failed to save task: {exc}") from exc

    async def create_event(self, identity: str, draft: EventDraft) -> EventRecord:
        try:
            return await asyncio.to_thread(self._db.add_event, identity, **_event_fields(draft))
        except Exception as exc:
            raise PersistenceError(f"Failed to save event: {exc}") from exc

    async def create_goal(self, identity: str, draft: GoalDraft) -> GoalRecord:
        try:
            return await asyncio.to_thread(self._db.add_goal, identity, **_goal_fields(draft))
        except Exception as exc:
            raise PersistenceError(f"Failed to save goal: {exc}") from exc


class JsonFallbackStore:
    """Anonymous store backed by JSON files."""

    def __init__(self, store: JsonRecordStore | None = None) -> None:
        self._store = store or JsonRecordStore()

    async def create_task(self, draft: TaskDraft) -> TaskRecord:
        try:
            return await asyncio.to_thread(self._store.add_task, **_task_fields(draft))
        except Exception as exc:
            raise PersistenceError(f"Failed to save task locally: {exc}") from exc

    async def create_event(self, draft: EventDraft) -> EventRecord:
        try:
            return await asyncio.to_thread(self._store.add_event, **_event_fields(draft))
        except Exception as exc:
            raise PersistenceError(f"Failed to save event locally: {exc}") from exc

    async def create_goal(self, draft: GoalDraft) -> GoalRecord:
        try:
            return await asyncio.to_thread(self._store.add_goal, **_goal_fields(draft))
        except Exception as exc:
            raise PersistenceError(f"Failed to save goal locally: {exc}") from exc
