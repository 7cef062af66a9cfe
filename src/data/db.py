"""
Life Planner — Per-user record database.

The durable store: tasks, events and goals created for an authenticated user
persist in SQLite. Every row is scoped to the user that created it.
"""

from __future__ import annotations

import json
import logging
import sqlite3
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


class RecordDB:
    """SQLite-backed storage for user-scoped tasks, events and goals."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the record tables if they don't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id          TEXT PRIMARY KEY,
                    user_id     TEXT NOT NULL,
                    title       TEXT NOT NULL,
                    due_date    TEXT,
                    due_time    TEXT,
                    due_at      TEXT,
                    priority    TEXT NOT NULL DEFAULT 'none',
                    category    TEXT NOT NULL DEFAULT '',
                    completed   INTEGER NOT NULL DEFAULT 0,
                    created_at  TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS events (
                    id          TEXT PRIMARY KEY,
                    user_id     TEXT NOT NULL,
                    summary     TEXT NOT NULL,
                    start_time  TEXT NOT NULL,
                    end_time    TEXT NOT NULL,
                    category    TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    location    TEXT NOT NULL DEFAULT '',
                    created_at  TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS goals (
                    id          TEXT PRIMARY KEY,
                    user_id     TEXT NOT NULL,
                    type        TEXT NOT NULL DEFAULT 'goal',
                    title       TEXT NOT NULL,
                    category    TEXT NOT NULL DEFAULT 'work',
                    target      TEXT,
                    deadline    TEXT,
                    milestones  TEXT NOT NULL DEFAULT '[]',
                    progress    INTEGER NOT NULL DEFAULT 0,
                    created_at  TEXT NOT NULL
                )
            """)
        logger.debug("Record tables initialized at %s", self._db_path)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> TaskRecord:
        return TaskRecord(
            id=row["id"],
            title=row["title"],
            due_date=row["due_date"],
            due_time=row["due_time"],
            due_at=row["due_at"],
            priority=row["priority"],
            category=row["category"],
            completed=bool(row["completed"]),
            user_id=row["user_id"],
            created_at=row["created_at"],
        )

    def add_task(
        self,
        user_id: str,
        title: str,
        due_date: str | None = None,
        due_time: str | None = None,
        due_at: str | None = None,
        priority: str = "none",
        category: str = "",
    ) -> TaskRecord:
        task = TaskRecord(
            id=new_record_id(), title=title, due_date=due_date, due_time=due_time, due_at=due_at,
            priority=priority, category=category, user_id=user_id,
            created_at=utc_now_iso(),
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO tasks
                    (id, user_id, title, due_date, due_time, due_at, priority, category, completed, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, ?)
                """,
                (task.id, user_id, title, due_date, due_time, due_at, priority, category, task.created_at),
            )
        logger.info("Task added for user %s: %s '%s'", user_id, task.id, title)
        return task

    def get_task(self, task_id: str, user_id: str) -> TaskRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE id = ? AND user_id = ?", (task_id, user_id),
            ).fetchone()
        return None if row is None else self._row_to_task(row)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_event(row: sqlite3.Row) -> EventRecord:
        return EventRecord(
            id=row["id"],
            summary=row["summary"],
            start=row["start_time"],
            end=row["end_time"],
            category=row["category"],
            description=row["description"],
            location=row["location"],
            user_id=row["user_id"],
            created_at=row["created_at"],
        )

    def add_event(
        self,
        user_id: str,
        summary: str,
        start: str,
        end: str,
        category: str,
        description: str = "",
        location: str = "",
    ) -> EventRecord:
        event = EventRecord(
            id=new_record_id(), summary=summary, start=start, end=end, category=category,
            description=description, location=location, user_id=user_id,
            created_at=utc_now_iso(),
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO events
                    (id, user_id, summary, start_time, end_time, category,
                     description, location, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    event.id, user_id, summary, start, end, category,
                    description, location, event.created_at,
                ),
            )
        logger.info("Event added for user %s: %s '%s' at %s", user_id, event.id, summary, start)
        return event

    def get_event(self, event_id: str, user_id: str) -> EventRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM events WHERE id = ? AND user_id = ?", (event_id, user_id),
            ).fetchone()
        return None if row is None else self._row_to_event(row)

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_goal(row: sqlite3.Row) -> GoalRecord:
        return GoalRecord(
            id=row["id"],
            type=row["type"],
            title=row["title"],
            category=row["category"],
            target=row["target"],
            deadline=row["deadline"],
            milestones=[Milestone(**m) for m in json.loads(row["milestones"])],
            progress=row["progress"],
            user_id=row["user_id"],
            created_at=row["created_at"],
        )

    def add_goal(
        self,
        user_id: str,
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
            user_id=user_id, created_at=utc_now_iso(),
        )
        milestones_json = json.dumps(
            [{"id": m.id, "text": m.text, "completed": m.completed} for m in goal.milestones]
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO goals
                    (id, user_id, type, title, category, target, deadline,
                     milestones, progress, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, ?)
                """,
                (
                    goal.id, user_id, goal_type, title, category, target, deadline,
                    milestones_json, goal.created_at,
                ),
            )
        logger.info("Goal added for user %s: %s '%s' (%s)", user_id, goal.id, title, goal_type)
        return goal

    def get_goal(self, goal_id: str, user_id: str) -> GoalRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM goals WHERE id = ? AND user_id = ?", (goal_id, user_id),
            ).fetchone()
        return None if row is None else self._row_to_goal(row)
