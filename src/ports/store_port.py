"""Store ports — abstract interfaces for persisting drafts.

Core modules depend on these protocols, never on a specific backend.
"""

from __future__ import annotations

from typing import Protocol

from src.core.drafts import EventDraft, GoalDraft, TaskDraft
from src.data.models import EventRecord, GoalRecord, TaskRecord


class PersistenceError(Exception):
    """Raised when any store operation fails."""


class ActionStore(Protocol):
    """Durable store scoped to an authenticated user."""

    async def create_task(self, identity: str, draft: TaskDraft) -> TaskRecord: ...

    async def create_event(self, identity: str, draft: EventDraft) -> EventRecord: ...

    async def create_goal(self, identity: str, draft: GoalDraft) -> GoalRecord: ...


class FallbackStore(Protocol):
    """Store used without an identity, and when the durable store fails."""

    async def create_task(self, draft: TaskDraft) -> TaskRecord: ...

    async def create_event(self, draft: EventDraft) -> EventRecord: ...

    async def create_goal(self, draft: GoalDraft) -> GoalRecord: ...
