"""
Life Planner — Persistence Adapter.

Chooses where a draft is saved. With a user identity the durable store is
tried first and the anonymous fallback store takes over on any failure;
without one only the fallback store is used. The switch is logged, never
shown to the user. PersistenceError escapes only when every store failed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from src.core.fallback import Stage, StagesExhausted, run_stages
from src.ports.store_port import PersistenceError

if TYPE_CHECKING:
    from src.core.drafts import EventDraft, GoalDraft, TaskDraft
    from src.data.models import EventRecord, GoalRecord, TaskRecord
    from src.ports.store_port import ActionStore, FallbackStore

logger = logging.getLogger(__name__)


class PersistenceAdapter:
    def __init__(self, durable: ActionStore | None, fallback: FallbackStore) -> None:
        self._durable = durable
        self._fallback = fallback

    async def save_task(self, draft: TaskDraft, identity: str | None = None) -> TaskRecord:
        return await self._save("task", draft, identity, "create_task")

    async def save_event(self, draft: EventDraft, identity: str | None = None) -> EventRecord:
        return await self._save("event", draft, identity, "create_event")

    async def save_goal(self, draft: GoalDraft, identity: str | None = None) -> GoalRecord:
        return await self._save("goal", draft, identity, "create_goal")

    async def _save(self, kind: str, draft: Any, identity: str | None, method: str) -> Any:
        stages: list[Stage] = []
        if identity:
            stages.append(Stage("durable", self._durable_call(method, identity, draft)))
        fallback_fn = getattr(self._fallback, method)
        stages.append(Stage("fallback", lambda: fallback_fn(draft)))

        try:
            record = await run_stages(f"save {kind}", stages)
        except StagesExhausted as exc:
            logger.error("Could not save %s anywhere: %s", kind, exc)
            raise PersistenceError(str(exc.last_error or exc)) from exc
        logger.info("Saved %s %s (user=%s)", kind, getattr(record, "id", "?"), getattr(record, "user_id", None))
        return record

    def _durable_call(
        self, method: str, identity: str, draft: Any,
    ) -> Callable[[], Awaitable[Any]]:
        async def call() -> Any:
            if self._durable is None:
                raise PersistenceError("Durable store not configured")
            return await getattr(self._durable, method)(identity, draft)
        return call
