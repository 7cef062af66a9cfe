"""
Life Planner — UI-Agnostic Action Service.

Stateless service layer that turns a chat message into a saved record:
classify intent -> (tasks) check completeness -> extract draft -> save ->
return a structured ActionResult.

Each UI adapter (web chat, CLI) calls this service and renders the result in
its own way. Plain chat yields None, which is distinct from a failed action.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Callable, Union
from zoneinfo import ZoneInfo

from src.core.categorizer import CategoryModel, EventCategorizer
from src.core.completeness import check_completeness
from src.core.extractor import (
    DraftValidationError,
    ExtractionError,
    extract_event,
    extract_goal,
    extract_task,
)
from src.core.intent import Intent, classify_intent
from src.core.temporal import DateAnchors, anchors_for
from src.data.models import EventRecord, GoalRecord, TaskRecord
from src.ports.store_port import PersistenceError

if TYPE_CHECKING:
    from src.core.drafts import EventDraft, GoalDraft, TaskDraft
    from src.core.persistence import PersistenceAdapter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Response types
# ---------------------------------------------------------------------------


class ActionKind(Enum):
    TASK = "task"
    EVENT = "event"
    GOAL = "goal"


class Outcome(Enum):
    SUCCESS = "success"
    NEEDS_CLARIFICATION = "needs_clarification"
    FAILED = "failed"


Record = Union[TaskRecord, EventRecord, GoalRecord]


@dataclass
class ActionResult:
    kind: ActionKind
    outcome: Outcome
    message: str
    payload: Record | None = None

    def __post_init__(self) -> None:
        if not self.message.strip():
            raise ValueError("ActionResult.message must not be empty")

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def needs_clarification(self) -> bool:
        return self.outcome is Outcome.NEEDS_CLARIFICATION


@dataclass
class _ActionContext:
    """Per-message state threaded through the pipeline steps."""

    kind: ActionKind
    message: str
    identity: str | None
    anchors: DateAnchors
    draft: Union[TaskDraft, EventDraft, GoalDraft, None] = None


# ---------------------------------------------------------------------------
# User-facing messages
# ---------------------------------------------------------------------------

_CLARIFY_TASK = (
    "I'd be happy to add a task for you! Could you please tell me what the task is "
    "and when it's due? For example: 'Add task: Buy groceries tomorrow' or "
    "'Remind me to call mom on Friday'"
)

_MISSING_FIELD = {
    ActionKind.TASK: (
        "I'd be happy to add a task for you! Could you please tell me what the task is? "
        "For example: 'Add task: Buy groceries' or 'Remind me to call mom'"
    ),
    ActionKind.EVENT: (
        "I'd be happy to schedule an event for you! Could you please tell me what the "
        "event is and when? For example: 'Schedule meeting with team tomorrow at 2pm' "
        "or 'Add event: Doctor appointment tomorrow at 10am'"
    ),
    ActionKind.GOAL: (
        "I'd be happy to set a goal for you! Could you please tell me what you want to "
        "achieve? For example: 'New goal: Run a 10k by June' or 'Add habit: Read 20 "
        "minutes every day'"
    ),
}

_REPHRASE = {
    ActionKind.TASK: (
        "I had trouble understanding the task details. Could you please rephrase? "
        "For example: 'Add task: Buy groceries due tomorrow'"
    ),
    ActionKind.EVENT: (
        "I couldn't understand the event details. Could you please rephrase? "
        "For example: 'Schedule meeting tomorrow at 2pm'"
    ),
    ActionKind.GOAL: (
        "I couldn't understand the goal details. Could you please rephrase? "
        "For example: 'New goal: Learn Spanish, milestones: finish A1, finish A2'"
    ),
}

_SAVE_FAILED = "I understood the {kind}, but couldn't save it. Please try again."


def _success_message(kind: ActionKind, record: Record) -> str:
    if isinstance(record, TaskRecord):
        return f'Task "{record.title}" has been added!'
    if isinstance(record, EventRecord):
        return f'Event "{record.summary}" has been added to your calendar!'
    if isinstance(record, GoalRecord):
        noun = "Habit" if record.type == "habit" else "Goal"
        return f'{noun} "{record.title}" has been added!'
    return f"Your {kind.value} has been added!"


def _default_clock() -> datetime:
    from src.config import settings

    return datetime.now(ZoneInfo(settings.TIMEZONE))


def _default_categorizer() -> EventCategorizer:
    from src.config import settings

    return EventCategorizer(CategoryModel(), threshold=settings.CATEGORY_CONFIDENCE_THRESHOLD)


# ---------------------------------------------------------------------------
# ActionService
# ---------------------------------------------------------------------------


class ActionService:
    """Stateless service that orchestrates the action pipeline.

    Returns ActionResult objects — never raises to the caller.
    """

    _PIPELINES: dict[ActionKind, list[str]] = {
        ActionKind.TASK: ["_check_completeness", "_extract", "_persist"],
        ActionKind.EVENT: ["_extract", "_persist"],
        ActionKind.GOAL: ["_extract", "_persist"],
    }

    def __init__(
        self,
        persistence: PersistenceAdapter,
        categorizer: EventCategorizer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._persistence = persistence
        self._categorizer = categorizer or _default_categorizer()
        self._clock = clock or _default_clock

    # ------------------------------------------------------------------
    # Public: process a chat message
    # ------------------------------------------------------------------

    async def process_action(
        self, message: str, identity: str | None = None,
    ) -> ActionResult | None:
        """Classify ``message`` and create the record it asks for.

        Args:
            message: User's free-text chat message.
            identity: Authenticated user id, or None for anonymous use.

        Returns an ActionResult, or None when the message is plain chat.
        """
        anchors = anchors_for(self._clock())

        intent = await classify_intent(message)
        if intent is Intent.CHAT:
            return None

        ctx = _ActionContext(
            kind=ActionKind(intent.value),
            message=message,
            identity=identity,
            anchors=anchors,
        )

        try:
            for step_name in self._PIPELINES[ctx.kind]:
                result = await getattr(self, step_name)(ctx)
                if isinstance(result, ActionResult):
                    logger.info("%s action finished: %s", ctx.kind.value, result.outcome.value)
                    return result
                ctx = result
        except Exception as exc:
            logger.exception("Unexpected error in %s pipeline: %s", ctx.kind.value, exc)
            return ActionResult(ctx.kind, Outcome.FAILED, _REPHRASE[ctx.kind])

        # Every pipeline ends in _persist, which always returns a result.
        return ActionResult(ctx.kind, Outcome.FAILED, _REPHRASE[ctx.kind])

    # ------------------------------------------------------------------
    # Pipeline steps: return the context to continue, or a result to stop
    # ------------------------------------------------------------------

    async def _check_completeness(self, ctx: _ActionContext) -> _ActionContext | ActionResult:
        completeness = await check_completeness(ctx.message)
        if not completeness.has_enough_info:
            logger.info("Asking for more task details: %s", completeness.reason)
            return ActionResult(ctx.kind, Outcome.NEEDS_CLARIFICATION, _CLARIFY_TASK)
        return ctx

    async def _extract(self, ctx: _ActionContext) -> _ActionContext | ActionResult:
        try:
            if ctx.kind is ActionKind.TASK:
                ctx.draft = await extract_task(ctx.message, ctx.anchors)
            elif ctx.kind is ActionKind.EVENT:
                if not self._categorizer.model.is_ready:
                    await asyncio.to_thread(self._categorizer.model.build)
                ctx.draft = await extract_event(ctx.message, ctx.anchors, self._categorizer)
            else:
                ctx.draft = await extract_goal(ctx.message, ctx.anchors)
        except DraftValidationError as exc:
            logger.warning("%s draft incomplete: %s", ctx.kind.value, exc)
            return ActionResult(ctx.kind, Outcome.FAILED, _MISSING_FIELD[ctx.kind])
        except ExtractionError as exc:
            logger.warning("%s extraction failed: %s", ctx.kind.value, exc)
            return ActionResult(ctx.kind, Outcome.FAILED, _REPHRASE[ctx.kind])
        return ctx

    async def _persist(self, ctx: _ActionContext) -> ActionResult:
        try:
            if ctx.kind is ActionKind.TASK:
                record = await self._persistence.save_task(ctx.draft, ctx.identity)
            elif ctx.kind is ActionKind.EVENT:
                record = await self._persistence.save_event(ctx.draft, ctx.identity)
            else:
                record = await self._persistence.save_goal(ctx.draft, ctx.identity)
        except PersistenceError as exc:
            logger.error("Saving %s failed: %s", ctx.kind.value, exc)
            return ActionResult(
                ctx.kind, Outcome.FAILED, _SAVE_FAILED.format(kind=ctx.kind.value),
            )
        return ActionResult(
            ctx.kind, Outcome.SUCCESS, _success_message(ctx.kind, record), payload=record,
        )
