"""
Life Planner — Intent Classifier.

Decides which kind of record, if any, a chat message asks for. The LLM is
asked first; keyword matching takes over whenever the LLM is unavailable or
fails, so classification never raises.
"""

from __future__ import annotations

import logging
from enum import Enum

from src.core.fallback import Stage, StagesExhausted, run_stages
from src.core.llm import complete

logger = logging.getLogger(__name__)


class Intent(Enum):
    TASK = "task"
    EVENT = "event"
    GOAL = "goal"
    CHAT = "chat"


TASK_TRIGGERS = ("add task", "create task", "new task", "todo", "remind me", "task:")
EVENT_TRIGGERS = (
    "add event", "create event", "schedule", "meeting", "appointment", "calendar", "event:",
)
GOAL_TRIGGERS = (
    "add goal", "create goal", "new goal", "set goal",
    "add habit", "create habit", "new habit", "goal:", "habit:",
)

_KEYWORD_TABLE: tuple[tuple[Intent, tuple[str, ...]], ...] = (
    (Intent.TASK, TASK_TRIGGERS),
    (Intent.EVENT, EVENT_TRIGGERS),
    (Intent.GOAL, GOAL_TRIGGERS),
)

_INTENT_PROMPT = """\
Analyze the user's message and decide whether they want to:
1. Create a task/todo (keywords: {task})
2. Create a calendar event (keywords: {event})
3. Create a goal or habit (keywords: {goal})
4. Just chat (anything else)

Respond with ONLY one word: "task", "event", "goal", or "chat".
"""


def _system_prompt() -> str:
    return _INTENT_PROMPT.format(
        task=", ".join(TASK_TRIGGERS),
        event=", ".join(EVENT_TRIGGERS),
        goal=", ".join(GOAL_TRIGGERS),
    )


def intent_from_reply(reply: str) -> Intent:
    """Map a free-form LLM reply to an intent by substring, task first."""
    lowered = reply.strip().lower()
    for intent in (Intent.TASK, Intent.EVENT, Intent.GOAL):
        if intent.value in lowered:
            return intent
    return Intent.CHAT


def intent_from_keywords(message: str) -> Intent:
    """Deterministic fallback: trigger-phrase membership, task → event → goal."""
    lowered = message.lower()
    for intent, triggers in _KEYWORD_TABLE:
        if any(trigger in lowered for trigger in triggers):
            return intent
    return Intent.CHAT


async def _classify_with_llm(message: str) -> Intent:
    raw = await complete(
        [
            {"role": "system", "content": _system_prompt()},
            {"role": "user", "content": message},
        ],
        max_tokens=10,
    )
    logger.debug("LLM intent reply: %r", raw)
    return intent_from_reply(raw)


async def classify_intent(message: str) -> Intent:
    """Return the intent of ``message``. Never raises."""
    try:
        intent = await run_stages(
            "intent",
            [
                Stage("llm", lambda: _classify_with_llm(message)),
                Stage("keywords", lambda: intent_from_keywords(message)),
            ],
        )
    except StagesExhausted as exc:
        logger.error("Intent classification failed entirely: %s", exc)
        intent = Intent.CHAT
    logger.info("Intent for %r: %s", message[:80], intent.value)
    return intent
