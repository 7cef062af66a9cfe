"""
Life Planner — Task completeness check.

Stops task creation when the message is only a trigger phrase ("add task")
instead of an actual task description.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from src.core.fallback import Stage, StagesExhausted, run_stages
from src.core.llm import clean_response, complete

logger = logging.getLogger(__name__)

BARE_TASK_TRIGGERS = ("add task", "create task", "new task", "task")
MIN_MESSAGE_LENGTH = 11
SHORT_MESSAGE_LENGTH = 20


@dataclass(frozen=True)
class Completeness:
    has_enough_info: bool
    reason: str


_CHECK_PROMPT = """\
You review task requests sent to a personal planner.

Decide whether the user's message contains enough information to create a task:
- Does it have a clear task description/title? (not just "add task" or "create task")
- Is it a specific, actionable task?

Respond with ONLY a JSON object:
{"hasEnoughInfo": true or false, "reason": "brief explanation"}
"""


def parse_completeness(raw: str) -> Completeness:
    """Strictly parse the LLM's JSON verdict. Raises ValueError if malformed."""
    data = json.loads(clean_response(raw))
    if not isinstance(data, dict) or not isinstance(data.get("hasEnoughInfo"), bool):
        raise ValueError(f"Malformed completeness reply: {raw!r}")
    reason = data.get("reason", "")
    return Completeness(has_enough_info=data["hasEnoughInfo"], reason=str(reason or ""))


def heuristic_completeness(message: str) -> Completeness:
    """Deterministic fallback used when the LLM can't be asked."""
    lowered = message.lower().strip()
    is_just_keyword = any(
        lowered == trigger
        or lowered == f"{trigger}:"
        or (lowered.startswith(f"{trigger} ") and len(lowered) < SHORT_MESSAGE_LENGTH)
        for trigger in BARE_TASK_TRIGGERS
    )
    if is_just_keyword:
        return Completeness(False, "Only keywords provided, no task description")
    if len(lowered) < MIN_MESSAGE_LENGTH:
        return Completeness(False, "Message too short to describe a task")
    return Completeness(True, "Unable to determine")


async def _check_with_llm(message: str) -> Completeness:
    raw = await complete(
        [
            {"role": "system", "content": _CHECK_PROMPT},
            {"role": "user", "content": message},
        ],
        max_tokens=100,
        response_format="json",
    )
    logger.debug("LLM completeness reply: %r", raw)
    return parse_completeness(raw)


async def check_completeness(message: str) -> Completeness:
    """Judge whether ``message`` describes an actual task. Never raises."""
    try:
        result = await run_stages(
            "completeness",
            [
                Stage("llm", lambda: _check_with_llm(message)),
                Stage("heuristic", lambda: heuristic_completeness(message)),
            ],
        )
    except StagesExhausted as exc:
        logger.error("Completeness check failed entirely: %s", exc)
        result = Completeness(True, "Unable to determine")
    logger.info("Completeness for %r: %s (%s)", message[:80], result.has_enough_info, result.reason)
    return result
