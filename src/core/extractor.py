"""
Life Planner — Structured Extractor.

Brain of the capture pipeline: converts a chat message into a typed draft
(task, event or goal) using the configured LLM in JSON mode.

Every reply is validated against a fixed reply schema before any draft is
built. Bad JSON or a wrongly-shaped reply raises ParseError; a reply that
parses but lacks its required title raises DraftValidationError. Both are
recoverable and are turned into a user-facing message by the ActionService.
"""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Union

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as SchemaError

from src.core.drafts import (
    PRIORITIES,
    EventDraft,
    GoalDraft,
    MilestoneDraft,
    TaskDraft,
    coerce_category,
)
from src.core.llm import clean_response, complete
from src.core.temporal import (
    DateAnchors,
    TemporalError,
    compose_instant,
    format_clock_time,
    parse_clock_time,
    resolve_date,
)

if TYPE_CHECKING:
    from src.core.categorizer import EventCategorizer

logger = logging.getLogger(__name__)

DEFAULT_EVENT_TIME = "09:00"
DEFAULT_EVENT_DURATION = timedelta(hours=1)


class ExtractionError(Exception):
    """Extraction could not produce a draft; the message can be rephrased."""


class ParseError(ExtractionError):
    """The LLM reply was not valid JSON or did not match the reply schema."""


class DraftValidationError(ExtractionError):
    """The reply parsed but a required field was missing or blank."""


# ---------------------------------------------------------------------------
# Reply schemas: the JSON the prompts ask for
# ---------------------------------------------------------------------------


class _Reply(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TaskReply(_Reply):
    """
    {"title": "Buy groceries", "dueDate": "2024-06-02", "dueTime": "18:00",
     "priority": "none", "category": "personal"}
    """
    title: str | None = None
    dueDate: str | None = None
    dueTime: str | None = None
    priority: str | None = None
    category: str | None = None


class EventReply(_Reply):
    """
    {"summary": "Team sync", "startDate": "2024-06-02", "startTime": "14:00",
     "endDate": null, "endTime": null, "category": "work",
     "description": "", "location": ""}
    """
    summary: str | None = None
    startDate: str | None = None
    startTime: str | None = None
    endDate: str | None = None
    endTime: str | None = None
    category: str | None = None
    description: str | None = None
    location: str | None = None


class GoalReply(_Reply):
    """
    {"type": "goal", "title": "Run a marathon", "category": "fitness",
     "target": "42 km", "deadline": "October", "milestones": ["Run 10 km"]}
    """
    type: str | None = None
    title: str | None = None
    category: str | None = None
    target: Union[str, int, float, None] = None
    deadline: str | None = None
    milestones: list[Union[str, dict]] | None = None


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

_DATE_CONTEXT = """\
Today's date is {today} ({weekday}). Tomorrow's date is {tomorrow}.
Always write dates as YYYY-MM-DD and times as HH:MM in 24-hour format.
"""

_TASK_PROMPT = _DATE_CONTEXT + """
Extract task details from the user's message.

- title: the task itself (required). For "add task of running 1 mile tomorrow at 8am" the title is "running 1 mile".
- dueDate: the due date, or null if not mentioned.
- dueTime: the due time, or null if not mentioned.
- priority: "high", "low", or "none" (look for words like urgent, important, high priority, low priority).
- category: one of "work", "study", "personal", "leisure", "fitness", "health", "travel", "rest", or "" if unclear.

Respond with ONLY a JSON object in this exact format:
{{"title": "string", "dueDate": "YYYY-MM-DD" or null, "dueTime": "HH:MM" or null, "priority": "high"|"low"|"none", "category": "string"}}
"""

_EVENT_PROMPT = _DATE_CONTEXT + """
Extract calendar event details from the user's message.

- summary: the event title (required).
- startDate / startTime: when it starts. If only a time is given, use today's date.
- endDate / endTime: when it ends, or null if not mentioned.
- category: one of "work", "study", "personal", "leisure", "fitness", "health", "travel", "rest", or null if unclear.
- description, location: short strings, or "" if not mentioned.

Respond with ONLY a JSON object in this exact format:
{{"summary": "string", "startDate": "YYYY-MM-DD", "startTime": "HH:MM" or null, "endDate": "YYYY-MM-DD" or null, "endTime": "HH:MM" or null, "category": "string" or null, "description": "string", "location": "string"}}
"""

_GOAL_PROMPT = _DATE_CONTEXT + """
Extract a goal or habit from the user's message.

- type: "habit" for a recurring behaviour, otherwise "goal".
- title: what the user wants to achieve (required).
- category: one of "work", "study", "personal", "leisure", "fitness", "health", "travel", "rest".
- target: a measurable target such as "5 km" or "3 times a week", or null.
- deadline: a human-readable deadline such as "end of June", or null.
- milestones: a list of short milestone strings in order, or [].

Respond with ONLY a JSON object in this exact format:
{{"type": "goal"|"habit", "title": "string", "category": "string", "target": "string" or null, "deadline": "string" or null, "milestones": ["string"]}}
"""


def _format_prompt(template: str, anchors: DateAnchors) -> str:
    return template.format(
        today=anchors.today.isoformat(),
        weekday=anchors.today.strftime("%A"),
        tomorrow=anchors.tomorrow.isoformat(),
    )


# ---------------------------------------------------------------------------
# Shared request / parse step
# ---------------------------------------------------------------------------


async def _request(template: str, message: str, anchors: DateAnchors) -> str:
    try:
        return await complete(
            [
                {"role": "system", "content": _format_prompt(template, anchors)},
                {"role": "user", "content": message},
            ],
            max_tokens=512,
            response_format="json",
        )
    except Exception as exc:
        logger.error("Extraction request failed: %s", exc)
        raise ExtractionError(f"Generation service failed: {exc}") from exc


def parse_reply(raw: str, schema: type[_Reply]) -> _Reply:
    """Validate ``raw`` against ``schema`` in one step, or raise ParseError."""
    cleaned = clean_response(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse LLM response as JSON: %s — raw: '%s'", exc, raw)
        raise ParseError(f"Reply is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")
    try:
        return schema.model_validate(data)
    except SchemaError as exc:
        logger.error("LLM reply does not match %s: %s", schema.__name__, exc)
        raise ParseError(f"Reply does not match {schema.__name__}") from exc


def _blank(value: object) -> bool:
    return value is None or not str(value).strip()


def _optional_text(value: object) -> str | None:
    return None if _blank(value) else str(value).strip()


# ---------------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------------


def build_task_draft(reply: TaskReply, anchors: DateAnchors) -> TaskDraft:
    if _blank(reply.title):
        raise DraftValidationError("Task title is missing")

    due_date: str | None = None
    if not _blank(reply.dueDate):
        try:
            due_date = resolve_date(reply.dueDate, anchors)
        except TemporalError as exc:
            logger.warning("Dropping unparsable due date %r: %s", reply.dueDate, exc)

    due_time: str | None = None
    due_at = None
    if not _blank(reply.dueTime):
        try:
            clock = parse_clock_time(reply.dueTime)
        except TemporalError as exc:
            logger.warning("Dropping invalid due time %r: %s", reply.dueTime, exc)
        else:
            if due_date is None:
                due_date = anchors.today.isoformat()
            due_time = format_clock_time(clock)
            due_at = compose_instant(due_date, clock, anchors.tz)

    priority = (reply.priority or "none").strip().lower()
    if priority not in PRIORITIES:
        priority = "none"

    return TaskDraft(
        title=reply.title.strip(),
        due_date=due_date,
        due_time=due_time,
        due_at=due_at,
        priority=priority,
        category=coerce_category(reply.category, default=""),
    )


async def extract_task(message: str, anchors: DateAnchors) -> TaskDraft:
    raw = await _request(_TASK_PROMPT, message, anchors)
    logger.debug("LLM task reply: %s", raw)
    draft = build_task_draft(parse_reply(raw, TaskReply), anchors)
    logger.info("Extracted task %r due %s %s", draft.title, draft.due_date, draft.due_time or "")
    return draft


# ---------------------------------------------------------------------------
# Event
# ---------------------------------------------------------------------------


def build_event_draft(
    reply: EventReply,
    anchors: DateAnchors,
    categorizer: EventCategorizer,
) -> EventDraft:
    if _blank(reply.summary):
        raise DraftValidationError("Event summary is missing")

    try:
        start_date = (
            anchors.today.isoformat() if _blank(reply.startDate)
            else resolve_date(reply.startDate, anchors)
        )
        start_time = DEFAULT_EVENT_TIME if _blank(reply.startTime) else reply.startTime
        start = compose_instant(start_date, start_time, anchors.tz)

        end_date = start_date if _blank(reply.endDate) else resolve_date(reply.endDate, anchors)
        if _blank(reply.endTime):
            end_clock = (start + DEFAULT_EVENT_DURATION).time()
        else:
            end_clock = reply.endTime
        end = compose_instant(end_date, end_clock, anchors.tz)
    except TemporalError as exc:
        raise ParseError(f"Unparsable event date/time: {exc}") from exc

    if end <= start:
        logger.info("Event end %s not after start %s, using one hour", end, start)
        end = start + DEFAULT_EVENT_DURATION

    summary = reply.summary.strip()
    description = _optional_text(reply.description) or ""
    location = _optional_text(reply.location) or ""

    category = coerce_category(reply.category, default="")
    if not category:
        category = categorizer.categorize(summary, description, location)

    return EventDraft(
        summary=summary,
        start=start,
        end=end,
        category=category,
        description=description,
        location=location,
    )


async def extract_event(
    message: str,
    anchors: DateAnchors,
    categorizer: EventCategorizer,
) -> EventDraft:
    raw = await _request(_EVENT_PROMPT, message, anchors)
    logger.debug("LLM event reply: %s", raw)
    draft = build_event_draft(parse_reply(raw, EventReply), anchors, categorizer)
    logger.info("Extracted event %r %s → %s [%s]", draft.summary, draft.start, draft.end, draft.category)
    return draft


# ---------------------------------------------------------------------------
# Goal
# ---------------------------------------------------------------------------


def _milestone_text(item: str | dict) -> str:
    if isinstance(item, dict):
        item = item.get("text") or ""
    return str(item).strip()


def build_goal_draft(reply: GoalReply) -> GoalDraft:
    if _blank(reply.title):
        raise DraftValidationError("Goal title is missing")

    milestones = [
        MilestoneDraft(text=text)
        for text in (_milestone_text(m) for m in (reply.milestones or []))
        if text
    ]
    goal_type = "habit" if (reply.type or "").strip().lower() == "habit" else "goal"

    return GoalDraft(
        type=goal_type,
        title=reply.title.strip(),
        category=coerce_category(reply.category, default="work"),
        target=_optional_text(reply.target),
        deadline=_optional_text(reply.deadline),
        milestones=milestones,
    )


async def extract_goal(message: str, anchors: DateAnchors) -> GoalDraft:
    raw = await _request(_GOAL_PROMPT, message, anchors)
    logger.debug("LLM goal reply: %s", raw)
    draft = build_goal_draft(parse_reply(raw, GoalReply))
    logger.info("Extracted %s %r with %d milestones", draft.type, draft.title, len(draft.milestones))
    return draft
