"""
Life Planner — Temporal resolution.

Turns relative date tokens ("today", "tomorrow") and 24-hour clock strings
into absolute values. Everything here is pure: the reference instant is
always passed in by the caller, never read from the system clock.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TemporalError(ValueError):
    """Raised when a date or time string cannot be resolved."""


@dataclass(frozen=True)
class DateAnchors:
    """Absolute dates substituted for relative tokens, fixed per invocation."""

    now: datetime
    today: date
    tomorrow: date

    @property
    def tz(self) -> tzinfo | None:
        return self.now.tzinfo


def anchors_for(now: datetime) -> DateAnchors:
    """Compute the "today" / "tomorrow" anchors in the calendar of ``now``."""
    today = now.date()
    return DateAnchors(now=now, today=today, tomorrow=today + timedelta(days=1))


def resolve_date(token: str, anchors: DateAnchors) -> str:
    """Return the canonical YYYY-MM-DD for ``today``, ``tomorrow`` or an ISO date."""
    value = (token or "").strip().lower()
    if value == "today":
        return anchors.today.isoformat()
    if value == "tomorrow":
        return anchors.tomorrow.isoformat()
    if _DATE_RE.match(value):
        try:
            return date.fromisoformat(value).isoformat()
        except ValueError as exc:
            raise TemporalError(f"Invalid calendar date: {token!r}") from exc
    raise TemporalError(f"Unrecognised date: {token!r}")


def parse_clock_time(value: str) -> time:
    """Parse a 24-hour ``HH:MM`` string (seconds tolerated and discarded)."""
    match = _CLOCK_RE.match((value or "").strip())
    if not match:
        raise TemporalError(f"Invalid time format: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if not 0 <= hours < 24 or not 0 <= minutes < 60:
        raise TemporalError(f"Time out of range: {value!r}")
    return time(hours, minutes)


def format_clock_time(value: time) -> str:
    return value.strftime("%H:%M")


def compose_instant(day: str | date, clock: str | time, tz: tzinfo | None) -> datetime:
    """Combine a date and a clock time into an absolute instant in ``tz``."""
    if isinstance(day, str):
        try:
            day = date.fromisoformat(day)
        except ValueError as exc:
            raise TemporalError(f"Invalid calendar date: {day!r}") from exc
    if isinstance(clock, str):
        clock = parse_clock_time(clock)
    return datetime.combine(day, clock, tzinfo=tz)
