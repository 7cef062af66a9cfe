"""
Life Planner — Ordered fallback stages.

A component with a primary path and one or more fallbacks describes them as
an ordered list of named stages. Each stage is attempted in turn and yields a
tagged StageResult; the runner moves on to the next stage on a recoverable
failure and only raises once every stage has failed.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

StageFn = Callable[[], Any]


@dataclass(frozen=True)
class Stage(Generic[T]):
    name: str
    run: StageFn


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Outcome of a single stage: a value, or the error that stopped it."""

    stage: str
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class StagesExhausted(Exception):
    """Raised when every stage of a fallback chain failed."""

    def __init__(self, label: str, results: list[StageResult]) -> None:
        self.label = label
        self.results = results
        reasons = "; ".join(f"{r.stage}: {r.error}" for r in results)
        super().__init__(f"{label}: all stages failed ({reasons})")

    @property
    def last_error(self) -> Exception | None:
        return self.results[-1].error if self.results else None


async def attempt(stage: Stage[T]) -> StageResult[T]:
    """Run one stage, converting any exception into a failed StageResult."""
    try:
        value = stage.run()
        if inspect.isawaitable(value):
            value = await value
        return StageResult(stage=stage.name, value=value)
    except Exception as exc:
        return StageResult(stage=stage.name, error=exc)


async def run_stages(label: str, stages: Sequence[Stage[T]]) -> T:
    """Return the value of the first stage that succeeds.

    Raises StagesExhausted when all stages fail.
    """
    failures: list[StageResult[Any]] = []
    for stage in stages:
        result = await attempt(stage)
        if result.ok:
            if failures:
                logger.info("%s: fell back to stage '%s'", label, stage.name)
            return result.value
        logger.warning("%s: stage '%s' failed: %s", label, stage.name, result.error)
        failures.append(result)
    raise StagesExhausted(label, failures)
