"""Tests for src.core.fallback — ordered fallback stages."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.core.fallback import Stage, StagesExhausted, attempt, run_stages


class TestAttempt:
    @pytest.mark.asyncio
    async def test_async_success(self):
        result = await attempt(Stage("primary", AsyncMock(return_value=42)))
        assert result.ok
        assert result.value == 42
        assert result.stage == "primary"

    @pytest.mark.asyncio
    async def test_sync_success(self):
        result = await attempt(Stage("sync", lambda: "done"))
        assert result.ok
        assert result.value == "done"

    @pytest.mark.asyncio
    async def test_failure_is_tagged(self):
        result = await attempt(Stage("primary", AsyncMock(side_effect=RuntimeError("boom"))))
        assert not result.ok
        assert isinstance(result.error, RuntimeError)
        assert result.value is None


class TestRunStages:
    @pytest.mark.asyncio
    async def test_first_success_short_circuits(self):
        second = MagicMock(return_value="fallback")
        value = await run_stages("test", [
            Stage("primary", AsyncMock(return_value="primary")),
            Stage("fallback", second),
        ])
        assert value == "primary"
        second.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_through_to_next_stage(self):
        value = await run_stages("test", [
            Stage("primary", AsyncMock(side_effect=ValueError("bad json"))),
            Stage("fallback", lambda: "fallback"),
        ])
        assert value == "fallback"

    @pytest.mark.asyncio
    async def test_falsy_value_counts_as_success(self):
        second = MagicMock(return_value="unused")
        value = await run_stages("test", [
            Stage("primary", lambda: None),
            Stage("fallback", second),
        ])
        assert value is None
        second.assert_not_called()

    @pytest.mark.asyncio
    async def test_all_fail_raises(self):
        with pytest.raises(StagesExhausted) as exc_info:
            await run_stages("test", [
                Stage("a", AsyncMock(side_effect=RuntimeError("first"))),
                Stage("b", AsyncMock(side_effect=RuntimeError("second"))),
            ])
        exc = exc_info.value
        assert [r.stage for r in exc.results] == ["a", "b"]
        assert str(exc.last_error) == "second"
        assert "first" in str(exc)
