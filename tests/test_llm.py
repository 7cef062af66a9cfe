"""Tests for src.core.llm — provider routing and reply cleanup."""

import pytest
from unittest.mock import AsyncMock, patch

from src.config import settings
from src.core import llm
from src.core.llm import ServiceUnavailable, clean_response, complete


@pytest.fixture(autouse=True)
def _reset_provider():
    with patch.object(llm, "_provider_fn", None), \
         patch.object(llm, "_model", ""), \
         patch.object(llm, "_api_key", ""):
        yield


class TestSelectProvider:
    @pytest.mark.asyncio
    async def test_no_key_is_unavailable(self):
        with patch.object(settings, "LLM_API_KEY", ""):
            with pytest.raises(ServiceUnavailable):
                await complete([{"role": "user", "content": "hi"}])

    @pytest.mark.asyncio
    async def test_unknown_provider_is_unavailable(self):
        with patch.object(settings, "LLM_API_KEY", "k"), \
             patch.object(settings, "LLM_PROVIDER", "mystery"):
            with pytest.raises(ServiceUnavailable, match="mystery"):
                await complete([{"role": "user", "content": "hi"}])

    @pytest.mark.asyncio
    async def test_routes_to_configured_provider(self):
        provider = AsyncMock(return_value="task")
        with patch.object(settings, "LLM_API_KEY", "k"), \
             patch.object(settings, "LLM_PROVIDER", "openai"), \
             patch.object(settings, "LLM_MODEL", ""), \
             patch.dict(llm._PROVIDERS, {"openai": (provider, "gpt-default")}):
            reply = await complete(
                [
                    {"role": "system", "content": "classify"},
                    {"role": "user", "content": "add task"},
                ],
                max_tokens=10,
                response_format="json",
            )

        assert reply == "task"
        provider.assert_awaited_once_with(
            "k", "gpt-default", "classify", [{"role": "user", "content": "add task"}], 10, True,
        )

    @pytest.mark.asyncio
    async def test_model_override_and_no_system(self):
        provider = AsyncMock(return_value="ok")
        with patch.object(settings, "LLM_API_KEY", "k"), \
             patch.object(settings, "LLM_PROVIDER", "gemini"), \
             patch.object(settings, "LLM_MODEL", "custom-model"), \
             patch.dict(llm._PROVIDERS, {"gemini": (provider, "gemini-default")}):
            await complete([{"role": "user", "content": "hi"}])

        args = provider.call_args.args
        assert args[1] == "custom-model"
        assert args[2] == ""
        assert args[5] is False


class TestCleanResponse:
    @pytest.mark.parametrize("raw,expected", [
        ('{"a": 1}', '{"a": 1}'),
        ('```json\n{"a": 1}\n```', '{"a": 1}'),
        ('```\n{"a": 1}\n```', '{"a": 1}'),
        ('  {"a": 1}  \n', '{"a": 1}'),
    ])
    def test_strips_fences(self, raw, expected):
        assert clean_response(raw) == expected
