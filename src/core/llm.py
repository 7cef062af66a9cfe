"""
Life Planner — LLM Provider Abstraction.

Single public function `complete()` that routes to the configured provider.
Provider is selected at first call via the LLM_PROVIDER env var.
Supports: gemini (default), anthropic, openai, cohere.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class ServiceUnavailable(Exception):
    """Raised when the generation service is not configured."""


# Type alias for provider implementations:
# (api_key, model, system, messages, max_tokens, json_mode) -> text
_ProviderFn = Callable[[str, str, str, list[dict], int, bool], Awaitable[str]]

# ---------------------------------------------------------------------------
# Provider implementations
# ---------------------------------------------------------------------------


async def _complete_gemini(
    api_key: str, model: str, system: str, messages: list[dict], max_tokens: int, json_mode: bool,
) -> str:
    import google.generativeai as genai

    genai.configure(api_key=api_key)
    gm = genai.GenerativeModel(
        model_name=model,
        system_instruction=system or None,
    )
    contents = [
        {"role": "model" if m["role"] == "assistant" else "user", "parts": [m["content"]]}
        for m in messages
    ]
    config = genai.types.GenerationConfig(max_output_tokens=max_tokens)
    if json_mode:
        config = genai.types.GenerationConfig(
            max_output_tokens=max_tokens,
            response_mime_type="application/json",
        )
    response = await gm.generate_content_async(contents, generation_config=config)
    return response.text


async def _complete_anthropic(
    api_key: str, model: str, system: str, messages: list[dict], max_tokens: int, json_mode: bool,
) -> str:
    import anthropic

    # No native JSON mode; the prompts already demand a bare JSON object.
    client = anthropic.AsyncAnthropic(api_key=api_key)
    kwargs: dict = {"model": model, "max_tokens": max_tokens, "messages": messages}
    if system:
        kwargs["system"] = system
    response = await client.messages.create(**kwargs)
    return response.content[0].text


async def _complete_openai(
    api_key: str, model: str, system: str, messages: list[dict], max_tokens: int, json_mode: bool,
) -> str:
    from openai import AsyncOpenAI

    client = AsyncOpenAI(api_key=api_key)
    kwargs: dict = {
        "model": model,
        "max_tokens": max_tokens,
        "temperature": 0.3,
        "messages": _with_system(system, messages),
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}
    response = await client.chat.completions.create(**kwargs)
    return response.choices[0].message.content


async def _complete_cohere(
    api_key: str, model: str, system: str, messages: list[dict], max_tokens: int, json_mode: bool,
) -> str:
    import cohere

    client = cohere.AsyncClientV2(api_key=api_key)
    kwargs: dict = {
        "model": model,
        "max_tokens": max_tokens,
        "messages": _with_system(system, messages),
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}
    response = await client.chat(**kwargs)
    return response.message.content[0].text


def _with_system(system: str, messages: list[dict]) -> list[dict]:
    if not system:
        return list(messages)
    return [{"role": "system", "content": system}, *messages]


# ---------------------------------------------------------------------------
# Provider selection (runs once at first call)
# ---------------------------------------------------------------------------

_PROVIDERS: dict[str, tuple[_ProviderFn, str]] = {
    "gemini":    (_complete_gemini,    "gemini-2.0-flash"),
    "anthropic": (_complete_anthropic, "claude-haiku-4-5-20251001"),
    "openai":    (_complete_openai,    "gpt-4o-mini"),
    "cohere":    (_complete_cohere,    "command-a-03-2025"),
}


def _select_provider() -> tuple[_ProviderFn, str, str]:
    """Read settings and return (provider_fn, model, api_key)."""
    from src.config import settings

    if not settings.LLM_API_KEY:
        raise ServiceUnavailable("LLM_API_KEY is not set")

    provider_name = settings.LLM_PROVIDER.lower()
    if provider_name not in _PROVIDERS:
        raise ServiceUnavailable(
            f"Unknown LLM_PROVIDER={provider_name!r}. "
            f"Supported: {', '.join(_PROVIDERS)}"
        )

    fn, default_model = _PROVIDERS[provider_name]
    model = settings.LLM_MODEL or default_model

    logger.info("LLM provider: %s, model: %s", provider_name, model)
    return fn, model, settings.LLM_API_KEY


# Lazy singleton — populated on first call to complete()
_provider_fn: _ProviderFn | None = None
_model: str = ""
_api_key: str = ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def complete(
    messages: list[dict],
    max_tokens: int = 256,
    response_format: str | None = None,
) -> str:
    """Send an ordered list of {role, content} messages and return the reply text.

    A leading "system" message is passed to the provider as its system prompt.
    ``response_format="json"`` asks providers that support it for a JSON object.

    Raises ServiceUnavailable when no provider is configured, and lets API
    errors propagate — callers route both to their fallbacks.
    """
    global _provider_fn, _model, _api_key

    if _provider_fn is None:
        _provider_fn, _model, _api_key = _select_provider()

    system = ""
    turns = list(messages)
    if turns and turns[0].get("role") == "system":
        system = turns.pop(0)["content"]

    return await _provider_fn(
        _api_key, _model, system, turns, max_tokens, response_format == "json",
    )


def clean_response(raw_text: str) -> str:
    """Remove markdown code block delimiters from the LLM's raw response."""
    cleaned_text = raw_text.strip()
    if cleaned_text.startswith("```json"):
        cleaned_text = cleaned_text.removeprefix("```json")
    elif cleaned_text.startswith("```"):
        cleaned_text = cleaned_text.removeprefix("```")
    if cleaned_text.endswith("```"):
        cleaned_text = cleaned_text.removesuffix("```")
    return cleaned_text.strip()
