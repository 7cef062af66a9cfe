"""
Life Planner — Centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # LLM — provider-agnostic (gemini, anthropic, openai, cohere)
    LLM_PROVIDER: str = "gemini"
    LLM_MODEL: str = ""          # empty → smart default per provider
    LLM_API_KEY: str = ""        # empty → generation service unavailable

    # Calendar day boundaries for "today" / "tomorrow"
    TIMEZONE: str = "UTC"

    # Durable per-user store (SQLite); empty → not configured
    DATABASE_PATH: str = "data/planner.db"

    # Anonymous fallback store (JSON files)
    FALLBACK_DATA_DIR: str = "data/local"

    # Minimum classifier confidence before keyword scoring takes over
    CATEGORY_CONFIDENCE_THRESHOLD: float = 0.1

    @field_validator("CATEGORY_CONFIDENCE_THRESHOLD", mode="before")
    @classmethod
    def parse_threshold(cls, v: str | float) -> float:
        if isinstance(v, str) and not v.strip():
            return 0.1
        return float(v)


def _load_settings() -> Settings:
    """Load settings from environment, validating the timezone."""
    timezone = os.getenv("TIMEZONE", "UTC")
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        print(f"ERROR: TIMEZONE={timezone!r} is not a known IANA timezone", file=sys.stderr)
        sys.exit(1)

    llm_api_key = os.getenv("LLM_API_KEY", "")
    if llm_api_key.startswith("your-"):
        llm_api_key = ""

    return Settings(
        LLM_PROVIDER=os.getenv("LLM_PROVIDER", "gemini"),
        LLM_MODEL=os.getenv("LLM_MODEL", ""),
        LLM_API_KEY=llm_api_key,
        TIMEZONE=timezone,
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/planner.db"),
        FALLBACK_DATA_DIR=os.getenv("FALLBACK_DATA_DIR", "data/local"),
        CATEGORY_CONFIDENCE_THRESHOLD=os.getenv("CATEGORY_CONFIDENCE_THRESHOLD", "0.1"),
    )


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
