"""Shared test fixtures and configuration.

Sets up environment variables before any src import so the generation
service is unconfigured (every component runs its fallback unless a test
patches `complete`), and provides common fixtures like temp stores.
"""

import os

# Patch env vars BEFORE any src imports
os.environ["LLM_API_KEY"] = ""
os.environ.setdefault("LLM_PROVIDER", "gemini")
os.environ.setdefault("TIMEZONE", "UTC")
os.environ.setdefault("DATABASE_PATH", "data/test_planner.db")
os.environ.setdefault("FALLBACK_DATA_DIR", "data/test_local")

from datetime import datetime, timezone

import pytest


@pytest.fixture
def now():
    """Fixed reference instant: 2024-06-01 10:00 UTC."""
    return datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def anchors(now):
    from src.core.temporal import anchors_for
    return anchors_for(now)


@pytest.fixture
def record_db(tmp_path):
    """Return a RecordDB instance backed by a temp file."""
    from src.data.db import RecordDB
    return RecordDB(db_path=str(tmp_path / "test_records.db"))


@pytest.fixture
def json_store(tmp_path):
    """Return a JsonRecordStore writing into a temp directory."""
    from src.data.json_store import JsonRecordStore
    return JsonRecordStore(data_dir=str(tmp_path / "local"))


@pytest.fixture(scope="session")
def category_model():
    """One trained model shared by the whole session."""
    from src.core.categorizer import CategoryModel
    return CategoryModel().build()


@pytest.fixture
def categorizer(category_model):
    from src.core.categorizer import EventCategorizer
    return EventCategorizer(category_model)
