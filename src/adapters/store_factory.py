"""Store factory — builds the store adapters based on config."""

from __future__ import annotations

import logging

from src.config import settings
from src.ports.store_port import ActionStore, FallbackStore

logger = logging.getLogger(__name__)


def create_action_store() -> ActionStore | None:
    """Return the durable per-user store, or None when DATABASE_PATH is empty."""
    if not settings.DATABASE_PATH.strip():
        logger.warning("DATABASE_PATH not set — durable store not configured")
        return None

    from src.adapters.record_stores import SQLiteActionStore
    from src.data.db import RecordDB

    return SQLiteActionStore(RecordDB(db_path=settings.DATABASE_PATH))


def create_fallback_store() -> FallbackStore:
    """Return the anonymous JSON-file store."""
    from src.adapters.record_stores import JsonFallbackStore
    from src.data.json_store import JsonRecordStore

    return JsonFallbackStore(JsonRecordStore(data_dir=settings.FALLBACK_DATA_DIR))
