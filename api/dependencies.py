"""Shared dependencies and helper functions for API routers.

Usage in routers:
    from api.dependencies import get_current_user, get_repository
"""
from __future__ import annotations

import os
from functools import lru_cache

from taskflow.api.auth import get_current_user  # noqa: F401 - re-export
from taskflow.config import Settings, load_settings
from taskflow.task_store import TaskRepository, get_document_store


# =============================================================================
# Configuration Constants
# =============================================================================

ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    os.getenv("TASKFLOW_ALLOWED_FRONTEND", "").strip(),
]


# =============================================================================
# Cached Functions
# =============================================================================

@lru_cache
def get_settings() -> Settings:
    """Get application settings (cached)."""
    return load_settings()


@lru_cache
def get_repository() -> TaskRepository:
    """Get the task repository for the configured document store (cached)."""
    settings = get_settings()
    return TaskRepository(get_document_store(settings), collection=settings.collection)
