"""FastAPI service for TaskFlow."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import ALLOWED_ORIGINS, get_repository, get_settings
from api.routers import tasks_router
from taskflow import __version__
from taskflow.task_store import TaskRepository

load_dotenv()

logger = logging.getLogger(__name__)


app = FastAPI(
    title="TaskFlow API",
    version=__version__,
    description="REST interface over the per-user task store.",
)

origins = [origin for origin in ALLOWED_ORIGINS if origin]

if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(tasks_router, prefix="/tasks", tags=["tasks"])


@app.get("/health")
def health_check(repository: TaskRepository = Depends(get_repository)) -> dict:
    """Health check endpoint reporting the document store actually in use."""
    settings = get_settings()
    return {
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "storage": repository.storage,
        "collection": repository.collection,
    }
