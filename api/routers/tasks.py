"""Tasks Router - per-user task CRUD.

Handles:
- Listing the caller's tasks
- Creating, updating and deleting tasks

Updates and deletes are only applied to ids found in the caller's own task
list; anything else is reported as 404.
"""
from __future__ import annotations

import logging
from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_current_user, get_repository
from api.models import TaskCreateRequest, TaskUpdateRequest
from taskflow.task_store import (
    PersistenceError,
    QueryError,
    Task,
    TaskRepository,
    TaskStoreError,
    UnauthenticatedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_http(exc: TaskStoreError) -> NoReturn:
    if isinstance(exc, ValidationError):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, UnauthenticatedError):
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    if isinstance(exc, (QueryError, PersistenceError)):
        raise HTTPException(status_code=502, detail=f"Task store error: {exc}") from exc
    raise HTTPException(status_code=500, detail=str(exc)) from exc


async def _owned_task(repository: TaskRepository, user: str, task_id: str) -> Task:
    try:
        tasks: List[Task] = await repository.list_tasks(user)
    except TaskStoreError as exc:
        _raise_http(exc)
    for task in tasks:
        if task.id == task_id:
            return task
    raise HTTPException(status_code=404, detail="Task not found")


@router.get("")
async def list_tasks(
    user: str = Depends(get_current_user),
    repository: TaskRepository = Depends(get_repository),
) -> dict:
    """List the caller's tasks in store order."""
    try:
        tasks = await repository.list_tasks(user)
    except TaskStoreError as exc:
        _raise_http(exc)

    return {
        "count": len(tasks),
        "tasks": [t.to_api_dict() for t in tasks],
    }


@router.post("", status_code=201)
async def create_task(
    request: TaskCreateRequest,
    user: str = Depends(get_current_user),
    repository: TaskRepository = Depends(get_repository),
) -> dict:
    """Create a task owned by the caller."""
    try:
        task = await repository.create_task(
            user,
            request.text,
            request.description,
            request.category,
            [s.to_subtask() for s in request.subtasks],
        )
    except TaskStoreError as exc:
        _raise_http(exc)

    logger.info("Task %s created for %s", task.id, user)
    return {"task": task.to_api_dict()}


@router.patch("/{task_id}")
async def update_task(
    task_id: str,
    request: TaskUpdateRequest,
    user: str = Depends(get_current_user),
    repository: TaskRepository = Depends(get_repository),
) -> dict:
    """Update text, description and subtasks of one of the caller's tasks."""
    existing = await _owned_task(repository, user, task_id)
    try:
        updated = await repository.update_task(
            task_id,
            request.text,
            request.description,
            [s.to_subtask() for s in request.subtasks],
        )
    except TaskStoreError as exc:
        _raise_http(exc)

    existing.text = updated.text
    existing.description = updated.description
    existing.subtasks = updated.subtasks
    return {"task": existing.to_api_dict()}


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    user: str = Depends(get_current_user),
    repository: TaskRepository = Depends(get_repository),
) -> dict:
    """Delete one of the caller's tasks."""
    await _owned_task(repository, user, task_id)
    try:
        await repository.delete_task(task_id)
    except TaskStoreError as exc:
        _raise_http(exc)

    logger.info("Task %s deleted for %s", task_id, user)
    return {"deleted": True, "id": task_id}
