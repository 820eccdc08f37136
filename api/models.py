"""Pydantic request models for the task endpoints."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from taskflow.task_store import Subtask


class SubtaskModel(BaseModel):
    """A checklist item as sent by clients."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    is_completed: bool = Field(False, alias="isCompleted")

    def to_subtask(self) -> Subtask:
        return Subtask(name=self.name, is_completed=self.is_completed)


class TaskCreateRequest(BaseModel):
    """Request body for creating a task."""
    text: str = Field(..., description="Task title (required)")
    description: str = ""
    category: Optional[str] = Field(
        None, description="One of Work, Personal, Fitness, Study, Other."
    )
    subtasks: List[SubtaskModel] = Field(default_factory=list)


class TaskUpdateRequest(BaseModel):
    """Request body for updating a task. Category cannot be changed."""
    text: str
    description: str = ""
    subtasks: List[SubtaskModel] = Field(default_factory=list)
