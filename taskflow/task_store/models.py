"""Task records and their Firestore document mapping.

Document layout (collection ``userInputs`` by default)::

    {
        "taskText": str,
        "description": str,
        "category": str,            # optional, absent on older documents
        "subtasks": [               # optional
            {"name": str, "isCompleted": bool},
        ],
        "userEmail": str,
    }

Documents written by different app versions disagree on which optional
fields exist, so every read path goes through ``Task.from_document``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class TaskCategory(str, Enum):
    """Categories offered by the task form."""

    WORK = "Work"
    PERSONAL = "Personal"
    FITNESS = "Fitness"
    STUDY = "Study"
    OTHER = "Other"

    @classmethod
    def parse(cls, raw: "str | TaskCategory | None") -> Optional["TaskCategory"]:
        """Return the matching category (case-insensitive) or None for empty input.

        Raises:
            ValueError: if ``raw`` is not one of the known categories.
        """
        if raw is None or raw == "":
            return None
        if isinstance(raw, cls):
            return raw
        for category in cls:
            if category.value.lower() == str(raw).strip().lower():
                return category
        raise ValueError(f"Unknown category: {raw}")


@dataclass(slots=True)
class Subtask:
    """A checklist item inside a task."""

    name: str
    is_completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "isCompleted": self.is_completed}

    @classmethod
    def from_dict(cls, data: Any) -> "Subtask":
        if not isinstance(data, dict):
            return cls(name="")
        name = data.get("name")
        completed = data.get("isCompleted")
        return cls(
            name=name if isinstance(name, str) else "",
            is_completed=completed if isinstance(completed, bool) else False,
        )


@dataclass(slots=True)
class Task:
    """A task owned by one user.

    ``id`` is empty until the store has accepted the task. ``owner_email``
    scopes queries and is never shown or edited.
    """

    id: str
    text: str
    description: str = ""
    category: Optional[str] = None
    subtasks: List[Subtask] = field(default_factory=list)
    owner_email: str = ""

    def to_document(self) -> Dict[str, Any]:
        """Convert to the stored document shape (without the id)."""
        doc: Dict[str, Any] = {
            "taskText": self.text,
            "description": self.description,
            "subtasks": encode_subtasks(self.subtasks),
            "userEmail": self.owner_email,
        }
        if self.category is not None:
            doc["category"] = self.category
        return doc

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> "Task":
        """Create from a stored document, defaulting anything missing."""
        data = data or {}
        raw_subtasks = data.get("subtasks")
        if not isinstance(raw_subtasks, list):
            raw_subtasks = []
        category = data.get("category")
        return cls(
            id=doc_id,
            text=_as_str(data.get("taskText")),
            description=_as_str(data.get("description")),
            category=category if isinstance(category, str) and category else None,
            subtasks=[Subtask.from_dict(item) for item in raw_subtasks],
            owner_email=_as_str(data.get("userEmail")),
        )

    def to_api_dict(self) -> Dict[str, Any]:
        """Convert to API response format (camelCase, owner omitted)."""
        return {
            "id": self.id,
            "text": self.text,
            "description": self.description,
            "category": self.category,
            "subtasks": encode_subtasks(self.subtasks),
        }


def encode_subtasks(subtasks: Iterable[Subtask]) -> List[Dict[str, Any]]:
    return [subtask.to_dict() for subtask in subtasks]


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""
