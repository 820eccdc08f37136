"""Task repository: maps Task records to documents in the store.

The repository is stateless. It validates input before touching the
network, translates between ``Task`` and the stored document shape, and
converts backend failures into ``QueryError`` / ``PersistenceError`` with
the backend message passed through unchanged. It never touches the
caller's task list.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .backends import DocumentStore
from .errors import PersistenceError, QueryError, UnauthenticatedError, ValidationError
from .models import Subtask, Task, TaskCategory, encode_subtasks

logger = logging.getLogger(__name__)

OWNER_FIELD = "userEmail"


class TaskRepository:
    """Create, list, update and delete a user's tasks."""

    def __init__(self, store: DocumentStore, *, collection: str = "userInputs") -> None:
        self._store = store
        self._collection = collection

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def storage(self) -> str:
        """Name of the backend in use, e.g. ``firestore`` or ``file``."""
        return self._store.name

    async def list_tasks(self, owner_email: Optional[str]) -> List[Task]:
        """Return every task owned by ``owner_email`` in store order.

        Raises:
            QueryError: if there is no owner or the query fails.
        """
        if not owner_email:
            raise QueryError("No signed-in user; cannot fetch tasks.")

        logger.debug("Querying %s for %s=%s", self._collection, OWNER_FIELD, owner_email)
        try:
            documents = await self._store.query(self._collection, OWNER_FIELD, owner_email)
        except Exception as exc:
            logger.warning("Task query failed for %s: %s", owner_email, exc)
            raise QueryError(str(exc)) from exc

        return [Task.from_document(doc.id, doc.data) for doc in documents]

    async def create_task(
        self,
        owner_email: Optional[str],
        text: str,
        description: str = "",
        category: "str | TaskCategory | None" = None,
        subtasks: Iterable[Subtask] = (),
    ) -> Task:
        """Persist a new task and return it with its assigned id.

        Raises:
            UnauthenticatedError: if there is no owner.
            ValidationError: if ``text`` is blank or ``category`` is unknown.
            PersistenceError: if the store rejects the write.
        """
        if not owner_email:
            raise UnauthenticatedError("No signed-in user; cannot save task.")
        _require_text(text)
        try:
            parsed = TaskCategory.parse(category)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        task = Task(
            id="",
            text=text,
            description=description or "",
            category=parsed.value if parsed else None,
            subtasks=list(subtasks),
            owner_email=owner_email,
        )

        try:
            doc_id = await self._store.add(self._collection, task.to_document())
        except Exception as exc:
            logger.warning("Task create failed for %s: %s", owner_email, exc)
            raise PersistenceError(str(exc)) from exc

        task.id = doc_id
        logger.debug("Task created id=%s owner=%s", doc_id, owner_email)
        return task

    async def update_task(
        self,
        task_id: str,
        text: str,
        description: str,
        subtasks: Iterable[Subtask],
    ) -> Task:
        """Persist new text, description and subtasks for an existing task.

        Only those three fields are written. ``category`` is left as it was
        stored at creation; the returned Task therefore carries
        ``category=None`` and no owner, and callers merge it into the record
        they already hold.

        Raises:
            ValidationError: if ``task_id`` is empty or ``text`` is blank.
            PersistenceError: if the store rejects the write.
        """
        if not task_id:
            raise ValidationError("Task id is required for update.")
        _require_text(text)

        subtask_list = list(subtasks)
        fields = {
            "taskText": text,
            "description": description or "",
            "subtasks": encode_subtasks(subtask_list),
        }

        try:
            await self._store.update(self._collection, task_id, fields)
        except Exception as exc:
            logger.warning("Task update failed id=%s: %s", task_id, exc)
            raise PersistenceError(str(exc)) from exc

        logger.debug("Task updated id=%s", task_id)
        return Task(id=task_id, text=text, description=description or "", subtasks=subtask_list)

    async def delete_task(self, task_id: str) -> None:
        """Delete a task document.

        Raises:
            ValidationError: if ``task_id`` is empty.
            PersistenceError: if the store rejects the delete.
        """
        if not task_id:
            raise ValidationError("Task id is required for delete.")

        try:
            await self._store.delete(self._collection, task_id)
        except Exception as exc:
            logger.warning("Task delete failed id=%s: %s", task_id, exc)
            raise PersistenceError(str(exc)) from exc

        logger.debug("Task deleted id=%s", task_id)


def _require_text(text: Optional[str]) -> None:
    if not text or not text.strip():
        raise ValidationError("Please enter a task.")
