"""In-session task list and edit-dialog state.

``TaskListController`` owns the ordered list of tasks shown to the user for
the lifetime of one session. It delegates every change to
``TaskRepository`` and mirrors the outcome into the list only after the
store call succeeded, so a failed call never leaves the list out of step
with the store.

Completions are applied by task id rather than by the index the caller
passed in, because another operation may have moved the task while the
store call was pending.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Set, Tuple

from ..identity import IdentityProvider
from .errors import OperationInFlightError, TaskStoreError, ValidationError
from .models import Subtask, Task, TaskCategory
from .repository import TaskRepository

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]
# (kind, owner email, task) for changes made while a load is pending.
Change = Tuple[str, Optional[str], Task]


class TaskListController:
    """Ordered task list for the signed-in user plus the selected task."""

    def __init__(
        self,
        repository: TaskRepository,
        identity: IdentityProvider,
        *,
        notify: Optional[Notifier] = None,
    ) -> None:
        self._repository = repository
        self._identity = identity
        self._notify = notify
        self._tasks: List[Task] = []
        self._owner: Optional[str] = None
        self._selected: Optional[int] = None
        self._in_flight: Set[str] = set()
        self._load_generation = 0
        self._loads_pending = 0
        self._changes: List[Change] = []
        self._closed = False

    # ---- state ----

    @property
    def tasks(self) -> Tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def selected_index(self) -> Optional[int]:
        return self._selected

    @property
    def selected_task(self) -> Optional[Task]:
        if self._selected is None:
            return None
        return self._tasks[self._selected]

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._tasks)

    def select_for_edit(self, index: int) -> Task:
        """Open the edit dialog on the task at ``index``."""
        task = self._task_at(index)
        self._selected = index
        return task

    def clear_selection(self) -> None:
        """Close the edit dialog."""
        self._selected = None

    def close(self) -> None:
        """End the session. Store calls that complete later are ignored."""
        self._closed = True
        self._selected = None

    # ---- operations ----

    async def load(self, owner_email: Optional[str] = None) -> List[Task]:
        """Replace the list with the owner's tasks from the store.

        On failure the list is kept when reloading for the same owner and
        cleared when switching to a different one, so one user's tasks are
        never left on screen for another.

        Changes that succeed while the query is pending are re-applied to
        its result, since the query may have read the store before them.
        """
        owner = owner_email or self._identity.current_identity()
        self._load_generation += 1
        generation = self._load_generation
        self._selected = None
        self._loads_pending += 1
        mark = len(self._changes)

        try:
            tasks = await self._repository.list_tasks(owner)
            changes = self._changes[mark:]
        except TaskStoreError as exc:
            if self._is_current(generation) and owner != self._owner:
                self._tasks = []
                self._owner = None
                self._selected = None
            self._report(f"Failed to fetch tasks: {exc}")
            raise
        finally:
            self._loads_pending -= 1
            if not self._loads_pending:
                self._changes.clear()

        if not self._is_current(generation):
            logger.debug("Dropping superseded load for %s", owner)
            return tasks

        self._tasks = _reapply(list(tasks), owner, changes)
        self._owner = owner
        self._selected = None
        logger.debug("Loaded %d tasks for %s", len(self._tasks), owner)
        return list(self._tasks)

    async def add(
        self,
        text: str,
        description: str = "",
        category: "str | TaskCategory | None" = None,
        subtasks: Iterable[Subtask] = (),
    ) -> Task:
        """Create a task for the signed-in user and append it to the list."""
        owner = self._identity.current_identity()
        try:
            task = await self._repository.create_task(owner, text, description, category, subtasks)
        except ValidationError as exc:
            self._report(str(exc))
            raise
        except TaskStoreError as exc:
            self._report(f"Error adding task: {exc}")
            raise

        if self._closed:
            return task

        self._tasks.append(task)
        self._record("add", owner, task)
        self._report("Task added successfully.")
        return task

    async def edit(
        self,
        index: int,
        text: str,
        description: str,
        subtasks: Iterable[Subtask],
    ) -> Task:
        """Update the task at ``index`` in place; its position never changes."""
        current = self._task_at(index)
        task_id = current.id
        self._claim(task_id)
        try:
            updated = await self._repository.update_task(task_id, text, description, subtasks)
        except ValidationError as exc:
            self._report(str(exc))
            raise
        except TaskStoreError as exc:
            self._report(f"Error updating task: {exc}")
            raise
        finally:
            self._in_flight.discard(task_id)

        if self._closed:
            return updated

        self._record("edit", None, updated)
        position = self._position_of(task_id)
        if position is None:
            logger.debug("Updated task %s is no longer in the list", task_id)
            return updated

        merged = replace(
            self._tasks[position],
            text=updated.text,
            description=updated.description,
            subtasks=list(updated.subtasks),
        )
        self._tasks[position] = merged
        if self._selected == position:
            self._selected = None
        self._report("Task updated successfully.")
        return merged

    async def remove(self, index: int) -> Task:
        """Delete the task at ``index``; later tasks shift down by one."""
        current = self._task_at(index)
        task_id = current.id
        self._claim(task_id)
        self._selected = None
        try:
            await self._repository.delete_task(task_id)
        except ValidationError as exc:
            self._report(str(exc))
            raise
        except TaskStoreError as exc:
            self._report(f"Error deleting task: {exc}")
            raise
        finally:
            self._in_flight.discard(task_id)

        if self._closed:
            return current

        self._record("remove", None, current)
        position = self._position_of(task_id)
        if position is not None:
            del self._tasks[position]
            if self._selected == position:
                self._selected = None
            elif self._selected is not None and self._selected > position:
                self._selected -= 1
        self._report("Task deleted successfully.")
        return current

    # ---- helpers ----

    def _task_at(self, index: int) -> Task:
        if not 0 <= index < len(self._tasks):
            raise IndexError(f"No task at position {index}")
        return self._tasks[index]

    def _position_of(self, task_id: str) -> Optional[int]:
        for position, task in enumerate(self._tasks):
            if task.id == task_id:
                return position
        return None

    def _claim(self, task_id: str) -> None:
        if task_id in self._in_flight:
            self._report("Task is still being saved. Try again in a moment.")
            raise OperationInFlightError(f"Task {task_id} already has a pending change.")
        self._in_flight.add(task_id)

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._load_generation

    def _report(self, message: str) -> None:
        if self._closed or self._notify is None:
            return
        self._notify(message)

    def _record(self, kind: str, owner: Optional[str], task: Task) -> None:
        if self._loads_pending:
            self._changes.append((kind, owner, task))


def _reapply(tasks: List[Task], owner: Optional[str], changes: List[Change]) -> List[Task]:
    """Apply ``changes`` to a freshly loaded list; each change is idempotent."""
    for kind, change_owner, change in changes:
        position = next((i for i, t in enumerate(tasks) if t.id == change.id), None)
        if kind == "add":
            if position is None and change_owner == owner:
                tasks.append(change)
        elif position is None:
            continue
        elif kind == "edit":
            tasks[position] = replace(
                tasks[position],
                text=change.text,
                description=change.description,
                subtasks=list(change.subtasks),
            )
        elif kind == "remove":
            del tasks[position]
    return tasks
