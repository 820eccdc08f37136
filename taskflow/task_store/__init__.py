"""Task store package - task records, document backends, repository and session list."""
from __future__ import annotations

from .backends import (
    DocumentStore,
    FileDocumentStore,
    FirestoreDocumentStore,
    StoredDocument,
    get_document_store,
)
from .controller import TaskListController
from .errors import (
    OperationInFlightError,
    PersistenceError,
    QueryError,
    TaskStoreError,
    UnauthenticatedError,
    ValidationError,
)
from .models import Subtask, Task, TaskCategory
from .repository import TaskRepository

__all__ = [
    "DocumentStore",
    "FileDocumentStore",
    "FirestoreDocumentStore",
    "StoredDocument",
    "get_document_store",
    "TaskListController",
    "OperationInFlightError",
    "PersistenceError",
    "QueryError",
    "TaskStoreError",
    "UnauthenticatedError",
    "ValidationError",
    "Subtask",
    "Task",
    "TaskCategory",
    "TaskRepository",
]
