"""Errors raised by the task store."""
from __future__ import annotations


class TaskStoreError(RuntimeError):
    """Base class for task store failures.

    All of these are recoverable: the caller may simply retry.
    """


class ValidationError(TaskStoreError):
    """Bad input, detected before any store call."""


class UnauthenticatedError(TaskStoreError):
    """No signed-in user to own the task."""


class QueryError(TaskStoreError):
    """Listing tasks failed. The backend message is kept verbatim."""


class PersistenceError(TaskStoreError):
    """Writing to the document store failed. The backend message is kept verbatim."""


class OperationInFlightError(TaskStoreError):
    """A previous edit or delete of the same task has not completed yet."""
