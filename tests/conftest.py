# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from taskflow.identity import StaticIdentity
from taskflow.task_store import FileDocumentStore, TaskListController, TaskRepository

from .fakes import RecordingStore

OWNER = "a@x.com"


@pytest.fixture()
def file_store(tmp_path: Path) -> FileDocumentStore:
    return FileDocumentStore(tmp_path / "store")


@pytest.fixture()
def store(file_store: FileDocumentStore) -> RecordingStore:
    """
    Real file-backed store wrapped for call recording and failure injection.
    """
    return RecordingStore(inner=file_store)


@pytest.fixture()
def repository(store: RecordingStore) -> TaskRepository:
    return TaskRepository(store, collection="userInputs")


@pytest.fixture()
def identity() -> StaticIdentity:
    return StaticIdentity(OWNER)


@pytest.fixture()
def messages() -> List[str]:
    return []


@pytest.fixture()
def controller(
    repository: TaskRepository,
    identity: StaticIdentity,
    messages: List[str],
) -> TaskListController:
    return TaskListController(repository, identity, notify=messages.append)
