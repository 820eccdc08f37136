"""Tests for task records and their document mapping."""
from __future__ import annotations

import pytest

from taskflow.task_store import Subtask, Task, TaskCategory


class TestFromDocument:
    """Decoding stored documents written by any app version."""

    def test_full_document(self):
        data = {
            "taskText": "Buy milk",
            "description": "2%",
            "category": "Personal",
            "subtasks": [
                {"name": "Go to store", "isCompleted": True},
                {"name": "Pay", "isCompleted": False},
            ],
            "userEmail": "a@x.com",
        }

        task = Task.from_document("doc-1", data)

        assert task.id == "doc-1"
        assert task.text == "Buy milk"
        assert task.description == "2%"
        assert task.category == "Personal"
        assert task.subtasks == [Subtask("Go to store", True), Subtask("Pay", False)]
        assert task.owner_email == "a@x.com"

    def test_missing_fields_are_defaulted(self):
        task = Task.from_document("doc-2", {"userEmail": "a@x.com"})

        assert task.text == ""
        assert task.description == ""
        assert task.category is None
        assert task.subtasks == []

    def test_none_document(self):
        task = Task.from_document("doc-3", None)

        assert task.id == "doc-3"
        assert task.text == ""
        assert task.owner_email == ""

    def test_malformed_subtasks(self):
        data = {
            "taskText": "x",
            "subtasks": [{"isCompleted": True}, {"name": "ok"}, "junk", {"name": 5, "isCompleted": "yes"}],
        }

        task = Task.from_document("doc-4", data)

        assert task.subtasks == [
            Subtask("", True),
            Subtask("ok", False),
            Subtask("", False),
            Subtask("", False),
        ]

    def test_subtasks_not_a_list(self):
        task = Task.from_document("doc-5", {"taskText": "x", "subtasks": "nope"})
        assert task.subtasks == []

    def test_legacy_category_kept_verbatim(self):
        task = Task.from_document("doc-6", {"taskText": "x", "category": "General"})
        assert task.category == "General"


class TestToDocument:
    def test_shape(self):
        task = Task(
            id="ignored",
            text="Walk dog",
            description="",
            category="Fitness",
            subtasks=[Subtask("Leash", True)],
            owner_email="b@y.com",
        )

        assert task.to_document() == {
            "taskText": "Walk dog",
            "description": "",
            "category": "Fitness",
            "subtasks": [{"name": "Leash", "isCompleted": True}],
            "userEmail": "b@y.com",
        }

    def test_category_omitted_when_unset(self):
        doc = Task(id="", text="x", owner_email="a@x.com").to_document()
        assert "category" not in doc

    def test_api_dict_hides_owner(self):
        api = Task(id="t1", text="x", owner_email="a@x.com").to_api_dict()
        assert "ownerEmail" not in api
        assert "owner_email" not in api
        assert api["id"] == "t1"


class TestTaskCategory:
    @pytest.mark.parametrize("raw", ["Work", "work", " STUDY ", TaskCategory.OTHER])
    def test_parse_known(self, raw):
        assert isinstance(TaskCategory.parse(raw), TaskCategory)

    def test_parse_empty(self):
        assert TaskCategory.parse(None) is None
        assert TaskCategory.parse("") is None

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            TaskCategory.parse("General")
