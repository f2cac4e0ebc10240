"""Tests for the Task model."""

import pytest
from datetime import date, datetime

from todotxt.exceptions import InvalidTask
from todotxt.parser import parse_task
from todotxt.task import Task, render


class TestTaskConstruction:
    """Test Task validation."""

    def test_task_creation(self):
        """Test basic task creation."""
        task = Task(description="Test task")

        assert task.is_complete is False
        assert task.priority is None
        assert task.completed_on is None
        assert task.created_on is None
        assert task.description == "Test task"

    def test_completed_before_created_fails(self):
        """Completion may not predate creation."""
        with pytest.raises(InvalidTask) as exc_info:
            Task(
                is_complete=True,
                completed_on=date(2024, 1, 1),
                created_on=date(2024, 1, 2),
                description="time travel",
            )
        assert exc_info.value.field == "completed_on"
        assert "before it was created" in str(exc_info.value)

    def test_same_day_completion_is_valid(self):
        task = Task(
            is_complete=True,
            completed_on=date(2024, 1, 1),
            created_on=date(2024, 1, 1),
            description="quick one",
        )
        assert task.completed_on == task.created_on

    def test_completion_date_requires_complete(self):
        """A completion date on an open task is rejected."""
        with pytest.raises(InvalidTask, match="marked incomplete"):
            Task(is_complete=False, completed_on=date(2024, 1, 1), description="half done")

    @pytest.mark.parametrize("priority", ["a", "AA", "1", "", "Ä", 65])
    def test_bad_priority(self, priority):
        with pytest.raises(InvalidTask) as exc_info:
            Task(priority=priority, description="task")
        assert exc_info.value.field == "priority"

    @pytest.mark.parametrize("description", [
        "x done already",
        "(A) sneaky priority",
        "(b) lowercase priority",
        "2024-01-01 sneaky date",
    ])
    def test_reserved_markers_rejected(self, description):
        """Descriptions may not start with text the grammar reads as a field."""
        with pytest.raises(InvalidTask) as exc_info:
            Task(description=description)
        assert exc_info.value.field == "description"

    @pytest.mark.parametrize("description", [
        "x",
        "xylophone lesson",
        "(A)without space",
        "2024-01-01",
        "20240101 not a date token",
        " x leading space",
    ])
    def test_near_misses_allowed(self, description):
        assert Task(description=description).description == description

    def test_datetime_rejected(self):
        with pytest.raises(InvalidTask):
            Task(created_on=datetime(2024, 1, 1, 12, 0), description="too precise")

    def test_tasks_are_immutable(self):
        task = Task(description="frozen")
        with pytest.raises(AttributeError):
            task.description = "thawed"

    def test_value_equality_and_hash(self):
        a = Task(priority="A", created_on=date(2024, 1, 1), description="same")
        b = Task(priority="A", created_on=date(2024, 1, 1), description="same")
        c = Task(priority="A", created_on=date(2024, 1, 1), description="same ")

        assert a == b
        assert hash(a) == hash(b)
        assert a != c
        assert len({a, b, c}) == 2


class TestRender:
    """Test canonical rendering."""

    def test_render_all_fields(self):
        task = Task(
            is_complete=True,
            priority="B",
            completed_on=date(2024, 2, 1),
            created_on=date(2024, 1, 15),
            description="done task",
        )
        assert render(task) == "x (B) 2024-02-01 2024-01-15 done task"
        assert str(task) == render(task)

    def test_render_minimal(self):
        assert render(Task(description="just text")) == "just text"

    def test_render_created_only(self):
        task = Task(created_on=date(2024, 1, 1), description="buy milk")
        assert render(task) == "2024-01-01 buy milk"

    def test_render_escapes_control_characters(self):
        task = Task(description="line one\nline two\tcol \\ slash")
        assert render(task) == "line one\\nline two\\tcol \\\\ slash"

    def test_render_pads_early_years(self):
        task = Task(created_on=date(999, 3, 4), description="ancient")
        assert render(task) == "0999-03-04 ancient"

    @pytest.mark.parametrize("task", [
        Task(description=""),
        Task(is_complete=True, description=""),
        Task(priority="Z", description="  padded"),
        Task(is_complete=True, completed_on=date(2024, 2, 1), created_on=date(2024, 1, 1), description="a"),
        Task(created_on=date(2024, 1, 1), description="multi\nline\r\nnote"),
        Task(description="tab\there \x07 bell \\n literal"),
        Task(priority="A", description="  x spaced out"),
        Task(description="unicode ✓ and   separator"),
    ])
    def test_parse_inverts_render(self, task):
        assert parse_task(render(task)) == task


class TestProjections:
    """Test project, context and tag extraction."""

    def setup_method(self):
        self.task = Task(description="+start call mom@home @phone +family due:2024-05-01 a+b x@y url:http://x.y")

    def test_projects(self):
        assert list(self.task.projects()) == ["start", "family"]

    def test_contexts(self):
        assert list(self.task.contexts()) == ["phone"]

    def test_tags(self):
        assert list(self.task.tags()) == [("due", "2024-05-01")]

    def test_projections_are_repeatable(self):
        """Each call restarts from the beginning and leaves the task alone."""
        description = self.task.description
        first = list(self.task.projects()), list(self.task.contexts()), list(self.task.tags())
        second = list(self.task.projects()), list(self.task.contexts()), list(self.task.tags())

        assert first == second
        assert self.task.description == description

    def test_projection_is_lazy(self):
        projects = self.task.projects()
        assert next(projects) == "start"
        assert next(projects) == "family"
        with pytest.raises(StopIteration):
            next(projects)

    def test_membership_helpers(self):
        assert self.task.has_project("family")
        assert not self.task.has_project("fam")
        assert self.task.has_context("phone")
        assert not self.task.has_context("home")

    def test_tokens_after_tabs_and_newlines(self):
        task = Task(description="one\t+tabbed\n@newline")
        assert list(task.projects()) == ["tabbed"]
        assert list(task.contexts()) == ["newline"]

    def test_to_dict(self):
        task = Task(priority="A", created_on=date(2024, 1, 1), description="buy milk +home @store due:fri")
        data = task.to_dict()

        assert data["priority"] == "A"
        assert data["created_on"] == "2024-01-01"
        assert data["completed_on"] is None
        assert data["projects"] == ["home"]
        assert data["contexts"] == ["store"]
        assert data["tags"] == {"due": "fri"}
