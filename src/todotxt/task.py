"""Task model for the todo.txt format."""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterator, Optional, Tuple

from .exceptions import InvalidTask
from .utils.escaping import escape_text


# Leading description text the grammar would read as a structured field
COMPLETION_MARKER_RE = re.compile(r"^x ")
PRIORITY_MARKER_RE = re.compile(r"^\([A-Za-z]\) ")
DATE_MARKER_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2} ")

PROJECT_RE = re.compile(r"(?<!\S)\+(\S+)")
CONTEXT_RE = re.compile(r"(?<!\S)@(\S+)")
TAG_RE = re.compile(r"(?<!\S)([^\s:]+):([^\s:]+)(?!\S)")


def format_date(value: date) -> str:
    """Format a date as a todo.txt ``YYYY-MM-DD`` token."""
    # isoformat zero-pads the year, strftime("%Y") does not on every platform
    return value.isoformat()


@dataclass(frozen=True)
class Task:
    """A single validated todo.txt entry.

    Tasks are immutable values: two tasks with the same fields are equal and
    hash the same, which lets them act as registry keys.
    """

    is_complete: bool = False
    priority: Optional[str] = None
    completed_on: Optional[date] = None
    created_on: Optional[date] = None
    description: str = ""

    def __post_init__(self):
        """Validate field types and the cross-field invariants."""
        if not isinstance(self.is_complete, bool):
            raise InvalidTask("Task completion flag must be a bool", "is_complete", self.is_complete)

        for field_name in ("completed_on", "created_on"):
            value = getattr(self, field_name)
            # datetime is a date subclass, but a time of day has no place in todo.txt
            if value is not None and (not isinstance(value, date) or isinstance(value, datetime)):
                raise InvalidTask(f"Task {field_name} must be a date", field_name, value)

        if not isinstance(self.description, str):
            raise InvalidTask("Task description must be a string", "description", self.description)

        if self.completed_on is not None and self.created_on is not None and self.completed_on < self.created_on:
            raise InvalidTask(
                "Task cannot be completed before it was created",
                "completed_on",
                self.completed_on,
            )

        if self.completed_on is not None and not self.is_complete:
            raise InvalidTask(
                "Task cannot have a completion date yet be marked incomplete",
                "completed_on",
                self.completed_on,
            )

        if self.priority is not None and not (
            isinstance(self.priority, str) and len(self.priority) == 1 and "A" <= self.priority <= "Z"
        ):
            raise InvalidTask("Task priority must be a capital letter [A-Z]", "priority", self.priority)

        if COMPLETION_MARKER_RE.match(self.description):
            raise InvalidTask(
                "Task description may not begin with a completion marking, e.g. `x `",
                "description",
                self.description,
            )
        if PRIORITY_MARKER_RE.match(self.description):
            raise InvalidTask(
                "Task description may not begin with a priority, e.g. `(A) `",
                "description",
                self.description,
            )
        if DATE_MARKER_RE.match(self.description):
            raise InvalidTask(
                "Task description may not begin with a date, e.g. `2019-01-23 `",
                "description",
                self.description,
            )

    def __str__(self) -> str:
        return render(self)

    @classmethod
    def from_line(cls, line: str, **overrides: Any) -> "Task":
        """Parse a todo.txt line, optionally overriding parsed fields."""
        from .parser import parse_task
        return parse_task(line, **overrides)

    def projects(self) -> Iterator[str]:
        """Yield ``+project`` names in the order they appear."""
        return (m.group(1) for m in PROJECT_RE.finditer(self.description))

    def contexts(self) -> Iterator[str]:
        """Yield ``@context`` names in the order they appear."""
        return (m.group(1) for m in CONTEXT_RE.finditer(self.description))

    def tags(self) -> Iterator[Tuple[str, str]]:
        """Yield ``key:value`` pairs in the order they appear."""
        return (m.groups() for m in TAG_RE.finditer(self.description))

    def has_project(self, name: str) -> bool:
        return name in self.projects()

    def has_context(self, name: str) -> bool:
        return name in self.contexts()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the task to a plain dictionary with ISO date strings."""
        return {
            "is_complete": self.is_complete,
            "priority": self.priority,
            "completed_on": self.completed_on.isoformat() if self.completed_on else None,
            "created_on": self.created_on.isoformat() if self.created_on else None,
            "description": self.description,
            "projects": list(self.projects()),
            "contexts": list(self.contexts()),
            "tags": dict(self.tags()),
        }


def render(task: Task) -> str:
    """Render a task as its canonical todo.txt line (without newline)."""
    parts = []
    if task.is_complete:
        parts.append("x ")
    if task.priority is not None:
        parts.append(f"({task.priority}) ")
    if task.completed_on is not None:
        parts.append(format_date(task.completed_on) + " ")
    if task.created_on is not None:
        parts.append(format_date(task.created_on) + " ")
    parts.append(escape_text(task.description))
    return "".join(parts)
