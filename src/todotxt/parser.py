"""Grammar engine turning todo.txt lines into :class:`Task` values."""

import re
from dataclasses import dataclass, fields
from datetime import date
from typing import Any, Dict, Optional

from .exceptions import InvalidLine
from .task import Task
from .utils.escaping import unescape_text


# The grammar mirrors render(): every structured field is followed by exactly
# one space, anything after that belongs to the next field or the description.
TASK_LINE_RE = re.compile(
    r"^(?:(x) )?"
    r"(?:\(([A-Za-z])\) )?"
    r"(?:([0-9]{4}-[0-9]{2}-[0-9]{2}) )?"
    r"(?:([0-9]{4}-[0-9]{2}-[0-9]{2}) )?"
    r"(.*)$",
    re.DOTALL,
)


class _Unset:
    """Marker for a field the caller did not override."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class TaskFields:
    """Partial task used to override values read from a line.

    Every field defaults to ``UNSET``; an explicit ``None`` is a real override
    (for example, dropping a parsed priority).
    """

    is_complete: Any = UNSET
    priority: Any = UNSET
    completed_on: Any = UNSET
    created_on: Any = UNSET
    description: Any = UNSET

    @classmethod
    def from_kwargs(cls, **kwargs: Any) -> "TaskFields":
        """Build overrides from keyword arguments, rejecting unknown names."""
        valid = [f.name for f in fields(cls)]
        for key in kwargs:
            if key not in valid:
                raise TypeError(
                    f"Keyword argument {key} is not a valid field for Task ({', '.join(valid)})"
                )
        return cls(**kwargs)

    def provided(self) -> Dict[str, Any]:
        """Return only the fields that were explicitly set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


def _parse_date(token: Optional[str], line: str) -> Optional[date]:
    if token is None:
        return None
    try:
        return date.fromisoformat(token)
    except ValueError:
        raise InvalidLine(f"Invalid date `{token}` in line", line=line) from None


def parse_fields(line: str) -> Dict[str, Any]:
    """Split a todo.txt line into raw field values without validating them.

    Args:
        line: Escaped todo.txt line (escape sequences are decoded here)

    Returns:
        Dictionary keyed by :class:`Task` field name

    Raises:
        InvalidLine: If the line is not a string, does not match the grammar,
            or carries an impossible calendar date
    """
    if not isinstance(line, str):
        raise InvalidLine(f"Invalid line used to construct a Task `{line!r}`", line=line)

    decoded = unescape_text(line)
    match = TASK_LINE_RE.match(decoded)
    if match is None:
        raise InvalidLine(f"Invalid line used to construct a Task `{line}`", line=line)

    complete, priority, first_date, second_date, description = match.groups()

    # A lone date is the creation date; completion dates only come paired
    if second_date is None:
        completed_on, created_on = None, _parse_date(first_date, line)
    else:
        completed_on, created_on = _parse_date(first_date, line), _parse_date(second_date, line)

    return {
        "is_complete": complete is not None,
        "priority": priority,
        "completed_on": completed_on,
        "created_on": created_on,
        "description": description,
    }


def parse_task(line: str, overrides: Optional[TaskFields] = None, **kwargs: Any) -> Task:
    """Parse a todo.txt line into a validated :class:`Task`.

    Args:
        line: Escaped todo.txt line
        overrides: Explicit field values that take precedence over the line
        **kwargs: Shorthand for ``overrides``; merged on top of it

    Returns:
        Validated task

    Raises:
        InvalidLine: If the line cannot be read by the grammar
        InvalidTask: If the resulting fields break a task invariant
        TypeError: If a keyword does not name a task field
    """
    values = parse_fields(line)
    if overrides is not None:
        values.update(overrides.provided())
    if kwargs:
        values.update(TaskFields.from_kwargs(**kwargs).provided())
    return Task(**values)
