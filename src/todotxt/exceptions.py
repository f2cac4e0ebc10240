"""Error types raised by the todo.txt core.

Every failure the parser, the task model and the storage layer can raise
derives from :class:`TodoTxtError`, so callers that only care about "bad
data" can catch a single type. File-system problems are left as the
built-in :class:`OSError`.
"""

from typing import Any, Optional


class TodoTxtError(Exception):
    """Base class for todo.txt data errors.

    Attributes:
        reason: Human-readable description of the problem
        line_number: 1-based line number in the source file, if known
        path: Source file the offending line came from, if known
    """

    def __init__(self, reason: str, line_number: Optional[int] = None, path: Optional[str] = None):
        self.reason = reason
        self.line_number = line_number
        self.path = path
        super().__init__(reason)

    def __str__(self) -> str:
        location = ""
        if self.path is not None and self.line_number is not None:
            location = f"{self.path}:{self.line_number}: "
        elif self.line_number is not None:
            location = f"line {self.line_number}: "
        elif self.path is not None:
            location = f"{self.path}: "
        return f"{location}{self.reason}"


class InvalidTask(TodoTxtError):
    """Raised when task fields violate one of the task invariants."""

    def __init__(self, reason: str, field: Optional[str] = None, value: Any = None, **kwargs):
        self.field = field
        self.value = value
        super().__init__(reason, **kwargs)


class InvalidLine(TodoTxtError):
    """Raised when a line cannot be matched by the todo.txt grammar."""

    def __init__(self, reason: str, line: Optional[str] = None, **kwargs):
        self.line = line
        super().__init__(reason, **kwargs)


class InvalidFormat(TodoTxtError):
    """Raised when a collection is saved in an unknown format."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"`{value}` is not a valid format for saving")
