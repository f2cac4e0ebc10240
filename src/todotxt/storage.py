"""Storage layer for todo.txt collections: plain-text files and Markdown export."""

import logging
import os
import stat
import tempfile
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Union

from .exceptions import InvalidFormat, TodoTxtError
from .parser import parse_task
from .task import Task, render


logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

DEFAULT_HEADING = "Todos"


class SaveFormat(Enum):
    """Supported output formats."""
    TODO = "todo"
    MARKDOWN = "markdown"

    @classmethod
    def coerce(cls, value: Union["SaveFormat", str]) -> "SaveFormat":
        """Resolve a format given as enum member or string name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in ("txt", "plain", "plaintext", "todo.txt"):
                return cls.TODO
            try:
                return cls(normalized)
            except ValueError:
                pass
        raise InvalidFormat(value)


class TodoTxtFormat:
    """Handles conversion between task collections and todo.txt text."""

    @staticmethod
    def to_text(tasks: Iterable[Task]) -> str:
        """Render tasks one canonical line each, in input order."""
        return "".join(render(task) + "\n" for task in tasks)

    @staticmethod
    def from_lines(lines: Iterable[str], path: Union[str, None] = None) -> List[Task]:
        """Parse lines into tasks, skipping empty ones.

        Whitespace-only lines are tasks with a whitespace description.

        Parse failures are re-raised with the 1-based line number attached.
        """
        tasks = []
        for line_number, raw in enumerate(lines, start=1):
            line = raw.rstrip("\r\n")
            if not line:
                continue
            try:
                tasks.append(parse_task(line))
            except TodoTxtError as e:
                e.line_number = line_number
                e.path = path
                raise
        return tasks


class MarkdownChecklistFormat:
    """Write-only Markdown checklist export."""

    @staticmethod
    def to_markdown(tasks: Iterable[Task], heading: str = DEFAULT_HEADING) -> str:
        lines = [f"## {heading}", ""]
        for task in tasks:
            checkbox = "- [x] " if task.is_complete else "- [ ] "
            # Two trailing spaces make a Markdown hard line break
            lines.append(checkbox + task.description.replace("\n", "  \n"))
        lines.append("")
        return "\n".join(lines) + "\n"


def _file_mode(path: Path) -> int:
    """Permissions for a rewritten file: keep the existing ones, else honour the umask.

    Reading the umask means setting it, so for a new file the process umask
    is briefly 0. Threads creating files at that moment get unmasked modes.
    """
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def loads(text: str) -> List[Task]:
    """Parse a todo.txt document held in memory."""
    return TodoTxtFormat.from_lines(text.split("\n"))


def load(path: PathLike) -> List[Task]:
    """Load tasks from a todo.txt file.

    Args:
        path: File to read

    Returns:
        Tasks in file order

    Raises:
        OSError: If the file cannot be read
        InvalidLine, InvalidTask: If a line is malformed; ``line_number``
            and ``path`` are set on the exception
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        tasks = TodoTxtFormat.from_lines(f, path=str(path))
    logger.debug("Loaded %d tasks from %s", len(tasks), path)
    return tasks


def dumps(
    tasks: Iterable[Task],
    format: Union[SaveFormat, str] = SaveFormat.TODO,
    heading: str = DEFAULT_HEADING,
) -> str:
    """Render tasks to a document string in the requested format."""
    fmt = SaveFormat.coerce(format)
    if fmt is SaveFormat.MARKDOWN:
        return MarkdownChecklistFormat.to_markdown(tasks, heading=heading)
    return TodoTxtFormat.to_text(tasks)


def save(
    path: PathLike,
    tasks: Iterable[Task],
    format: Union[SaveFormat, str] = SaveFormat.TODO,
    heading: str = DEFAULT_HEADING,
) -> None:
    """Save tasks to a file, replacing it atomically.

    The document is written to a temporary file next to ``path`` and moved
    into place, so a failure never leaves a partially written target.
    A symlinked ``path`` is followed: the file it points to is replaced and
    the link itself is kept.

    Args:
        path: Destination file
        tasks: Tasks to write, in order
        format: ``SaveFormat.TODO`` or ``SaveFormat.MARKDOWN`` (or their names)
        heading: Markdown heading text, ignored for plain text

    Raises:
        InvalidFormat: If ``format`` is not recognized (nothing is written)
        OSError: If the file cannot be written
    """
    fmt = SaveFormat.coerce(format)
    content = dumps(tasks, fmt, heading=heading)

    path = Path(os.path.realpath(path))
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.chmod(tmp_name, _file_mode(path))
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise

    logger.debug("Saved %s document to %s", fmt.value, path)
