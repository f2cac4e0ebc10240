"""todotxt - parse, validate and serialize todo.txt tasks and track code annotations."""

__version__ = "0.1.0"
__author__ = "todotxt Team"

from .exceptions import InvalidFormat, InvalidLine, InvalidTask, TodoTxtError
from .task import Task, render
from .parser import TaskFields, parse_task
from .storage import SaveFormat, dumps, load, loads, save
from .registry import AnnotationRegistry, get_registry, reset_registry
from .annotate import todo

__all__ = [
    "Task",
    "TaskFields",
    "render",
    "parse_task",
    "SaveFormat",
    "load",
    "loads",
    "save",
    "dumps",
    "AnnotationRegistry",
    "get_registry",
    "reset_registry",
    "todo",
    "TodoTxtError",
    "InvalidTask",
    "InvalidLine",
    "InvalidFormat",
    "__version__",
]
