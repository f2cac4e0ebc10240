"""Registry of pending-work annotations found in source code.

Each annotation is stored as a :class:`Task` whose description carries the
owning scope as a ``+project`` and the source location as an ``@context``.
Registering the same annotation again resolves to the same task, so the
registry doubles as a hit counter when tracking is enabled.
"""

import logging
import threading
from typing import Dict, List, Optional, Union

from .exceptions import TodoTxtError
from .parser import parse_task
from .task import Task, render


logger = logging.getLogger(__name__)


def _with_suffix(task: Task, marker: str) -> Task:
    """Append a marker to the description and re-validate through the grammar."""
    return parse_task(render(task), description=f"{task.description} {marker}")


class AnnotationRegistry:
    """Process-wide mapping from annotation tasks to hit counts.

    Args:
        tracking_enabled: Whether :meth:`register` increments hit counts.
            Fixed for the lifetime of the registry.
    """

    def __init__(self, tracking_enabled: bool = False):
        self._tracking_enabled = bool(tracking_enabled)
        self._counts: Dict[Task, int] = {}
        self._lock = threading.Lock()

    @property
    def tracking_enabled(self) -> bool:
        return self._tracking_enabled

    def annotate(self, raw_text: str, location: str, scope: str) -> Task:
        """Build the annotation task for a raw line without registering it.

        Raises:
            InvalidLine, InvalidTask: If ``raw_text`` or the enriched
                description is malformed
        """
        task = parse_task(raw_text)
        if scope and not task.has_project(scope):
            task = _with_suffix(task, f"+{scope}")
        if location and not task.has_context(location):
            task = _with_suffix(task, f"@{location}")
        return task

    def register(self, raw_text: str, location: str, scope: str) -> str:
        """Record one occurrence of an annotation.

        Args:
            raw_text: todo.txt line written in the annotation
            location: Source location label, e.g. ``"pkg/mod.py:10"``
            scope: Owning scope label, e.g. the module name

        Returns:
            Canonical line identifying the registry entry
        """
        task = self.annotate(raw_text, location, scope)
        with self._lock:
            if task not in self._counts:
                self._counts[task] = 0
                logger.debug("Registered annotation %s", render(task))
            if self._tracking_enabled:
                self._counts[task] += 1
        return render(task)

    def _key(self, task: Union[Task, str]) -> Task:
        return parse_task(task) if isinstance(task, str) else task

    def count(self, task: Union[Task, str]) -> int:
        """Hit count for a task or canonical line (0 when unknown)."""
        key = self._key(task)
        with self._lock:
            return self._counts.get(key, 0)

    def tasks(self) -> List[Task]:
        """All registered annotation tasks."""
        with self._lock:
            return list(self._counts)

    def items(self) -> Dict[Task, int]:
        """Snapshot of every entry and its count."""
        with self._lock:
            return dict(self._counts)

    def hits(self) -> Dict[Task, int]:
        """Entries that were hit at least once."""
        with self._lock:
            return {task: hits for task, hits in self._counts.items() if hits > 0}

    def reset_hits(self) -> None:
        """Set every count back to zero, keeping the entries."""
        with self._lock:
            for task in self._counts:
                self._counts[task] = 0

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._counts.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)

    def __contains__(self, task: object) -> bool:
        if not isinstance(task, (Task, str)):
            return False
        try:
            key = self._key(task)
        except TodoTxtError:
            return False
        with self._lock:
            return key in self._counts


# Global registry instance
_registry_instance: Optional[AnnotationRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> AnnotationRegistry:
    """Get the global registry instance.

    Tracking is resolved once, on first use, from the environment, the
    configuration and the session type.
    """
    global _registry_instance

    with _registry_lock:
        if _registry_instance is None:
            from .config import get_config, resolve_tracking_enabled
            tracking = resolve_tracking_enabled(config=get_config())
            _registry_instance = AnnotationRegistry(tracking_enabled=tracking)
            logger.debug("Created annotation registry (tracking=%s)", tracking)
        return _registry_instance


def reset_registry(tracking_enabled: Optional[bool] = None) -> Optional[AnnotationRegistry]:
    """Drop the global registry (useful for testing).

    If ``tracking_enabled`` is given, a fresh registry with that setting is
    installed and returned; otherwise the next :func:`get_registry` call
    builds one.
    """
    global _registry_instance

    with _registry_lock:
        if tracking_enabled is None:
            _registry_instance = None
        else:
            _registry_instance = AnnotationRegistry(tracking_enabled=tracking_enabled)
        return _registry_instance
