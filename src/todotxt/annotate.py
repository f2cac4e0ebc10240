"""Inline ``todo("...")`` annotations that register themselves when executed."""

import inspect
import os
from typing import Optional

from .registry import AnnotationRegistry, get_registry


def _scope_for(module_name: Optional[str], filename: str) -> str:
    if module_name and module_name != "__main__":
        return module_name
    return os.path.splitext(os.path.basename(filename))[0]


def todo(text: str, registry: Optional[AnnotationRegistry] = None) -> Optional[str]:
    """Register a pending-work note at the calling line.

    The caller's ``file:line`` becomes the ``@context`` and its module name
    the ``+project`` of the stored task. Calls made from interactive or
    generated code (``<stdin>``, ``<string>``, ...) are ignored.

    Args:
        text: todo.txt line describing the pending work
        registry: Registry to record into (defaults to the global one)

    Returns:
        Canonical task line, or None when the call site has no real file
    """
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    try:
        if caller is None:
            return None
        filename = caller.f_code.co_filename
        if not filename or (filename.startswith("<") and filename.endswith(">")):
            return None
        location = f"{filename}:{caller.f_lineno}"
        scope = _scope_for(caller.f_globals.get("__name__"), filename)
    finally:
        # Break the frame reference cycle
        del frame, caller

    registry = get_registry() if registry is None else registry
    return registry.register(text, location, scope)
