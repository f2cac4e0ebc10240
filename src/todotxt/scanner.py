"""Discover TODO/FIXME comments in source files and register them as tasks."""

import io
import logging
import os
import re
import tokenize
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .exceptions import TodoTxtError
from .registry import AnnotationRegistry


logger = logging.getLogger(__name__)

DEFAULT_MARKERS = ("TODO", "FIXME")
DEFAULT_EXTENSIONS = (".py",)
IGNORED_DIRS = {".git", "__pycache__", ".venv", "venv", "build", "dist", ".tox"}
PYTHON_SUFFIXES = {".py", ".pyw", ".pyi"}


def build_marker_pattern(markers: Sequence[str]) -> "re.Pattern[str]":
    """Compile a pattern matching ``# MARKER: text`` or ``# MARKER(owner): text``."""
    alternatives = "|".join(re.escape(m) for m in markers)
    return re.compile(rf"#\s*({alternatives})(?:\(([^)]*)\))?\s*:\s*(.+?)\s*$")


@dataclass(frozen=True)
class Annotation:
    """A pending-work comment found in a source file."""
    path: str
    line_number: int
    marker: str
    text: str
    owner: Optional[str] = None
    scope: str = ""

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line_number}"


def module_scope(path: Path, root: Path) -> str:
    """Dotted module name of ``path`` relative to ``root``.

    ``pkg/sub/__init__.py`` maps to ``pkg.sub`` and ``pkg/mod.py`` to
    ``pkg.mod``. Files outside ``root`` fall back to their stem.
    """
    try:
        relative = path.resolve().relative_to(root.resolve())
    except ValueError:
        return path.stem
    parts = list(relative.with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    if not parts:
        return root.resolve().name
    return ".".join(parts)


def _source_lines(text: str) -> Iterator[Tuple[int, str]]:
    # Only "\n" ends a line; form feeds and other separators stay in place
    for line_number, line in enumerate(text.split("\n"), start=1):
        yield line_number, line.rstrip("\r")


def _python_comments(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, comment)`` for every comment token in Python source."""
    readline = io.StringIO(text).readline
    for tok in tokenize.generate_tokens(readline):
        if tok.type == tokenize.COMMENT:
            yield tok.start[0], tok.string


def _is_python(path: str) -> bool:
    suffix = os.path.splitext(path)[1].lower()
    return not suffix or suffix in PYTHON_SUFFIXES


def find_annotations(
    text: str,
    path: str = "<text>",
    markers: Sequence[str] = DEFAULT_MARKERS,
    scope: str = "",
) -> List[Annotation]:
    """Find marker comments in a block of source text.

    Python sources (``.py`` files, or a ``path`` without a suffix) are
    tokenized so only real comments count; markers inside string literals
    are ignored. Other files are searched line by line. Source that does
    not tokenize falls back to the line search.
    """
    pattern = build_marker_pattern(markers)
    candidates: Iterable[Tuple[int, str]]
    if _is_python(path):
        try:
            candidates = list(_python_comments(text))
        except (tokenize.TokenError, SyntaxError) as e:
            logger.warning("Could not tokenize %s (%s); searching lines instead", path, e)
            candidates = _source_lines(text)
    else:
        candidates = _source_lines(text)

    found = []
    for line_number, line in candidates:
        m = pattern.search(line)
        if m:
            marker, owner, body = m.groups()
            found.append(Annotation(
                path=path,
                line_number=line_number,
                marker=marker,
                text=body,
                owner=owner or None,
                scope=scope,
            ))
    return found


def iter_source_files(
    root: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ignored_dirs: Iterable[str] = IGNORED_DIRS,
) -> Iterator[Path]:
    """Yield source files under ``root`` in a stable order."""
    root = Path(root)
    suffixes = {e.lower() for e in extensions}
    if root.is_file():
        if root.suffix.lower() in suffixes:
            yield root
        return

    ignored = set(ignored_dirs)
    for dirpath, dirs, files in os.walk(root):
        # prune
        dirs[:] = sorted(d for d in dirs if d not in ignored)
        for name in sorted(files):
            candidate = Path(dirpath) / name
            if candidate.suffix.lower() in suffixes:
                yield candidate


def scan_path(
    root: Path,
    markers: Sequence[str] = DEFAULT_MARKERS,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ignored_dirs: Iterable[str] = IGNORED_DIRS,
) -> List[Annotation]:
    """Scan a file or directory tree for marker comments.

    Locations are reported relative to ``root`` when scanning a directory.
    """
    root = Path(root)
    base = root.parent if root.is_file() else root
    annotations = []
    for path in iter_source_files(root, extensions, ignored_dirs):
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            content = f.read()
        try:
            label = path.relative_to(base).as_posix()
        except ValueError:
            label = path.as_posix()
        annotations.extend(
            find_annotations(content, path=label, markers=markers, scope=module_scope(path, base))
        )
    logger.debug("Found %d annotations under %s", len(annotations), root)
    return annotations


def register_annotations(
    annotations: Iterable[Annotation], registry: AnnotationRegistry
) -> List[str]:
    """Register annotations, skipping (and logging) ones that do not parse.

    Returns:
        Canonical lines of the registered annotations, in input order
    """
    lines = []
    for annotation in annotations:
        try:
            lines.append(registry.register(annotation.text, annotation.location, annotation.scope))
        except TodoTxtError as e:
            logger.warning("Skipping annotation at %s: %s", annotation.location, e)
    return lines
