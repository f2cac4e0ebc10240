"""Backslash escaping for task descriptions.

A todo.txt file holds one task per line, so descriptions containing line
breaks or other control characters are stored with C-style escapes. The
scheme is reversible: ``unescape_text(escape_text(s)) == s`` for any string.
"""

import re


_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}

_UNESCAPES = {
    "\\": "\\",
    "n": "\n",
    "t": "\t",
    "r": "\r",
    '"': '"',
    "'": "'",
}

_NEEDS_ESCAPE_RE = re.compile(r"[\\\x00-\x1f\x7f]")
_ESCAPE_SEQUENCE_RE = re.compile(r"\\(x[0-9a-fA-F]{2}|.)", re.DOTALL)


def _escape_char(match: "re.Match[str]") -> str:
    char = match.group(0)
    if char in _ESCAPES:
        return _ESCAPES[char]
    return f"\\x{ord(char):02x}"


def _unescape_sequence(match: "re.Match[str]") -> str:
    body = match.group(1)
    if body in _UNESCAPES:
        return _UNESCAPES[body]
    if len(body) == 3 and body[0] == "x":
        return chr(int(body[1:], 16))
    # Unknown escape, keep it as written
    return match.group(0)


def escape_text(text: str) -> str:
    """Escape backslashes and control characters.

    Args:
        text: Raw text, possibly containing newlines or tabs

    Returns:
        Single-line text safe to write into a todo.txt file
    """
    return _NEEDS_ESCAPE_RE.sub(_escape_char, text)


def unescape_text(text: str) -> str:
    """Reverse :func:`escape_text`.

    Unknown escape sequences and a trailing lone backslash are kept as
    written, so hand-edited lines such as ``C:\\work`` keep their meaning.

    Args:
        text: Escaped text as stored in a todo.txt file

    Returns:
        Raw text with escape sequences decoded
    """
    if "\\" not in text:
        return text
    return _ESCAPE_SEQUENCE_RE.sub(_unescape_sequence, text)
