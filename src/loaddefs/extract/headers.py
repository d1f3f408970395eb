"""File headers and trailers: local variables and package version.

Values are read as Lisp data and never evaluated.
"""

from __future__ import annotations

import re
from typing import Any

from loaddefs.config.constants import LOCAL_VARIABLES_WINDOW
from loaddefs.core.errors import ReadError
from loaddefs.lisp import NIL, Reader

_LOCAL_VARIABLES_RE = re.compile(r"^(.*?)Local Variables:[ \t]*(.*?)[ \t]*$", re.MULTILINE)
_CODE_RE = re.compile(r"^;;;[ \t]*Code:", re.MULTILINE)

# Version list entries for non-numeric components, first match wins.
_VERSION_PRIORITIES: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"^[-._+ ]?snapshot$", re.IGNORECASE), -4),
    (re.compile(r"^[-._+]$"), -4),
    (re.compile(r"^[-._+ ]?(?:cvs|git|bzr|svn|hg|darcs)$", re.IGNORECASE), -4),
    (re.compile(r"^[-._+ ]?unknown$", re.IGNORECASE), -4),
    (re.compile(r"^[-._+ ]?alpha$", re.IGNORECASE), -3),
    (re.compile(r"^[-._+ ]?beta$", re.IGNORECASE), -2),
    (re.compile(r"^[-._+ ]?(?:pre|rc)$", re.IGNORECASE), -1),
)
_VERSION_LETTER_RE = re.compile(r"^[-_+ ]?([a-zA-Z])$")
_DIGITS_RE = re.compile(r"[0-9]+")
_NON_DIGITS_RE = re.compile(r"[^0-9]+")


def read_local_variables(text: str) -> dict[str, Any]:
    """Variables of the ``Local Variables:`` block near the end of ``text``.

    Each line of the block carries the same prefix (and suffix) as the
    ``Local Variables:`` line. Values that fail to read are skipped.
    """
    offset = max(0, len(text) - LOCAL_VARIABLES_WINDOW)
    matches = list(_LOCAL_VARIABLES_RE.finditer(text, offset))
    if not matches:
        return {}
    start = matches[-1]
    prefix, suffix = start.group(1), start.group(2)

    variables: dict[str, Any] = {}
    for line in text[start.end() :].splitlines():
        if not line.strip():
            continue
        if not line.startswith(prefix):
            break
        line = line[len(prefix) :]
        if suffix and line.rstrip().endswith(suffix):
            line = line.rstrip()[: -len(suffix)]
        name, sep, value = line.strip().partition(":")
        if not sep or name == "End":
            break
        if name == "eval" or not value.strip():
            continue
        try:
            variables[name.strip()], _ = Reader(value).read_at(0)
        except ReadError:
            continue
    return variables


def is_true(value: Any) -> bool:
    """Lisp truthiness of a datum read from a file."""
    return value is not None and value != NIL and value is not False


def read_header(text: str, name: str) -> str | None:
    """Value of the ``;; NAME:`` header line before ``;;; Code:``."""
    code = _CODE_RE.search(text)
    header = text[: code.start()] if code else text
    pattern = re.compile(
        rf"^;+[ \t]+(?:@\(#\))?[ \t]*{re.escape(name)}[ \t]*:[ \t]*(.*?)[ \t]*$",
        re.MULTILINE | re.IGNORECASE,
    )
    m = pattern.search(header)
    if m is None or not m.group(1):
        return None
    return m.group(1)


def version_to_list(version: str) -> tuple[int, ...]:
    """Parse a version string the way Emacs ``version-to-list`` does.

    ``"1.0pre2"`` gives ``(1, 0, -1, 2)``; a single trailing letter counts
    as its position in the alphabet, so ``"22.3a"`` gives ``(22, 3, 1)``.

    Raises:
        ValueError: The string is not a valid version.
    """
    text = version.strip()
    parts: list[int] = []
    pos = 0
    while m := _DIGITS_RE.match(text, pos):
        parts.append(int(m.group()))
        pos = m.end()
        sep = _NON_DIGITS_RE.match(text, pos)
        if sep is None:
            continue
        pos = sep.end()
        word = sep.group()
        if word == ".":
            continue
        priority = next(
            (value for pattern, value in _VERSION_PRIORITIES if pattern.match(word)), None
        )
        if priority is not None:
            parts.append(priority)
            continue
        letter = _VERSION_LETTER_RE.match(word)
        if letter and pos == len(text):
            parts.append(ord(letter.group(1).lower()) - ord("a") + 1)
            continue
        raise ValueError(f"Invalid version syntax: {version!r}")
    if not parts or pos != len(text):
        raise ValueError(f"Invalid version syntax: {version!r} (must start with a number)")
    return tuple(parts)
