"""Emacs Lisp reader.

Reads the subset of Emacs Lisp syntax that appears in package sources:
lists, dotted pairs, vectors, ``#s`` records, strings, character literals,
integers in several radixes, floats, symbols, and the quote family of
shorthands. Reading never evaluates anything.
"""

from __future__ import annotations

import bisect
import re
import sys
import unicodedata
from typing import Any

from loaddefs.core.errors import ReadError
from loaddefs.lisp.types import (
    BACKQUOTE,
    COMMA,
    COMMA_AT,
    FUNCTION,
    NIL,
    QUOTE,
    Form,
    Record,
    Symbol,
    Vector,
)

_WHITESPACE = frozenset(" \t\n\r\f\v ")
_DELIMITERS = _WHITESPACE | frozenset("()[]\"';`,")

_INT_RE = re.compile(r"[+-]?\d+\.?\Z")
_FLOAT_RE = re.compile(r"[+-]?(?:\d*\.\d+(?:e[+-]?\d+)?|\d+(?:\.\d*)?e[+-]?\d+)\Z")
_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_OCTAL_RE = re.compile(r"[0-7]{1,3}")

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "f": "\f",
    "e": "\x1b",
    "a": "\x07",
    "b": "\x08",
    "v": "\x0b",
    "d": "\x7f",
    "s": " ",
}

_META_BIT = 1 << 27
_MAX_CHAR = 0x3FFFFF

_RADIX = {"x": 16, "X": 16, "o": 8, "O": 8, "b": 2, "B": 2}


class Reader:
    """Reads data from one buffer of Emacs Lisp text.

    Usage::

        reader = Reader(text, source="foo.el")
        form, end = reader.read_at(0)
        forms = reader.read_all()
    """

    def __init__(self, text: str, source: str | None = None) -> None:
        self.text = text
        self.source = source
        self._line_starts: list[int] | None = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def read_at(self, pos: int) -> tuple[Any, int]:
        """Read the next datum at or after ``pos``.

        Returns the datum and the offset just past it.

        Raises:
            ReadError: No datum before end of input, or malformed syntax.
        """
        pos = self.skip_whitespace(pos)
        if pos >= len(self.text):
            raise self._eof(pos)
        return self._read(pos)

    def read_all(self) -> list[Any]:
        """Read every top-level datum in the buffer."""
        data: list[Any] = []
        pos = self.skip_whitespace(0)
        while pos < len(self.text):
            datum, pos = self._read(pos)
            data.append(datum)
            pos = self.skip_whitespace(pos)
        return data

    def skip_whitespace(self, pos: int) -> int:
        """Skip whitespace and ``;`` comments."""
        text = self.text
        n = len(text)
        while pos < n:
            ch = text[pos]
            if ch in _WHITESPACE:
                pos += 1
            elif ch == ";":
                newline = text.find("\n", pos)
                pos = n if newline < 0 else newline + 1
            else:
                break
        return pos

    def location(self, pos: int) -> tuple[int, int]:
        """1-based line and 0-based column of an offset."""
        if self._line_starts is None:
            self._line_starts = [0] + [m.end() for m in re.finditer("\n", self.text)]
        line = bisect.bisect_right(self._line_starts, pos)
        return line, pos - self._line_starts[line - 1]

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _read(self, pos: int) -> tuple[Any, int]:
        ch = self.text[pos]
        if ch == "(":
            return self._read_list(pos)
        if ch == "[":
            items, end = self._read_sequence(pos + 1, "]")
            return Vector(tuple(items)), end
        if ch in ")]":
            line, col = self.location(pos)
            raise ReadError.unbalanced(line, col, self.source)
        if ch == '"':
            return self._read_string(pos)
        if ch == "?":
            return self._read_char(pos)
        if ch == "'":
            return self._read_shorthand(pos, pos + 1, QUOTE)
        if ch == "`":
            return self._read_shorthand(pos, pos + 1, BACKQUOTE)
        if ch == ",":
            if self.text.startswith(",@", pos):
                return self._read_shorthand(pos, pos + 2, COMMA_AT)
            return self._read_shorthand(pos, pos + 1, COMMA)
        if ch == "#":
            return self._read_hash(pos)
        return self._read_atom(pos)

    def _read_shorthand(self, start: int, pos: int, head: Symbol) -> tuple[Form, int]:
        datum, end = self.read_at(pos)
        return Form((head, datum), NIL, start, end), end

    # -------------------------------------------------------------------------
    # Lists and vectors
    # -------------------------------------------------------------------------

    def _read_list(self, start: int) -> tuple[Any, int]:
        items: list[Any] = []
        tail: Any = NIL
        pos = start + 1
        while True:
            pos = self.skip_whitespace(pos)
            if pos >= len(self.text):
                raise self._eof(start)
            ch = self.text[pos]
            if ch == ")":
                pos += 1
                break
            if ch == "]":
                line, col = self.location(pos)
                raise ReadError.unbalanced(line, col, self.source)
            if ch == "." and self._is_lone_dot(pos):
                if not items:
                    line, col = self.location(pos)
                    raise ReadError.invalid_syntax(line, col, "dot at list start", self.source)
                tail, pos = self.read_at(pos + 1)
                pos = self.skip_whitespace(pos)
                if pos >= len(self.text):
                    raise self._eof(start)
                if self.text[pos] != ")":
                    line, col = self.location(pos)
                    raise ReadError.invalid_syntax(
                        line, col, "more than one object after dot", self.source
                    )
                pos += 1
                if isinstance(tail, Form):
                    # (a . (b c)) is (a b c)
                    items.extend(tail.items)
                    tail = tail.tail
                break
            datum, pos = self._read(pos)
            items.append(datum)
        if not items:
            return NIL, pos
        return Form(tuple(items), tail, start, pos), pos

    def _read_sequence(self, pos: int, close: str) -> tuple[list[Any], int]:
        start = pos - 1
        items: list[Any] = []
        while True:
            pos = self.skip_whitespace(pos)
            if pos >= len(self.text):
                raise self._eof(start)
            ch = self.text[pos]
            if ch == close:
                return items, pos + 1
            if ch in ")]":
                line, col = self.location(pos)
                raise ReadError.unbalanced(line, col, self.source)
            datum, pos = self._read(pos)
            items.append(datum)

    def _is_lone_dot(self, pos: int) -> bool:
        nxt = pos + 1
        return nxt >= len(self.text) or self.text[nxt] in _DELIMITERS

    # -------------------------------------------------------------------------
    # Hash syntax
    # -------------------------------------------------------------------------

    def _read_hash(self, pos: int) -> tuple[Any, int]:
        text = self.text
        nxt = text[pos + 1] if pos + 1 < len(text) else ""
        if nxt == "'":
            return self._read_shorthand(pos, pos + 2, FUNCTION)
        if nxt == "$":
            return Symbol("#$"), pos + 2
        if nxt == "s" and text.startswith("#s(", pos):
            items, end = self._read_sequence(pos + 3, ")")
            return Record(tuple(items)), end
        if nxt == "(":
            # String with text properties: keep the string only.
            datum, end = self._read_list(pos + 1)
            if isinstance(datum, Form) and isinstance(datum.head, str):
                return datum.head, end
            line, col = self.location(pos)
            raise ReadError.invalid_syntax(line, col, "malformed #( string", self.source)
        if nxt in _RADIX:
            token, end = self._scan_token(pos + 2)
            try:
                return int(token, _RADIX[nxt]), end
            except ValueError:
                line, col = self.location(pos)
                raise ReadError.invalid_syntax(
                    line, col, f"invalid #{nxt} integer {token!r}", self.source
                ) from None
        if nxt in (":", "_"):
            token, end = self._scan_token(pos + 2)
            return Symbol(token), end
        if nxt == "#":
            return Symbol(""), pos + 2
        line, col = self.location(pos)
        raise ReadError.invalid_syntax(line, col, f"unsupported syntax #{nxt}", self.source)

    # -------------------------------------------------------------------------
    # Atoms
    # -------------------------------------------------------------------------

    def _scan_token(self, pos: int) -> tuple[str, int]:
        token, end, _ = self._scan_symbol_chars(pos)
        return token, end

    def _scan_symbol_chars(self, pos: int) -> tuple[str, int, bool]:
        text = self.text
        n = len(text)
        chars: list[str] = []
        escaped = False
        while pos < n:
            ch = text[pos]
            if ch == "\\":
                if pos + 1 >= n:
                    raise self._eof(pos)
                chars.append(text[pos + 1])
                escaped = True
                pos += 2
                continue
            if ch in _DELIMITERS:
                break
            chars.append(ch)
            pos += 1
        return "".join(chars), pos, escaped

    def _read_atom(self, pos: int) -> tuple[Any, int]:
        token, end, escaped = self._scan_symbol_chars(pos)
        if not escaped:
            if _INT_RE.match(token):
                return int(token.rstrip(".")), end
            if _FLOAT_RE.match(token):
                return float(token), end
        if not token and not escaped:
            line, col = self.location(pos)
            raise ReadError.invalid_syntax(line, col, "empty token", self.source)
        return Symbol(token), end

    def _read_string(self, start: int) -> tuple[str, int]:
        text = self.text
        n = len(text)
        pos = start + 1
        out: list[str] = []
        while True:
            if pos >= n:
                raise self._eof(start)
            ch = text[pos]
            if ch == '"':
                return "".join(out), pos + 1
            if ch != "\\":
                out.append(ch)
                pos += 1
                continue
            if pos + 1 >= n:
                raise self._eof(start)
            esc = text[pos + 1]
            if esc in "\n ":
                pos += 2
                continue
            code, pos = self._read_escape(pos + 1, in_string=True)
            if code & _META_BIT:
                code = (code & ~_META_BIT) | 0x80
            if code > sys.maxunicode:
                line, col = self.location(pos)
                raise ReadError.invalid_syntax(
                    line, col, f"character code {code:#x} not allowed in a string", self.source
                )
            out.append(chr(code))

    def _read_char(self, start: int) -> tuple[int, int]:
        pos = start + 1
        if pos >= len(self.text):
            raise self._eof(start)
        ch = self.text[pos]
        if ch == "\\":
            return self._read_escape(pos + 1, in_string=False)
        return ord(ch), pos + 1

    def _read_escape(self, pos: int, *, in_string: bool) -> tuple[int, int]:
        """Decode the escape whose letter is at ``pos``. Returns (code, end)."""
        text = self.text
        if pos >= len(text):
            raise self._eof(pos)
        esc = text[pos]
        if esc in ("C", "^"):
            if esc == "C":
                if not text.startswith("C-", pos):
                    return ord("C"), pos + 1
                pos += 2
            else:
                pos += 1
            code, end = self._read_modified(pos, in_string=in_string)
            if code == ord("?"):
                return 127, end
            return code & 0x1F, end
        if esc == "M" and text.startswith("M-", pos):
            code, end = self._read_modified(pos + 2, in_string=in_string)
            return code | _META_BIT, end
        if esc == "s" and not in_string and text.startswith("s-", pos):
            code, end = self._read_modified(pos + 2, in_string=in_string)
            return code | (1 << 23), end
        if esc in _SIMPLE_ESCAPES:
            return ord(_SIMPLE_ESCAPES[esc]), pos + 1
        if esc == "x":
            if m := _HEX_RE.match(text, pos + 1):
                return self._checked(int(m.group(0), 16), pos), m.end()
            return 0, pos + 1
        if esc in ("u", "U"):
            width = 4 if esc == "u" else 8
            digits = text[pos + 1 : pos + 1 + width]
            if len(digits) != width or not all(c in "0123456789abcdefABCDEF" for c in digits):
                line, col = self.location(pos)
                raise ReadError.invalid_syntax(line, col, f"bad \\{esc} escape", self.source)
            return self._checked(int(digits, 16), pos), pos + 1 + width
        if esc == "N" and text.startswith("N{", pos):
            close = text.find("}", pos)
            if close < 0:
                raise self._eof(pos)
            name = text[pos + 2 : close]
            try:
                if name.upper().startswith("U+"):
                    return self._checked(int(name[2:], 16), pos), close + 1
                return ord(unicodedata.lookup(name)), close + 1
            except (KeyError, ValueError):
                line, col = self.location(pos)
                raise ReadError.invalid_syntax(
                    line, col, f"unknown character name {name!r}", self.source
                ) from None
        if esc in "01234567" and (m := _OCTAL_RE.match(text, pos)):
            return int(m.group(0), 8), m.end()
        return ord(esc), pos + 1

    def _read_modified(self, pos: int, *, in_string: bool) -> tuple[int, int]:
        if pos >= len(self.text):
            raise self._eof(pos)
        ch = self.text[pos]
        if ch == "\\":
            return self._read_escape(pos + 1, in_string=in_string)
        return ord(ch), pos + 1

    def _checked(self, code: int, pos: int) -> int:
        if code > _MAX_CHAR:
            line, col = self.location(pos)
            raise ReadError.invalid_syntax(
                line, col, f"character code {code:#x} out of range", self.source
            )
        return code

    def _eof(self, pos: int) -> ReadError:
        line, col = self.location(pos)
        return ReadError.unexpected_eof(line, col, self.source)


def read_from_string(text: str) -> Any:
    """Read the first datum of ``text``."""
    datum, _ = Reader(text).read_at(0)
    return datum


def string_spans(text: str) -> list[tuple[int, int]]:
    """Offsets ``(start, end)`` of every string literal in ``text``.

    Comments and character literals are skipped so that a ``"`` inside them
    does not open a string. Used to ignore autoload cookies that appear at
    the start of a line inside a docstring.
    """
    spans: list[tuple[int, int]] = []
    n = len(text)
    pos = 0
    while pos < n:
        ch = text[pos]
        if ch == ";":
            newline = text.find("\n", pos)
            pos = n if newline < 0 else newline + 1
        elif ch == "\\":
            pos += 2
        elif ch == "?" and (pos == 0 or text[pos - 1] in _DELIMITERS):
            pos += 3 if text.startswith("?\\", pos) else 2
        elif ch == '"':
            start = pos
            pos += 1
            while pos < n and text[pos] != '"':
                pos += 2 if text[pos] == "\\" else 1
            pos += 1
            spans.append((start, min(pos, n)))
        else:
            pos += 1
    return spans


def in_spans(spans: list[tuple[int, int]], pos: int) -> bool:
    """True if ``pos`` falls strictly inside one of ``spans`` (sorted)."""
    index = bisect.bisect_right(spans, (pos, float("inf"))) - 1
    if index < 0:
        return False
    start, end = spans[index]
    return start < pos < end
