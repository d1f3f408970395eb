"""Emacs Lisp printer (``prin1`` semantics).

Output re-reads to an equal datum: symbols are escaped where needed and the
quote family is printed back in reader shorthand.
"""

from __future__ import annotations

import math
import re
from typing import Any

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

_SHORTHANDS = {
    QUOTE: "'",
    FUNCTION: "#'",
    BACKQUOTE: "`",
    COMMA: ",",
    COMMA_AT: ",@",
}

_SYMBOL_SPECIALS = frozenset("\"\\ \t\n\r\f();'`,#?[].")
_NUMBER_LIKE = re.compile(r"[+-]?(?:\d+\.?|\d*\.\d+(?:e[+-]?\d+)?|\d+(?:\.\d*)?e[+-]?\d+)\Z")


def prin1(datum: Any, *, escape_newlines: bool = True) -> str:
    """Print ``datum`` as Emacs Lisp text."""
    parts: list[str] = []
    _print(datum, parts, escape_newlines)
    return "".join(parts)


def _print(datum: Any, out: list[str], escape_newlines: bool) -> None:
    if isinstance(datum, Symbol):
        out.append(_print_symbol(datum))
    elif isinstance(datum, str):
        out.append(print_string(datum, escape_newlines=escape_newlines))
    elif isinstance(datum, bool):
        out.append("t" if datum else "nil")
    elif isinstance(datum, int):
        out.append(str(datum))
    elif isinstance(datum, float):
        out.append(_print_float(datum))
    elif isinstance(datum, Form):
        _print_form(datum, out, escape_newlines)
    elif isinstance(datum, Vector):
        _print_items("[", datum.items, "]", out, escape_newlines)
    elif isinstance(datum, Record):
        _print_items("#s(", datum.items, ")", out, escape_newlines)
    elif datum is None:
        out.append("nil")
    else:
        raise TypeError(f"cannot print {type(datum).__name__} as Lisp: {datum!r}")


def _print_form(form: Form, out: list[str], escape_newlines: bool) -> None:
    shorthand = _SHORTHANDS.get(form.head) if isinstance(form.head, Symbol) else None
    if shorthand is not None and len(form.items) == 2 and form.is_proper:
        out.append(shorthand)
        _print(form.items[1], out, escape_newlines)
        return
    out.append("(")
    for index, item in enumerate(form.items):
        if index:
            out.append(" ")
        _print(item, out, escape_newlines)
    if form.tail != NIL:
        out.append(" . ")
        _print(form.tail, out, escape_newlines)
    out.append(")")


def _print_items(
    opening: str, items: tuple[Any, ...], closing: str, out: list[str], escape_newlines: bool
) -> None:
    out.append(opening)
    for index, item in enumerate(items):
        if index:
            out.append(" ")
        _print(item, out, escape_newlines)
    out.append(closing)


def print_string(value: str, *, escape_newlines: bool = True) -> str:
    """Print a string literal, escaping ``"`` and ``\\``."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    if escape_newlines:
        escaped = escaped.replace("\n", "\\n").replace("\f", "\\f")
    return f'"{escaped}"'


def _print_symbol(symbol: Symbol) -> str:
    name = symbol.name
    if not name:
        return "##"
    if name == "#$":
        return name
    if _NUMBER_LIKE.match(name):
        return "\\" + name
    out: list[str] = []
    for index, ch in enumerate(name):
        if ch in _SYMBOL_SPECIALS and not (ch in "#?." and index > 0):
            out.append("\\")
        out.append(ch)
    return "".join(out)


def _print_float(value: float) -> str:
    if math.isnan(value):
        return "0.0e+NaN"
    if math.isinf(value):
        return "1.0e+INF" if value > 0 else "-1.0e+INF"
    text = repr(value)
    if "e" in text and "." not in text.split("e")[0]:
        mantissa, exponent = text.split("e")
        text = f"{mantissa}.0e{exponent}"
    return text
