"""Lisp datum types produced by the reader and consumed by the printer.

Atoms map onto Python values where the semantics agree: Lisp strings are
``str``, integers ``int``, floats ``float``. Symbols get their own type so
that ``foo`` and ``"foo"`` stay distinct. ``nil`` and ``()`` both read as
:data:`NIL`.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Symbol:
    """An interned symbol, compared by name."""

    name: str

    @property
    def is_keyword(self) -> bool:
        return self.name.startswith(":")

    def __repr__(self) -> str:
        return f"Symbol({self.name!r})"


NIL = Symbol("nil")
T = Symbol("t")
QUOTE = Symbol("quote")
FUNCTION = Symbol("function")
BACKQUOTE = Symbol("`")
COMMA = Symbol(",")
COMMA_AT = Symbol(",@")


@dataclass(frozen=True, slots=True)
class Form:
    """A (possibly dotted) list: ``(a b c)`` or ``(a b . c)``.

    ``items`` is never empty; the empty list is :data:`NIL`. ``tail`` is
    :data:`NIL` for proper lists.
    """

    items: tuple[Any, ...]
    tail: Any = NIL
    # Source offsets, when read from text. Not part of equality.
    start: int | None = field(default=None, compare=False)
    end: int | None = field(default=None, compare=False)

    @property
    def head(self) -> Any:
        return self.items[0]

    @property
    def is_proper(self) -> bool:
        return self.tail == NIL

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Any:
        return self.items[index]


@dataclass(frozen=True, slots=True)
class Vector:
    """``[a b c]``."""

    items: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class Record:
    """``#s(tag slot ...)`` record literal."""

    items: tuple[Any, ...]


def make_list(*items: Any, tail: Any = NIL) -> Any:
    """Build a list datum; no items and a nil tail gives :data:`NIL`."""
    if not items:
        return tail
    return Form(tuple(items), tail)


def quoted(datum: Any) -> Form:
    return Form((QUOTE, datum))


def is_list(datum: Any) -> bool:
    """True for proper lists, including the empty list."""
    return datum == NIL or (isinstance(datum, Form) and datum.is_proper)


def head_name(datum: Any) -> str | None:
    """Name of the head symbol of a list, or None."""
    if isinstance(datum, Form) and isinstance(datum.head, Symbol):
        return datum.head.name
    return None


def nth(datum: Any, n: int) -> Any:
    """Lisp ``nth``: element n of a list, NIL past the end."""
    if isinstance(datum, Form) and n < len(datum.items):
        return datum.items[n]
    return NIL


def nthcdr(datum: Any, n: int) -> tuple[Any, ...]:
    """Elements from position n onwards as a tuple (the improper tail is dropped)."""
    if isinstance(datum, Form):
        return datum.items[n:]
    return ()


def to_items(datum: Any) -> tuple[Any, ...]:
    """Elements of a proper list as a tuple; NIL gives ()."""
    if datum == NIL:
        return ()
    if isinstance(datum, Form):
        return datum.items
    raise TypeError(f"not a list: {datum!r}")


def unquote(datum: Any) -> Any:
    """Strip one ``'x`` or ``#'x`` wrapper; other data is returned unchanged."""
    if (
        isinstance(datum, Form)
        and len(datum.items) == 2
        and datum.is_proper
        and datum.head in (QUOTE, FUNCTION)
    ):
        return datum.items[1]
    return datum


def plist_get(items: tuple[Any, ...], key: str) -> tuple[bool, Any]:
    """Look up a keyword in a property list. Returns (found, value)."""
    for index in range(0, len(items) - 1, 2):
        prop = items[index]
        if isinstance(prop, Symbol) and prop.name == key:
            return True, items[index + 1]
    return False, NIL
