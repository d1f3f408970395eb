"""Emacs Lisp data: reader, printer and datum types."""

from loaddefs.lisp.printer import prin1, print_string
from loaddefs.lisp.reader import Reader, in_spans, read_from_string, string_spans
from loaddefs.lisp.types import (
    FUNCTION,
    NIL,
    QUOTE,
    T,
    Form,
    Record,
    Symbol,
    Vector,
    head_name,
    is_list,
    make_list,
    nth,
    nthcdr,
    plist_get,
    quoted,
    to_items,
    unquote,
)

__all__ = [
    "FUNCTION",
    "NIL",
    "QUOTE",
    "T",
    "Form",
    "Reader",
    "Record",
    "Symbol",
    "Vector",
    "head_name",
    "in_spans",
    "is_list",
    "make_list",
    "nth",
    "nthcdr",
    "plist_get",
    "prin1",
    "print_string",
    "quoted",
    "read_from_string",
    "string_spans",
    "to_items",
    "unquote",
]
