"""Registration records produced by extraction.

Every record knows how to turn itself into the Lisp datum that is printed
into a manifest (``to_form``) and into a plain dict for JSON output
(``to_dict``). ``Verbatim`` records carrying raw text bypass the printer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loaddefs.lisp import NIL, T, Form, Symbol, make_list, prin1, quoted, to_items

AUTOLOAD = Symbol("autoload")
DEFVAR = Symbol("defvar")

_USAGE_RE = re.compile(r"\n\n\(fn(?: .*)?\)\Z")
_TRAILING_NEWLINES_RE = re.compile(r"\n?\n\Z")


# =============================================================================
# Docstring usage encoding
# =============================================================================


def make_usage(arglist: Any) -> str:
    """Render an argument list as a ``(fn ARG ...)`` usage string."""
    args: list[Any] = [Symbol("fn")]
    for arg in to_items(arglist):
        if isinstance(arg, Symbol):
            name = arg.name
            if name.startswith("&"):
                args.append(arg)
            elif name.startswith("_") and len(name) > 1:
                args.append(Symbol(name[1:].upper()))
            else:
                args.append(Symbol(name.upper()))
        elif isinstance(arg, Form) and isinstance(arg.head, Symbol):
            args.append(Form((Symbol(arg.head.name.upper()), *arg.items[1:]), arg.tail))
        else:
            args.append(arg)
    usage = prin1(make_list(*args), escape_newlines=False)
    return usage.replace("`", "\\=`").replace("'", "\\='")


def add_usage(docstring: str | None, arglist: Any) -> str:
    """Append the usage line for ``arglist`` unless the docstring has one."""
    doc = docstring or ""
    if _USAGE_RE.search(doc):
        return doc
    m = _TRAILING_NEWLINES_RE.search(doc)
    if m:
        separator = "\n" if m.end() - m.start() < 2 else ""
    else:
        separator = "\n\n"
    return doc + separator + make_usage(arglist)


def _name_expr(name: Any) -> Any:
    return quoted(name) if isinstance(name, Symbol) else name


def _or_nil(value: Any) -> Any:
    return NIL if value is None else value


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True, slots=True)
class FunctionDecl:
    """A function or macro to autoload.

    ``arglist`` is None when the argument list is unknown or gives no usage
    line; ``interactive`` is None, True, or a tuple of the modes the command
    is meant for.
    """

    name: Any
    module: str
    docstring: str | None = None
    arglist: Any = None
    interactive: bool | tuple[Any, ...] | None = None
    macro: bool = False

    kind = "function"

    @property
    def documentation(self) -> str | None:
        """Docstring with the usage line appended when the arglist is known."""
        if self.arglist is None:
            return self.docstring
        return add_usage(self.docstring, self.arglist)

    def to_form(self) -> Form:
        if self.interactive is None or self.interactive is False:
            interactive: Any = NIL
        elif self.interactive is True:
            interactive = T
        else:
            interactive = quoted(make_list(*self.interactive))
        items = [
            AUTOLOAD,
            _name_expr(self.name),
            self.module,
            _or_nil(self.documentation),
            interactive,
            quoted(Symbol("macro")) if self.macro else NIL,
        ]
        # Optional trailing nils are dropped, (autoload NAME FILE) at minimum.
        while len(items) > 3 and items[-1] == NIL:
            items.pop()
        return Form(tuple(items))

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "name": prin1(self.name),
            "module": self.module,
            "docstring": self.docstring,
            "arglist": None if self.arglist is None else prin1(self.arglist),
            "interactive": (
                self.interactive
                if self.interactive is None or isinstance(self.interactive, bool)
                else [prin1(mode) for mode in self.interactive]
            ),
            "macro": self.macro,
        }


@dataclass(frozen=True, slots=True)
class VariableDecl:
    """A ``defvar`` standing in for a ``defcustom`` with a default initializer."""

    name: Any
    module: str
    initial: Any = NIL
    docstring: str | None = None

    kind = "variable"

    def to_form(self) -> Form:
        return Form((DEFVAR, self.name, self.initial, _or_nil(self.docstring)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "name": prin1(self.name),
            "module": self.module,
            "initial": prin1(self.initial),
            "docstring": self.docstring,
        }


@dataclass(frozen=True, slots=True)
class CustomDecl:
    """Tells the customization machinery which file defines a user option."""

    name: Any
    module: str
    noset: bool = True

    kind = "custom"

    def to_form(self) -> Form:
        return Form(
            (Symbol("custom-autoload"), quoted(self.name), self.module, T if self.noset else NIL)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "name": prin1(self.name),
            "module": self.module,
            "noset": self.noset,
        }


@dataclass(frozen=True, slots=True)
class GroupDecl:
    """Registers the module as a loader of a customization group.

    The rendered form checks ``custom-loads`` before adding the module, so
    loading a manifest twice, or two manifests naming the same group,
    never duplicates the entry.
    """

    name: Any
    module: str

    kind = "group"

    def to_form(self) -> Form:
        loads = Symbol("loads")
        group = quoted(self.name)
        custom_loads = quoted(Symbol("custom-loads"))
        module = quoted(self.module)
        return Form(
            (
                Symbol("let"),
                make_list(make_list(loads, make_list(Symbol("get"), group, custom_loads))),
                make_list(
                    Symbol("if"),
                    make_list(Symbol("member"), module, loads),
                    NIL,
                    make_list(
                        Symbol("put"),
                        group,
                        custom_loads,
                        make_list(Symbol("cons"), module, loads),
                    ),
                ),
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "name": prin1(self.name), "module": self.module}


@dataclass(frozen=True, slots=True)
class ClassDecl:
    """An EIEIO class to autoload."""

    name: Any
    parents: tuple[Any, ...]
    module: str
    docstring: Any = None

    kind = "class"

    def to_form(self) -> Form:
        return Form(
            (
                Symbol("eieio-defclass-autoload"),
                quoted(self.name),
                quoted(make_list(*self.parents)),
                self.module,
                _or_nil(self.docstring),
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "name": prin1(self.name),
            "parents": [prin1(parent) for parent in self.parents],
            "module": self.module,
            "docstring": self.docstring if isinstance(self.docstring, str) else None,
        }


@dataclass(frozen=True, slots=True)
class PrefixDecl:
    """The covering prefix set of a module's definitions."""

    module: str
    prefixes: tuple[str, ...]

    kind = "prefixes"

    def to_form(self) -> Form:
        return Form(
            (
                Symbol("register-definition-prefixes"),
                self.module,
                quoted(make_list(*self.prefixes)),
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "module": self.module, "prefixes": list(self.prefixes)}


@dataclass(frozen=True, slots=True)
class Verbatim:
    """Copied into the manifest as is.

    ``payload`` is either raw text (the rest of a cookie line) or a Lisp
    datum that is printed unchanged.
    """

    payload: Any

    kind = "verbatim"

    def to_form(self) -> Any:
        if isinstance(self.payload, str):
            raise TypeError("raw text verbatim records have no form")
        return self.payload

    def to_dict(self) -> dict[str, Any]:
        text = self.payload if isinstance(self.payload, str) else prin1(self.payload)
        return {"kind": self.kind, "raw": isinstance(self.payload, str), "text": text}


@dataclass(frozen=True, slots=True)
class PackageVersion:
    """Declares the version of a package bundled with the scanned tree."""

    package: str
    version: tuple[int, ...]

    kind = "package-version"

    def to_form(self) -> Form:
        entry = make_list(Symbol(self.package), *self.version)
        return Form(
            (
                Symbol("push"),
                make_list(Symbol("purecopy"), quoted(entry)),
                Symbol("package--builtin-versions"),
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "package": self.package, "version": list(self.version)}


RegistrationRecord = (
    FunctionDecl
    | VariableDecl
    | CustomDecl
    | GroupDecl
    | ClassDecl
    | PrefixDecl
    | Verbatim
    | PackageVersion
)


def render_record(record: RegistrationRecord, *, escape_newlines: bool = True) -> str:
    """Text of one record as it appears in a manifest."""
    if isinstance(record, Verbatim) and isinstance(record.payload, str):
        return record.payload
    return prin1(record.to_form(), escape_newlines=escape_newlines)


@dataclass(frozen=True, slots=True)
class DestinationEntry:
    """One record, the manifest it goes to, and the file it came from."""

    destination: Path
    source: Path
    module: str
    record: RegistrationRecord
