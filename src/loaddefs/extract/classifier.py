"""Form classifier: turns one top-level form into registration records.

Dispatch is table-driven by the head symbol of the form. Derived
definitions (``define-minor-mode``, ``cl-defstruct``, ...) are macro
expanded and the expansion is classified again as a *byproduct*: in that
mode ``defalias``, ``progn``/``prog1`` and arbitrary side-effect forms are
recognised too.

The classifier returns ``None`` for forms that are not extraction-worthy;
it never raises for a form it does not understand.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loaddefs.config.constants import AUTOLOAD_END
from loaddefs.core.errors import ExpansionError
from loaddefs.core.logging import get_logger
from loaddefs.extract.expander import MacroExpander, NullExpander
from loaddefs.extract.records import (
    ClassDecl,
    CustomDecl,
    FunctionDecl,
    GroupDecl,
    RegistrationRecord,
    VariableDecl,
    Verbatim,
)
from loaddefs.lisp import (
    NIL,
    QUOTE,
    Form,
    Symbol,
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

Records = list[RegistrationRecord]
Handler = Callable[[Form, str], "Records | None"]

# =============================================================================
# Head tables
# =============================================================================

DERIVED_DEFINITION_HEADS: frozenset[str] = frozenset(
    (
        "easy-mmode-define-global-mode",
        "define-global-minor-mode",
        "define-globalized-minor-mode",
        "defun",
        "defmacro",
        "easy-mmode-define-minor-mode",
        "define-minor-mode",
        "define-inline",
        "cl-defun",
        "cl-defmacro",
        "cl-defgeneric",
        "cl-defstruct",
        "pcase-defmacro",
        "iter-defun",
        "cl-iter-defun",
    )
)
"""Heads that are macro expanded and classified on their expansion."""

EXPANSION_HEADS: frozenset[str] = frozenset(("progn", "prog1", "defalias"))
"""An expansion is only classified when it is one of these shapes."""

_ARGS_AT_POSITION_2 = (
    "defun",
    "defmacro",
    "defun*",
    "defmacro*",
    "cl-defun",
    "cl-defmacro",
    "define-overloadable-function",
    "transient-define-prefix",
    "transient-define-suffix",
    "transient-define-infix",
)
_ARGS_EMPTY = ("define-generic-mode", "define-derived-mode", "define-compilation-mode")
_ARGS_UNKNOWN = (
    "define-skeleton",
    "easy-mmode-define-keymap",
    "easy-mmode-define-syntax",
    "easy-mmode-define-minor-mode",
    "define-minor-mode",
    "easy-mmode-define-global-mode",
    "define-global-minor-mode",
    "define-globalized-minor-mode",
)

DIRECT_FUNCTION_HEADS: frozenset[str] = frozenset(
    _ARGS_AT_POSITION_2 + _ARGS_EMPTY + _ARGS_UNKNOWN
)
"""Heads whose name, arguments and docstring are read directly."""

MACRO_HEADS: frozenset[str] = frozenset(("defmacro", "cl-defmacro", "defmacro*"))

INTERACTIVE_HEADS: frozenset[str] = frozenset(
    (
        "define-skeleton",
        "define-derived-mode",
        "define-generic-mode",
        "easy-mmode-define-global-mode",
        "define-global-minor-mode",
        "define-globalized-minor-mode",
        "easy-mmode-define-minor-mode",
        "define-minor-mode",
    )
)
"""Heads that always define commands."""

DOC_STRING_ELT: dict[str, int] = {
    "define-skeleton": 2,
    "define-derived-mode": 4,
    "define-generic-mode": 7,
    "define-minor-mode": 2,
    "easy-mmode-define-minor-mode": 2,
    "define-global-minor-mode": 2,
    "define-globalized-minor-mode": 2,
    "easy-mmode-define-global-mode": 2,
    "easy-mmode-define-keymap": 2,
    "easy-mmode-define-syntax": 2,
}
"""Position of the docstring for heads that do not use the default of 3."""

DEFAULT_DOC_STRING_ELT = 3

SKELETON_ARGLIST = make_list(Symbol("&optional"), Symbol("str"), Symbol("arg"))

DEFAULT_INITIALIZERS: frozenset[str] = frozenset(
    ("custom-initialize-default", "custom-initialize-reset")
)


def argument_list(head: str, form: Form) -> Any:
    """Argument list of a direct definition, or None when it cannot be known."""
    if head in _ARGS_AT_POSITION_2:
        return nth(form, 2)
    if head == "define-skeleton":
        return SKELETON_ARGLIST
    if head in _ARGS_EMPTY:
        return NIL
    return None


def interactive_spec(form: Any) -> bool | tuple[Any, ...] | None:
    """Interactive marker of an ``(interactive ...)`` form, if it is one.

    ``(interactive)`` and ``(interactive "p")`` give True; extra elements
    after the spec name the modes the command is meant for.
    """
    if head_name(form) != "interactive":
        return None
    modes = form.items[2:]
    return tuple(modes) if modes else True


class FormClassifier:
    """Classifies top-level forms into registration records.

    Args:
        expander: Macro expansion capability for derived definitions.
    """

    def __init__(self, expander: MacroExpander | None = None) -> None:
        self.expander: MacroExpander = expander or NullExpander()
        self._handlers: dict[str, Handler] = {
            **{head: self._direct_function for head in DIRECT_FUNCTION_HEADS},
            "defclass": self._class,
            "defcustom": self._custom,
            "defgroup": self._group,
        }
        self._byproduct_handlers: dict[str, Handler] = {
            "defalias": self._alias,
            "progn": self._sequence,
            "prog1": self._sequence,
        }

    @property
    def handled_heads(self) -> frozenset[str]:
        """Every head symbol with a dedicated handler."""
        return frozenset(self._handlers) | frozenset(self._byproduct_handlers)

    def classify(self, form: Any, module: str, *, byproduct: bool = False) -> Records | None:
        """Records for ``form``, or None if it is not extraction-worthy.

        Args:
            form: A datum read from the source file.
            module: Load name of the file the form comes from.
            byproduct: True when ``form`` is (part of) a macro expansion.
        """
        head = head_name(form)
        if head is None:
            return None

        if byproduct and head in self._byproduct_handlers:
            return self._byproduct_handlers[head](form, module)

        if head in DERIVED_DEFINITION_HEADS and self.expander.is_macro(head):
            expansion = self._expand(form, module)
            if head_name(expansion) in EXPANSION_HEADS:
                return self.classify(expansion, module, byproduct=True)

        handler = self._handlers.get(head)
        if handler is not None:
            return handler(form, module)

        if byproduct:
            # Side effects attached to a definition, e.g. (put 'foo 'prop val).
            return [Verbatim(form)]
        return None

    def _expand(self, form: Form, module: str) -> Any:
        try:
            return self.expander.expand(form, module)
        except ExpansionError as e:
            get_logger("classifier").debug(
                "expansion_failed", module=module, head=head_name(form), error=e.message
            )
            return None

    # -------------------------------------------------------------------------
    # Byproduct shapes
    # -------------------------------------------------------------------------

    def _alias(self, form: Form, module: str) -> Records | None:
        """``(defalias NAME ARG . REST)`` with ARG a (possibly macro) lambda.

        An empty argument list gets no usage line.
        """
        arg = nth(form, 2)
        rest = nthcdr(form, 3)

        macro, fun = _split_macro(arg)
        lam = nth(fun, 1) if head_name(fun) in ("quote", "function") else None
        if head_name(lam) == "lambda" and len(lam.items) >= 2:
            args: Any = lam.items[1]
            body: tuple[Any, ...] | None = lam.items[2:]
        else:
            args, body = None, None

        doc = None
        if body and isinstance(body[0], str):
            doc = body[0]
        elif rest and isinstance(rest[0], str):
            doc = rest[0]

        interactive = None
        if body:
            interactive = interactive_spec(body[0])
            if interactive is None and len(body) > 1:
                interactive = interactive_spec(body[1])

        return [
            FunctionDecl(
                name=unquote(nth(form, 1)),
                module=module,
                docstring=doc,
                arglist=args if isinstance(args, Form) and args.is_proper else None,
                interactive=interactive,
                macro=macro,
            )
        ]

    def _sequence(self, form: Form, module: str) -> Records | None:
        """``progn``/``prog1``: classify each element, up to ``:autoload-end``."""
        elements = form.items[1:]
        for index, element in enumerate(elements):
            if isinstance(element, Symbol) and element.name == AUTOLOAD_END:
                elements = elements[:index]
                break
        records: Records = []
        for element in elements:
            result = self.classify(element, module, byproduct=True)
            if result:
                records.extend(result)
        return records or None

    # -------------------------------------------------------------------------
    # Direct shapes
    # -------------------------------------------------------------------------

    def _direct_function(self, form: Form, module: str) -> Records | None:
        head = form.head.name
        args = argument_list(head, form)
        body = nthcdr(form, DOC_STRING_ELT.get(head, DEFAULT_DOC_STRING_ELT))
        doc = None
        if body and isinstance(body[0], str):
            doc, body = body[0], body[1:]

        if head in INTERACTIVE_HEADS:
            interactive: bool | tuple[Any, ...] | None = True
        else:
            interactive = interactive_spec(body[0]) if body else None

        return [
            FunctionDecl(
                name=unquote(nth(form, 1)),
                module=module,
                docstring=doc,
                arglist=args if args is None or is_list(args) else None,
                interactive=interactive,
                macro=head in MACRO_HEADS,
            )
        ]

    def _class(self, form: Form, module: str) -> Records | None:
        parents = nth(form, 2)
        return [
            ClassDecl(
                name=nth(form, 1),
                parents=to_items(parents) if is_list(parents) else (parents,),
                module=module,
                docstring=nth(form, 4) if isinstance(nth(form, 4), str) else None,
            )
        ]

    def _custom(self, form: Form, module: str) -> Records | None:
        name = nth(form, 1)
        init = nth(form, 2)
        doc = nth(form, 3)
        props = nthcdr(form, 4)
        _, initializer = plist_get(props, ":initialize")
        _, setter = plist_get(props, ":set")
        has_safe, safe = plist_get(props, ":safe")

        records: Records = []
        if initializer == NIL or _initializer_name(initializer) in DEFAULT_INITIALIZERS:
            records.append(
                VariableDecl(
                    name=name,
                    module=module,
                    initial=init,
                    docstring=doc if isinstance(doc, str) else None,
                )
            )
        else:
            # The initializer may compute the value some other way; keep the
            # whole definition so loading the manifest behaves the same.
            records.append(Verbatim(form))
        records.append(CustomDecl(name=name, module=module, noset=setter == NIL))
        if has_safe and safe != NIL:
            records.append(
                Verbatim(
                    Form(
                        (
                            Symbol("put"),
                            quoted(name),
                            quoted(Symbol("safe-local-variable")),
                            safe,
                        )
                    )
                )
            )
        return records

    def _group(self, form: Form, module: str) -> Records | None:
        return [GroupDecl(name=nth(form, 1), module=module)]


def _split_macro(arg: Any) -> tuple[bool, Any]:
    """Recognise ``(cons 'macro FUN)`` and ``'(macro . FUN)``."""
    if (
        head_name(arg) == "cons"
        and len(arg.items) == 3
        and arg.items[1] == quoted(Symbol("macro"))
    ):
        return True, arg.items[2]
    if head_name(arg) == "quote" and len(arg.items) == 2:
        inner = arg.items[1]
        if head_name(inner) == "macro":
            if len(inner.items) > 1:
                return True, Form(inner.items[1:], inner.tail)
            return True, inner.tail
    return False, arg


def _initializer_name(initializer: Any) -> str | None:
    """Name of a quoted or #'-quoted initializer function."""
    if isinstance(initializer, Form) and initializer.head in (QUOTE, Symbol("function")):
        inner = unquote(initializer)
        if isinstance(inner, Symbol):
            return inner.name
    return None


__all__ = [
    "DERIVED_DEFINITION_HEADS",
    "DIRECT_FUNCTION_HEADS",
    "DOC_STRING_ELT",
    "FormClassifier",
    "argument_list",
    "interactive_spec",
]
