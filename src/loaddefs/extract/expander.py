"""Macro expansion for derived definitions.

The classifier only needs to expand a fixed set of defining macros
(``define-minor-mode``, ``cl-defstruct``, ...). A real expansion requires a
Lisp evaluator, so expansion is a pluggable capability: anything that
implements :class:`MacroExpander` can be handed to the classifier.

:func:`builtin_expander` covers ``defun`` and ``defmacro``, whose
expansions are fixed enough to be written down as rules.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from loaddefs.core.errors import ExpansionError
from loaddefs.lisp import (
    FUNCTION,
    Form,
    Symbol,
    head_name,
    make_list,
    quoted,
    to_items,
)

ExpansionRule = Callable[[Form, str], Any]


@runtime_checkable
class MacroExpander(Protocol):
    """Expands derived definitions into primitive forms."""

    def is_macro(self, head: str) -> bool:
        """Whether ``head`` names a macro this expander can expand."""
        ...

    def expand(self, form: Form, module: str) -> Any:
        """Fully expand ``form`` as if loaded from ``module``.

        Raises:
            ExpansionError: The form does not match the macro's syntax.
        """
        ...


class NullExpander:
    """Knows no macros; every derived definition falls through."""

    def is_macro(self, head: str) -> bool:  # noqa: ARG002
        return False

    def expand(self, form: Form, module: str) -> Any:  # noqa: ARG002
        raise ExpansionError.failed(head_name(form) or "?", "no macro expander available")


class RuleExpander:
    """Expands macros through a table of Python rules, one per head symbol."""

    def __init__(self, rules: dict[str, ExpansionRule] | None = None) -> None:
        self._rules: dict[str, ExpansionRule] = dict(rules or {})

    def register(self, head: str, rule: ExpansionRule) -> None:
        self._rules[head] = rule

    def is_macro(self, head: str) -> bool:
        return head in self._rules

    def expand(self, form: Form, module: str) -> Any:
        head = head_name(form)
        if head is None or head not in self._rules:
            raise ExpansionError.failed(head or "?", "not a known macro")
        return self._rules[head](form, module)


# =============================================================================
# Built-in rules
# =============================================================================

_DECLARE_PROPERTIES = {
    "indent": "lisp-indent-function",
    "doc-string": "doc-string-elt",
}


def _split_body(body: tuple[Any, ...]) -> tuple[tuple[Any, ...], list[Form]]:
    """Separate ``(declare ...)`` forms from a definition body.

    Declarations may follow the docstring; they are removed from the body
    that ends up in the lambda.
    """
    index = 1 if body and isinstance(body[0], str) and len(body) > 1 else 0
    declarations: list[Form] = []
    rest = list(body)
    while index < len(rest) and head_name(rest[index]) == "declare":
        declarations.append(rest.pop(index))
    return tuple(rest), declarations


def _declared_properties(name: Symbol, declarations: list[Form]) -> list[Form]:
    forms: list[Form] = []
    for declaration in declarations:
        for spec in declaration.items[1:]:
            prop = _DECLARE_PROPERTIES.get(head_name(spec) or "")
            if prop is None or len(spec.items) < 2:
                continue
            forms.append(
                Form(
                    (
                        Symbol("function-put"),
                        quoted(name),
                        quoted(Symbol(prop)),
                        quoted(spec.items[1]),
                    )
                )
            )
    return forms


def _definition_parts(form: Form) -> tuple[Symbol, Any, tuple[Any, ...]]:
    head = head_name(form) or "?"
    if len(form.items) < 3 or not isinstance(form.items[1], Symbol):
        raise ExpansionError.failed(head, "expected (NAME ARGLIST BODY...)")
    arglist = form.items[2]
    try:
        to_items(arglist)
    except TypeError:
        raise ExpansionError.failed(head, "argument list is not a list") from None
    return form.items[1], arglist, form.items[3:]


def _expand_definition(form: Form, *, macro: bool) -> Any:
    name, arglist, body = _definition_parts(form)
    body, declarations = _split_body(body)
    lam = Form((FUNCTION, make_list(Symbol("lambda"), arglist, *body)))
    value: Any = lam
    if macro:
        value = Form((Symbol("cons"), quoted(Symbol("macro")), lam))
    definition = Form((Symbol("defalias"), quoted(name), value))
    properties = _declared_properties(name, declarations)
    if not properties:
        return definition
    return Form((Symbol("prog1"), definition, *properties))


def expand_defun(form: Form, module: str) -> Any:  # noqa: ARG001
    """``(defun NAME ARGS BODY...)`` -> ``(defalias 'NAME #'(lambda ARGS BODY...))``."""
    return _expand_definition(form, macro=False)


def expand_defmacro(form: Form, module: str) -> Any:  # noqa: ARG001
    """``(defmacro NAME ARGS BODY...)`` -> ``(defalias 'NAME (cons 'macro #'(lambda ...)))``."""
    return _expand_definition(form, macro=True)


def builtin_expander() -> RuleExpander:
    """Expander with the built-in ``defun`` and ``defmacro`` rules."""
    return RuleExpander({"defun": expand_defun, "defmacro": expand_defmacro})


__all__ = [
    "ExpansionRule",
    "MacroExpander",
    "NullExpander",
    "RuleExpander",
    "builtin_expander",
    "expand_defmacro",
    "expand_defun",
]
