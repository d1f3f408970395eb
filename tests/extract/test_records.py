"""Tests for registration records and their rendering."""

from __future__ import annotations

import pytest

from loaddefs.extract.records import (
    ClassDecl,
    CustomDecl,
    FunctionDecl,
    PackageVersion,
    PrefixDecl,
    VariableDecl,
    Verbatim,
    add_usage,
    make_usage,
    render_record,
)
from loaddefs.lisp import NIL, Symbol, make_list, read_from_string

foo = Symbol("foo")


class TestUsage:
    @pytest.mark.parametrize(
        ("arglist", "expected"),
        [
            ("()", "(fn)"),
            ("(x y)", "(fn X Y)"),
            ("(x &optional y &rest z)", "(fn X &optional Y &rest Z)"),
            ("(_ignored _)", "(fn IGNORED _)"),
            ("(&key (name 'anon))", "(fn &key (NAME \\='anon))"),
        ],
    )
    def test_make_usage(self, arglist: str, expected: str) -> None:
        assert make_usage(read_from_string(arglist)) == expected

    @pytest.mark.parametrize(
        ("docstring", "expected"),
        [
            ("Doc.", "Doc.\n\n(fn X)"),
            ("Doc.\n", "Doc.\n\n(fn X)"),
            ("Doc.\n\n", "Doc.\n\n(fn X)"),
            (None, "\n\n(fn X)"),
            ("Doc.\n\n(fn ARG)", "Doc.\n\n(fn ARG)"),
        ],
    )
    def test_add_usage(self, docstring: str | None, expected: str) -> None:
        assert add_usage(docstring, read_from_string("(x)")) == expected


class TestFunctionDecl:
    def test_minimal_record_trims_trailing_nils(self) -> None:
        decl = FunctionDecl(name=foo, module="foo-lib")

        assert render_record(decl) == '(autoload \'foo "foo-lib")'

    def test_docstring_without_arglist_is_kept_as_is(self) -> None:
        decl = FunctionDecl(name=foo, module="m", docstring="Doc.")

        assert render_record(decl) == '(autoload \'foo "m" "Doc.")'

    def test_interior_nils_are_kept(self) -> None:
        decl = FunctionDecl(name=foo, module="m", macro=True)

        assert render_record(decl) == "(autoload 'foo \"m\" nil nil 'macro)"

    def test_newlines_escaped_unless_disabled(self) -> None:
        decl = FunctionDecl(name=foo, module="m", docstring="Doc.", arglist=NIL)

        assert render_record(decl) == '(autoload \'foo "m" "Doc.\\n\\n(fn)")'
        assert render_record(decl, escape_newlines=False) == (
            '(autoload \'foo "m" "Doc.\n\n(fn)")'
        )

    def test_to_dict(self) -> None:
        decl = FunctionDecl(
            name=foo,
            module="m",
            arglist=read_from_string("(x)"),
            interactive=(Symbol("foo-mode"),),
        )

        assert decl.to_dict() == {
            "kind": "function",
            "name": "foo",
            "module": "m",
            "docstring": None,
            "arglist": "(x)",
            "interactive": ["foo-mode"],
            "macro": False,
        }


class TestOtherRecords:
    def test_variable(self) -> None:
        decl = VariableDecl(name=foo, module="m", initial=read_from_string("'(1 2)"))

        assert render_record(decl) == "(defvar foo '(1 2) nil)"

    def test_custom(self) -> None:
        assert render_record(CustomDecl(name=foo, module="m")) == '(custom-autoload \'foo "m" t)'

    def test_class_with_single_parent_symbol(self) -> None:
        decl = ClassDecl(name=foo, parents=(Symbol("bar"),), module="m")

        assert render_record(decl) == "(eieio-defclass-autoload 'foo '(bar) \"m\" nil)"

    def test_prefixes(self) -> None:
        decl = PrefixDecl(module="foo", prefixes=("foo-", "foobar"))

        assert render_record(decl) == '(register-definition-prefixes "foo" \'("foo-" "foobar"))'
        assert decl.to_dict()["prefixes"] == ["foo-", "foobar"]

    def test_empty_prefix_set(self) -> None:
        decl = PrefixDecl(module="foo", prefixes=())

        assert render_record(decl) == "(register-definition-prefixes \"foo\" 'nil)"

    def test_package_version(self) -> None:
        decl = PackageVersion(package="foo", version=(1, 0, -1, 2))

        assert render_record(decl) == (
            "(push (purecopy '(foo 1 0 -1 2)) package--builtin-versions)"
        )

    def test_verbatim_text_is_copied(self) -> None:
        record = Verbatim("(put 'foo 'bar t) ; kept")

        assert render_record(record) == "(put 'foo 'bar t) ; kept"
        assert record.to_dict() == {
            "kind": "verbatim",
            "raw": True,
            "text": "(put 'foo 'bar t) ; kept",
        }
        with pytest.raises(TypeError):
            record.to_form()

    def test_verbatim_datum_is_printed(self) -> None:
        record = Verbatim(make_list(Symbol("add-hook"), Symbol("x")))

        assert render_record(record) == "(add-hook x)"
