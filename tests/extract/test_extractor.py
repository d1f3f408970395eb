"""Tests for file-level extraction."""

from __future__ import annotations

from pathlib import Path

import pytest

from loaddefs.config.models import ExtractConfig
from loaddefs.core.errors import ErrorCode, ExtractError, ReadError
from loaddefs.extract.extractor import FileExtractor, SourceFile
from loaddefs.extract.records import (
    CustomDecl,
    FunctionDecl,
    PackageVersion,
    PrefixDecl,
    VariableDecl,
    Verbatim,
    render_record,
)
from loaddefs.lisp import Symbol, read_from_string

FOO_SOURCE = """\
;;; foo.el --- Foo  -*- lexical-binding: t -*-

;; Version: 1.2

;;; Code:

;;;###autoload
(defun foo-hello (name)
  "Say hello to NAME."
  (interactive "sName: ")
  (message "Hello %s" name))

(defvar foo-counter 0)

(provide 'foo)
;;; foo.el ends here
"""


@pytest.fixture
def extractor() -> FileExtractor:
    return FileExtractor()


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def records(entries: list) -> list:
    return [entry.record for entry in entries]


class TestParseFile:
    def test_given_cookie_and_definitions_then_function_and_prefix_records(
        self, tmp_path: Path
    ) -> None:
        """One autoloaded function plus the prefix set of the rest."""
        # Given
        source = write(tmp_path / "foo.el", FOO_SOURCE)
        main = tmp_path / "loaddefs.el"
        extractor = FileExtractor(ExtractConfig(include_package_version=False))

        # When
        entries = extractor.parse_file(source, main)

        # Then
        assert records(entries) == [
            FunctionDecl(
                name=Symbol("foo-hello"),
                module="foo",
                docstring="Say hello to NAME.",
                arglist=read_from_string("(name)"),
                interactive=True,
            ),
            PrefixDecl(module="foo", prefixes=("foo-counter",)),
        ]
        assert {entry.destination for entry in entries} == {main}
        assert {entry.source for entry in entries} == {source}
        assert render_record(entries[0].record) == (
            '(autoload \'foo-hello "foo" "Say hello to NAME.\\n\\n(fn NAME)" t)'
        )

    def test_package_version_record_comes_first(
        self, extractor: FileExtractor, tmp_path: Path
    ) -> None:
        source = write(tmp_path / "foo.el", FOO_SOURCE)

        entries = extractor.parse_file(source, tmp_path / "loaddefs.el")

        assert entries[0].record == PackageVersion(package="foo", version=(1, 2))
        assert len(entries) == 3

    def test_package_data_only(self, extractor: FileExtractor, tmp_path: Path) -> None:
        source = write(tmp_path / "foo.el", FOO_SOURCE)

        entries = extractor.parse_file(source, tmp_path / "loaddefs.el", package_data="only")

        assert records(entries) == [PackageVersion(package="foo", version=(1, 2))]

    def test_package_data_none(self, extractor: FileExtractor, tmp_path: Path) -> None:
        source = write(tmp_path / "foo.el", FOO_SOURCE)

        entries = extractor.parse_file(source, tmp_path / "loaddefs.el", package_data="none")

        assert not any(isinstance(record, PackageVersion) for record in records(entries))

    def test_package_header_names_the_package(
        self, extractor: FileExtractor, tmp_path: Path
    ) -> None:
        source = write(tmp_path / "foo.el", ";; Package: foo-mode\n;; Version: 3.0beta\n")

        entries = extractor.parse_file(source, tmp_path / "loaddefs.el", package_data="only")

        assert records(entries) == [PackageVersion(package="foo-mode", version=(3, 0, -2))]

    def test_unparsable_version_is_skipped(
        self, extractor: FileExtractor, tmp_path: Path
    ) -> None:
        source = write(tmp_path / "foo.el", ";; Version: unreleased\n")

        assert extractor.parse_file(source, tmp_path / "loaddefs.el", package_data="only") == []

    def test_defcustom_cookie_gives_variable_and_hint(
        self, extractor: FileExtractor, tmp_path: Path
    ) -> None:
        source = write(
            tmp_path / "foo.el",
            ';;;###autoload\n(defcustom foo-level 1 "Level." :type \'integer)\n',
        )

        entries = extractor.parse_file(source, tmp_path / "loaddefs.el")

        assert records(entries)[:2] == [
            VariableDecl(name=Symbol("foo-level"), module="foo", initial=1, docstring="Level."),
            CustomDecl(name=Symbol("foo-level"), module="foo", noset=True),
        ]


class TestCookies:
    def parse(self, tmp_path: Path, text: str) -> list:
        source = write(tmp_path / "foo.el", text)
        config = ExtractConfig(compute_prefixes=False)
        return FileExtractor(config).parse_file(source, tmp_path / "loaddefs.el")

    def test_rest_of_line_is_copied_verbatim(self, tmp_path: Path) -> None:
        text = ";;;###autoload (put 'foo-x 'safe t)\n(defun foo-x ())\n"
        entries = self.parse(tmp_path, text)

        assert records(entries) == [Verbatim("(put 'foo-x 'safe t)")]

    def test_rest_of_line_leading_blanks_are_skipped(self, tmp_path: Path) -> None:
        text = ";;;###autoload \t  (put 'foo-x 'safe t)  \n(defun foo-x ())\n"
        entries = self.parse(tmp_path, text)

        assert records(entries) == [Verbatim("(put 'foo-x 'safe t)  ")]

    def test_zero_argument_defun_has_no_usage_line(self, tmp_path: Path) -> None:
        entries = self.parse(tmp_path, ';;;###autoload\n(defun foo-x () "Doc." nil)\n')

        assert render_record(entries[0].record) == '(autoload \'foo-x "foo" "Doc.")'

    def test_unclassified_datum_is_kept(self, tmp_path: Path) -> None:
        entries = self.parse(tmp_path, ";;;###autoload\n(add-hook 'foo-hook #'foo-setup)\n")

        datum = read_from_string("(add-hook 'foo-hook #'foo-setup)")
        assert records(entries) == [Verbatim(datum)]

    def test_cookie_inside_string_is_ignored(self, tmp_path: Path) -> None:
        text = '(defun foo-doc ()\n  "Docs.\n;;;###autoload\nnot a cookie"\n  nil)\n'

        assert self.parse(tmp_path, text) == []

    def test_tagged_cookie_goes_to_its_own_manifest(self, tmp_path: Path) -> None:
        entries = self.parse(tmp_path, ";;;###foo-autoload\n(defun foo-x () nil)\n")

        assert [entry.destination for entry in entries] == [tmp_path / "foo-loaddefs.el"]

    def test_cookies_in_file_order(self, tmp_path: Path) -> None:
        text = (
            ";;;###autoload\n(defun foo-b () nil)\n"
            ";;;###autoload\n(defun foo-a () nil)\n"
        )

        names = [record.name.name for record in records(self.parse(tmp_path, text))]

        assert names == ["foo-b", "foo-a"]

    def test_malformed_datum_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ReadError) as exc_info:
            self.parse(tmp_path, ";;;###autoload\n(defun foo-x (\n")

        assert exc_info.value.code == ErrorCode.READ_UNEXPECTED_EOF
        assert exc_info.value.message.startswith(f"{tmp_path / 'foo.el'}: ")
        assert exc_info.value.details["source"] == str(tmp_path / "foo.el")


class TestLocalSettings:
    def test_local_outfile_redirects_records(
        self, extractor: FileExtractor, tmp_path: Path
    ) -> None:
        text = (
            ";;;###autoload\n(defun foo-x () nil)\n"
            ";; Local Variables:\n"
            ';; generated-autoload-file: "lisp/foo-defs.el"\n'
            ";; End:\n"
        )
        source = write(tmp_path / "foo.el", text)

        entries = extractor.parse_file(source, tmp_path / "loaddefs.el")

        assert {entry.destination for entry in entries} == {tmp_path / "lisp" / "foo-defs.el"}

    def test_load_name_override(self, extractor: FileExtractor, tmp_path: Path) -> None:
        text = (
            ";;;###autoload\n(defun foo-x () nil)\n"
            ';; Local Variables:\n;; generated-autoload-load-name: "pkg/foo"\n;; End:\n'
        )
        source = write(tmp_path / "foo.el", text)

        entries = extractor.parse_file(source, tmp_path / "loaddefs.el")

        assert {entry.module for entry in entries} == {"pkg/foo"}

    def test_no_update_autoloads(self, extractor: FileExtractor, tmp_path: Path) -> None:
        text = (
            ";;;###autoload\n(defun foo-x () nil)\n"
            ";; Local Variables:\n;; no-update-autoloads: t\n;; End:\n"
        )
        source = write(tmp_path / "foo.el", text)

        assert extractor.parse_file(source, tmp_path / "loaddefs.el") == []

    def test_prefixes_disabled_locally(self, extractor: FileExtractor, tmp_path: Path) -> None:
        text = (
            "(defun foo-x () nil)\n"
            ";; Local Variables:\n;; autoload-compute-prefixes: nil\n;; End:\n"
        )
        source = write(tmp_path / "foo.el", text)

        assert extractor.parse_file(source, tmp_path / "loaddefs.el") == []

    def test_prefix_destination_override(self, extractor: FileExtractor, tmp_path: Path) -> None:
        main = tmp_path / "lisp" / "loaddefs.el"
        source = write(
            tmp_path / "lisp" / "cedet" / "semantic" / "foo.el", "(defun foo-x () nil)\n"
        )

        entries = extractor.parse_file(source, main)

        assert [entry.destination for entry in entries] == [
            tmp_path / "lisp" / "cedet" / "semantic" / "loaddefs.el"
        ]


class TestSourceFile:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ExtractError) as exc_info:
            SourceFile.read(tmp_path / "missing.el", tmp_path / "loaddefs.el")

        assert exc_info.value.code == ErrorCode.EXTRACT_SOURCE_UNREADABLE

    def test_undecodable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.el"
        path.write_bytes(b"(defun \xff\xfe ())\n")

        with pytest.raises(ExtractError):
            SourceFile.read(path, tmp_path / "loaddefs.el")

    def test_settings(self, tmp_path: Path) -> None:
        path = write(tmp_path / "foo.el", FOO_SOURCE)
        source = SourceFile.read(path, tmp_path / "loaddefs.el")

        assert source.module == "foo"
        assert source.version == "1.2"
        assert source.package is None
        assert not source.inhibit
        assert source.compute_prefixes
        assert source.outfile(tmp_path / "loaddefs.el") == tmp_path / "loaddefs.el"
