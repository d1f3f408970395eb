"""End-to-end tests for generation runs."""

from __future__ import annotations

from pathlib import Path

import pytest

from loaddefs.config.models import ExtractConfig, LoaddefsConfig
from loaddefs.core.errors import ExtractError
from loaddefs.core.logging import get_run_id
from loaddefs.generate import discover_files, generate

FOO = """\
;;; foo.el --- Foo  -*- lexical-binding: t -*-

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

BAR = """\
;; Version: 2.1

;;;###bar-autoload
(defun bar-open () "Open." nil)

(defun bar-helper () nil)
(defun bar-other () nil)
"""


@pytest.fixture
def lisp_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "lisp"
    directory.mkdir()
    (directory / "foo.el").write_text(FOO, encoding="utf-8")
    return directory


class TestGenerate:
    def test_given_one_file_then_function_and_prefix_records(self, lisp_dir: Path) -> None:
        """A single source file yields one function and one prefix record."""
        # When
        result = generate([lisp_dir])

        # Then
        main = lisp_dir / "loaddefs.el"
        assert result.written == [main]
        (manifest,) = result.manifests
        assert manifest.record_count == 2
        text = main.read_text(encoding="utf-8")
        assert text.count("(autoload ") == 1
        assert text.count("(register-definition-prefixes ") == 1
        assert '(register-definition-prefixes "foo" \'("foo-counter"))' in text

    def test_second_run_is_unchanged(self, lisp_dir: Path) -> None:
        generate([lisp_dir])
        first = (lisp_dir / "loaddefs.el").read_bytes()

        result = generate([lisp_dir])

        assert result.written == []
        assert result.unchanged == [lisp_dir / "loaddefs.el"]
        assert (lisp_dir / "loaddefs.el").read_bytes() == first

    def test_generated_manifest_is_not_scanned(self, lisp_dir: Path) -> None:
        generate([lisp_dir])

        result = generate([lisp_dir])

        assert result.files == [lisp_dir / "foo.el"]

    def test_tagged_cookie_and_version_go_to_their_manifests(self, lisp_dir: Path) -> None:
        (lisp_dir / "bar.el").write_text(BAR, encoding="utf-8")

        result = generate([lisp_dir])

        assert [manifest.destination.name for manifest in result.manifests] == [
            "bar-loaddefs.el",
            "loaddefs.el",
        ]
        main_text = (lisp_dir / "loaddefs.el").read_text(encoding="utf-8")
        assert "(push (purecopy '(bar 2 1)) package--builtin-versions)" in main_text
        assert main_text.index('"bar.el"') < main_text.index('"foo.el"')
        tagged_text = (lisp_dir / "bar-loaddefs.el").read_text(encoding="utf-8")
        assert "(autoload 'bar-open \"bar\"" in tagged_text

    def test_version_only_files(self, lisp_dir: Path) -> None:
        (lisp_dir / "bar.el").write_text(BAR, encoding="utf-8")
        config = LoaddefsConfig(extract=ExtractConfig(version_only_files=["bar.el"]))

        result = generate([lisp_dir], config=config)

        assert [manifest.destination.name for manifest in result.manifests] == ["loaddefs.el"]
        main_text = (lisp_dir / "loaddefs.el").read_text(encoding="utf-8")
        assert "(push (purecopy '(bar 2 1))" in main_text
        assert '"bar" \'("bar-"))' not in main_text

    def test_dry_run_writes_nothing(self, lisp_dir: Path) -> None:
        result = generate([lisp_dir], dry_run=True)

        assert result.written == []
        assert len(result.manifests) == 1
        assert not (lisp_dir / "loaddefs.el").exists()

    def test_explicit_output_file(self, lisp_dir: Path, tmp_path: Path) -> None:
        output = tmp_path / "out" / "autoloads.el"

        result = generate([lisp_dir], output)

        assert result.written == [output]
        assert '"../lisp/foo.el"' in output.read_text(encoding="utf-8")

    def test_empty_directory_still_writes_main_manifest(self, tmp_path: Path) -> None:
        result = generate([tmp_path])

        assert result.written == [tmp_path / "loaddefs.el"]
        assert result.manifests[0].sections == ()

    def test_failure_aborts_run(self, lisp_dir: Path) -> None:
        (lisp_dir / "bad.el").write_bytes(b"\xff\xfe\n")

        with pytest.raises(ExtractError):
            generate([lisp_dir])

        assert not (lisp_dir / "loaddefs.el").exists()
        assert get_run_id() is None

    def test_keep_going_skips_failed_files(self, lisp_dir: Path) -> None:
        bad = lisp_dir / "bad.el"
        bad.write_bytes(b"\xff\xfe\n")

        result = generate([lisp_dir], keep_going=True)

        assert list(result.failed) == [bad]
        assert result.written == [lisp_dir / "loaddefs.el"]
        assert result.to_dict()["failed"][str(bad)]["code"] == 4001

    def test_keep_going_skips_unreadable_character_escape(self, lisp_dir: Path) -> None:
        bad = lisp_dir / "bad.el"
        bad.write_text(';;;###autoload\n(defun bad-x () "\\x110000")\n', encoding="utf-8")

        result = generate([lisp_dir], keep_going=True)

        assert list(result.failed) == [bad]
        assert result.to_dict()["failed"][str(bad)]["code"] == 3003
        assert "foo-hello" in (lisp_dir / "loaddefs.el").read_text(encoding="utf-8")

    def test_run_id_is_cleared_after_run(self, lisp_dir: Path) -> None:
        result = generate([lisp_dir])

        assert len(result.run_id) == 12
        assert get_run_id() is None

    def test_directories_required(self) -> None:
        with pytest.raises(ValueError):
            generate([])

    def test_result_to_dict(self, lisp_dir: Path) -> None:
        result = generate([lisp_dir])

        data = result.to_dict()

        assert data["files"] == 1
        assert data["manifests"] == [
            {"destination": str(lisp_dir / "loaddefs.el"), "sections": 1, "records": 2}
        ]
        assert data["run_id"] == result.run_id


class TestDiscoverFiles:
    def test_filters_and_sorts(self, tmp_path: Path) -> None:
        for name in (
            "b.el",
            "a.el",
            "notes.txt",
            ".#a.el",
            "=scratch.el",
            "loaddefs.el",
            "foo-loaddefs.el",
            "foo-autoloads.el",
        ):
            (tmp_path / name).write_text("", encoding="utf-8")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "c.el").write_text("", encoding="utf-8")

        assert discover_files([tmp_path]) == [tmp_path / "a.el", tmp_path / "b.el"]
        assert discover_files([tmp_path], recursive=True) == [
            tmp_path / "a.el",
            tmp_path / "b.el",
            tmp_path / "sub" / "c.el",
        ]

    def test_excluded_names_and_paths(self, tmp_path: Path) -> None:
        for name in ("a.el", "b.el", "c.el"):
            (tmp_path / name).write_text("", encoding="utf-8")
        config = LoaddefsConfig(extract=ExtractConfig(excluded_files=["b.el"]))

        found = discover_files([tmp_path], config=config, exclude=[tmp_path / "c.el"])

        assert found == [tmp_path / "a.el"]
