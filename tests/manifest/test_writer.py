"""Tests for manifest writing."""

from __future__ import annotations

from pathlib import Path

from loaddefs.manifest.writer import write_if_changed


class TestWriteIfChanged:
    def test_writes_new_file(self, tmp_path: Path) -> None:
        path = tmp_path / "sub" / "loaddefs.el"

        assert write_if_changed(path, "content\n") is True
        assert path.read_text(encoding="utf-8") == "content\n"

    def test_unchanged_content_is_not_rewritten(self, tmp_path: Path) -> None:
        path = tmp_path / "loaddefs.el"
        write_if_changed(path, "content\n")
        before = path.stat().st_mtime_ns

        assert write_if_changed(path, "content\n") is False
        assert path.stat().st_mtime_ns == before

    def test_changed_content_replaces_file(self, tmp_path: Path) -> None:
        path = tmp_path / "loaddefs.el"
        write_if_changed(path, "old\n")

        assert write_if_changed(path, "new\n") is True
        assert path.read_text(encoding="utf-8") == "new\n"

    def test_no_temporary_files_left(self, tmp_path: Path) -> None:
        path = tmp_path / "loaddefs.el"
        write_if_changed(path, "a\n")
        write_if_changed(path, "b\n")

        assert [p.name for p in tmp_path.iterdir()] == ["loaddefs.el"]

    def test_newlines_are_not_translated(self, tmp_path: Path) -> None:
        path = tmp_path / "loaddefs.el"

        write_if_changed(path, "a\nb\n")

        assert path.read_bytes() == b"a\nb\n"
