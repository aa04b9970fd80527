"""Tests for bluejay.deploy.files."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from bluejay.core.errors import StorageError
from bluejay.deploy import files


class TestCopy:
    """Tests for copy() and copy_into()."""

    def test_file_to_file_creates_parents(self, tmp_path):
        src = tmp_path / "a.txt"
        src.write_text("hello")
        dest = tmp_path / "deep" / "nested" / "b.txt"

        written = files.copy(src, dest)

        assert written == dest
        assert dest.read_text() == "hello"

    def test_file_into_existing_directory(self, tmp_path):
        src = tmp_path / "a.txt"
        src.write_text("hello")
        target_dir = tmp_path / "target"
        target_dir.mkdir()

        written = files.copy(src, target_dir)

        assert written == target_dir / "a.txt"
        assert written.read_text() == "hello"

    def test_overwrites(self, tmp_path):
        src = tmp_path / "a.txt"
        src.write_text("new")
        dest = tmp_path / "b.txt"
        dest.write_text("old")

        files.copy(src, dest)

        assert dest.read_text() == "new"

    def test_directory_tree(self, tmp_path):
        src = tmp_path / "dump"
        (src / "inner").mkdir(parents=True)
        (src / "inner" / "x.bson").write_bytes(b"x")

        files.copy(src, tmp_path / "copy")

        assert (tmp_path / "copy" / "inner" / "x.bson").read_bytes() == b"x"

    def test_copy_into_creates_directory(self, tmp_path):
        src = tmp_path / "acme.json"
        src.write_text("{}")

        written = files.copy_into(src, tmp_path / "agreements")

        assert written == tmp_path / "agreements" / "acme.json"

    def test_copy_into_own_directory_is_noop(self, tmp_path):
        stored = tmp_path / "agreements" / "acme_v2.json"
        stored.parent.mkdir()
        stored.write_text('{"id": "acme_v2"}')

        written = files.copy_into(stored, stored.parent)

        assert written == stored
        assert stored.read_text() == '{"id": "acme_v2"}'

    def test_missing_source(self, tmp_path):
        with pytest.raises(StorageError) as exc_info:
            files.copy(tmp_path / "missing.txt", tmp_path / "b.txt")
        assert exc_info.value.context.path == str(tmp_path / "missing.txt")


class TestDirectories:
    """Tests for make_dirs() and directory_exists()."""

    def test_make_dirs_idempotent(self, tmp_path):
        target = tmp_path / "a" / "b"
        files.make_dirs(target)
        files.make_dirs(target)
        assert files.directory_exists(target)

    def test_directory_exists_false_for_file(self, tmp_path):
        path = tmp_path / "f"
        path.write_text("")
        assert files.directory_exists(path) is False

    def test_file_name(self):
        assert files.file_name("agreements/acme_v2.json") == "acme_v2.json"


class TestWriteText:
    """Tests for the atomic write_text()."""

    def test_writes_utf8(self, tmp_path):
        target = tmp_path / "prometheus" / "targets.json"
        files.write_text(target, "ñ")
        assert target.read_text(encoding="utf-8") == "ñ"

    def test_failed_replace_keeps_old_content(self, tmp_path):
        target = tmp_path / "targets.json"
        target.write_text("old")

        with patch("bluejay.deploy.files.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                files.write_text(target, "new")

        assert target.read_text() == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["targets.json"]

    def test_read_text_missing(self, tmp_path):
        with pytest.raises(StorageError):
            files.read_text(tmp_path / "absent")

    def test_no_temp_files_left(self, tmp_path):
        files.write_text(tmp_path / "t.json", "[]")
        assert sorted(os.listdir(tmp_path)) == ["t.json"]
