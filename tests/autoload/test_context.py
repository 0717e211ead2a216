"""
Tests for ocls/autoload/context.py
"""
from pathlib import Path

from ocls.autoload.context import AutoloadContext
from ocls.autoload.types import AppRoot


class TestAutoloadContext:

    def test_defaults(self):
        context = AutoloadContext()

        assert context.class_path == {}
        assert context.app_roots == []
        assert context.include_path == []

    def test_contexts_do_not_share_tables(self):
        first = AutoloadContext()
        second = AutoloadContext()
        first.class_path["OC_Foo"] = "foo.php"

        assert second.class_path == {}

    def test_app_root_defaults(self):
        root = AppRoot(path=Path("/var/www/apps"))

        assert root.url == "/apps"
        assert root.writable is False


class TestResolveIncludePath:

    def test_relative_path_first_match_wins(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        (tmp_path / "b" / "util.php").write_text("<?php")
        (tmp_path / "c").mkdir()
        (tmp_path / "c" / "util.php").write_text("<?php")

        context = AutoloadContext(
            include_path=[tmp_path / "a", tmp_path / "b", tmp_path / "c"]
        )

        assert context.resolve_include_path("util.php") == tmp_path / "b" / "util.php"

    def test_relative_path_not_found(self, tmp_path):
        context = AutoloadContext(include_path=[tmp_path])

        assert context.resolve_include_path("missing.php") is None

    def test_relative_path_without_include_path(self):
        assert AutoloadContext().resolve_include_path("util.php") is None

    def test_absolute_path(self, tmp_path):
        php_file = tmp_path / "util.php"
        php_file.write_text("<?php")
        context = AutoloadContext()

        assert context.resolve_include_path(str(php_file)) == php_file
        assert context.resolve_include_path(tmp_path / "missing.php") is None

    def test_directories_resolve(self, tmp_path):
        (tmp_path / "apps" / "files").mkdir(parents=True)
        context = AutoloadContext(include_path=[tmp_path])

        assert context.resolve_include_path("apps/files") == tmp_path / "apps" / "files"

    def test_files_only_skips_directories(self, tmp_path):
        (tmp_path / "a" / "util.php").mkdir(parents=True)
        (tmp_path / "b").mkdir()
        (tmp_path / "b" / "util.php").write_text("<?php")
        context = AutoloadContext(include_path=[tmp_path / "a", tmp_path / "b"])

        assert context.resolve_include_path("util.php") == tmp_path / "a" / "util.php"
        assert context.resolve_include_path("util.php", files_only=True) == tmp_path / "b" / "util.php"

    def test_files_only_absolute_directory(self, tmp_path):
        context = AutoloadContext()

        assert context.resolve_include_path(tmp_path, files_only=True) is None
