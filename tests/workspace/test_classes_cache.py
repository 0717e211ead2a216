"""
Tests for ocls/workspace/classes_cache.py
"""

from pathlib import Path
from unittest.mock import Mock

import pytest
from lsprotocol.types import MessageType

from ocls.workspace.classes_cache import ClassDefinition, ClassesCache


@pytest.fixture
def classes_cache():
    return ClassesCache()


@pytest.fixture
def view_file(tmp_path):
    php_file = tmp_path / "view.php"
    php_file.write_text("""<?php
/**
 * class Foo is mentioned in a comment
 */

namespace OC\\Files;

class View {
    public function mkdir($path) {}
    protected function helper() {}
    private function secret() {}
    public static function normalize($path) {}
    function legacy() {}
    public function __construct() {}
}

interface Storage {
    public function stat($path);
}
""")
    return php_file


class TestClassDefinition:

    def test_full_name_from_namespace(self):
        class_def = ClassDefinition(
            file_path=Path("/path/to/view.php"),
            line_number=3,
            namespace="OC\\Files",
            class_name="View",
        )

        assert class_def.full_name == "OC\\Files\\View"
        assert class_def.methods == []

    def test_full_name_without_namespace(self):
        class_def = ClassDefinition(
            file_path=Path("/path/to/util.php"),
            line_number=2,
            class_name="OC_Util",
        )

        assert class_def.full_name == "OC_Util"


class TestLoadFile:

    def test_parses_declarations(self, classes_cache, view_file):
        class_defs = classes_cache.load_file(view_file)

        assert [c.full_name for c in class_defs] == ["OC\\Files\\View", "OC\\Files\\Storage"]

        view = classes_cache.get("OC\\Files\\View")
        assert view.namespace == "OC\\Files"
        assert view.class_name == "View"
        assert view.line_number == 8
        assert view.methods == ["mkdir", "normalize", "legacy"]
        assert view.file_path == view_file.resolve()

        storage = classes_cache.get("\\OC\\Files\\Storage")
        assert storage.methods == ["stat"]

    def test_global_class(self, classes_cache, tmp_path):
        php_file = tmp_path / "util.php"
        php_file.write_text("<?php\n\nabstract class OC_Util {\n}\n\nfinal class OC_Helper {\n}\n")

        classes_cache.load_file(php_file)

        assert set(classes_cache.get_all()) == {"OC_Util", "OC_Helper"}
        assert classes_cache.get("OC_Helper").line_number == 6

    def test_loads_once(self, classes_cache, view_file):
        first = classes_cache.load_file(view_file)
        view_file.write_text("<?php\nclass Other {\n}\n")

        second = classes_cache.load_file(view_file)

        assert second is first
        assert classes_cache.get("Other") is None
        assert classes_cache.loaded_files() == [view_file.resolve()]

    def test_is_loaded(self, classes_cache, view_file):
        assert not classes_cache.is_loaded(view_file)

        classes_cache.load_file(view_file)

        assert classes_cache.is_loaded(view_file)

    def test_unreadable_file_logs_warning(self, tmp_path):
        server = Mock()
        classes_cache = ClassesCache(server)

        assert classes_cache.load_file(tmp_path / "missing.php") == []

        server.window_log_message.assert_called_once()
        params = server.window_log_message.call_args[0][0]
        assert params.type == MessageType.Warning
        assert "missing.php" in params.message


class TestLookups:

    def test_search(self, classes_cache, view_file):
        classes_cache.load_file(view_file)

        results = classes_cache.search("stor")

        assert [c.full_name for c in results] == ["OC\\Files\\Storage"]

    def test_search_orders_prefix_matches_first(self, classes_cache, view_file):
        classes_cache.load_file(view_file)

        results = classes_cache.search("files")

        assert [c.class_name for c in results] == ["Storage", "View"]

    def test_search_limit(self, classes_cache, view_file):
        classes_cache.load_file(view_file)

        assert len(classes_cache.search("OC", limit=1)) == 1

    def test_get_methods(self, classes_cache, view_file):
        classes_cache.load_file(view_file)

        assert classes_cache.get_methods("OC\\Files\\Storage") == ["stat"]
        assert classes_cache.get_methods("Missing") == []


class TestInvalidateFile:

    def test_reloads_changed_file(self, classes_cache, view_file):
        classes_cache.load_file(view_file)
        view_file.write_text("<?php\nnamespace OC\\Files;\n\nclass Mapper {\n}\n")

        classes_cache.invalidate_file(view_file)

        assert classes_cache.get("OC\\Files\\View") is None
        assert classes_cache.get("OC\\Files\\Mapper") is not None

    def test_forgets_deleted_file(self, classes_cache, view_file):
        classes_cache.load_file(view_file)
        view_file.unlink()

        classes_cache.invalidate_file(view_file)

        assert classes_cache.get_all() == {}
        assert not classes_cache.is_loaded(view_file)

    def test_ignores_files_never_loaded(self, classes_cache, view_file):
        classes_cache.invalidate_file(view_file)

        assert not classes_cache.is_loaded(view_file)
