"""
Autoloader: map ownCloud class names to candidate files and load them.

Resolution order for a class name:
1. Explicit class paths registered with register_class()
2. The global class path (AutoloadContext.class_path), unless disabled
3. ownCloud naming conventions (OC_, OC\\, OCP\\, OCA\\, Test_, Test\\)
4. Prefixes registered with register_prefix()

The first branch that applies produces all candidates; later branches are
not consulted.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable

from lsprotocol.types import LogMessageParams, MessageType

from ocls.autoload.context import AutoloadContext
from ocls.autoload.types import ClassKind
from ocls.workspace.classes_cache import ClassesCache

if TYPE_CHECKING:
    from ocls.lsp.oc_language_server import OcLanguageServer


# Hardcoded ownCloud namespaces. Checked in order, first match wins.
CONVENTION_PREFIXES: list[tuple[str, ClassKind]] = [
    ("OC_", ClassKind.LEGACY_UNDERSCORE),
    ("OC\\", ClassKind.CORE_NAMESPACE),
    ("OCP\\", ClassKind.PUBLIC_NAMESPACE),
    ("OCA\\", ClassKind.APP_NAMESPACE),
    ("Test_", ClassKind.TEST_UNDERSCORE),
    ("Test\\", ClassKind.TEST_NAMESPACE),
]

LEGACY_APPS_DIR = "apps/"


def _to_path(name: str, separator: str) -> str:
    """OC_Foo_Bar style remainder -> foo/bar.php"""
    return name.replace(separator, "/").lower() + ".php"


class Autoloader:
    """
    Resolves class names to files following ownCloud conventions.

    Usage:
        context = AutoloadContext(include_path=[root / "lib", root])
        autoloader = Autoloader(context)
        autoloader.register_prefix("Sabre_", "3rdparty")

        autoloader.find_class("OC_Files")   # ['legacy/files.php', 'files.php']
        autoloader.load("OC_Files")         # True if a file was loaded
    """

    def __init__(
        self,
        context: AutoloadContext | None = None,
        classes_cache: ClassesCache | None = None,
        server: OcLanguageServer | None = None,
    ) -> None:
        self.context = context or AutoloadContext()
        self.server = server
        self.classes_cache = classes_cache or ClassesCache(server)

        self._use_global_class_path = True
        self._prefix_paths: dict[str, str] = {}
        self._class_paths: dict[str, str] = {}

        self._path_builders: dict[ClassKind, Callable[[str], list[str]]] = {
            ClassKind.EXPLICIT: self._explicit_paths,
            ClassKind.GLOBAL_OVERRIDE: self._global_paths,
            ClassKind.LEGACY_UNDERSCORE: self._legacy_paths,
            ClassKind.CORE_NAMESPACE: self._core_paths,
            ClassKind.PUBLIC_NAMESPACE: self._public_paths,
            ClassKind.APP_NAMESPACE: self._app_paths,
            ClassKind.TEST_UNDERSCORE: self._test_legacy_paths,
            ClassKind.TEST_NAMESPACE: self._test_paths,
            ClassKind.USER_PREFIX: self._prefix_paths_for,
        }

    # ===== Registration =====

    def register_prefix(self, prefix: str, path: str) -> None:
        """Add a custom prefix. A later call for the same prefix overwrites it."""
        self._prefix_paths[prefix] = path

    def register_class(self, class_name: str, path: str) -> None:
        """Add an explicit class path. A later call for the same class overwrites it."""
        self._class_paths[class_name] = path

    def enable_global_class_path(self) -> None:
        self._use_global_class_path = True

    def disable_global_class_path(self) -> None:
        self._use_global_class_path = False

    @property
    def uses_global_class_path(self) -> bool:
        return self._use_global_class_path

    @property
    def prefixes(self) -> dict[str, str]:
        return dict(self._prefix_paths)

    @property
    def class_paths(self) -> dict[str, str]:
        return dict(self._class_paths)

    # ===== Resolution =====

    def classify(self, class_name: str) -> ClassKind:
        """Determine which rule resolves the given class name."""
        class_name = class_name.strip("\\")

        if class_name in self._class_paths:
            return ClassKind.EXPLICIT

        if self._use_global_class_path and class_name in self.context.class_path:
            return ClassKind.GLOBAL_OVERRIDE

        for prefix, kind in CONVENTION_PREFIXES:
            if class_name.startswith(prefix):
                return kind

        if any(class_name.startswith(prefix) for prefix in self._prefix_paths):
            return ClassKind.USER_PREFIX

        return ClassKind.UNMATCHED

    def find_class(self, class_name: str) -> list[str]:
        """
        Get the possible paths for a class.

        Args:
            class_name: Class name, leading/trailing backslashes are ignored

        Returns:
            Candidate paths in the order they should be tried, possibly empty
        """
        class_name = class_name.strip("\\")

        builder = self._path_builders.get(self.classify(class_name))
        if builder is None:
            return []

        return builder(class_name)

    def load(self, class_name: str) -> bool:
        """
        Load the first resolvable file for a class.

        Each file is loaded only once; asking again for a class whose file
        is already loaded is a no-op that still reports success.

        Returns:
            True if a file for the class was found and loaded
        """
        full_path = self.resolve(class_name)
        if full_path is None:
            return False

        self.classes_cache.load_file(full_path)
        return True

    def resolve(self, class_name: str) -> Path | None:
        """Get the file load() would pick for a class, without loading it."""
        for path in self.find_class(class_name):
            full_path = self.context.resolve_include_path(path, files_only=True)
            if full_path:
                return full_path

        return None

    # ===== Path builders =====

    def _explicit_paths(self, class_name: str) -> list[str]:
        return [self._class_paths[class_name]]

    def _global_paths(self, class_name: str) -> list[str]:
        path = self.context.class_path[class_name]
        paths = [path]

        # Apps used to be referenced relative to the server root. Strip the
        # "apps/" segment so they resolve against any app root.
        if path.startswith(LEGACY_APPS_DIR):
            self._log(
                f'include path for class "{class_name}" starts with "{LEGACY_APPS_DIR}"',
                MessageType.Log,
            )
            paths.append(path.replace(LEGACY_APPS_DIR, ""))

        return paths

    def _legacy_paths(self, class_name: str) -> list[str]:
        path = _to_path(class_name[len("OC_"):], "_")
        return [f"legacy/{path}", path]

    def _core_paths(self, class_name: str) -> list[str]:
        return [_to_path(class_name[len("OC\\"):], "\\")]

    def _public_paths(self, class_name: str) -> list[str]:
        return ["public/" + _to_path(class_name[len("OCP\\"):], "\\")]

    def _app_paths(self, class_name: str) -> list[str]:
        paths = []

        # OCA\Files\Share\Api -> app "files", rest "share/api.php"
        segments = class_name.split("\\")
        app = segments[1].lower()
        # OCA\Files alone has no rest: its lib/ candidate is named after the app
        rest = _to_path("\\".join(segments[2:] or segments[1:2]), "\\")
        full = _to_path(class_name[len("OCA\\"):], "\\")

        for app_root in self.context.app_roots:
            if not self.context.resolve_include_path(app_root.path / app):
                continue

            paths.append(f"{app_root.path}/{full}")
            # Not in the root of the app: try the app's lib/ directory.
            paths.append(f"{app_root.path}/{app}/lib/{rest}")

        return paths

    def _test_legacy_paths(self, class_name: str) -> list[str]:
        return ["tests/lib/" + _to_path(class_name[len("Test_"):], "_")]

    def _test_paths(self, class_name: str) -> list[str]:
        return ["tests/lib/" + _to_path(class_name[len("Test\\"):], "\\")]

    def _prefix_paths_for(self, class_name: str) -> list[str]:
        paths = []
        for prefix, directory in self._prefix_paths.items():
            if class_name.startswith(prefix):
                path = class_name.replace("\\", "/").replace("_", "/") + ".php"
                paths.append(f"{directory}/{path}")

        return paths

    def _log(self, message: str, message_type: MessageType) -> None:
        if self.server:
            self.server.window_log_message(
                LogMessageParams(type=message_type, message=message)
            )
