"""
Process-wide autoloader state, passed explicitly.

ownCloud keeps the global class path, the list of app roots and the PHP
include path in static globals. Here they live on an AutoloadContext that
is handed to the Autoloader.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ocls.autoload.types import AppRoot


@dataclass
class AutoloadContext:
    """
    External tables consulted by the Autoloader.

    Attributes:
        class_path: Global class name -> path overrides
        app_roots: Directories holding apps, searched in order
        include_path: Directories used to resolve relative candidate paths
    """

    class_path: dict[str, str] = field(default_factory=dict)
    app_roots: list[AppRoot] = field(default_factory=list)
    include_path: list[Path] = field(default_factory=list)

    def resolve_include_path(
        self, path: str | Path, files_only: bool = False
    ) -> Path | None:
        """
        Resolve a path against the include path.

        Absolute paths are returned as-is when they exist. Relative paths
        are tried against each include directory in order and the first
        existing match wins. With files_only, directories never match.

        Returns:
            The resolved path, or None if nothing exists
        """
        candidate = Path(path)

        if candidate.is_absolute():
            return candidate if self._matches(candidate, files_only) else None

        for include_dir in self.include_path:
            full_path = include_dir / candidate
            if self._matches(full_path, files_only):
                return full_path

        return None

    @staticmethod
    def _matches(path: Path, files_only: bool) -> bool:
        return path.is_file() if files_only else path.exists()
