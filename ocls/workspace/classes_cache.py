"""
ClassesCache: registry of PHP files loaded by the autoloader.

A file is read and parsed the first time it is loaded; loading it again is a
no-op, the same way require_once behaves. Parsed class declarations are kept
for lookups by fully qualified name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Sequence

from lsprotocol.types import LogMessageParams, MessageType

if TYPE_CHECKING:
    from ocls.lsp.oc_language_server import OcLanguageServer


@dataclass
class ClassDefinition:
    """Represents a parsed PHP class, interface or trait declaration."""

    file_path: Path
    line_number: int
    namespace: str = ""
    class_name: str = ""
    full_name: str = ""  # namespace + class_name
    methods: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.full_name:
            self.full_name = (
                f"{self.namespace}\\{self.class_name}" if self.namespace else self.class_name
            )


class ClassesCache:
    """Loaded files and the classes they declare."""

    def __init__(self, server: OcLanguageServer | None = None) -> None:
        self.server = server
        self._classes: dict[str, ClassDefinition] = {}
        self._loaded_files: dict[Path, list[ClassDefinition]] = {}

        self._namespace_pattern = re.compile(r'^\s*namespace\s+([^;{\s]+)', re.MULTILINE)
        self._class_pattern = re.compile(
            r'^\s*(?:abstract\s+|final\s+)?'      # optional modifiers
            r'(?:class|interface|trait)\s+(\w+)'  # declaration name
            r'[^{;]*{',                           # extends/implements, opening brace
            re.IGNORECASE | re.MULTILINE
        )
        self._method_pattern = re.compile(
            r'(public|protected|private)?\s*'      # visibility (captured)
            r'(?:static\s+)?'                      # static modifier
            r'(?:function\s+)(\w+)\s*\(',          # function name
            re.IGNORECASE
        )

    def load_file(self, file_path: Path) -> list[ClassDefinition]:
        """
        Load a PHP file once.

        Returns:
            Classes declared in the file (empty if it could not be read)
        """
        file_path = file_path.resolve()
        if file_path in self._loaded_files:
            return self._loaded_files[file_path]

        class_defs = self._parse_php_file(file_path)
        self._loaded_files[file_path] = class_defs
        for class_def in class_defs:
            self._classes[class_def.full_name] = class_def

        return class_defs

    def is_loaded(self, file_path: Path) -> bool:
        return file_path.resolve() in self._loaded_files

    def loaded_files(self) -> list[Path]:
        return list(self._loaded_files)

    def _parse_php_file(self, file_path: Path) -> list[ClassDefinition]:
        """Parse a single PHP file for class definitions."""
        try:
            with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
                content = f.read()
        except OSError as e:
            if self.server:
                self.server.window_log_message(
                    LogMessageParams(
                        type=MessageType.Warning,
                        message=f"Error reading PHP file {file_path}: {e}"
                    )
                )
            return []

        namespace = ""
        namespace_match = self._namespace_pattern.search(content)
        if namespace_match:
            namespace = namespace_match.group(1).strip().strip("\\")

        class_defs = []
        for match in self._class_pattern.finditer(content):
            class_name = match.group(1)
            line_number = content[:match.start(1)].count('\n') + 1

            class_defs.append(
                ClassDefinition(
                    file_path=file_path,
                    line_number=line_number,
                    namespace=namespace,
                    class_name=class_name,
                    methods=self._extract_methods(content, match.end()),
                )
            )

        return class_defs

    def _extract_methods(self, content: str, start_pos: int) -> list[str]:
        """Extract public method names from a class body."""
        methods = []

        # Already inside the opening brace of the class.
        brace_count = 1
        end_pos = len(content)

        for i, char in enumerate(content[start_pos:], start_pos):
            if char == '{':
                brace_count += 1
            elif char == '}':
                brace_count -= 1
                if brace_count == 0:
                    end_pos = i
                    break

        class_body = content[start_pos:end_pos]
        for match in self._method_pattern.finditer(class_body):
            visibility = match.group(1)
            method_name = match.group(2)

            if (method_name not in {'__construct', '__destruct'} and
                visibility not in {'protected', 'private'}):
                methods.append(method_name)

        return methods

    def get(self, id: str) -> ClassDefinition | None:
        """Get a class definition by full name."""
        return self._classes.get(id.strip("\\"))

    def get_all(self) -> Mapping[str, ClassDefinition]:
        return self._classes

    def search(self, query: str, limit: int = 50) -> Sequence[ClassDefinition]:
        """Search loaded classes by name or namespace."""
        query_lower = query.lower()
        results = [
            class_def for class_def in self._classes.values()
            if query_lower in class_def.full_name.lower()
        ]

        # Exact prefix matches first
        results.sort(key=lambda c: (
            not c.class_name.lower().startswith(query_lower),
            not c.full_name.lower().startswith(query_lower),
            c.class_name
        ))

        return results[:limit]

    def get_methods(self, class_name: str) -> list[str]:
        class_def = self.get(class_name)
        return class_def.methods if class_def else []

    def invalidate_file(self, file_path: Path):
        """Forget a loaded file, re-loading it if it still exists."""
        file_path = file_path.resolve()
        if file_path not in self._loaded_files:
            return

        del self._loaded_files[file_path]
        self._classes = {
            name: class_def for name, class_def in self._classes.items()
            if class_def.file_path != file_path
        }

        if file_path.exists():
            self.load_file(file_path)
