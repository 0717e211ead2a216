"""
Class-related LSP capabilities.

Provides hover and go-to-definition for class names in PHP files, using the
autoloader to find the file a class lives in.
"""

from __future__ import annotations

import re
from pathlib import Path

from lsprotocol.types import (
    DefinitionParams,
    Hover,
    HoverParams,
    Location,
    MarkupContent,
    MarkupKind,
    Position,
    Range,
)

from ocls.autoload.types import ClassKind
from ocls.lsp.capabilities.capabilities import DefinitionCapability, HoverCapability

CLASS_NAME_PATTERN = re.compile(r"\\?[A-Za-z_][A-Za-z0-9_]*(?:\\[A-Za-z_][A-Za-z0-9_]*)*")
NAMESPACE_PATTERN = re.compile(r"^\s*namespace\s+([\w\\]+)\s*[;{]", re.MULTILINE)
# File-level imports only; indented `use` lines inside a class are trait uses.
USE_PATTERN = re.compile(r"^use\s+\\?([\w\\]+)(?:\s+as\s+(\w+))?\s*;", re.MULTILINE)


def _class_name_at(line: str, character: int) -> str | None:
    """
    Get the class-like name under the cursor.

    Variables ($foo), properties and methods (->foo, ::foo) are skipped.
    """
    for match in CLASS_NAME_PATTERN.finditer(line):
        if not match.start() <= character <= match.end():
            continue

        prefix = line[:match.start()]
        if prefix.endswith(("$", "->", "::")):
            return None

        return match.group(0)

    return None


def qualify_class_name(source: str, name: str) -> str:
    r"""
    Resolve a class name as written in a file to a fully qualified name.

    Follows PHP name resolution:
    - \OC\Files\View          -> OC\Files\View
    - View with `use OC\Files\View;` -> OC\Files\View
    - Files\View with `use OC\Files;` -> OC\Files\View
    - View in `namespace OCA\Files;` -> OCA\Files\View
    - OC_Util outside any namespace -> OC_Util
    """
    if name.startswith("\\"):
        return name.lstrip("\\")

    first, _, rest = name.partition("\\")

    for match in USE_PATTERN.finditer(source):
        imported = match.group(1)
        alias = match.group(2) or imported.split("\\")[-1]
        if alias == first:
            return f"{imported}\\{rest}" if rest else imported

    namespace_match = NAMESPACE_PATTERN.search(source)
    if namespace_match:
        return f"{namespace_match.group(1)}\\{name}"

    return name


class _ClassCapabilityMixin:
    """Shared lookup of the class under the cursor."""

    def _class_at_position(self, params: HoverParams | DefinitionParams) -> str | None:
        if not params.text_document.uri.endswith(".php"):
            return None

        doc = self.server.workspace.get_text_document(params.text_document.uri)  # type: ignore[attr-defined]

        try:
            line = doc.lines[params.position.line]
        except IndexError:
            return None

        name = _class_name_at(line, params.position.character)
        if not name:
            return None

        # Imported names are always fully qualified
        import_match = USE_PATTERN.match(line)
        if import_match:
            return import_match.group(1)

        return qualify_class_name(doc.source, name)


class ClassHoverCapability(_ClassCapabilityMixin, HoverCapability):
    """Shows how the autoloader resolves the class under the cursor."""

    @property
    def name(self) -> str:
        return "class_hover"

    @property
    def description(self) -> str:
        return "Show the autoloader rule and file for ownCloud class names"

    async def can_handle(self, params: HoverParams) -> bool:
        if not self.autoloader:
            return False

        class_name = self._class_at_position(params)
        if not class_name:
            return False

        return self.autoloader.classify(class_name) != ClassKind.UNMATCHED

    async def hover(self, params: HoverParams) -> Hover | None:
        class_name = self._class_at_position(params)
        if not class_name or not self.autoloader:
            return None

        kind = self.autoloader.classify(class_name)
        candidates = self.autoloader.find_class(class_name)
        class_file = self.autoloader.resolve(class_name)

        content = (
            f"**Class:** `{class_name}`{chr(10)}"
            f"**Autoload rule:** {kind.value}{chr(10)}"
            f"**File:** {self._display_path(class_file) if class_file else 'not found'}"
        )

        if candidates:
            listed = chr(10).join(f"- `{path}`" for path in candidates)
            content += f"{chr(10)}{chr(10)}**Candidates:**{chr(10)}{listed}"

        return Hover(contents=MarkupContent(kind=MarkupKind.Markdown, value=content))

    def _display_path(self, path: Path) -> str:
        root = self.server.owncloud_root
        if root:
            try:
                return str(path.relative_to(root))
            except ValueError:
                pass
        return str(path)


class ClassDefinitionCapability(_ClassCapabilityMixin, DefinitionCapability):
    r"""
    Provides go-to-definition for ownCloud class names.

    Navigates from:
        $view = new \OC\Files\View('');

    To:
        lib/files/view.php
    """

    @property
    def name(self) -> str:
        return "class_definition"

    @property
    def description(self) -> str:
        return "Navigate to the file the autoloader loads for a class"

    async def can_handle(self, params: DefinitionParams) -> bool:
        if not self.autoloader:
            return False

        return self._class_at_position(params) is not None

    async def definition(self, params: DefinitionParams) -> Location | None:
        class_name = self._class_at_position(params)
        if not class_name or not self.autoloader:
            return None

        if not self.autoloader.load(class_name):
            return None

        class_def = self.autoloader.classes_cache.get(class_name)
        if class_def:
            class_file = class_def.file_path
            line_number = class_def.line_number - 1
        else:
            # Loaded, but the declaration could not be parsed
            class_file = self.autoloader.resolve(class_name)
            if class_file is None:
                return None
            line_number = 0

        return Location(
            uri=class_file.as_uri(),
            range=Range(
                start=Position(line=line_number, character=0),
                end=Position(line=line_number, character=0),
            ),
        )
