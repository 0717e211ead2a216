"""
LSP Capabilities Manager

This module manages LSP feature handlers (hover, definition) using
a plugin architecture.

Design Principles:
1. Plugin-based (add capabilities without modifying core)
2. Composable (multiple handlers for same feature)
3. Testable (isolated capability handlers)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from lsprotocol.types import (
    DefinitionParams,
    Hover,
    HoverParams,
    Location,
    LogMessageParams,
    MessageType,
)


if TYPE_CHECKING:
    from ocls.lsp.oc_language_server import OcLanguageServer


class Capability(ABC):
    """
    Base class for all LSP capability handlers.

    Each capability handles one LSP feature and decides whether it can
    handle a specific request based on context.
    """

    def __init__(self, server: OcLanguageServer) -> None:
        self.server = server
        self.autoloader = server.autoloader

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this capability."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this capability does."""
        pass

    @abstractmethod
    async def can_handle(self, params) -> bool:
        """Check if the capability can handle the request."""
        pass


class HoverCapability(Capability):
    """Base class for hover capabilities."""

    @abstractmethod
    async def can_handle(self, params: HoverParams) -> bool:
        pass

    @abstractmethod
    async def hover(self, params: HoverParams) -> Hover | None:
        """Provide hover information."""
        pass


class DefinitionCapability(Capability):
    """Base class for definition capabilities."""

    @abstractmethod
    async def can_handle(self, params: DefinitionParams) -> bool:
        pass

    @abstractmethod
    async def definition(
        self, params: DefinitionParams
    ) -> Location | list[Location] | None:
        """Provide definition location(s)"""
        pass


class CapabilityManager:
    """
    Central manager for all LSP capabilities.

    Usage:
        # In server initialization
        manager = CapabilityManager(server)

        # Feature handlers delegate to it
        await manager.handle_hover(params)
    """

    def __init__(
        self,
        server: OcLanguageServer,
        capabilities: dict[str, Capability] | None = None,
    ):
        self.server = server

        # Default capabilities
        if capabilities is None:
            from ocls.lsp.capabilities.class_capabilities import (
                ClassDefinitionCapability,
                ClassHoverCapability,
            )

            capabilities = {
                "class_hover": ClassHoverCapability(server),
                "class_definition": ClassDefinitionCapability(server),
            }

        self.capabilities = capabilities

    def get_capability(self, name: str) -> Capability | None:
        """Get a specific capability by name"""
        return self.capabilities.get(name)

    def get_capabilities_by_type(self, capability_type: type) -> list[Capability]:
        """Get all capabilities of a specific type (e.g., all HoverCapability)."""
        return [
            cap
            for cap in self.capabilities.values()
            if isinstance(cap, capability_type)
        ]

    async def handle_hover(self, params: HoverParams) -> Hover | None:
        """
        Handle hover requests by delegating to capable handlers.

        Returns the first non-None hover result
        """
        for capability in self.get_capabilities_by_type(HoverCapability):
            try:
                if await capability.can_handle(params):
                    result = await capability.hover(params)  # pyright: ignore
                    if result:
                        return result
            except Exception as e:
                self._log_error(capability, e)

        return None

    async def handle_definition(
        self, params: DefinitionParams
    ) -> Location | list[Location] | None:
        """Handle definition requests by delegating to capable handlers."""
        for capability in self.get_capabilities_by_type(DefinitionCapability):
            try:
                if await capability.can_handle(params):
                    result = await capability.definition(params)  # pyright: ignore
                    if result:
                        return result
            except Exception as e:
                self._log_error(capability, e)

        return None

    def _log_error(self, capability: Capability, error: Exception) -> None:
        self.server.window_log_message(
            LogMessageParams(
                type=MessageType.Error,
                message=f"Error in {capability.name}: {type(error).__name__}: {error}"
            )
        )
