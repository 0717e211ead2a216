from pathlib import Path

from lsprotocol.types import (
    TEXT_DOCUMENT_DEFINITION,
    TEXT_DOCUMENT_DID_SAVE,
    TEXT_DOCUMENT_HOVER,
    DefinitionParams,
    DidSaveTextDocumentParams,
    HoverParams,
    LogMessageParams,
    MessageType,
)

from ocls.config import AutoloadConfig, ConfigError, build_autoloader, load_config
from ocls.lsp.capabilities.capabilities import CapabilityManager
from ocls.lsp.oc_language_server import OcLanguageServer
from ocls.utils.find_files import find_owncloud_root


def setup_workspace(ls: OcLanguageServer, root_uri: str | None) -> None:
    """
    Detect the ownCloud root and set up the autoloader and capabilities.
    """
    if not root_uri:
        return

    project_root = Path(root_uri.replace("file://", ""))
    owncloud_root = find_owncloud_root(project_root)

    if owncloud_root is None:
        ls.window_log_message(
            LogMessageParams(
                MessageType.Info, "ownCloud installation not found in workspace"
            )
        )
        return

    ls.window_log_message(
        LogMessageParams(MessageType.Info, f"ownCloud root detected: {owncloud_root}")
    )

    try:
        config = load_config(project_root)
    except ConfigError as e:
        ls.window_log_message(
            LogMessageParams(MessageType.Error, f"{e}; using default layout")
        )
        config = AutoloadConfig()

    ls.owncloud_root = owncloud_root
    ls.autoloader = build_autoloader(config, owncloud_root, server=ls)
    ls.capability_manager = CapabilityManager(ls)


def reload_saved_file(ls: OcLanguageServer, uri: str) -> None:
    """Re-read a saved PHP file if the autoloader has loaded it."""
    if not ls.autoloader or not uri.endswith(".php"):
        return

    file_path = Path(uri.replace("file://", ""))
    classes_cache = ls.autoloader.classes_cache
    if classes_cache.is_loaded(file_path):
        classes_cache.invalidate_file(file_path)
        ls.window_log_message(
            LogMessageParams(MessageType.Info, f"Reloaded {file_path.name}")
        )


def create_server() -> OcLanguageServer:
    """
    Creates and returns a configured Language Server instance.

    The LanguageServer class from pygls handles:
    - JSON-RPC communication with clients (editors)
    - Request/response lifecycle
    - Notifications and event handling
    """
    server = OcLanguageServer("ocls", "0.1.0")

    @server.feature("initialize")
    async def initialize(ls: OcLanguageServer, params):
        setup_workspace(ls, params.root_uri)

    @server.feature(TEXT_DOCUMENT_HOVER)
    async def hover(ls: OcLanguageServer, params: HoverParams):
        if ls.capability_manager:
            return await ls.capability_manager.handle_hover(params)
        return None

    @server.feature(TEXT_DOCUMENT_DEFINITION)
    async def definition(ls: OcLanguageServer, params: DefinitionParams):
        if ls.capability_manager:
            return await ls.capability_manager.handle_definition(params)
        return None

    @server.feature(TEXT_DOCUMENT_DID_SAVE)
    async def did_save(ls: OcLanguageServer, params: DidSaveTextDocumentParams):
        reload_saved_file(ls, params.text_document.uri)

    return server
