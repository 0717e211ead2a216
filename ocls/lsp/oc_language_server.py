from pathlib import Path

from pygls.lsp.server import LanguageServer

from ocls.autoload.autoloader import Autoloader
from ocls.lsp.capabilities.capabilities import CapabilityManager


class OcLanguageServer(LanguageServer):
    """
    Custom Language Server with ownCloud-specific attributes.

    Attributes:
        owncloud_root: Detected ownCloud server root
        autoloader: Resolves class names to files for this workspace
    """

    def __init__(self, name: str, version: str):
        super().__init__(name, version)

        self.owncloud_root: Path | None = None
        self.autoloader: Autoloader | None = None
        self.capability_manager: CapabilityManager | None = None
