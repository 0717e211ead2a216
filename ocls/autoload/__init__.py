"""Class name to file resolution for ownCloud."""
from .autoloader import Autoloader
from .context import AutoloadContext
from .types import AppRoot, ClassKind

__all__ = ['Autoloader', 'AutoloadContext', 'AppRoot', 'ClassKind']
