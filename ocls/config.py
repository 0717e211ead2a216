"""
Autoloader configuration.

Settings are read from `.ocls.yml` in the project root. Every key is optional;
missing keys fall back to the stock ownCloud layout:

    include_path: [lib, config, 3rdparty, .]
    apps_roots:
      - {path: apps, url: /apps, writable: true}
    use_global_classpath: true
    classpath: {}      # global class path (class -> file)
    classes: {}        # explicit class paths (class -> file)
    prefixes: {}       # custom prefixes (prefix -> directory)

Relative directories are relative to the ownCloud root.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from ocls.autoload.autoloader import Autoloader
from ocls.autoload.context import AutoloadContext
from ocls.autoload.types import AppRoot
from ocls.workspace.classes_cache import ClassesCache

if TYPE_CHECKING:
    from ocls.lsp.oc_language_server import OcLanguageServer


CONFIG_FILE_NAME = ".ocls.yml"

DEFAULT_INCLUDE_PATH = ["lib", "config", "3rdparty", "."]
DEFAULT_APPS_ROOTS = [{"path": "apps", "url": "/apps", "writable": True}]


class ConfigError(ValueError):
    """Raised when the configuration file is malformed."""


@dataclass
class AutoloadConfig:
    include_path: list[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE_PATH))
    apps_roots: list[dict[str, Any]] = field(
        default_factory=lambda: [dict(root) for root in DEFAULT_APPS_ROOTS]
    )
    use_global_classpath: bool = True
    classpath: dict[str, str] = field(default_factory=dict)
    classes: dict[str, str] = field(default_factory=dict)
    prefixes: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AutoloadConfig:
        """Build a config from parsed YAML, validating the shape of each key."""
        config = cls()

        if "include_path" in data:
            config.include_path = _string_list(data, "include_path")

        if "apps_roots" in data:
            roots = data["apps_roots"] or []
            if not isinstance(roots, list):
                raise ConfigError("'apps_roots' must be a list")
            config.apps_roots = []
            for root in roots:
                if isinstance(root, str):
                    root = {"path": root}
                if not isinstance(root, dict) or "path" not in root:
                    raise ConfigError("each entry of 'apps_roots' needs a 'path'")
                config.apps_roots.append(root)

        if "use_global_classpath" in data:
            value = data["use_global_classpath"]
            if not isinstance(value, bool):
                raise ConfigError("'use_global_classpath' must be true or false")
            config.use_global_classpath = value

        for key in ("classpath", "classes", "prefixes"):
            if key in data:
                setattr(config, key, _string_mapping(data, key))

        return config


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data[key] or []
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list")
    return [str(item) for item in value]


def _string_mapping(data: dict[str, Any], key: str) -> dict[str, str]:
    value = data[key] or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return {str(k): str(v) for k, v in value.items()}


def load_config(project_root: Path) -> AutoloadConfig:
    """
    Load `.ocls.yml` from the project root.

    Returns the default configuration when the file does not exist.

    Raises:
        ConfigError: if the file cannot be read, is not valid YAML or has
            the wrong shape
    """
    config_file = project_root / CONFIG_FILE_NAME
    if not config_file.is_file():
        return AutoloadConfig()

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_file} must contain a mapping")

    return AutoloadConfig.from_dict(data)


def _absolute(root: Path, path: str) -> Path:
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return (root / candidate).resolve()


def build_autoloader(
    config: AutoloadConfig,
    owncloud_root: Path,
    server: OcLanguageServer | None = None,
) -> Autoloader:
    """
    Create an Autoloader for an ownCloud installation.

    App roots are appended to the include path, as ownCloud does on boot.
    """
    app_roots = [
        AppRoot(
            path=_absolute(owncloud_root, str(root["path"])),
            url=str(root.get("url", "/apps")),
            writable=bool(root.get("writable", False)),
        )
        for root in config.apps_roots
    ]

    include_path = [_absolute(owncloud_root, path) for path in config.include_path]
    include_path.extend(root.path for root in app_roots if root.path not in include_path)

    context = AutoloadContext(
        class_path=dict(config.classpath),
        app_roots=app_roots,
        include_path=include_path,
    )

    autoloader = Autoloader(context, ClassesCache(server), server=server)

    if not config.use_global_classpath:
        autoloader.disable_global_class_path()

    for class_name, path in config.classes.items():
        autoloader.register_class(class_name, path)

    for prefix, directory in config.prefixes.items():
        autoloader.register_prefix(prefix, str(_absolute(owncloud_root, directory)))

    return autoloader
