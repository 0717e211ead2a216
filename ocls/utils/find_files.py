from collections import deque
from pathlib import Path
from typing import Iterator

# Where ownCloud usually sits inside a project checkout
COMMON_LOCATIONS = ["owncloud", "server", "web", "htdocs", "public"]


def find_owncloud_root(workspace_root: Path, max_depth: int = 3) -> Path | None:
    """
    Find the ownCloud server root within a workspace.

    The workspace itself and the common locations are checked first, then
    subdirectories level by level, so the shallowest root wins. The walk
    stops at the first root found.

    Args:
        workspace_root: The workspace root path
        max_depth: How many directory levels below the workspace to search

    Returns:
        Path to ownCloud root, or None if not found
    """
    preferred = [workspace_root] + [workspace_root / name for name in COMMON_LOCATIONS]
    for candidate in preferred:
        if is_owncloud_root(candidate):
            return candidate

    return next(
        (d for d in _walk_directories(workspace_root, max_depth) if is_owncloud_root(d)),
        None,
    )


def is_owncloud_root(path: Path) -> bool:
    """
    Check if a path is an ownCloud server root.

    A valid root must contain:
    - lib/base.php
    - lib/autoloader.php
    """
    if not path.is_dir():
        return False

    lib_dir = path / "lib"
    return (lib_dir / "base.php").is_file() and (lib_dir / "autoloader.php").is_file()


def _walk_directories(root: Path, max_depth: int) -> Iterator[Path]:
    """Yield visible subdirectories breadth-first, lazily, down to max_depth."""
    queue = deque([(root, 0)])

    while queue:
        path, depth = queue.popleft()
        if depth >= max_depth:
            continue

        try:
            children = sorted(item for item in path.iterdir() if item.is_dir())
        except PermissionError:
            continue

        for child in children:
            if child.name.startswith('.'):
                continue
            yield child
            queue.append((child, depth + 1))
