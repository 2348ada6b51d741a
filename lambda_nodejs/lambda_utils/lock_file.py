"""Dependency lock file lookup and package manager detection."""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)


class LockFileError(ValueError):
    """Raised when a dependency lock file is missing or invalid."""


class PackageManager(Enum):
    """Package managers that can install a function's dependencies."""

    NPM = ("npm", "package-lock.json", ("npm", "ci"))
    YARN = ("yarn", "yarn.lock", ("yarn", "install", "--no-immutable"))
    PNPM = ("pnpm", "pnpm-lock.yaml", ("pnpm", "install", "--config.node-linker=hoisted"))
    BUN = ("bun", "bun.lockb", ("bun", "install", "--frozen-lockfile"))

    def __init__(self, manager: str, lock_file: str, install_command: Tuple[str, ...]):
        self.manager = manager
        self.lock_file = lock_file
        self.install_command = install_command

    @classmethod
    def from_lock_file(cls, lock_file: Union[str, Path]) -> "PackageManager":
        """Detect the package manager from a lock file name (npm by default)."""
        name = Path(lock_file).name
        for package_manager in cls:
            if package_manager.lock_file == name:
                return package_manager
        return cls.NPM


# Search order at each directory level
LOCK_FILE_SEARCH_ORDER = [
    PackageManager.PNPM,
    PackageManager.YARN,
    PackageManager.BUN,
    PackageManager.NPM,
]


def resolve_deps_lock_file(lock_file: Union[str, Path]) -> Path:
    """Validate an explicit lock file path and make it absolute.

    Relative paths are resolved against the current working directory.
    """
    path = Path(lock_file)
    if not path.exists():
        raise LockFileError(f"Lock file at {lock_file} doesn't exist")
    if not path.is_file():
        raise LockFileError("`deps_lock_file_path` should point to a file")

    return Path(os.path.abspath(path))


def find_lock_file(start_dir: Union[str, Path]) -> Path:
    """Walk up from start_dir and return the nearest lock file."""
    current = Path(os.path.abspath(start_dir))

    for directory in [current] + list(current.parents):
        found = _lock_file_in(directory)
        if found:
            logger.debug(f"Found lock file {found}")
            return found

    raise LockFileError(
        "Cannot find a package lock file (`pnpm-lock.yaml`, `yarn.lock`, "
        "`bun.lockb` or `package-lock.json`). Please specify it with "
        "`deps_lock_file_path`."
    )


def _lock_file_in(directory: Path) -> Optional[Path]:
    found = [
        directory / package_manager.lock_file
        for package_manager in LOCK_FILE_SEARCH_ORDER
        if (directory / package_manager.lock_file).is_file()
    ]
    if len(found) > 1:
        raise LockFileError(
            f"Multiple package lock files found: {', '.join(str(f) for f in found)}. "
            "Please specify the desired one with `deps_lock_file_path`."
        )
    return found[0] if found else None
