"""Lambda entry resolution, lock file and bundling utilities."""

from .bundling import Bundler, BundlingOptions, CodeLocation, PrebuiltArtifactBundler
from .entry import (
    EntryNotFoundError,
    EntryResolutionError,
    HandlerNotFoundError,
    ResolutionRequest,
    ResolvedEntry,
    UnsupportedExtensionError,
    find_entry,
    resolve_entry,
)
from .lock_file import LockFileError, PackageManager, find_lock_file, resolve_deps_lock_file
from .runtime import RuntimeFamily, UnsupportedRuntimeError, runtime_family, validate_nodejs_runtime

__all__ = [
    "Bundler",
    "BundlingOptions",
    "CodeLocation",
    "PrebuiltArtifactBundler",
    "EntryResolutionError",
    "UnsupportedExtensionError",
    "EntryNotFoundError",
    "HandlerNotFoundError",
    "ResolutionRequest",
    "ResolvedEntry",
    "find_entry",
    "resolve_entry",
    "LockFileError",
    "PackageManager",
    "find_lock_file",
    "resolve_deps_lock_file",
    "RuntimeFamily",
    "UnsupportedRuntimeError",
    "runtime_family",
    "validate_nodejs_runtime",
]
