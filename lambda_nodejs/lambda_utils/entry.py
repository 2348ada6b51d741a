"""Handler entry file resolution for Node.js Lambda functions.

A function's entry file is either given explicitly or discovered next to the
file that defines the function, following the naming pattern
``<defining file stem>.<construct id>.<ext>``.
"""

import inspect
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

# Extensions accepted for an explicit entry (.tsx is treated as TypeScript)
SUPPORTED_EXTENSIONS = (".ts", ".js", ".mjs", ".tsx")

# Auto-discovery order, first existing file wins
DISCOVERY_EXTENSIONS = (".ts", ".js", ".mjs")

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


class EntryResolutionError(ValueError):
    """Base class for entry resolution failures."""


class UnsupportedExtensionError(EntryResolutionError):
    """Raised when an explicit entry is not a JavaScript or TypeScript file."""

    def __init__(self, entry: str):
        self.entry = entry
        super().__init__(
            "Only JavaScript or TypeScript entry files are supported "
            f"({', '.join(SUPPORTED_EXTENSIONS)}), got: {entry}"
        )


class EntryNotFoundError(EntryResolutionError):
    """Raised when an explicit entry does not point to an existing file."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Cannot find entry file at {path}")


class HandlerNotFoundError(EntryResolutionError):
    """Raised when no handler file could be discovered for a construct."""

    def __init__(self, candidates: List[Path]):
        self.candidates = candidates
        names = [str(c) for c in candidates]
        super().__init__(
            f"Cannot find handler file {', '.join(names[:-1])} or {names[-1]}"
        )


@dataclass(frozen=True)
class ResolutionRequest:
    """Inputs of a single entry resolution."""

    construct_id: str
    defining_file: Path
    entry: Optional[str] = None

    @property
    def base_directory(self) -> Path:
        """Directory that relative entries and discovered handlers live in."""
        return Path(os.path.abspath(self.defining_file)).parent

    @property
    def caller_stem(self) -> str:
        """Defining file name without its last extension."""
        return Path(self.defining_file).stem


@dataclass(frozen=True)
class ResolvedEntry:
    """An existing handler entry file."""

    path: Path
    extension: str

    def __str__(self) -> str:
        return str(self.path)


def _absolute(base_directory: Path, entry: Union[str, Path]) -> Path:
    # abspath keeps symlinks in place, unlike Path.resolve()
    return Path(os.path.abspath(base_directory / entry))


def resolve_entry(request: ResolutionRequest) -> ResolvedEntry:
    """Resolve the handler entry file for a construct.

    Args:
        request: Construct id, defining file and optional explicit entry

    Returns:
        The absolute path of an existing entry file

    Raises:
        UnsupportedExtensionError: explicit entry is not .ts/.js/.mjs/.tsx
        EntryNotFoundError: explicit entry does not exist
        HandlerNotFoundError: no ``<stem>.<id>.ts|js|mjs`` file exists
    """
    if not request.construct_id:
        raise ValueError("construct_id must be a non-empty string")

    if request.entry is not None:
        return _resolve_explicit(request)

    return _discover(request)


def _resolve_explicit(request: ResolutionRequest) -> ResolvedEntry:
    extension = os.path.splitext(str(request.entry))[1]
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedExtensionError(str(request.entry))

    path = _absolute(request.base_directory, request.entry)
    if not path.is_file():
        raise EntryNotFoundError(path)

    logger.debug(f"Using explicit entry {path} for {request.construct_id}")
    return ResolvedEntry(path=path, extension=extension)


def _discover(request: ResolutionRequest) -> ResolvedEntry:
    candidates = [
        _absolute(
            request.base_directory,
            f"{request.caller_stem}.{request.construct_id}{extension}",
        )
        for extension in DISCOVERY_EXTENSIONS
    ]

    for candidate, extension in zip(candidates, DISCOVERY_EXTENSIONS):
        if candidate.is_file():
            logger.debug(f"Found handler file {candidate} for {request.construct_id}")
            return ResolvedEntry(path=candidate, extension=extension)

    raise HandlerNotFoundError(candidates)


def find_defining_file() -> Path:
    """Return the source file of the first caller outside this package."""
    frame = inspect.currentframe()
    try:
        while frame is not None:
            filename = frame.f_code.co_filename
            if not filename.startswith("<"):
                path = Path(os.path.abspath(filename))
                if _PACKAGE_DIR not in path.resolve().parents:
                    return path
            frame = frame.f_back
    finally:
        del frame

    raise RuntimeError("Cannot determine the file defining the function")


def find_entry(
    construct_id: str,
    entry: Optional[str] = None,
    defining_file: Optional[Union[str, Path]] = None,
) -> Path:
    """Resolve an entry path, defaulting the defining file to the caller."""
    if defining_file is None:
        defining_file = find_defining_file()

    request = ResolutionRequest(
        construct_id=construct_id,
        defining_file=Path(defining_file),
        entry=entry,
    )
    return resolve_entry(request).path
