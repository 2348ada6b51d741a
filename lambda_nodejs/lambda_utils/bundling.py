"""Bundler capability used by Node.js function constructs.

Bundling itself happens outside this package. A construct describes what to
bundle with ``BundlingOptions`` and receives the uploaded artifact location
back from whatever ``Bundler`` it was given.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .lock_file import PackageManager

logger = logging.getLogger(__name__)


@dataclass
class BundlingOptions:
    """Everything a bundler needs to produce a function artifact."""

    entry: Path
    deps_lock_file_path: Path
    runtime: str
    architecture: str = "arm64"
    project_root: Optional[Path] = None
    package_manager: Optional[PackageManager] = None
    environment: Dict[str, str] = field(default_factory=dict)
    minify: bool = False
    source_map: bool = False
    external_modules: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.project_root is None:
            self.project_root = self.deps_lock_file_path.parent
        if self.package_manager is None:
            self.package_manager = PackageManager.from_lock_file(self.deps_lock_file_path)


@dataclass(frozen=True)
class CodeLocation:
    """S3 location of a bundled function artifact."""

    s3_bucket: str
    s3_key: str


class Bundler(ABC):
    """Turns bundling options into a deployable code location."""

    @abstractmethod
    def bundle(self, options: BundlingOptions) -> CodeLocation:
        """Bundle the entry described by options and return its location."""


class PrebuiltArtifactBundler(Bundler):
    """Bundler for artifacts that were built and uploaded ahead of time."""

    def __init__(self, s3_bucket: str, s3_key: str):
        if not s3_bucket or not s3_key:
            raise ValueError("Both s3_bucket and s3_key are required")
        self.location = CodeLocation(s3_bucket=s3_bucket, s3_key=s3_key)

    def bundle(self, options: BundlingOptions) -> CodeLocation:
        logger.info(
            f"Using prebuilt artifact s3://{self.location.s3_bucket}/"
            f"{self.location.s3_key} for {options.entry.name}"
        )
        return self.location
