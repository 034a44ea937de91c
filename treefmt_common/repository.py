"""
Abstract repository interface for eval cache persistence.

This module defines the contract that any cache storage implementation must
follow, allowing easy swapping between SQLite, flat files, etc.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from .cache import CacheManifest


class CacheRepository(ABC):
    """
    Abstract base class for eval cache storage operations.

    Manifests are keyed by the absolute path of the treefmt.toml they were
    produced for, so a single store can serve several projects.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create the underlying storage if it doesn't exist."""
        pass

    @abstractmethod
    async def load_manifest(self, config_path: Path) -> CacheManifest:
        """
        Load the manifest recorded for a project.

        Args:
            config_path: Absolute path of the project's treefmt.toml

        Returns:
            The stored manifest, or an empty manifest if none was stored
        """
        pass

    @abstractmethod
    async def save_manifest(self, config_path: Path, manifest: CacheManifest) -> None:
        """
        Replace the manifest recorded for a project.

        Args:
            config_path: Absolute path of the project's treefmt.toml
            manifest: Manifest to persist
        """
        pass

    @abstractmethod
    async def clear(self, config_path: Path) -> None:
        """Forget everything recorded for a project."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections held by the repository."""
        pass
