"""
Treefmt Persistence module.

This module contains the storage implementation of the eval cache.
Currently supports SQLite, but can be extended to other backends.

The persistence layer depends on treefmt_common for the manifest model and
the repository interface, and is used by treefmt_engine.
"""

from .sqlite_repository import SQLiteCacheRepository

__all__ = ["SQLiteCacheRepository"]
