"""
Treefmt Common module.

This module contains shared domain models, the eval cache manifest and the
cache repository interface used across the treefmt components (engine,
persistence, cli).

The common module has no dependencies on other treefmt_* modules, making it
a pure domain layer that can be imported by any component.
"""

from .cache import CacheManifest
from .errors import ConfigError, FailOnChangeError, FormatterError, TreefmtError
from .models import FormatterConfig, ProjectConfig, RunStats
from .repository import CacheRepository

__all__ = [
    "CacheManifest",
    "CacheRepository",
    "ConfigError",
    "FailOnChangeError",
    "FormatterConfig",
    "FormatterError",
    "ProjectConfig",
    "RunStats",
    "TreefmtError",
]
