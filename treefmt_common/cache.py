"""
Eval cache manifest.

The manifest remembers, per formatter, the modification time of the
formatter executable and of every file it successfully processed. On the
next run, files whose mtime did not move are skipped.

All operations return a new manifest and leave the receiver untouched.
"""

from dataclasses import dataclass, field
from pathlib import Path

# formatter name -> path -> mtime (nanoseconds)
Matches = dict[str, dict[Path, int]]


@dataclass
class CacheManifest:
    formatters: dict[str, int] = field(default_factory=dict)
    matches: Matches = field(default_factory=dict)

    def update_formatters(self, formatters: dict[str, int]) -> "CacheManifest":
        """
        Record the current formatter executable mtimes.

        A formatter whose executable changed since the last run, or that is
        no longer configured, loses all of its cached file entries.

        Args:
            formatters: formatter name -> executable mtime

        Returns:
            New manifest with the formatter table replaced
        """
        matches: Matches = {}
        for name, paths in self.matches.items():
            if name in formatters and self.formatters.get(name) == formatters[name]:
                matches[name] = dict(paths)
        return CacheManifest(formatters=dict(formatters), matches=matches)

    def filter_matches(self, matches: Matches) -> Matches:
        """Drop the paths whose mtime is identical to the cached one."""
        filtered: Matches = {}
        for name, paths in matches.items():
            cached = self.matches.get(name, {})
            filtered[name] = {
                path: mtime
                for path, mtime in paths.items()
                if cached.get(path) != mtime
            }
        return filtered

    def add_results(self, matches: Matches) -> "CacheManifest":
        """Merge the mtimes observed after formatting into the manifest."""
        merged: Matches = {name: dict(paths) for name, paths in self.matches.items()}
        for name, paths in matches.items():
            merged.setdefault(name, {}).update(paths)
        return CacheManifest(formatters=dict(self.formatters), matches=merged)

    def is_empty(self) -> bool:
        return not self.formatters and not self.matches
