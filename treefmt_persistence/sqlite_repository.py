"""
SQLite implementation of the eval cache repository.

Uses aiosqlite for async operations. One database file holds the manifests
of every project formatted with the same cache directory.
"""

from pathlib import Path

import aiosqlite

from treefmt_common.cache import CacheManifest, Matches
from treefmt_common.repository import CacheRepository

DEFAULT_DB_NAME = "eval-cache.db"


class SQLiteCacheRepository(CacheRepository):
    """
    SQLite-based eval cache storage implementation.

    Uses a single database file with two tables:
    - formatters: executable mtime per (project, formatter)
    - matches: file mtime per (project, formatter, path)
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_NAME):
        """
        Initialize the SQLite repository.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = str(db_path)
        self._connection: aiosqlite.Connection | None = None

    @classmethod
    def in_cache_dir(cls, cache_dir: Path) -> "SQLiteCacheRepository":
        """Create a repository using the default database name inside cache_dir."""
        return cls(cache_dir / DEFAULT_DB_NAME)

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
        return self._connection

    async def initialize(self) -> None:
        """
        Create database tables if they don't exist.

        Schema:
        - formatters table: (config_path, name) -> mtime
        - matches table: (config_path, formatter, path) -> mtime
        """
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = await self._get_connection()

        await conn.execute("""
            CREATE TABLE IF NOT EXISTS formatters (
                config_path TEXT NOT NULL,
                name TEXT NOT NULL,
                mtime INTEGER NOT NULL,
                PRIMARY KEY (config_path, name)
            )
        """)

        await conn.execute("""
            CREATE TABLE IF NOT EXISTS matches (
                config_path TEXT NOT NULL,
                formatter TEXT NOT NULL,
                path TEXT NOT NULL,
                mtime INTEGER NOT NULL,
                PRIMARY KEY (config_path, formatter, path)
            )
        """)

        await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def load_manifest(self, config_path: Path) -> CacheManifest:
        """
        Load the manifest stored for a project.

        Args:
            config_path: Absolute path of the project's treefmt.toml

        Returns:
            Stored manifest, empty if the project was never formatted
        """
        conn = await self._get_connection()
        key = str(config_path)

        cursor = await conn.execute(
            "SELECT name, mtime FROM formatters WHERE config_path = ?", (key,)
        )
        formatters = {name: mtime for name, mtime in await cursor.fetchall()}

        cursor = await conn.execute(
            "SELECT formatter, path, mtime FROM matches WHERE config_path = ?",
            (key,),
        )
        matches: Matches = {}
        for formatter, path, mtime in await cursor.fetchall():
            matches.setdefault(formatter, {})[Path(path)] = mtime

        return CacheManifest(formatters=formatters, matches=matches)

    async def save_manifest(self, config_path: Path, manifest: CacheManifest) -> None:
        """
        Replace the manifest stored for a project.

        The delete and the inserts run in a single transaction so a reader
        never sees a half-written manifest.
        """
        conn = await self._get_connection()
        key = str(config_path)

        try:
            await conn.execute("DELETE FROM formatters WHERE config_path = ?", (key,))
            await conn.execute("DELETE FROM matches WHERE config_path = ?", (key,))
            await conn.executemany(
                "INSERT INTO formatters (config_path, name, mtime) VALUES (?, ?, ?)",
                [(key, name, mtime) for name, mtime in manifest.formatters.items()],
            )
            await conn.executemany(
                """
                INSERT INTO matches (config_path, formatter, path, mtime)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (key, formatter, str(path), mtime)
                    for formatter, paths in manifest.matches.items()
                    for path, mtime in paths.items()
                ],
            )
            await conn.commit()
        except aiosqlite.Error:
            await conn.rollback()
            raise

    async def clear(self, config_path: Path) -> None:
        """Delete the stored manifest of a project."""
        conn = await self._get_connection()
        key = str(config_path)

        await conn.execute("DELETE FROM formatters WHERE config_path = ?", (key,))
        await conn.execute("DELETE FROM matches WHERE config_path = ?", (key,))
        await conn.commit()
