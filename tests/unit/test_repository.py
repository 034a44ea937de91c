"""
Unit tests for the repository layer.

Tests the SQLite implementation of the eval cache repository to ensure
manifests are persisted per project and replaced atomically.
"""

import os
import tempfile
from pathlib import Path

import pytest

from treefmt_common.cache import CacheManifest
from treefmt_persistence.sqlite_repository import (
    DEFAULT_DB_NAME,
    SQLiteCacheRepository,
)

PROJECT = Path("/work/project/treefmt.toml")
OTHER = Path("/work/other/treefmt.toml")


@pytest.fixture
async def temp_db():
    """Create a temporary database file for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    repo = SQLiteCacheRepository(path)
    await repo.initialize()

    yield repo

    await repo.close()
    if os.path.exists(path):
        os.unlink(path)


def make_manifest() -> CacheManifest:
    return CacheManifest(
        formatters={"python": 111, "rust": 222},
        matches={
            "python": {Path("/work/project/a.py"): 1, Path("/work/project/b.py"): 2},
            "rust": {Path("/work/project/src/main.rs"): 3},
        },
    )


@pytest.mark.asyncio
async def test_load_unknown_project_is_empty(temp_db):
    """Test that a project that was never saved loads as an empty manifest."""
    manifest = await temp_db.load_manifest(PROJECT)

    assert manifest == CacheManifest()
    assert manifest.is_empty()


@pytest.mark.asyncio
async def test_save_and_load_manifest(temp_db):
    """Test that a saved manifest is read back unchanged."""
    await temp_db.save_manifest(PROJECT, make_manifest())

    loaded = await temp_db.load_manifest(PROJECT)

    assert loaded == make_manifest()


@pytest.mark.asyncio
async def test_save_replaces_previous_manifest(temp_db):
    """Test that saving drops entries missing from the new manifest."""
    await temp_db.save_manifest(PROJECT, make_manifest())

    replacement = CacheManifest(
        formatters={"python": 111},
        matches={"python": {Path("/work/project/a.py"): 5}},
    )
    await temp_db.save_manifest(PROJECT, replacement)

    assert await temp_db.load_manifest(PROJECT) == replacement


@pytest.mark.asyncio
async def test_projects_are_isolated(temp_db):
    """Test that manifests are keyed by config path."""
    await temp_db.save_manifest(PROJECT, make_manifest())
    other = CacheManifest(formatters={"go": 9}, matches={})
    await temp_db.save_manifest(OTHER, other)

    assert await temp_db.load_manifest(PROJECT) == make_manifest()
    assert await temp_db.load_manifest(OTHER) == other


@pytest.mark.asyncio
async def test_clear(temp_db):
    """Test that clearing one project leaves the others untouched."""
    await temp_db.save_manifest(PROJECT, make_manifest())
    await temp_db.save_manifest(OTHER, make_manifest())

    await temp_db.clear(PROJECT)

    assert (await temp_db.load_manifest(PROJECT)).is_empty()
    assert await temp_db.load_manifest(OTHER) == make_manifest()


@pytest.mark.asyncio
async def test_persists_across_connections(tmp_path):
    """Test that data survives closing and reopening the database."""
    repo = SQLiteCacheRepository.in_cache_dir(tmp_path / "cache")
    await repo.initialize()
    await repo.save_manifest(PROJECT, make_manifest())
    await repo.close()

    assert (tmp_path / "cache" / DEFAULT_DB_NAME).exists()

    reopened = SQLiteCacheRepository(tmp_path / "cache" / DEFAULT_DB_NAME)
    await reopened.initialize()
    try:
        assert await reopened.load_manifest(PROJECT) == make_manifest()
    finally:
        await reopened.close()


@pytest.mark.asyncio
async def test_close_is_idempotent(temp_db):
    await temp_db.close()
    await temp_db.close()
