"""
The main formatting engine.

A run walks the requested paths, assigns every file to the formatters whose
globs match it, skips the files the eval cache knows to be unchanged, runs
all formatters concurrently and finally records the new file mtimes.
"""

import asyncio
import logging
import os
import time
from pathlib import Path

import aiosqlite

from treefmt_common.cache import CacheManifest, Matches
from treefmt_common.errors import FailOnChangeError, FormatterError
from treefmt_common.models import ProjectConfig, RunStats
from treefmt_common.repository import CacheRepository
from treefmt_persistence.sqlite_repository import SQLiteCacheRepository

from .config import load_config
from .formatter import Formatter
from .walker import walk_paths

logger = logging.getLogger(__name__)

# Failures of the cache store; they are logged and never fail a run.
CACHE_ERRORS = (aiosqlite.Error, OSError)


def expand_path(path: Path, work_dir: Path) -> Path:
    """Make path absolute against work_dir and normalise `..` segments."""
    if not path.is_absolute():
        path = work_dir / path
    return Path(os.path.normpath(path))


class _PhaseTimer:
    """Logs the elapsed and delta time of each engine phase at DEBUG."""

    def __init__(self) -> None:
        self.start = time.perf_counter()
        self.phase = self.start

    def __call__(self, description: str) -> None:
        now = time.perf_counter()
        logger.debug(
            f"{description}: {now - self.start:.3f}s (Δ {now - self.phase:.3f}s)"
        )
        self.phase = now

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self.start


def load_formatters(tree_root: Path, config: ProjectConfig) -> dict[str, Formatter]:
    """Instantiate every configured formatter, skipping the broken ones."""
    formatters = {}
    for name, fmt_config in sorted(config.formatter.items()):
        try:
            formatters[name] = Formatter.from_config(tree_root, name, fmt_config)
            logger.debug(f"Loaded formatter #{name}: {fmt_config.to_dict()}")
        except FormatterError as e:
            logger.error(f"Ignoring formatter #{name} due to error: {e}")
    return formatters


async def _load_cache(
    repository: CacheRepository, treefmt_toml: Path, clear_cache: bool
) -> CacheManifest:
    if clear_cache:
        try:
            await repository.clear(treefmt_toml)
        except CACHE_ERRORS as e:
            logger.warning(f"Failed to clear the cache: {e}")
        return CacheManifest()

    try:
        return await repository.load_manifest(treefmt_toml)
    except CACHE_ERRORS as e:
        logger.warning(f"Ignoring unreadable cache: {e}")
        return CacheManifest()


async def _save_cache(
    repository: CacheRepository, treefmt_toml: Path, manifest: CacheManifest
) -> None:
    try:
        await repository.save_manifest(treefmt_toml, manifest)
    except CACHE_ERRORS as e:
        logger.warning(f"Failed to write the cache: {e}")


def _mtime(path: Path) -> int:
    return path.stat().st_mtime_ns


async def _run_formatter(
    formatter: Formatter, path_mtimes: dict[Path, int]
) -> dict[Path, int] | None:
    """
    Run one formatter and return the mtimes of its files afterwards.

    A failed formatter is logged and None is returned: its files are
    neither cached nor counted as re-formatted, so the next run retries them.
    """
    paths = list(path_mtimes)
    if not paths:
        return dict(path_mtimes)

    start = time.perf_counter()
    try:
        await formatter.fmt(paths)
    except FormatterError as e:
        logger.error(f"{formatter} failed: {e}")
        if e.output:
            logger.error(e.output.rstrip())
        return None

    logger.info(
        f"{formatter.name}: {len(paths)} files processed in "
        f"{time.perf_counter() - start:.2f}s"
    )

    new_mtimes = {}
    for path in paths:
        try:
            new_mtimes[path] = _mtime(path)
        except OSError:
            logger.warning(f"{formatter.name}: {path} disappeared after formatting")
    return new_mtimes


async def run_treefmt(
    tree_root: Path,
    work_dir: Path,
    cache_dir: Path,
    treefmt_toml: Path,
    paths: list[Path],
    clear_cache: bool = False,
    fail_on_change: bool = False,
    repository: CacheRepository | None = None,
) -> RunStats:
    """
    Format the given paths of a project.

    Args:
        tree_root: Absolute project root, usually the treefmt.toml directory
        work_dir: Absolute directory relative paths are resolved against
        cache_dir: Absolute directory holding the eval cache
        treefmt_toml: Absolute path of the project config
        paths: Files or directories to format
        clear_cache: Start from an empty cache
        fail_on_change: Raise FailOnChangeError if any file was re-formatted
        repository: Cache storage; defaults to SQLite inside cache_dir

    Returns:
        Counters describing the run

    Raises:
        ValueError: If one of the directory arguments is relative
        ConfigError: If the config can't be loaded
        FailOnChangeError: If fail_on_change is set and files changed
    """
    for label, value in (
        ("tree_root", tree_root),
        ("work_dir", work_dir),
        ("cache_dir", cache_dir),
        ("treefmt_toml", treefmt_toml),
    ):
        if not value.is_absolute():
            raise ValueError(f"{label} must be an absolute path: {value}")

    timer = _PhaseTimer()
    stats = RunStats()

    # Ignore the paths pointing outside of the project root
    abs_paths = []
    for path in paths:
        abs_path = expand_path(path, work_dir)
        if abs_path == tree_root or tree_root in abs_path.parents:
            abs_paths.append(abs_path)
        else:
            logger.warning(f"Ignoring path {path}, it is not in the project root")

    if not abs_paths:
        logger.warning("Aborting, no paths to format")
        stats.elapsed = timer.elapsed
        return stats

    project_config = load_config(treefmt_toml)
    timer("load config")

    formatters = load_formatters(tree_root, project_config)
    timer("load formatters")

    own_repository = repository is None
    if repository is None:
        repository = SQLiteCacheRepository.in_cache_dir(cache_dir)
    try:
        # initialize() creates cache_dir, which may be unusable
        await repository.initialize()
        cache = await _load_cache(repository, treefmt_toml, clear_cache)
    except CACHE_ERRORS as e:
        logger.warning(f"Ignoring unreadable cache: {e}")
        cache = CacheManifest()
    timer("load cache")
    if cache.is_empty():
        logger.debug("Cache is empty, every matched file will be formatted")

    try:
        formatter_mtimes = {}
        for name, formatter in list(formatters.items()):
            try:
                formatter_mtimes[name] = formatter.mtime
            except OSError as e:
                logger.error(f"Ignoring formatter #{name} due to error: {e}")
                del formatters[name]
        cache = cache.update_formatters(formatter_mtimes)

        # Classify each file and remember its mtime to detect changes afterwards
        matches: Matches = {}
        for path in walk_paths(abs_paths, tree_root):
            stats.traversed += 1
            for formatter in formatters.values():
                if not formatter.is_match(path):
                    continue
                try:
                    mtime = _mtime(path)
                except OSError as e:
                    logger.warning(f"Couldn't stat {path}: {e}")
                    continue
                stats.matched += 1
                matches.setdefault(formatter.name, {})[path] = mtime
        timer("tree walk")

        matches = cache.filter_matches(matches)
        stats.filtered = sum(len(p) for p in matches.values())
        timer("filter_matches")

        names = list(matches)
        results = await asyncio.gather(
            *(_run_formatter(formatters[name], matches[name]) for name in names)
        )
        new_matches: Matches = {
            name: mtimes for name, mtimes in zip(names, results) if mtimes is not None
        }
        timer("format")

        cache = cache.add_results(new_matches)
        await _save_cache(repository, treefmt_toml, cache)
        timer("write cache")
    finally:
        if own_repository:
            await repository.close()

    for name, new_paths in new_matches.items():
        old_paths = matches[name]
        stats.reformatted += sum(
            1 for path, mtime in new_paths.items() if old_paths.get(path) != mtime
        )

    stats.elapsed = timer.elapsed
    logger.debug(f"Run stats: {stats.to_dict()}")

    if fail_on_change and stats.reformatted > 0:
        raise FailOnChangeError(stats.reformatted, stats)

    return stats
