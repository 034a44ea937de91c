"""
Command line interface: one CLI to format the code tree.

Usage:
    treefmt [OPTIONS] [PATHS]...

Environment Variables:
    TREEFMT_CACHE_DIR: Where the eval cache is kept
                       (default: $XDG_CACHE_HOME/treefmt or ~/.cache/treefmt)
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

import click

from treefmt_common.errors import ConfigError, FailOnChangeError
from treefmt_engine.config import CONFIG_FILENAME, find_config, init_config
from treefmt_engine.engine import run_treefmt

logger = logging.getLogger(__name__)


def get_cache_dir(cli_arg: Path | None = None) -> Path:
    """
    Get the cache directory from multiple sources in priority order.

    Priority (highest to lowest):
    1. Command line argument (--cache-dir)
    2. Environment variable (TREEFMT_CACHE_DIR)
    3. $XDG_CACHE_HOME/treefmt
    4. ~/.cache/treefmt
    """
    if cli_arg:
        return cli_arg.resolve()

    env_dir = os.environ.get("TREEFMT_CACHE_DIR")
    if env_dir:
        return Path(env_dir).resolve()

    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        return (Path(xdg) / "treefmt").resolve()

    return (Path.home() / ".cache" / "treefmt").resolve()


def configure_logging(verbose: int, quiet: bool) -> None:
    """Map -q / -v / -vv onto logging levels."""
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.command()
@click.argument(
    "paths", nargs=-1, type=click.Path(path_type=Path, file_okay=True, dir_okay=True)
)
@click.option("--init", is_flag=True, help=f"Create a new {CONFIG_FILENAME}")
@click.option(
    "--config-file",
    type=click.Path(path_type=Path, dir_okay=False),
    help=f"Run with the specified config file (default: search {CONFIG_FILENAME} upwards)",
)
@click.option(
    "--tree-root",
    type=click.Path(path_type=Path, file_okay=False),
    help="Set the path to the tree root directory (default: the config file directory)",
)
@click.option(
    "-C",
    "--working-directory",
    type=click.Path(path_type=Path, file_okay=False, exists=True),
    default=Path("."),
    show_default=True,
    help="Run as if treefmt was started in this directory",
)
@click.option(
    "--cache-dir",
    type=click.Path(path_type=Path, file_okay=False),
    help="Eval cache directory (can also use TREEFMT_CACHE_DIR env var)",
)
@click.option("--clear-cache", is_flag=True, help="Reset the evaluation cache")
@click.option(
    "--fail-on-change",
    is_flag=True,
    help="Exit with error if any changes were made. Useful for CI",
)
@click.option("-v", "--verbose", count=True, help="Log verbosity, repeat for more")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors")
def main(
    paths: tuple[Path, ...],
    init: bool,
    config_file: Path | None,
    tree_root: Path | None,
    working_directory: Path,
    cache_dir: Path | None,
    clear_cache: bool,
    fail_on_change: bool,
    verbose: int,
    quiet: bool,
):
    """Format the files of the current project with the configured formatters."""
    configure_logging(verbose, quiet)

    work_dir = working_directory.resolve()

    if init:
        try:
            path = init_config(work_dir)
        except ConfigError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        click.echo(f"✓ Generated {path}")
        return

    if config_file is not None:
        treefmt_toml = (work_dir / config_file).resolve()
        if not treefmt_toml.is_file():
            click.echo(f"Error: {treefmt_toml} does not exist", err=True)
            sys.exit(1)
    else:
        found = find_config(work_dir)
        if found is None:
            click.echo(
                f"Error: {CONFIG_FILENAME} could not be found in {work_dir} "
                "and up. Use the --init option to create one.",
                err=True,
            )
            sys.exit(1)
        treefmt_toml = found

    root = (work_dir / tree_root).resolve() if tree_root else treefmt_toml.parent

    logger.debug(f"tree root: {root}")
    logger.debug(f"config: {treefmt_toml}")

    try:
        stats = asyncio.run(
            run_treefmt(
                tree_root=root,
                work_dir=work_dir,
                cache_dir=get_cache_dir(cache_dir),
                treefmt_toml=treefmt_toml,
                paths=list(paths) or [root],
                clear_cache=clear_cache,
                fail_on_change=fail_on_change,
            )
        )
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except FailOnChangeError as e:
        if e.stats is not None:
            click.echo(e.stats.summary())
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted.", err=True)
        sys.exit(130)

    click.echo(stats.summary())


if __name__ == "__main__":
    main()
