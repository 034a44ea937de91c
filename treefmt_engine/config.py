"""
Loading, locating and initialising treefmt.toml project files.
"""

import logging
import tomllib
from pathlib import Path

from treefmt_common.errors import ConfigError
from treefmt_common.models import ProjectConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "treefmt.toml"

TEMPLATE = """\
# One CLI to format the code tree - https://github.com/numtide/treefmt

[formatter.mylanguage]
# Formatter to run
command = "command-to-run"
# Command-line arguments for the command
options = []
# Glob pattern of files to include
includes = [ "*.<language-extension>" ]
# Glob patterns of files to exclude
excludes = []
"""


def load_config(path: Path) -> ProjectConfig:
    """
    Parse a treefmt.toml file.

    Args:
        path: Path to the config file

    Returns:
        Parsed project configuration

    Raises:
        ConfigError: If the file can't be read, isn't valid TOML, or a
            formatter table is malformed
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e

    config = ProjectConfig.from_dict(data)
    logger.debug(f"Loaded {len(config.formatter)} formatters from {path}")
    return config


def find_config(start_dir: Path) -> Path | None:
    """Look for treefmt.toml in start_dir and then in each parent directory."""
    start_dir = start_dir.resolve()
    for directory in (start_dir, *start_dir.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def init_config(directory: Path) -> Path:
    """
    Write a template treefmt.toml into directory.

    Raises:
        ConfigError: If the directory already contains a treefmt.toml
    """
    path = directory / CONFIG_FILENAME
    if path.exists():
        raise ConfigError(f"{path} already exists")

    try:
        path.write_text(TEMPLATE, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to write {path}: {e}") from e

    logger.info(f"Generated {path}")
    return path
