"""
Treefmt Engine module.

Loads the project configuration, matches files to formatters, runs the
formatters and keeps the eval cache up to date.
"""

from .config import find_config, init_config, load_config
from .engine import run_treefmt
from .formatter import Formatter

__all__ = ["Formatter", "find_config", "init_config", "load_config", "run_treefmt"]
