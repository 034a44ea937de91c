"""
Formatter instances built from the `[formatter.<name>]` config tables.

A formatter knows which files it is responsible for (include/exclude globs
relative to the tree root) and how to run its command on a batch of them.
"""

import asyncio
import logging
import os
import shutil
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath

from treefmt_common.errors import FormatterError
from treefmt_common.models import FormatterConfig

logger = logging.getLogger(__name__)


def resolve_command(command: str, tree_root: Path) -> Path:
    """
    Locate the formatter executable and return its absolute path.

    Commands containing a path separator are taken relative to the tree
    root; bare names are looked up on PATH.

    Raises:
        FormatterError: If the executable does not exist or isn't executable
    """
    if "/" in command or os.sep in command:
        candidate = (tree_root / command).resolve()
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return candidate
        raise FormatterError(f"command '{command}' not found at {candidate}")

    found = shutil.which(command)
    if found:
        return Path(found).resolve()

    raise FormatterError(f"command '{command}' not found on PATH")


class Formatter:
    """
    A configured formatter, ready to be matched against paths and run.
    """

    def __init__(
        self,
        name: str,
        command: Path,
        options: list[str],
        work_dir: Path,
        includes: list[str],
        excludes: list[str],
    ):
        self.name = name
        self.command = command
        self.options = options
        self.work_dir = work_dir
        self.includes = includes
        self.excludes = excludes

    @classmethod
    def from_config(
        cls, tree_root: Path, name: str, config: FormatterConfig
    ) -> "Formatter":
        """
        Build a formatter from its config table.

        Raises:
            FormatterError: If the command can't be resolved or no include
                pattern is given
        """
        if not config.includes:
            raise FormatterError(f"formatter {name} has no includes")

        return cls(
            name=name,
            command=resolve_command(config.command, tree_root),
            options=list(config.options),
            work_dir=tree_root,
            includes=list(config.includes),
            excludes=list(config.excludes),
        )

    @property
    def mtime(self) -> int:
        """Modification time of the executable, in nanoseconds."""
        return self.command.stat().st_mtime_ns

    def is_match(self, path: Path) -> bool:
        """Return True if path falls under this formatter's globs."""
        try:
            relative = path.relative_to(self.work_dir)
        except ValueError:
            return False

        posix = PurePosixPath(*relative.parts).as_posix()
        if any(fnmatchcase(posix, pattern) for pattern in self.excludes):
            return False
        return any(fnmatchcase(posix, pattern) for pattern in self.includes)

    async def fmt(self, paths: list[Path]) -> str:
        """
        Run the formatter on paths, in the tree root.

        Returns:
            Combined stdout/stderr of the command

        Raises:
            FormatterError: If the command can't be started or exits non-zero
        """
        if not paths:
            return ""

        args = [*self.options, *(str(p) for p in paths)]
        logger.debug(f"{self.name}: running {self.command} {' '.join(args)}")

        try:
            process = await asyncio.create_subprocess_exec(
                str(self.command),
                *args,
                cwd=str(self.work_dir),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise FormatterError(f"{self.name}: failed to start {self.command}: {e}") from e

        stdout, _ = await process.communicate()
        output = stdout.decode(errors="replace") if stdout else ""

        if process.returncode != 0:
            raise FormatterError(
                f"{self.name} exited with status {process.returncode}",
                returncode=process.returncode,
                output=output,
            )
        return output

    def __str__(self) -> str:
        return f"{self.name} ({self.command})"

    def __repr__(self) -> str:
        return f"Formatter(name={self.name!r}, command={str(self.command)!r})"
