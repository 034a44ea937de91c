"""
Data models for the treefmt project configuration and run results.

These models represent the domain objects used throughout the application,
independent of the TOML file or the cache storage behind them.
"""

from dataclasses import dataclass, field
from typing import Any

from .errors import ConfigError


def _string_list(name: str, key: str, value: Any) -> list[str]:
    """Validate that a formatter setting is a list of strings."""
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"formatter.{name}.{key} must be a list of strings")
    return list(value)


@dataclass
class FormatterConfig:
    """
    Configuration of a single formatter, one `[formatter.<name>]` table.

    The command receives `options` followed by the paths to format and is
    expected to rewrite those files in place.
    """

    command: str
    includes: list[str]
    options: list[str] = field(default_factory=list)
    excludes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert the formatter config to its TOML table layout."""
        return {
            "command": self.command,
            "options": list(self.options),
            "includes": list(self.includes),
            "excludes": list(self.excludes),
        }

    @classmethod
    def from_dict(cls, name: str, data: Any) -> "FormatterConfig":
        """
        Create a formatter config from a parsed TOML table.

        Raises:
            ConfigError: If required keys are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise ConfigError(f"formatter.{name} must be a table")
        if "command" not in data:
            raise ConfigError(f"formatter.{name} is missing 'command'")
        if not isinstance(data["command"], str) or not data["command"]:
            raise ConfigError(f"formatter.{name}.command must be a non-empty string")
        if "includes" not in data:
            raise ConfigError(f"formatter.{name} is missing 'includes'")

        return cls(
            command=data["command"],
            includes=_string_list(name, "includes", data["includes"]),
            options=_string_list(name, "options", data.get("options", [])),
            excludes=_string_list(name, "excludes", data.get("excludes", [])),
        )


@dataclass
class ProjectConfig:
    """The contents of a treefmt.toml file."""

    formatter: dict[str, FormatterConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectConfig":
        """Create the project config from the parsed TOML document."""
        formatters = data.get("formatter", {})
        if not isinstance(formatters, dict):
            raise ConfigError("'formatter' must be a table of formatter tables")

        return cls(
            formatter={
                name: FormatterConfig.from_dict(name, table)
                for name, table in formatters.items()
            }
        )


@dataclass
class RunStats:
    """
    Counters collected during one formatting run.

    traversed >= matched is not guaranteed: a file matched by two
    formatters counts twice towards `matched`.
    """

    traversed: int = 0
    matched: int = 0
    filtered: int = 0
    reformatted: int = 0
    elapsed: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to a plain dictionary, elapsed rounded to milliseconds."""
        return {
            "traversed": self.traversed,
            "matched": self.matched,
            "filtered": self.filtered,
            "reformatted": self.reformatted,
            "elapsed": round(self.elapsed, 3),
        }

    def summary(self) -> str:
        """Human readable report printed at the end of a run."""
        return (
            f"traversed {self.traversed} files\n"
            f"matched {self.matched} files to formatters\n"
            f"left with {self.filtered} files after cache\n"
            f"of whom {self.reformatted} files were re-formatted\n"
            f"all of this in {self.elapsed:.2f}s"
        )
