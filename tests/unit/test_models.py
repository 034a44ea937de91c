"""
Unit tests for treefmt_common.models.

Tests config table validation and the run statistics report.
"""

import pytest

from treefmt_common.errors import ConfigError
from treefmt_common.models import FormatterConfig, ProjectConfig, RunStats


class TestFormatterConfig:
    """Test suite for FormatterConfig class."""

    def test_from_dict_minimal(self):
        """Test that options and excludes default to empty lists."""
        config = FormatterConfig.from_dict(
            "python", {"command": "black", "includes": ["*.py"]}
        )

        assert config.command == "black"
        assert config.includes == ["*.py"]
        assert config.options == []
        assert config.excludes == []

    def test_from_dict_full(self):
        """Test that every key is carried over."""
        config = FormatterConfig.from_dict(
            "rust",
            {
                "command": "rustfmt",
                "options": ["--edition", "2018"],
                "includes": ["*.rs"],
                "excludes": ["target/*"],
            },
        )

        assert config.options == ["--edition", "2018"]
        assert config.excludes == ["target/*"]

    def test_to_dict_round_trips_table_layout(self):
        """Test serializing back to the TOML table layout."""
        data = {
            "command": "nixpkgs-fmt",
            "options": [],
            "includes": ["*.nix"],
            "excludes": [],
        }

        assert FormatterConfig.from_dict("nix", data).to_dict() == data

    def test_missing_command(self):
        """Test that a table without a command is rejected."""
        with pytest.raises(ConfigError, match="missing 'command'"):
            FormatterConfig.from_dict("python", {"includes": ["*.py"]})

    def test_missing_includes(self):
        """Test that a table without includes is rejected."""
        with pytest.raises(ConfigError, match="missing 'includes'"):
            FormatterConfig.from_dict("python", {"command": "black"})

    def test_empty_command(self):
        with pytest.raises(ConfigError, match="non-empty string"):
            FormatterConfig.from_dict("python", {"command": "", "includes": []})

    def test_includes_must_be_list_of_strings(self):
        """Test that a bare string is not accepted as a pattern list."""
        with pytest.raises(ConfigError, match="formatter.python.includes"):
            FormatterConfig.from_dict(
                "python", {"command": "black", "includes": "*.py"}
            )

    def test_options_must_be_strings(self):
        with pytest.raises(ConfigError, match="formatter.python.options"):
            FormatterConfig.from_dict(
                "python", {"command": "black", "includes": ["*.py"], "options": [1]}
            )

    def test_table_must_be_dict(self):
        with pytest.raises(ConfigError, match="must be a table"):
            FormatterConfig.from_dict("python", ["black"])


class TestProjectConfig:
    """Test suite for ProjectConfig class."""

    def test_empty_document(self):
        """Test that a document without formatters yields no formatters."""
        assert ProjectConfig.from_dict({}).formatter == {}

    def test_multiple_formatters(self):
        config = ProjectConfig.from_dict(
            {
                "formatter": {
                    "python": {"command": "black", "includes": ["*.py"]},
                    "go": {"command": "gofmt", "options": ["-w"], "includes": ["*.go"]},
                }
            }
        )

        assert set(config.formatter) == {"python", "go"}
        assert config.formatter["go"].options == ["-w"]

    def test_formatter_must_be_table(self):
        with pytest.raises(ConfigError):
            ProjectConfig.from_dict({"formatter": "black"})


class TestRunStats:
    """Test suite for RunStats class."""

    def test_defaults(self):
        stats = RunStats()

        assert stats.to_dict() == {
            "traversed": 0,
            "matched": 0,
            "filtered": 0,
            "reformatted": 0,
            "elapsed": 0.0,
        }

    def test_summary(self):
        """Test that the report names every counter."""
        stats = RunStats(traversed=10, matched=4, filtered=2, reformatted=1, elapsed=0.5)

        summary = stats.summary()

        assert "traversed 10 files" in summary
        assert "matched 4 files to formatters" in summary
        assert "left with 2 files after cache" in summary
        assert "of whom 1 files were re-formatted" in summary
        assert "all of this in 0.50s" in summary
