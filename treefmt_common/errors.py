"""Exceptions raised by the treefmt components."""


class TreefmtError(Exception):
    """Base class for all treefmt errors."""


class ConfigError(TreefmtError):
    """The project configuration is missing, unreadable or malformed."""


class FormatterError(TreefmtError):
    """
    A formatter could not be loaded or exited with a failure.

    When raised for a failed run, ``returncode`` and ``output`` hold the
    exit status and the combined stdout/stderr of the command.
    """

    def __init__(
        self, message: str, returncode: int | None = None, output: str = ""
    ):
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class FailOnChangeError(TreefmtError):
    """Raised when --fail-on-change is set and files were re-formatted."""

    def __init__(self, reformatted: int, stats=None):
        super().__init__(f"fail-on-change: {reformatted} files were re-formatted")
        self.reformatted = reformatted
        self.stats = stats
