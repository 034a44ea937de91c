"""
Shared fixtures: throwaway projects with small Python-script formatters.
"""

import os
import stat
import sys
from pathlib import Path

import pytest

# Fixed timestamp given to fixture files so any rewrite moves the mtime.
OLD_MTIME_NS = 1_000_000_000_000_000_000

STRIP_FORMATTER = f"""#!{sys.executable}
import sys

for name in sys.argv[1:]:
    if name.startswith("-"):
        continue
    with open(name) as f:
        text = f.read()
    new = "".join(line.rstrip() + "\\n" for line in text.splitlines())
    if new != text:
        with open(name, "w") as f:
            f.write(new)
"""

FAILING_FORMATTER = f"""#!{sys.executable}
import sys

print("boom")
sys.exit(3)
"""

windows_skip = pytest.mark.skipif(
    sys.platform == "win32", reason="formatter fixtures are shebang scripts"
)


def write_executable(path: Path, content: str) -> Path:
    """Write a script and mark it executable."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def write_source(path: Path, content: str) -> Path:
    """Write a project file with an old, fixed mtime."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    os.utime(path, ns=(OLD_MTIME_NS, OLD_MTIME_NS))
    return path


@pytest.fixture
def project(tmp_path):
    """
    Create a project with a strip-whitespace formatter for *.py files.

    Layout:
        project/treefmt.toml
        project/bin/strip, project/bin/fail
        project/clean.py        (already formatted)
        project/dirty.py        (trailing whitespace)
        project/pkg/nested.py   (trailing whitespace)
        project/README.md       (not matched)
    """
    root = tmp_path / "project"
    root.mkdir()
    write_executable(root / "bin" / "strip", STRIP_FORMATTER)
    write_executable(root / "bin" / "fail", FAILING_FORMATTER)

    (root / "treefmt.toml").write_text(
        """
[formatter.python]
command = "bin/strip"
includes = ["*.py"]
"""
    )
    write_source(root / "clean.py", "x = 1\n")
    write_source(root / "dirty.py", "x = 1   \n")
    write_source(root / "pkg" / "nested.py", "y = 2  \n")
    write_source(root / "README.md", "# title   \n")
    return root


@pytest.fixture
def cache_dir(tmp_path):
    path = tmp_path / "cache"
    path.mkdir()
    return path
