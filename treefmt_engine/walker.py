"""
Tree traversal honoring hidden files and .gitignore rules.

Only the commonly used subset of the gitignore syntax is supported:
comments, negation with `!`, directory-only patterns with a trailing `/`,
anchoring with a leading or inner `/`, a leading `**/` and an inner
`/**/`, which also matches zero directories (`a/**/b` matches `a/b`).
"""

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

logger = logging.getLogger(__name__)

GITIGNORE = ".gitignore"


@dataclass(frozen=True)
class IgnoreRule:
    """A single pattern line of a .gitignore file."""

    base: Path  # directory holding the .gitignore
    pattern: str
    negated: bool = False
    dir_only: bool = False
    anchored: bool = False

    @classmethod
    def parse(cls, base: Path, line: str) -> "IgnoreRule | None":
        line = line.rstrip("\n").rstrip()
        if not line or line.startswith("#"):
            return None

        negated = line.startswith("!")
        if negated:
            line = line[1:]
        elif line.startswith("\\"):
            line = line[1:]

        dir_only = line.endswith("/")
        line = line.rstrip("/")

        if line.startswith("**/"):
            line = line[3:]
            anchored = False
        else:
            anchored = "/" in line
            line = line.lstrip("/")

        if not line:
            return None
        return cls(base, line, negated, dir_only, anchored)

    def matches(self, path: Path, is_dir: bool) -> bool:
        if self.dir_only and not is_dir:
            return False
        try:
            relative = path.relative_to(self.base)
        except ValueError:
            return False

        if self.anchored:
            relative_posix = relative.as_posix()
            if fnmatchcase(relative_posix, self.pattern):
                return True
            return "/**/" in self.pattern and fnmatchcase(
                relative_posix, self.pattern.replace("/**/", "/")
            )
        return fnmatchcase(path.name, self.pattern)


def read_gitignore(directory: Path) -> list[IgnoreRule]:
    """Parse directory/.gitignore, returning no rules if it can't be read."""
    path = directory / GITIGNORE
    if not path.is_file():
        return []

    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.warning(f"Couldn't read {path}: {e}")
        return []

    rules = []
    for line in lines:
        rule = IgnoreRule.parse(directory, line)
        if rule is not None:
            rules.append(rule)
    return rules


def is_ignored(path: Path, is_dir: bool, rules: list[IgnoreRule]) -> bool:
    """The last rule matching path decides; negated rules re-include."""
    ignored = False
    for rule in rules:
        if rule.matches(path, is_dir):
            ignored = not rule.negated
    return ignored


def _inherited_rules(directory: Path, tree_root: Path) -> list[IgnoreRule]:
    """Collect the rules of tree_root and every directory down to directory."""
    try:
        relative = directory.relative_to(tree_root)
    except ValueError:
        return []

    rules = read_gitignore(tree_root)
    current = tree_root
    for part in relative.parts:
        current = current / part
        rules.extend(read_gitignore(current))
    return rules


def _walk_dir(top: Path, tree_root: Path) -> Iterator[Path]:
    rules_by_dir = {top: _inherited_rules(top, tree_root)}

    def on_error(err: OSError) -> None:
        logger.warning(f"traversal error: {err}")

    for dirpath, dirnames, filenames in os.walk(top, onerror=on_error):
        current = Path(dirpath)
        rules = rules_by_dir.pop(current, [])

        kept = []
        for name in sorted(dirnames):
            child = current / name
            if name.startswith(".") or child.is_symlink():
                continue
            if is_ignored(child, True, rules):
                continue
            rules_by_dir[child] = rules + read_gitignore(child)
            kept.append(name)
        dirnames[:] = kept

        for name in sorted(filenames):
            if name.startswith("."):
                continue
            path = current / name
            if is_ignored(path, False, rules):
                continue
            yield path


def walk_paths(paths: list[Path], tree_root: Path) -> Iterator[Path]:
    """
    Yield every file below paths, skipping hidden and git-ignored entries.

    Files passed explicitly are yielded as-is. Each file is yielded at most
    once even when the given paths overlap.
    """
    seen: set[Path] = set()
    for root in paths:
        if root.is_dir():
            candidates = _walk_dir(root, tree_root)
        elif root.exists():
            candidates = iter([root])
        else:
            logger.warning(f"traversal error: {root} does not exist")
            continue

        for path in candidates:
            if path in seen:
                continue
            seen.add(path)
            yield path
