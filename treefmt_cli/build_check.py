"""
Build helper invoked by the CI build workflow.

Usage:
    python -m treefmt_cli.build_check [--release] [--all-features]

--release builds the sdist and wheel with `python -m build`.
--all-features installs the project with every optional extra.
"""

import argparse
import logging
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
ALL_EXTRAS = "all"


def build_commands(release: bool, all_features: bool) -> list[list[str]]:
    """
    Translate the workflow flags into the commands to run, in order.

    Without --release only an editable install is performed.
    """
    commands = []
    if release:
        commands.append([sys.executable, "-m", "build", "--outdir", "dist"])

    target = f".[{ALL_EXTRAS}]" if all_features else "."
    install = [sys.executable, "-m", "pip", "install"]
    if not release:
        install.append("-e")
    commands.append([*install, target])
    return commands


def run_commands(commands: list[list[str]], cwd: Path = PROJECT_ROOT) -> int:
    """Run the commands, stopping at the first failure."""
    for cmd in commands:
        logger.info(f"Running: {' '.join(cmd)}")
        result = subprocess.run(cmd, cwd=str(cwd))
        if result.returncode != 0:
            logger.error(f"Command failed with exit code {result.returncode}")
            return result.returncode
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build and install treefmt")
    parser.add_argument(
        "--release",
        action="store_true",
        help="Build sdist and wheel distributions",
    )
    parser.add_argument(
        "--all-features",
        dest="all_features",
        action="store_true",
        help="Install with every optional extra",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    return run_commands(build_commands(args.release, args.all_features))


if __name__ == "__main__":
    sys.exit(main())
