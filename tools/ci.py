#!/usr/bin/env python3
# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the archwith CI checks locally.

Steps run in order and all of them run even after a failure. Use ``--skip``
to leave out slow steps, e.g. ``tools/ci.py --skip build``.
"""

import argparse
import subprocess
import sys
import time
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############

STEPS: list[tuple[str, str, list[str]]] = [
    ("format", "Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    ("lint", "Lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    ("types", "Type check", ["uv", "run", "ty", "check", "src/"]),
    ("tests", "Tests", ["uv", "run", "pytest", "--cov=archwith", "--cov-report=term-missing"]),
    ("build", "Build", ["uv", "build"]),
]


def main() -> int:
    """Run the selected CI steps and print a summary."""
    parser = argparse.ArgumentParser(description="Run the archwith CI checks locally.")
    parser.add_argument(
        "--skip",
        action="append",
        default=[],
        choices=[key for key, _, _ in STEPS],
        help="Step to leave out (repeatable)",
    )
    args = parser.parse_args()

    results: list[tuple[str, bool, float]] = []
    for key, name, cmd in STEPS:
        if key in args.skip:
            continue
        _banner(name)
        start = time.monotonic()
        proc = subprocess.run(cmd, cwd=_repo_root())
        results.append((name, proc.returncode == 0, time.monotonic() - start))

    _banner("  Summary")
    for name, passed, elapsed in results:
        colour = chalk.green if passed else chalk.red
        print(colour(f"  {'PASS' if passed else 'FAIL'}  {name} ({elapsed:.1f}s)"))
    print()
    return 0 if all(passed for _, passed, _ in results) else 1


# ################
# Implementation
# ################


def _banner(title: str) -> None:
    sep = chalk.blue("=" * 60)
    print(f"\n{sep}")
    print(chalk.blue(title))
    print(sep)


def _repo_root() -> Path:
    return Path(__file__).resolve().parent.parent


if __name__ == "__main__":
    sys.exit(main())
