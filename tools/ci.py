#!/usr/bin/env python3
# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run all CI checks locally: format, lint, type check, tests, CLI smoke run, and build."""

import argparse
import subprocess
import sys
import tempfile
import time
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############

STEPS: list[tuple[str, list[str]]] = [
    ("Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    ("Lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    ("Type check", ["uv", "run", "ty", "check", "src/"]),
    ("Tests", ["uv", "run", "pytest", "--cov=taskgen", "--cov-report=term-missing"]),
    ("Build", ["uv", "build"]),
]


def main() -> int:
    """Run the selected CI steps and report results."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--only", action="append", default=[], help="Run only the named step (repeatable)")
    parser.add_argument("--no-smoke", action="store_true", help="Skip the CLI smoke run")
    args = parser.parse_args()

    selected = [(name, cmd) for name, cmd in STEPS if not args.only or name in args.only]
    results: list[tuple[str, bool, float]] = []

    for name, cmd in selected:
        _banner(name)
        start = time.monotonic()
        proc = subprocess.run(cmd, cwd=_repo_root())
        results.append((name, proc.returncode == 0, time.monotonic() - start))

    if not args.no_smoke and not args.only:
        _banner("CLI smoke run")
        start = time.monotonic()
        results.append(("CLI smoke run", _smoke_run(), time.monotonic() - start))

    _banner("Summary")
    all_passed = True
    for name, passed, elapsed in results:
        if passed:
            print(chalk.green(f"  PASS  {name} ({elapsed:.1f}s)"))
        else:
            print(chalk.red(f"  FAIL  {name} ({elapsed:.1f}s)"))
            all_passed = False

    print()
    return 0 if all_passed else 1


# ################
# Implementation
# ################


def _repo_root() -> str:
    return str(Path(__file__).parent.parent)


def _banner(title: str) -> None:
    sep = chalk.blue("=" * 60)
    print(f"\n{sep}")
    print(chalk.blue(title))
    print(sep)


def _smoke_run() -> bool:
    """Create a project with ``taskgen init`` and generate it twice."""
    with tempfile.TemporaryDirectory() as workdir:
        for command in (["init"], ["generate"], ["generate"]):
            proc = subprocess.run(["uv", "run", "taskgen", *command, workdir], cwd=_repo_root())
            if proc.returncode != 0:
                return False
    return True


if __name__ == "__main__":
    sys.exit(main())
