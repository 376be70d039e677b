#!/usr/bin/env python3
"""Run every formatter check, linter and the test suite in sequence.

Steps:
1. Black format check
2. isort import order check
3. Ruff static checks
4. Pylint analysis
5. pytest

All output is collected and summarized at the end.
"""

from pathlib import Path
import subprocess
import sys

ROOT = Path(__file__).parent

COMMANDS: list[tuple[list[str], str]] = [
    ([sys.executable, "-m", "black", ".", "--check"], "Black"),
    ([sys.executable, "-m", "isort", ".", "--check-only"], "isort"),
    ([sys.executable, "-m", "ruff", "check", "."], "Ruff"),
    ([sys.executable, "-m", "pylint", "app", "core", "infrastructure", "main.py"], "Pylint"),
    ([sys.executable, "-m", "pytest", "-q"], "pytest"),
]


def run_command(cmd: list[str], description: str) -> tuple[bool, str]:
    """Run `cmd` from the repo root and return (success, combined output)."""
    print(f"\n{'=' * 60}")
    print(f"Running: {description}")
    print(f"Command: {' '.join(cmd)}")
    print("=" * 60)

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False, cwd=ROOT)
    except OSError as e:
        print(f"FAILED to start: {e}")
        return False, str(e)

    output = result.stdout + result.stderr
    success = result.returncode == 0
    print("OK" if success else "FAILED")
    print(output if output.strip() else "(no output)")
    return success, output


def main() -> None:
    results = [(desc, *run_command(cmd, desc)) for cmd, desc in COMMANDS]

    print(f"\n{'=' * 60}")
    print("Summary")
    print("=" * 60)
    for description, success, _ in results:
        print(f"{description}: {'passed' if success else 'failed'}")

    all_passed = all(success for _, success, _ in results)
    print(f"\nOverall: {'all passed' if all_passed else 'errors found'}")
    sys.exit(0 if all_passed else 1)


if __name__ == "__main__":
    main()
