"""DevOps tasks for httpfs.

Usage: uv run devops.py <task>
Tasks: fmt, test, clean
"""

import subprocess
import sys


def _run(commands: list[list[str]]) -> None:
    """Execute a sequence of shell commands, exiting on first failure."""
    for cmd in commands:
        try:
            subprocess.run(cmd, check=True)  # nosec: B603, B607
        except subprocess.CalledProcessError as e:
            print(f"Command failed: {' '.join(e.cmd)}", file=sys.stderr)
            sys.exit(e.returncode)


def format_code() -> None:
    """Format and lint the codebase with Ruff."""
    _run([["ruff", "format", "."], ["ruff", "check", "--fix", "."]])


def test() -> None:
    """Run the test suite with PyTest."""
    _run([["uv", "run", "pytest", "-q"]])


def clean() -> None:
    """Remove Python and tool caches."""
    _run(
        [
            ["find", ".", "-type", "d", "-name", "__pycache__", "-exec", "rm", "-rf", "{}", "+"],
            ["find", ".", "-type", "d", "-name", ".pytest_cache", "-exec", "rm", "-rf", "{}", "+"],
            ["find", ".", "-type", "d", "-name", ".ruff_cache", "-exec", "rm", "-rf", "{}", "+"],
        ]
    )


TASKS = {"fmt": format_code, "test": test, "clean": clean}


if __name__ == "__main__":
    if len(sys.argv) != 2 or sys.argv[1] not in TASKS:
        print(f"Usage: uv run devops.py <{'|'.join(TASKS)}>", file=sys.stderr)
        sys.exit(2)
    TASKS[sys.argv[1]]()
