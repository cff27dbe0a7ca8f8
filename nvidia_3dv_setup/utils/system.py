"""Process launching for external tools (7za, rcedit, setup.exe, toggle)"""

import subprocess
from typing import Callable, Sequence

from .logging import log_info, log_error

# A launcher runs a command to completion and returns its exit code.
# Stages take one as a parameter so tests can script exit codes.
Launcher = Callable[[Sequence[str]], int]


def format_command(args: Sequence[str]) -> str:
    """Render an argument list the way Windows would quote it"""
    return subprocess.list2cmdline([str(arg) for arg in args])


def run_command(args: Sequence[str]) -> int:
    """
    Launch an executable and block until it exits

    Args:
        args: Executable path followed by its arguments

    Returns:
        The process exit code.  A command that cannot be started at all
        (missing executable, access denied) is reported as exit code -1.
    """
    command_line = format_command(args)
    log_info(f"Running: {command_line}")

    try:
        result = subprocess.run([str(arg) for arg in args],
                                stdin=subprocess.DEVNULL)
    except OSError as exc:
        log_error(f"Could not start {args[0]}: {exc}")
        return -1

    if result.returncode != 0:
        log_error(f"Command failed with exit code {result.returncode}: {command_line}")
    return result.returncode
