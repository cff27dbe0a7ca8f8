"""Console logging for the 3D Vision installer"""

import sys


class Colors:
    """ANSI color codes for terminal output"""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[1;31m'
    GREEN = '\033[1;32m'
    YELLOW = '\033[1;33m'
    BLUE = '\033[1;34m'
    CYAN = '\033[1;36m'


def _emit(color, tag, message, stream=None):
    stream = stream or sys.stdout
    print(f"{color}{tag} {message}{Colors.RESET}", file=stream)


def log_info(message):
    """Log info message in green"""
    _emit(Colors.GREEN, "[INFO] ", message)


def log_warn(message):
    """Log warning message in yellow"""
    _emit(Colors.YELLOW, "[WARN] ", message)


def log_error(message):
    """Log error message in red on stderr"""
    _emit(Colors.RED, "[ERROR]", message, sys.stderr)


def log_detail(message):
    """Log a secondary detail line (command output, key writes) in cyan"""
    _emit(Colors.CYAN, "       ", message)


def log_step(message):
    """Log step message in blue with newline before"""
    print()
    _emit(Colors.BLUE, "[STEP] ", message)


def log_success(message):
    """Log success message in bold green"""
    print(f"{Colors.BOLD}{Colors.GREEN}✓ {message}{Colors.RESET}")
