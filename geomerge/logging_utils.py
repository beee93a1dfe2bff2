"""Logging utilities for Geomerge sessions.

Provides color-coded output to distinguish deterministic engine work from
player-driven state changes.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Deterministic operations (spawn, cull, range checks)
    YELLOW = "\033[93m"    # Player interactions (merge, swap, movement)
    RED = "\033[91m"       # Errors and recoverable failures
    GREEN = "\033[92m"     # Success (win, save)
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if GEOMERGE_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("GEOMERGE_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def verbose_enabled() -> bool:
    """Per-event chatter is opt-in via GEOMERGE_VERBOSE."""
    return os.getenv("GEOMERGE_VERBOSE", "").lower() in ("1", "true", "yes")


def log_deterministic(message: str) -> None:
    """Log a deterministic engine operation (blue). Verbose only."""
    if verbose_enabled():
        print(colored(f"{LOG_TAG_DETERMINISTIC} {message}", Color.BLUE))


def log_player(message: str) -> None:
    """Log a player interaction (yellow). Verbose only."""
    if verbose_enabled():
        print(colored(f"{LOG_TAG_PLAYER} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log an error or recoverable failure (red)."""
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN, bold=True))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))


# Markers for operation types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"  # Deterministic operation
LOG_TAG_PLAYER = "[>]"         # Player interaction
LOG_TAG_ERROR = "[!]"          # Error/recoverable failure
LOG_TAG_SUCCESS = "[✓]"        # Success
LOG_TAG_INFO = "[i]"           # Information
