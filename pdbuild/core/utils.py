"""
Shared console utilities for pdbuild.
"""

from __future__ import annotations

import sys
from typing import Optional, TextIO


# =============================================================================
# Logging
# =============================================================================


class Logger:
    """Simple colored logger with --no-color support."""

    COLORS = {
        "reset": "\033[0m",
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "blue": "\033[94m",
        "cyan": "\033[96m",
        "bold": "\033[1m",
        "dim": "\033[2m",
    }

    def __init__(self, use_color: Optional[bool] = None):
        if use_color is None:
            self._use_color = sys.stdout.isatty()
        else:
            self._use_color = use_color

    def set_color(self, use_color: bool) -> None:
        """Set whether to use color output."""
        self._use_color = use_color

    def highlight(self, text: str, color: str) -> str:
        """Wrap text in a color code (no-op when color is disabled)."""
        if not self._use_color:
            return text
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def step(self, message: str) -> None:
        """Print a pipeline step arrow line."""
        print(f"{self.highlight('=>', 'blue')} {message}")

    def info(self, message: str) -> None:
        """Print an info message."""
        print(f"  {message}")

    def success(self, message: str) -> None:
        """Print a success message."""
        print(f"  {self.highlight('[OK]', 'green')} {message}")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        print(f"  {self.highlight('[WARN]', 'yellow')} {message}")

    def error(self, message: str) -> None:
        """Print an error message to stderr."""
        print(f"  {self.highlight('[ERROR]', 'red')} {message}", file=sys.stderr)

    def dim(self, message: str) -> None:
        """Print a dim/secondary message."""
        print(f"  {self.highlight(message, 'dim')}")

    def raw(self, text: str, stream: Optional[TextIO] = None) -> None:
        """Print text verbatim, without indentation or color."""
        print(text, file=stream if stream is not None else sys.stdout)


# Global logger instance
log = Logger()
