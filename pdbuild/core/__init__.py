"""
pdbuild.core - Foundation layer for pdbuild.

Exports the console logger and timing helpers.
"""

from pdbuild.core.utils import Logger, log
from pdbuild.core.timing import PhaseTimer, elapsed_millis, format_millis

__all__ = [
    # Logging
    "log",
    "Logger",
    # Timing
    "PhaseTimer",
    "elapsed_millis",
    "format_millis",
]
