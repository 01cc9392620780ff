"""
Console reporting for build phases.

Nothing here affects control flow; it only renders what the pipeline did.
"""

from __future__ import annotations

import sys
from typing import Sequence

from pdbuild.build.errors import PhaseFailure
from pdbuild.core.utils import Logger, log


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").rstrip("\n")


class StepReporter:
    """Brackets each phase with progress lines and renders the outcome."""

    def __init__(self, logger: Logger = log) -> None:
        self.log = logger

    def announce_step(self, description: str) -> None:
        self.log.step(description)

    def announce_substep(self, message: str) -> None:
        self.log.dim(message)

    def announce_spawn(self, command: str, args: Sequence[str]) -> None:
        self.log.step(f"Running {' '.join([str(command), *map(str, args)])}")

    def announce_failure(self, failure: PhaseFailure) -> None:
        """Print the failed command line and everything it wrote."""
        self.log.error(f"Error: {failure.command_line} failed")
        if failure.stdout:
            self.log.raw(_decode(failure.stdout))
        if failure.stderr:
            self.log.raw(_decode(failure.stderr), stream=sys.stderr)
        if failure.launch_error is not None:
            self.log.error(str(failure.launch_error))
        else:
            self.log.error(str(failure))

    def announce_completion(self, artifact_name: str, elapsed_ms: int) -> None:
        artifact = self.log.highlight(artifact_name, "blue")
        duration = self.log.highlight(f"{elapsed_ms}ms", "blue")
        self.log.success(f"Built {artifact} in {duration}")
