"""
Error taxonomy for the build pipeline.

Every failure the pipeline raises derives from BuildError, so the CLI can
map them all to exit status 1.
"""

from __future__ import annotations

import signal
from typing import Optional, Sequence


class BuildError(RuntimeError):
    """Base class for build pipeline failures."""


class UsageError(BuildError):
    """Bad or missing command-line arguments."""


class ValidationError(BuildError):
    """The target's project descriptor is missing or is not a file."""


class ArtifactError(BuildError):
    """A file a phase depends on was not produced by the previous phase."""


class PhaseFailure(BuildError):
    """An external command failed to launch or exited unsuccessfully.

    Exactly one of ``exit_code`` and ``launch_error`` is set. A negative
    ``exit_code`` means the child was terminated by that signal number.
    """

    def __init__(
        self,
        command: str,
        args: Sequence[str],
        *,
        exit_code: Optional[int] = None,
        launch_error: Optional[OSError] = None,
        stdout: bytes = b"",
        stderr: bytes = b"",
    ) -> None:
        if (exit_code is None) == (launch_error is None):
            raise ValueError("PhaseFailure needs exactly one of exit_code or launch_error")

        self.command = command
        self.arguments = list(args)
        self.exit_code = exit_code
        self.launch_error = launch_error
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(self._describe())

    @property
    def kind(self) -> str:
        """Either "launch" or "exit"."""
        return "launch" if self.launch_error is not None else "exit"

    @property
    def command_line(self) -> str:
        return " ".join([self.command, *self.arguments])

    @property
    def signal_name(self) -> Optional[str]:
        if self.exit_code is None or self.exit_code >= 0:
            return None
        try:
            return signal.Signals(-self.exit_code).name
        except ValueError:
            return f"signal {-self.exit_code}"

    def _describe(self) -> str:
        if self.launch_error is not None:
            return f"{self.command_line} could not be started: {self.launch_error}"
        if self.signal_name is not None:
            return f"{self.command_line} was terminated by {self.signal_name}"
        return f"{self.command_line} exited with code {self.exit_code}"
