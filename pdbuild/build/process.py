"""
Subprocess execution for build phases.

One ProcessRunner.run call launches exactly one child process and either
returns its captured output or raises PhaseFailure.
"""

from __future__ import annotations

import os
import signal
import subprocess
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence, Union

from pdbuild.build.errors import PhaseFailure
from pdbuild.core.utils import log

Command = Union[str, Path]


@dataclass(frozen=True)
class PhaseResult:
    """Output of a successful command. Empty when the child inherited the terminal."""

    stdout: bytes = b""
    stderr: bytes = b""


class ProcessRunner:
    """Runs external commands, capturing or inheriting their output."""

    def __init__(
        self,
        dry_run: bool = False,
        on_spawn: Optional[Callable[[str, list[str]], None]] = None,
    ) -> None:
        self.dry_run = dry_run
        self.on_spawn = on_spawn

    def run(
        self,
        command: Command,
        args: Sequence[Command] = (),
        cwd: Optional[Path] = None,
        inherit: bool = False,
    ) -> PhaseResult:
        """Run command with args and wait for it to finish.

        With inherit=True the child writes directly to this process's
        stdout/stderr and nothing is captured.

        Raises:
            PhaseFailure: the command could not be started, or exited with
                anything other than status 0.
        """
        cmd = os.fspath(command)
        argv = [os.fspath(a) for a in args]

        if self.dry_run:
            log.info(f"[DRY-RUN] Would run: {' '.join([cmd, *argv])}" + (f" in {cwd}" if cwd else ""))
            return PhaseResult()

        if self.on_spawn is not None:
            self.on_spawn(cmd, argv)

        if inherit:
            return self._attach(cmd, argv, cwd)

        try:
            result = subprocess.run(
                [cmd, *argv],
                cwd=cwd,
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise PhaseFailure(cmd, argv, launch_error=e) from e

        if result.returncode != 0:
            raise PhaseFailure(
                cmd,
                argv,
                exit_code=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )

        return PhaseResult(stdout=result.stdout, stderr=result.stderr)

    def _attach(self, cmd: str, argv: list[str], cwd: Optional[Path]) -> PhaseResult:
        """Run a child on this terminal and wait for it.

        Ctrl-C in the terminal reaches the whole foreground process group.
        The child (gdb or the simulator) decides what an interrupt means, so
        this process ignores SIGINT until the child exits.
        """
        try:
            proc = subprocess.Popen([cmd, *argv], cwd=cwd)
        except OSError as e:
            raise PhaseFailure(cmd, argv, launch_error=e) from e

        # Installed after the spawn so the child keeps the default handler
        with ignore_interrupts():
            returncode = proc.wait()

        if returncode != 0:
            raise PhaseFailure(cmd, argv, exit_code=returncode)
        return PhaseResult()


@contextmanager
def ignore_interrupts() -> Iterator[None]:
    """Ignore SIGINT for the duration of the block, then restore the old handler.

    Signal handlers can only be changed from the main thread; elsewhere this
    does nothing.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        yield
    finally:
        # None means the old handler was not installed from Python
        signal.signal(signal.SIGINT, signal.SIG_DFL if previous is None else previous)
