"""
Build orchestrator for pdbuild.

Runs the build phases for one Playdate app in a fixed order, stopping at
the first failure.
"""

from __future__ import annotations

import argparse
import sys
import time
from enum import Enum
from typing import Callable, ContextManager, Optional, Sequence

from pdbuild.core.timing import PhaseTimer, elapsed_millis
from pdbuild.core.utils import log
from pdbuild.build.config import SDK_ENV_VAR, BuildRequest, DEFAULT_SDK_SUFFIX
from pdbuild.build.errors import PhaseFailure, UsageError
from pdbuild.build.process import PhaseResult, ProcessRunner
from pdbuild.build.reporter import StepReporter
from pdbuild.build.phases import (
    cargo_build,
    clean_output_dir,
    copy_artifact,
    debug_simulator,
    ensure_output_dir,
    package_bundle,
    require_bundle,
    run_simulator,
    validate_target,
)


class Phase(Enum):
    """Pipeline states, in the order they are entered."""

    VALIDATING = "validating"
    PREPARING_OUTPUT = "preparing_output"
    CLEANING = "cleaning"
    BUILDING_LIBRARY = "building_library"
    BUILDING_APPLICATION = "building_application"
    COPYING_ARTIFACT = "copying_artifact"
    PACKAGING = "packaging"
    IDLE = "idle"
    RUNNING = "running"
    DEBUGGING = "debugging"
    TERMINATED = "terminated"


# =============================================================================
# Build Orchestrator
# =============================================================================


class BuildOrchestrator:
    """Orchestrates the build, package and launch of one app."""

    def __init__(
        self,
        request: BuildRequest,
        runner: Optional[ProcessRunner] = None,
        reporter: Optional[StepReporter] = None,
    ):
        self.request = request
        self.reporter = reporter or StepReporter()
        if runner is None:
            runner = ProcessRunner(
                dry_run=request.dry_run,
                on_spawn=self.reporter.announce_spawn if request.verbose else None,
            )
        self.runner = runner

        self.phase: Optional[Phase] = None
        self.history: list[Phase] = []
        self.timer = PhaseTimer()

    def _enter(self, phase: Phase) -> ContextManager[None]:
        """Move to a new phase and time it."""
        self.phase = phase
        self.history.append(phase)
        return self.timer.measure(phase.value)

    def _invoke(self, description: str, action: Callable[[], PhaseResult]) -> PhaseResult:
        """Announce a subprocess phase, run it, and report it if it fails."""
        self.reporter.announce_step(description)
        try:
            return action()
        except PhaseFailure as failure:
            self.reporter.announce_failure(failure)
            raise

    def build(self) -> None:
        """Validate, compile, copy and package. Leaves <target>.pdx in the workspace."""
        req = self.request
        target = req.target

        with self._enter(Phase.VALIDATING):
            validate_target(target)

        with self._enter(Phase.PREPARING_OUTPUT):
            ensure_output_dir(target, req.dry_run)

        with self._enter(Phase.CLEANING):
            self.reporter.announce_step("Cleaning build directory")
            clean_output_dir(
                target.output_dir,
                dry_run=req.dry_run,
                on_removed=lambda path: self.reporter.announce_substep(f"Removed {path}"),
            )

        with self._enter(Phase.BUILDING_LIBRARY):
            self._invoke(
                "Building API",
                lambda: cargo_build(self.runner, req.workspace, req.release),
            )

        with self._enter(Phase.BUILDING_APPLICATION):
            self._invoke(
                f"Building {target.name}",
                lambda: cargo_build(self.runner, target.root, req.release),
            )

        with self._enter(Phase.COPYING_ARTIFACT):
            self.reporter.announce_step("Copying lib to Playdate Binary")
            copy_artifact(target, req.release, req.dry_run)

        with self._enter(Phase.PACKAGING):
            self._invoke(
                "Running Playdate Compiler",
                lambda: package_bundle(self.runner, req.toolchain, target),
            )

    def launch(self) -> None:
        """Run the post-build action, if one was requested."""
        req = self.request
        action = req.post_action

        if action is None:
            self._enter(Phase.IDLE)
            return

        bundle = require_bundle(req.target, req.dry_run)

        if action == "run":
            with self._enter(Phase.RUNNING):
                self._invoke(
                    f"Running {req.target.bundle_name}",
                    lambda: run_simulator(self.runner, req.toolchain, bundle),
                )
        else:
            with self._enter(Phase.DEBUGGING):
                self._invoke(
                    "Starting GDB",
                    lambda: debug_simulator(self.runner, req.toolchain, bundle),
                )

    def run(self) -> None:
        """Run the full pipeline."""
        req = self.request

        if req.verbose:
            log.dim(f"SDK: {req.toolchain.root}")
            log.dim(f"Workspace: {req.workspace}")

        try:
            self.build()
            self.reporter.announce_completion(
                req.target.bundle_name,
                elapsed_millis(req.started_at),
            )
            if req.verbose:
                log.dim(self.timer.summary())

            self.launch()
        finally:
            self.phase = Phase.TERMINATED
            self.history.append(Phase.TERMINATED)


# =============================================================================
# CLI
# =============================================================================


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = _ArgumentParser(
        prog="pdbuild",
        description="Compiles, runs, and debugs example Playdate apps written in Rust",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog=f"""
The SDK path specifies where the pdc and PlaydateSimulator commands are located.
There are three ways to specify the location, each taking precedence over the
next:
 - passing the --sdkPath argument
 - setting the {SDK_ENV_VAR} environment variable
 - default location of ~/{DEFAULT_SDK_SUFFIX.as_posix()}

Examples:
    python build.py hello_world              # Build examples/hello_world
    python build.py sprite_game --run        # Build, then open in the simulator
    python build.py sprite_game --release    # Optimized build
        """,
    )

    parser.add_argument(
        "target",
        nargs="?",
        help="Name of an example app in the examples/ directory",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Debug the app using gdb once the build completes",
    )

    parser.add_argument(
        "--help", "-h",
        action="store_true",
        help="Show this help and exit",
    )

    parser.add_argument(
        "--release",
        action="store_true",
        help="Produce an optimized release build of the app",
    )

    parser.add_argument(
        "--run",
        action="store_true",
        help="Run the app in the Playdate simulator once the build completes",
    )

    parser.add_argument(
        "--sdkPath", "--sdk-path",
        dest="sdk_path",
        metavar="PATH",
        help="Path to the root of the Playdate SDK",
    )

    parser.add_argument(
        "--workspace",
        default=".",
        help="Repository root containing examples/ (default: current directory)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without executing",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Echo each command and print phase timings",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Raises:
        UsageError: On unknown options or a missing option value.
    """
    return create_parser().parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    started_at = time.monotonic()
    parser = create_parser()

    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        log.error(str(e))
        parser.print_help()
        return 1

    if args.no_color:
        log.set_color(False)

    # Help exits non-zero, like a usage error
    if args.help:
        parser.print_help()
        return 1

    if not args.target:
        log.error("Please provide the name of an example app in the examples/ directory")
        parser.print_help()
        return 1

    try:
        request = BuildRequest.from_args(args, started_at=started_at)
        orchestrator = BuildOrchestrator(request)
        orchestrator.run()

        return 0

    except KeyboardInterrupt:
        log.warning("Build interrupted")
        return 130
    except PhaseFailure:
        # Already reported by the orchestrator
        return 1
    except Exception as e:
        log.error(str(e))
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
