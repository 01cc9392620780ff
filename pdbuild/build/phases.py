"""
Build phases for pdbuild.

Individual build operations that the orchestrator chains together. Each
phase reads what the previous one left on disk, so their order matters.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, Optional

from pdbuild.build.config import (
    BUILD_TOOL,
    CLEAN_FILES,
    DEBUGGER,
    PDEX_NAME,
    Target,
    ToolchainConfig,
)
from pdbuild.build.errors import ArtifactError, ValidationError
from pdbuild.build.process import PhaseResult, ProcessRunner
from pdbuild.core.utils import log


# =============================================================================
# Filesystem Operations
# =============================================================================


def validate_target(target: Target) -> None:
    """Check that the target has a Cargo.toml that is a regular file.

    Raises:
        ValidationError: If the descriptor is missing, is not a file, or
            cannot be checked (for example, a name too long for the filesystem).
    """
    descriptor = target.descriptor
    try:
        exists = descriptor.exists()
        is_file = descriptor.is_file()
    except OSError as e:
        raise ValidationError(f"Could not check {descriptor}: {e}") from e
    if not exists:
        raise ValidationError(
            f"{descriptor} not found\n"
            f"  Fix: Pass the name of an app in the {descriptor.parent.parent}/ directory"
        )
    if not is_file:
        raise ValidationError(f"{descriptor} exists, but it isn't a file")


def ensure_output_dir(target: Target, dry_run: bool = False) -> None:
    """Create the target's Source/ directory. Failures are only logged."""
    if dry_run:
        log.info(f"[DRY-RUN] Would create {target.output_dir}")
        return

    try:
        target.output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        log.warning(f"Could not create {target.output_dir}: {e}")


def clean_output_dir(
    output_dir: Path,
    files: Optional[list[str]] = None,
    dry_run: bool = False,
    on_removed: Optional[Callable[[Path], None]] = None,
) -> list[Path]:
    """Remove stale artifacts from output_dir. Returns the paths removed.

    Missing files are skipped; other removal errors are logged as warnings.
    """
    removed: list[Path] = []
    for name in CLEAN_FILES if files is None else files:
        path = output_dir / name
        if dry_run:
            if path.exists():
                log.info(f"[DRY-RUN] Would remove {path}")
            continue
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            log.warning(f"Could not remove {path}: {e}")
            continue
        removed.append(path)
        if on_removed is not None:
            on_removed(path)
    return removed


def copy_artifact(target: Target, release: bool = False, dry_run: bool = False) -> Path:
    """Copy the built shared library into Source/ as pdex.so.

    Raises:
        ArtifactError: If the build did not produce the library.
    """
    src = target.build_artifact(release)
    dest = target.output_dir / PDEX_NAME

    if dry_run:
        log.info(f"[DRY-RUN] Would copy {src} to {dest}")
        return dest

    if not src.is_file():
        raise ArtifactError(
            f"Built library not found at {src}\n"
            f"  Fix: Make sure the crate's [lib] has crate-type = [\"cdylib\"]"
        )
    try:
        shutil.copyfile(src, dest)
    except OSError as e:
        raise ArtifactError(f"Could not copy {src} to {dest}: {e}") from e
    return dest


def require_bundle(target: Target, dry_run: bool = False) -> Path:
    """Return the bundle path, failing if packaging did not produce it."""
    bundle = target.bundle_path
    if not dry_run and not bundle.exists():
        raise ArtifactError(f"Bundle not found at {bundle}")
    return bundle


# =============================================================================
# Tool Invocations
# =============================================================================


def cargo_build_args(release: bool = False) -> list[str]:
    args = ["build"]
    if release:
        args.append("--release")
    return args


def cargo_build(runner: ProcessRunner, cwd: Path, release: bool = False) -> PhaseResult:
    """Run cargo build in a crate directory."""
    return runner.run(BUILD_TOOL, cargo_build_args(release), cwd=cwd)


def packager_args(toolchain: ToolchainConfig, target: Target) -> list[str]:
    return ["-sdkpath", str(toolchain.root), str(target.output_dir), target.bundle_name]


def package_bundle(
    runner: ProcessRunner,
    toolchain: ToolchainConfig,
    target: Target,
) -> PhaseResult:
    """Run pdc on the target's Source/ directory, writing <target>.pdx."""
    return runner.run(
        toolchain.packager,
        packager_args(toolchain, target),
        cwd=target.workspace,
    )


def run_simulator(runner: ProcessRunner, toolchain: ToolchainConfig, bundle: Path) -> PhaseResult:
    """Open the bundle in the simulator, attached to this terminal."""
    return runner.run(toolchain.simulator, [str(bundle)], inherit=True)


def debugger_args(toolchain: ToolchainConfig, bundle: Path) -> list[str]:
    return ["--silent", "--args", str(toolchain.simulator), str(bundle)]


def debug_simulator(runner: ProcessRunner, toolchain: ToolchainConfig, bundle: Path) -> PhaseResult:
    """Start rust-gdb wrapping the simulator, attached to this terminal."""
    return runner.run(DEBUGGER, debugger_args(toolchain, bundle), inherit=True)
