"""
Build configuration for pdbuild.

Constants, dataclasses, and toolchain resolution.
"""

from __future__ import annotations

import argparse
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from pdbuild.build.errors import ValidationError

# =============================================================================
# Constants
# =============================================================================

# Environment variable consulted when --sdkPath is absent
SDK_ENV_VAR = "SDK_PATH"

# Fallback SDK location, relative to the home directory
DEFAULT_SDK_SUFFIX = Path(".local") / "share" / "playdate-sdk"

EXAMPLES_DIR = "examples"
SOURCE_DIR = "Source"
PROJECT_DESCRIPTOR = "Cargo.toml"

# Name pdc expects for the native library inside Source/
PDEX_NAME = "pdex.so"

# Stale artifacts removed from Source/ before each build
CLEAN_FILES = [PDEX_NAME]

BUILD_TOOL = "cargo"
DEBUGGER = "rust-gdb"
PACKAGER_NAME = "pdc"
SIMULATOR_NAME = "PlaydateSimulator"
BUNDLE_SUFFIX = ".pdx"


def default_sdk_path() -> Path:
    return Path.home() / DEFAULT_SDK_SUFFIX


# =============================================================================
# Toolchain Resolution
# =============================================================================


def resolve_toolchain_path(
    explicit: Optional[str],
    environment_value: Optional[str],
    default_path: Path,
) -> Path:
    """Pick the toolchain root: explicit flag, then environment, then default.

    Empty strings count as unset. The result is not checked for existence;
    a wrong path surfaces later when the packager fails to launch.
    """
    if explicit:
        return Path(explicit).expanduser()
    if environment_value:
        return Path(environment_value).expanduser()
    return default_path


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class ToolchainConfig:
    """Location of the Playdate SDK and the tools inside it."""

    root: Path

    @property
    def bin_dir(self) -> Path:
        return self.root / "bin"

    @property
    def packager(self) -> Path:
        return self.bin_dir / PACKAGER_NAME

    @property
    def simulator(self) -> Path:
        return self.bin_dir / SIMULATOR_NAME


def resolve_toolchain(
    explicit: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ToolchainConfig:
    """Resolve the SDK location once, using the process environment by default."""
    if environ is None:
        environ = os.environ
    root = resolve_toolchain_path(explicit, environ.get(SDK_ENV_VAR), default_sdk_path())
    return ToolchainConfig(root=root)


@dataclass(frozen=True)
class Target:
    """An example app under <workspace>/examples/<name>."""

    name: str
    workspace: Path

    def __post_init__(self) -> None:
        # The name is a single directory under examples/
        name = self.name
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise ValidationError(
                f"Invalid app name {name!r}\n"
                f"  Fix: Pass the name of a directory in {self.workspace / EXAMPLES_DIR}/"
            )

    @property
    def root(self) -> Path:
        return self.workspace / EXAMPLES_DIR / self.name

    @property
    def descriptor(self) -> Path:
        return self.root / PROJECT_DESCRIPTOR

    @property
    def output_dir(self) -> Path:
        return self.root / SOURCE_DIR

    @property
    def crate_lib_name(self) -> str:
        # cargo replaces dashes in library file names
        return f"lib{self.name.replace('-', '_')}.so"

    def build_artifact(self, release: bool) -> Path:
        profile = "release" if release else "debug"
        return self.root / "target" / profile / self.crate_lib_name

    @property
    def bundle_name(self) -> str:
        return f"{self.name}{BUNDLE_SUFFIX}"

    @property
    def bundle_path(self) -> Path:
        return self.workspace / self.bundle_name


@dataclass(frozen=True)
class BuildRequest:
    """Immutable snapshot of everything a build run needs."""

    target: Target
    toolchain: ToolchainConfig
    release: bool = False
    run: bool = False
    debug: bool = False
    dry_run: bool = False
    verbose: bool = False
    started_at: float = field(default_factory=time.monotonic)

    @property
    def workspace(self) -> Path:
        return self.target.workspace

    @property
    def post_action(self) -> Optional[str]:
        """Which post-build action applies: run, debug, or None (run wins)."""
        if self.run:
            return "run"
        if self.debug:
            return "debug"
        return None

    @classmethod
    def from_args(
        cls,
        args: argparse.Namespace,
        environ: Optional[Mapping[str, str]] = None,
        started_at: Optional[float] = None,
    ) -> "BuildRequest":
        workspace = Path(args.workspace).resolve()
        extra = {} if started_at is None else {"started_at": started_at}
        return cls(
            target=Target(name=args.target, workspace=workspace),
            toolchain=resolve_toolchain(args.sdk_path, environ),
            release=args.release,
            run=args.run,
            debug=args.debug,
            dry_run=args.dry_run,
            verbose=args.verbose,
            **extra,
        )
