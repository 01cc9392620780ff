"""
pdbuild.build - Build orchestration for Playdate apps.

Provides the phase pipeline, subprocess runner, console reporting and
toolchain resolution.
"""

from pdbuild.build.config import (
    SDK_ENV_VAR,
    CLEAN_FILES,
    PDEX_NAME,
    BuildRequest,
    Target,
    ToolchainConfig,
    default_sdk_path,
    resolve_toolchain,
    resolve_toolchain_path,
)
from pdbuild.build.errors import (
    ArtifactError,
    BuildError,
    PhaseFailure,
    UsageError,
    ValidationError,
)
from pdbuild.build.process import PhaseResult, ProcessRunner
from pdbuild.build.reporter import StepReporter
from pdbuild.build.orchestrator import (
    BuildOrchestrator,
    Phase,
    create_parser,
    parse_args,
    main,
)

__all__ = [
    # Constants
    "SDK_ENV_VAR",
    "CLEAN_FILES",
    "PDEX_NAME",
    # Data classes
    "BuildRequest",
    "Target",
    "ToolchainConfig",
    "PhaseResult",
    # Errors
    "BuildError",
    "UsageError",
    "ValidationError",
    "ArtifactError",
    "PhaseFailure",
    # Functions
    "default_sdk_path",
    "resolve_toolchain",
    "resolve_toolchain_path",
    # Pipeline
    "ProcessRunner",
    "StepReporter",
    "BuildOrchestrator",
    "Phase",
    "create_parser",
    "parse_args",
    "main",
]
