"""
Shared pytest fixtures for pdbuild tests.

Provides a throwaway workspace laid out like the Rust Playdate repo and a
recording runner that stands in for cargo, pdc and the simulator.

Test Tier Markers:
  @pytest.mark.evergreen - Tests that always run, never skip (production tests)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest

from pdbuild.build.config import BuildRequest, Target, ToolchainConfig
from pdbuild.build.errors import PhaseFailure
from pdbuild.build.process import PhaseResult


# =============================================================================
# Test Data Constants
# =============================================================================

TARGET_NAME = "hello_world"
SDK_ROOT = Path("/opt/playdate-sdk")


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test tiers."""
    config.addinivalue_line(
        "markers",
        "evergreen: tests that always run, never skip (production tests)"
    )


# =============================================================================
# Recording Runner
# =============================================================================


@dataclass
class Call:
    """One recorded runner invocation."""

    command: str
    args: list[str]
    cwd: Optional[Path]
    inherit: bool


class RecordingRunner:
    """Records commands instead of running them.

    By default it mimics the side effects of the real tools: building the
    app crate writes the shared library, and pdc writes the bundle.
    ``fail_when`` makes the first matching call raise PhaseFailure.
    """

    def __init__(
        self,
        target: Target,
        fail_when: Optional[Callable[[Call], bool]] = None,
        simulate_outputs: bool = True,
    ) -> None:
        self.target = target
        self.fail_when = fail_when
        self.simulate_outputs = simulate_outputs
        self.calls: list[Call] = []

    @property
    def commands(self) -> list[str]:
        return [Path(c.command).name for c in self.calls]

    def run(
        self,
        command,
        args: Sequence = (),
        cwd: Optional[Path] = None,
        inherit: bool = False,
    ) -> PhaseResult:
        call = Call(str(command), [str(a) for a in args], cwd, inherit)
        self.calls.append(call)

        if self.fail_when is not None and self.fail_when(call):
            raise PhaseFailure(
                call.command,
                call.args,
                exit_code=101,
                stdout=b"compiling...\n",
                stderr=b"error[E0425]: cannot find value\n",
            )

        if self.simulate_outputs:
            self._simulate(call)
        return PhaseResult()

    def _simulate(self, call: Call) -> None:
        name = Path(call.command).name
        if name == "cargo" and call.cwd == self.target.root:
            release = "--release" in call.args
            artifact = self.target.build_artifact(release)
            artifact.parent.mkdir(parents=True, exist_ok=True)
            artifact.write_bytes(b"\x7fELF")
        elif name == "pdc":
            bundle = self.target.bundle_path
            bundle.mkdir(parents=True, exist_ok=True)
            (bundle / "pdex.bin").write_bytes(b"\x00")


# =============================================================================
# Fixtures
# =============================================================================


def make_workspace(root: Path, name: str = TARGET_NAME) -> Path:
    """Create <root>/examples/<name>/Cargo.toml and return root."""
    app = root / "examples" / name
    app.mkdir(parents=True)
    (app / "Cargo.toml").write_text(f'[package]\nname = "{name}"\n')
    return root


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A workspace with one valid example app."""
    return make_workspace(tmp_path.resolve() / "repo")


@pytest.fixture
def target(workspace: Path) -> Target:
    return Target(name=TARGET_NAME, workspace=workspace)


@pytest.fixture
def make_request(target: Target) -> Callable[..., BuildRequest]:
    """Factory for BuildRequest with the test target and a fixed SDK root."""

    def _make(**overrides) -> BuildRequest:
        fields = {
            "target": target,
            "toolchain": ToolchainConfig(root=SDK_ROOT),
            "started_at": 0.0,
        }
        fields.update(overrides)
        return BuildRequest(**fields)

    return _make


@pytest.fixture
def runner(target: Target) -> RecordingRunner:
    return RecordingRunner(target)
