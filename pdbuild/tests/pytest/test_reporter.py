"""
Tests for StepReporter and the console Logger it writes through.
"""

from __future__ import annotations

import pytest

from pdbuild.build.errors import PhaseFailure
from pdbuild.build.reporter import StepReporter
from pdbuild.core.utils import Logger


@pytest.fixture
def reporter() -> StepReporter:
    return StepReporter(Logger(use_color=False))


# =============================================================================
# Progress Lines
# =============================================================================


@pytest.mark.evergreen
class TestProgress:
    """Step, spawn and completion lines."""

    def test_announce_step(self, reporter: StepReporter, capsys: pytest.CaptureFixture[str]) -> None:
        reporter.announce_step("Building API")
        assert capsys.readouterr().out == "=> Building API\n"

    def test_announce_spawn(self, reporter: StepReporter, capsys: pytest.CaptureFixture[str]) -> None:
        reporter.announce_spawn("cargo", ["build", "--release"])
        assert capsys.readouterr().out == "=> Running cargo build --release\n"

    def test_announce_completion(self, reporter: StepReporter, capsys: pytest.CaptureFixture[str]) -> None:
        reporter.announce_completion("hello_world.pdx", 1234)
        assert "Built hello_world.pdx in 1234ms" in capsys.readouterr().out

    def test_color_wraps_artifact_name(self, capsys: pytest.CaptureFixture[str]) -> None:
        StepReporter(Logger(use_color=True)).announce_completion("app.pdx", 5)
        out = capsys.readouterr().out
        assert "\033[94mapp.pdx\033[0m" in out


# =============================================================================
# Failure Rendering
# =============================================================================


@pytest.mark.evergreen
class TestAnnounceFailure:
    """announce_failure shows the command line and both captured buffers."""

    def test_exit_failure(self, reporter: StepReporter, capsys: pytest.CaptureFixture[str]) -> None:
        failure = PhaseFailure(
            "cargo",
            ["build"],
            exit_code=101,
            stdout=b"Compiling app\n",
            stderr=b"error: aborting\n",
        )
        reporter.announce_failure(failure)

        captured = capsys.readouterr()
        assert "Compiling app" in captured.out
        assert "Error: cargo build failed" in captured.err
        assert "error: aborting" in captured.err
        assert "exited with code 101" in captured.err

    def test_launch_failure(self, reporter: StepReporter, capsys: pytest.CaptureFixture[str]) -> None:
        error = FileNotFoundError(2, "No such file or directory", "pdc")
        reporter.announce_failure(PhaseFailure("pdc", ["-sdkpath", "/sdk"], launch_error=error))

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error: pdc -sdkpath /sdk failed" in captured.err
        assert "No such file or directory" in captured.err

    def test_empty_buffers_are_not_printed(self, reporter: StepReporter, capsys: pytest.CaptureFixture[str]) -> None:
        reporter.announce_failure(PhaseFailure("cargo", ["build"], exit_code=1))
        assert capsys.readouterr().out == ""

    def test_undecodable_output_does_not_raise(
        self, reporter: StepReporter, capsys: pytest.CaptureFixture[str]
    ) -> None:
        failure = PhaseFailure("cargo", ["build"], exit_code=1, stdout=b"\xff\xfe bad", stderr=b"\x80")
        reporter.announce_failure(failure)
        assert "bad" in capsys.readouterr().out
