import os
import sys
from pathlib import Path

import pytest

from charmgen_core.errors import ToolchainError, ToolNotFoundError, wrap_error
from charmgen_core.process import EnvOverlay, ProcessRunner


def test_overlay_is_immutable() -> None:
    base = {"PATH": "/bin"}
    overlay = EnvOverlay({"PIP_PLATFORM": "manylinux2014_x86_64"})
    extended = overlay.with_entry("PIP_NO_INDEX", "1")

    env = extended.apply(base)

    assert base == {"PATH": "/bin"}
    assert overlay.entries == {"PIP_PLATFORM": "manylinux2014_x86_64"}
    assert env == {"PATH": "/bin", "PIP_PLATFORM": "manylinux2014_x86_64", "PIP_NO_INDEX": "1"}
    with pytest.raises(AttributeError):
        overlay.entries = {}  # type: ignore[misc]


def test_overlay_rejects_bad_names() -> None:
    with pytest.raises(ValueError):
        EnvOverlay({"A=B": "x"})
    assert not EnvOverlay()


def test_runner_applies_overlay(tmp_path: Path) -> None:
    runner = ProcessRunner(base_env=dict(os.environ))
    result = runner.run(
        [sys.executable, "-c", "import os; print(os.environ['CHARMGEN_MARKER'])"],
        cwd=tmp_path,
        overlay=EnvOverlay({"CHARMGEN_MARKER": "overlaid"}),
    )
    assert result.stdout.strip() == "overlaid"
    assert "CHARMGEN_MARKER" not in os.environ


def test_runner_reports_exit_status() -> None:
    runner = ProcessRunner()
    with pytest.raises(ToolchainError) as excinfo:
        runner.run([sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"])

    assert excinfo.value.returncode == 3
    assert "boom" in excinfo.value.output
    assert not isinstance(excinfo.value, ToolNotFoundError)


def test_runner_reports_missing_tool() -> None:
    with pytest.raises(ToolNotFoundError, match="executable not found"):
        ProcessRunner().run(["charmgen-no-such-tool-here"])


def test_missing_tool_error_carries_tool_details() -> None:
    error = ToolNotFoundError("pip", "get it with: python3 -m ensurepip --upgrade")

    assert isinstance(error, ToolchainError)
    assert error.tool == "pip"
    assert error.returncode is None
    assert error.output == ""
    assert error.remedy == "get it with: python3 -m ensurepip --upgrade"
    assert str(error) == "pip executable not found; get it with: python3 -m ensurepip --upgrade"

    wrapped = wrap_error("cannot vendor", error)
    assert type(wrapped) is ToolNotFoundError
    assert wrapped.tool == "pip"
    assert str(wrapped).startswith("cannot vendor: pip executable not found")


def test_wrap_error_keeps_class_and_details() -> None:
    original = ToolchainError("shiv", 2, "bad wheel")
    wrapped = wrap_error("cannot build", original)

    assert type(wrapped) is ToolchainError
    assert wrapped.returncode == 2
    assert str(wrapped) == "cannot build: shiv failed (exit=2): bad wheel"
    assert wrapped.__cause__ is original
