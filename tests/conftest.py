"""Shared fixtures: a sample charm package and a fake toolchain."""

from __future__ import annotations

import importlib
import io
import runpy
import shutil
import subprocess
import sys
from contextlib import redirect_stdout
from pathlib import Path
from typing import Sequence

import pytest

from charmgen_core.config import ToolchainConfig
from charmgen_core.errors import ToolchainError, ToolNotFoundError
from charmgen_core.package import TargetPackage
from charmgen_core.process import EnvOverlay

FIXTURES = Path(__file__).parent / "fixtures"
CHARMS = FIXTURES / "charms"
SAMPLE_WHEEL = "charmgen_sample_charm-0.1.0-py3-none-any.whl"


class FakeRunner:
    """Stands in for shiv, pip, git and the host interpreter.

    The "compiler" copies the entry module to the output path, and running an
    executable with the configured python executes that copy in-process.
    ``pip wheel`` and ``pip download`` leave placeholder wheels behind.
    """

    def __init__(
        self,
        toolchain: ToolchainConfig | None = None,
        *,
        missing: Sequence[str] = (),
        failing: dict[str, str] | None = None,
        wheel_name: str = SAMPLE_WHEEL,
    ) -> None:
        self.toolchain = toolchain or ToolchainConfig()
        self.missing = set(missing)
        self.failing = dict(failing or {})
        self.wheel_name = wheel_name
        self.calls: list[tuple[list[str], Path | None, EnvOverlay]] = []

    def run(self, argv, *, cwd=None, overlay=None, quiet=False):
        command = [str(part) for part in argv]
        self.calls.append((command, cwd, overlay or EnvOverlay()))
        tool = command[0]
        if tool in self.missing:
            raise ToolNotFoundError(tool)
        if tool in self.failing:
            raise ToolchainError(tool, 1, self.failing[tool])
        stdout = ""
        if tool == self.toolchain.compiler:
            self._compile(command)
        elif tool == self.toolchain.python:
            stdout = self._execute(command[1])
        elif tool == self.toolchain.vcs:
            (Path(cwd) / ".git").mkdir()
        elif tool == self.toolchain.snapshot_tool and command[1] == "wheel":
            wheel_dir = Path(command[command.index("--wheel-dir") + 1])
            (wheel_dir / self.wheel_name).write_bytes(b"wheel")
        elif tool == self.toolchain.snapshot_tool:
            dest = Path(command[command.index("--dest") + 1])
            (dest / "sample_dep-1.0-py3-none-any.whl").write_bytes(b"wheel")
        return subprocess.CompletedProcess(command, 0, stdout, "")

    def commands_for(self, tool: str) -> list[tuple[list[str], Path | None, EnvOverlay]]:
        return [call for call in self.calls if call[0][0] == tool]

    @staticmethod
    def _compile(command: list[str]) -> None:
        output = Path(command[command.index("--output-file") + 1])
        site = Path(command[command.index("--site-packages") + 1])
        module = command[command.index("--entry-point") + 1].split(":")[0]
        shutil.copyfile(site / f"{module}.py", output)
        output.chmod(0o755)

    @staticmethod
    def _execute(path: str) -> str:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            runpy.run_path(path, run_name="__main__")
        return buffer.getvalue()


@pytest.fixture
def charms_on_path(monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.syspath_prepend(str(CHARMS))
    return CHARMS


@pytest.fixture
def sample_package(charms_on_path: Path) -> TargetPackage:
    return TargetPackage(
        import_path="sample_charm",
        directory=charms_on_path / "sample_charm",
        requirement="sample-charm==1.0",
    )


@pytest.fixture
def sample_project(charms_on_path: Path) -> TargetPackage:
    return TargetPackage(
        import_path="sample_charm",
        directory=charms_on_path / "sample_charm",
        project_dir=charms_on_path,
    )


@pytest.fixture
def make_package(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Create an importable charm package with the given ``register_hooks`` body."""

    root = tmp_path / "packages"
    root.mkdir()
    monkeypatch.syspath_prepend(str(root))
    created: list[str] = []

    def _make(name: str, body: str, metadata: str = "name: placeholder\nsummary: test\n") -> TargetPackage:
        package_dir = root / name
        package_dir.mkdir()
        source = "def register_hooks(r):\n" + "".join(
            f"    {line}\n" for line in body.strip().splitlines()
        )
        (package_dir / "__init__.py").write_text(source, encoding="utf-8")
        (package_dir / "metadata.yaml").write_text(metadata, encoding="utf-8")
        importlib.invalidate_caches()
        created.append(name)
        return TargetPackage(import_path=name, directory=package_dir, requirement=name)

    yield _make
    for name in created:
        sys.modules.pop(name, None)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()
