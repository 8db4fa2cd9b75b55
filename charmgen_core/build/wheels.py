"""Turn the charm package into a requirement pip can satisfy without a host path."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Sequence

from charmgen_core.config import ToolchainConfig
from charmgen_core.errors import (
    BundleIOError,
    InvariantViolationError,
    SnapshotToolNotFoundError,
    ToolchainError,
    ToolNotFoundError,
    wrap_error,
)
from charmgen_core.package import TargetPackage
from charmgen_core.process import CommandRunner

from .invoke import make_dirs

SNAPSHOT_REMEDY = "get it with: python3 -m ensurepip --upgrade"

_STAGING_DIR = ".staging"


def package_requirements(
    package: TargetPackage,
    wheel_dir: Path,
    *,
    toolchain: ToolchainConfig,
    runner: CommandRunner,
    logger: logging.Logger | None = None,
) -> tuple[str, ...]:
    """Requirements a program built around ``package`` installs.

    A local project is built into a wheel in ``wheel_dir`` first; the
    returned requirement pins it by name and version.
    """

    make_dirs(wheel_dir)
    if package.project_dir is None:
        return (package.requirement,)
    return (
        build_wheel(
            package.project_dir, wheel_dir, toolchain=toolchain, runner=runner, logger=logger
        ),
    )


def build_wheel(
    project_dir: Path,
    wheel_dir: Path,
    *,
    toolchain: ToolchainConfig,
    runner: CommandRunner,
    logger: logging.Logger | None = None,
) -> str:
    # Built for the host without platform options; charm packages are pure Python.
    log = logger or logging.getLogger(__name__)
    staging = wheel_dir / _STAGING_DIR
    shutil.rmtree(staging, ignore_errors=True)
    make_dirs(staging)
    argv = [
        toolchain.snapshot_tool,
        "wheel",
        "--no-deps",
        "--wheel-dir",
        str(staging),
        str(project_dir),
    ]
    try:
        try:
            runner.run(argv, cwd=project_dir)
        except ToolNotFoundError as exc:
            raise SnapshotToolNotFoundError(toolchain.snapshot_tool, SNAPSHOT_REMEDY) from exc
        except ToolchainError as exc:
            raise wrap_error(f"cannot build a wheel of {project_dir}", exc) from exc
        wheels = sorted(staging.glob("*.whl"))
        if len(wheels) != 1:
            raise InvariantViolationError(
                f"expected one wheel from {project_dir}, found {len(wheels)}"
            )
        built = wheel_dir / wheels[0].name
        try:
            shutil.move(str(wheels[0]), str(built))
        except OSError as exc:
            raise BundleIOError("move", built, exc) from exc
    finally:
        shutil.rmtree(staging, ignore_errors=True)
    log.debug("built %s", built)
    return wheel_requirement(built)


def wheel_requirement(wheel: Path) -> str:
    """``name==version`` for a wheel file named per the binary distribution format."""

    parts = wheel.name[: -len(".whl")].split("-")
    if len(parts) < 5:
        raise InvariantViolationError(f"{wheel.name} is not a wheel file name")
    return f"{parts[0]}=={parts[1]}"


def copy_wheels(wheel_dirs: Sequence[Path], destination: Path) -> list[Path]:
    make_dirs(destination)
    copied: list[Path] = []
    for wheel_dir in wheel_dirs:
        for wheel in sorted(Path(wheel_dir).glob("*.whl")):
            target = destination / wheel.name
            try:
                shutil.copy2(wheel, target)
            except OSError as exc:
                raise BundleIOError("copy", target, exc) from exc
            copied.append(target)
    return copied
