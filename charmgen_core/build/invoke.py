"""Compile a synthesized program into a self-contained executable."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Sequence

import charmgen_hook
from charmgen_core.config import ToolchainConfig
from charmgen_core.errors import (
    BundleIOError,
    InvariantViolationError,
    ToolchainError,
    wrap_error,
)
from charmgen_core.package import HOOK_PACKAGE
from charmgen_core.paths import ProgramLayout
from charmgen_core.process import CommandRunner, EnvOverlay

TARGET_INTERPRETER = "/usr/bin/env python3"


def make_dirs(*directories: Path) -> None:
    for directory in directories:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BundleIOError("create directory", directory, exc) from exc


def write_file(path: Path, data: bytes | str, mode: int | None = None) -> None:
    payload = data.encode("utf-8") if isinstance(data, str) else data
    try:
        path.write_bytes(payload)
        if mode is not None:
            path.chmod(mode)
    except OSError as exc:
        raise BundleIOError("write", path, exc) from exc


def install_hook_library(target_dir: Path) -> Path:
    """Copy the dispatch library next to a program so it is built in with it."""

    source = Path(charmgen_hook.__file__).parent
    destination = target_dir / HOOK_PACKAGE
    try:
        shutil.copytree(
            source,
            destination,
            ignore=shutil.ignore_patterns("__pycache__", "*.pyc"),
            dirs_exist_ok=True,
        )
    except OSError as exc:
        raise BundleIOError("copy", destination, exc) from exc
    return destination


def find_links_overlay(find_links: Sequence[Path]) -> EnvOverlay:
    """Let every pip in a build see local wheels alongside the index."""

    if not find_links:
        return EnvOverlay()
    return EnvOverlay({"PIP_FIND_LINKS": " ".join(str(path) for path in find_links)})


def compile_command(
    toolchain: ToolchainConfig,
    program: ProgramLayout,
    exe_file: Path,
    *,
    cross_compile: bool = False,
) -> list[str]:
    argv = [
        toolchain.compiler,
        "--output-file",
        str(exe_file),
        "--entry-point",
        f"{program.name}:main",
        "--python",
        TARGET_INTERPRETER,
        "--site-packages",
        str(program.app_dir),
        "--reproducible",
    ]
    # Everything after the compiler's own options is handed to pip install.
    if cross_compile:
        argv.extend(toolchain.target.pip_args())
    argv.extend(["-r", str(program.requirements_file)])
    return argv


def compile_program(
    program: ProgramLayout,
    exe_file: Path,
    code: bytes,
    *,
    requirements: Sequence[str],
    toolchain: ToolchainConfig,
    runner: CommandRunner,
    cross_compile: bool,
    find_links: Sequence[Path] = (),
    logger: logging.Logger | None = None,
) -> Path:
    """Write ``code`` into ``program`` and build it into ``exe_file``.

    With ``cross_compile`` the compiler installs distributions for the
    configured target platform instead of the build host. The requirements
    file stays in the program tree so the bundle can be rebuilt later.
    """

    log = logger or logging.getLogger(__name__)
    make_dirs(program.app_dir, exe_file.parent)
    write_file(program.source_file, code)
    install_hook_library(program.app_dir)
    write_file(program.requirements_file, "".join(f"{req}\n" for req in requirements))

    if cross_compile:
        log.debug("building %s for %s/%s", exe_file, toolchain.target.os, toolchain.target.arch)
    try:
        runner.run(
            compile_command(toolchain, program, exe_file, cross_compile=cross_compile),
            cwd=program.root,
            overlay=find_links_overlay(find_links),
        )
    except ToolchainError as exc:
        raise wrap_error("failed to build", exc) from exc
    if not exe_file.is_file():
        raise InvariantViolationError(
            f"{toolchain.compiler} reported success but {exe_file} was not built"
        )
    return exe_file
