"""Vendor the charm's dependencies so it can rebuild itself on the target."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Sequence

from charmgen_core.config import ToolchainConfig
from charmgen_core.errors import (
    SnapshotToolNotFoundError,
    ToolchainError,
    ToolNotFoundError,
    wrap_error,
)
from charmgen_core.paths import APP_DIR, BundleLayout
from charmgen_core.process import CommandRunner

from .invoke import TARGET_INTERPRETER, find_links_overlay, make_dirs, write_file
from .wheels import SNAPSHOT_REMEDY, copy_wheels
from .writer import EXECUTABLE_MODE

COMPILE_SCRIPT = """#!/bin/sh
set -e
if test -z "$CHARM_DIR"; then
	echo CHARM_DIR not set >&2
	exit 2
fi
export PYTHONUSERBASE="$CHARM_DIR/.build"
export PATH="$PYTHONUSERBASE/bin:$CHARM_DIR/bin:$PATH"
cd "$CHARM_DIR/src/runhook"
export PIP_NO_INDEX=1
export PIP_FIND_LINKS="$CHARM_DIR/src/runhook/vendor"
mkdir -p "$CHARM_DIR/bin"
shiv --output-file "$CHARM_DIR/bin/runhook" --entry-point runhook:main --python "{interpreter}" --site-packages {app_dir} -r requirements.txt
"""


def vendor_deps(
    charm_dir: Path,
    *,
    toolchain: ToolchainConfig,
    runner: CommandRunner,
    find_links: Sequence[Path] = (),
    logger: logging.Logger | None = None,
) -> Path:
    """Download every distribution the charm program needs into ``src/runhook/vendor``.

    Local wheels from ``find_links`` are copied in first; the rest is resolved
    for the target platform. Returns the vendor directory.
    """

    log = logger or logging.getLogger(__name__)
    program = BundleLayout.from_root(charm_dir).program
    copy_wheels(find_links, program.vendor_dir)
    # The checkout only lives while the snapshot tool runs.
    try:
        try:
            runner.run([toolchain.vcs, "init"], cwd=program.root, quiet=True)
        except ToolchainError as exc:
            raise wrap_error("cannot git init directory", exc) from exc
        argv = [
            toolchain.snapshot_tool,
            "download",
            "--dest",
            str(program.vendor_dir),
            *toolchain.target.pip_args(),
            "-r",
            str(program.requirements_file),
        ]
        try:
            runner.run(argv, cwd=program.root, overlay=find_links_overlay(find_links))
        except ToolNotFoundError as exc:
            raise SnapshotToolNotFoundError(toolchain.snapshot_tool, SNAPSHOT_REMEDY) from exc
    finally:
        shutil.rmtree(program.root / ".git", ignore_errors=True)
    log.debug("vendored dependencies into %s", program.vendor_dir)
    return program.vendor_dir


def write_compile_script(charm_dir: Path) -> Path:
    target = BundleLayout.from_root(charm_dir).compile_script
    script = COMPILE_SCRIPT.format(interpreter=TARGET_INTERPRETER, app_dir=APP_DIR)
    write_file(target, script, EXECUTABLE_MODE)
    return target
