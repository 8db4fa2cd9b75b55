"""Charm build pipeline: synthesize, compile, introspect, write, validate, vendor."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from charmgen_core.charm import CharmDir, CharmInfo
from charmgen_core.config import ToolchainConfig
from charmgen_core.errors import CharmBuildError, wrap_error
from charmgen_core.package import TargetPackage
from charmgen_core.paths import EXECUTABLE_NAME, BundleLayout
from charmgen_core.process import CommandRunner, ProcessRunner

from .introspect import registered_charm_info
from .invoke import compile_program
from .synthesize import HOOK_MAIN_TEMPLATE, generate_code
from .validate import validate_charm_dir
from .vendor import vendor_deps, write_compile_script
from .wheels import package_requirements
from .writer import write_config, write_hooks, write_meta

WHEEL_DIR = "wheels"


@dataclass(frozen=True)
class BuildRequest:
    """Inputs for one charm build."""

    package: TargetPackage
    # destination directory for the charm files
    charm_dir: Path
    # scratch space for build artifacts; owned by the caller
    temp_dir: Path
    # vendor the source into the charm, giving hooks the ability to recompile
    source: bool = False


@dataclass(frozen=True)
class BuildResult:
    charm_dir: Path
    info: CharmInfo
    charm: CharmDir
    hooks_created: tuple[Path, ...] = ()
    config_written: bool = False
    vendored: bool = False
    executable: Path | None = None


def build_charm(
    request: BuildRequest,
    *,
    toolchain: ToolchainConfig | None = None,
    runner: CommandRunner | None = None,
    logger: logging.Logger | None = None,
) -> BuildResult:
    """Build the runhook executable and all the other charm pieces.

    A local charm project is first built into a wheel in the scratch
    directory. The runhook source goes into ``src/runhook``; the executable
    goes into ``bin/runhook``, or into the scratch directory when the source
    is vendored (the hooks then compile it on the target).
    """

    log = logger or logging.getLogger(__name__)
    toolchain = toolchain or ToolchainConfig()
    runner = runner or ProcessRunner(logger=log)
    layout = BundleLayout.from_root(request.charm_dir)

    wheel_dir = request.temp_dir / WHEEL_DIR
    with _stage("cannot build charm package"):
        requirements = package_requirements(
            request.package, wheel_dir, toolchain=toolchain, runner=runner, logger=log
        )
    find_links = (wheel_dir,)

    code = generate_code(HOOK_MAIN_TEMPLATE, request.package.import_path)
    if request.source:
        # Build the executable anyway, to be sure that we can, but discard it.
        exe = request.temp_dir / EXECUTABLE_NAME
    else:
        exe = layout.executable
    with _stage("cannot build hooks main package"):
        compile_program(
            layout.program,
            exe,
            code,
            requirements=requirements,
            toolchain=toolchain,
            runner=runner,
            cross_compile=True,
            find_links=find_links,
            logger=log,
        )

    with _stage("cannot introspect charm registrations"):
        info = registered_charm_info(
            request.package,
            request.temp_dir,
            requirements=requirements,
            toolchain=toolchain,
            runner=runner,
            find_links=find_links,
            logger=log,
        )

    with _stage("cannot write hooks to charm"):
        created = write_hooks(request.charm_dir, info.hooks, source=request.source, logger=log)
    with _stage("cannot write metadata.yaml"):
        write_meta(request.package.metadata_file, request.charm_dir, info, logger=log)
    with _stage("cannot write config.yaml"):
        config_path = write_config(request.charm_dir, info.config, logger=log)

    charm = validate_charm_dir(
        request.charm_dir,
        require_executable=not request.source,
        logger=log,
    )

    if request.source:
        with _stage("cannot get dependencies"):
            vendor_deps(
                request.charm_dir,
                toolchain=toolchain,
                runner=runner,
                find_links=find_links,
                logger=log,
            )
            write_compile_script(request.charm_dir)

    return BuildResult(
        charm_dir=request.charm_dir,
        info=info,
        charm=charm,
        hooks_created=tuple(created),
        config_written=config_path is not None,
        vendored=request.source,
        executable=None if request.source else exe,
    )


@contextmanager
def _stage(context: str) -> Iterator[None]:
    """Prefix any build error raised inside the block with ``context``."""
    try:
        yield
    except CharmBuildError as exc:
        raise wrap_error(context, exc) from exc
