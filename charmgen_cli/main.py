"""charmgen: build a charm from a Python package that registers hooks."""

from __future__ import annotations

import argparse
import logging
import sys
import tempfile
from contextlib import ExitStack
from pathlib import Path
from typing import Sequence

from charmgen_core.build import BuildRequest, build_charm
from charmgen_core.build.invoke import make_dirs
from charmgen_core.config import SettingsResolver
from charmgen_core.errors import CharmBuildError
from charmgen_core.package import resolve_package
from charmgen_core.process import ProcessRunner

PROG = "charmgen"

logger = logging.getLogger(PROG)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=(
            "Build a charm from the named Python package. The package directory "
            "must hold a metadata.yaml; hooks, relations and config options are "
            "taken from the package's register_hooks function."
        ),
    )
    parser.add_argument("package", help="import path of the charm package")
    parser.add_argument("-v", "--verbose", action="store_true", help="print progress to stderr")
    parser.add_argument(
        "--source",
        action="store_true",
        help="vendor all dependencies into the charm and compile it on the target",
    )
    parser.add_argument("--charm-dir", help="charm directory (default <repo>/<series>/<package dir>)")
    parser.add_argument("--repo", help="charm repository root (default $JUJU_REPOSITORY)")
    parser.add_argument("--series", help="series name used under the repository root")
    parser.add_argument("--temp-dir", help="scratch directory to keep build artifacts in")
    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    start_dir: Path | str | None = None,
) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code or 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )
    resolver = SettingsResolver(
        cli_overrides={"repository": args.repo, "series": args.series},
        project_dir=Path(start_dir) if start_dir is not None else None,
    )
    try:
        return _run(args, resolver)
    except CharmBuildError as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        return 1
    except KeyError as exc:
        print(f"{PROG}: {exc.args[0] if exc.args else exc}", file=sys.stderr)
        return 1


def _run(args: argparse.Namespace, resolver: SettingsResolver) -> int:
    package = resolve_package(args.package)
    if args.charm_dir:
        charm_dir = Path(args.charm_dir).expanduser().resolve()
    else:
        charm_dir = resolver.charm_dir_for(package.directory)
    toolchain = resolver.toolchain()

    with ExitStack() as stack:
        if args.temp_dir:
            temp_dir = Path(args.temp_dir).expanduser().resolve()
            make_dirs(temp_dir)
        else:
            temp_dir = Path(stack.enter_context(tempfile.TemporaryDirectory(prefix="charmgen-")))
        logger.debug("building %s into %s", package.import_path, charm_dir)
        result = build_charm(
            BuildRequest(
                package=package,
                charm_dir=charm_dir,
                temp_dir=temp_dir,
                source=args.source,
            ),
            toolchain=toolchain,
            runner=ProcessRunner(logger=logger),
            logger=logger,
        )
    logger.debug(
        "built %s with %d new hooks", result.charm_dir, len(result.hooks_created)
    )
    return 0
