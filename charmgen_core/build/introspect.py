"""Recover a charm's registrations by running a compiled probe program."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Sequence

from charmgen_core.charm import CharmInfo
from charmgen_core.config import ToolchainConfig
from charmgen_core.errors import IntrospectionError, ToolchainError, wrap_error
from charmgen_core.package import TargetPackage
from charmgen_core.paths import ProgramLayout
from charmgen_core.process import CommandRunner

from .invoke import compile_program
from .synthesize import PROBE_TEMPLATE, generate_code

PROBE_NAME = "probe"


def registered_charm_info(
    package: TargetPackage,
    temp_dir: Path,
    *,
    requirements: Sequence[str],
    toolchain: ToolchainConfig,
    runner: CommandRunner,
    find_links: Sequence[Path] = (),
    logger: logging.Logger | None = None,
) -> CharmInfo:
    """Build and run a probe that registers ``package`` and reports the result.

    The probe is built for the build host, since it has to run here.
    """

    log = logger or logging.getLogger(__name__)
    program = ProgramLayout(root=temp_dir / PROBE_NAME, name=PROBE_NAME)
    exe_file = temp_dir / "bin" / PROBE_NAME
    code = generate_code(PROBE_TEMPLATE, package.import_path)
    try:
        compile_program(
            program,
            exe_file,
            code,
            requirements=requirements,
            toolchain=toolchain,
            runner=runner,
            cross_compile=False,
            find_links=find_links,
            logger=log,
        )
    except ToolchainError as exc:
        raise wrap_error("cannot build registration probe", exc) from exc
    try:
        result = runner.run([toolchain.python, str(exe_file)], quiet=True)
    except ToolchainError as exc:
        raise wrap_error("cannot run registration probe", exc) from exc
    info = decode_charm_info(result.stdout)
    log.debug(
        "probe found %d hooks, %d relations, %d config options",
        len(info.hooks),
        len(info.relations),
        len(info.config),
    )
    return info


def decode_charm_info(output: str) -> CharmInfo:
    """Parse what the probe printed.

    Output that is not shaped like a registry snapshot is an
    ``IntrospectionError``; well-formed declarations the build cannot accept
    (unknown roles, bad hook names) stay ``CharmInputError``.
    """

    try:
        data = json.loads(output)
    except (TypeError, json.JSONDecodeError) as exc:
        raise IntrospectionError(f"registration probe printed malformed data: {exc}") from exc
    if not isinstance(data, dict):
        raise IntrospectionError("registration probe did not print a JSON object")
    _check_shape(data)
    return CharmInfo.from_dict(data)


def _check_shape(data: dict[str, Any]) -> None:
    hooks = data.get("hooks", [])
    if not isinstance(hooks, list) or not all(isinstance(h, str) and h for h in hooks):
        raise IntrospectionError("registration probe reported hooks that are not a list of names")
    for key in ("relations", "config"):
        section = data.get(key, {})
        if not isinstance(section, dict):
            raise IntrospectionError(f"registration probe reported {key} that are not an object")
        for name, entry in section.items():
            if not isinstance(entry, dict):
                raise IntrospectionError(
                    f"registration probe reported {key} entry {name!r} that is not an object"
                )
