"""Write hook stubs, metadata.yaml and config.yaml into a charm directory."""

from __future__ import annotations

import logging
import shlex
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, Mapping

from charmgen_core.charm import (
    CharmInfo,
    Option,
    build_config,
    build_meta,
    dump_yaml,
    read_yaml_mapping,
)
from charmgen_core.errors import BundleIOError
from charmgen_core.paths import BundleLayout

from .invoke import make_dirs, write_file

EXECUTABLE_MODE = 0o755
COMPILER_PACKAGE = "shiv"

# The apt-get flags follow what juju itself uses for unattended installs.
INSTALL_HOOK_TEMPLATE = """#!/bin/sh
set -ex
apt-get '--option=Dpkg::Options::=--force-confold' '--option=Dpkg::options::=--force-unsafe-io' --assume-yes --quiet install python3 python3-pip git

if ! test -e "$CHARM_DIR/bin/runhook"; then
	export PYTHONUSERBASE="$CHARM_DIR/.build"
	export PATH="$PYTHONUSERBASE/bin:$PATH"
	export PIP_BREAK_SYSTEM_PACKAGES=1
	python3 -m pip install --user {compiler_package}
	"$CHARM_DIR/compile"
fi
"$CHARM_DIR/bin/runhook" {hook_name}
"""

SOURCE_HOOK_TEMPLATE = """#!/bin/sh
set -ex
if test -e "$CHARM_DIR/compile-always"; then
	"$CHARM_DIR/compile"
fi
"$CHARM_DIR/bin/runhook" {hook_name}
"""

PLAIN_HOOK_TEMPLATE = """#!/bin/sh
set -ex
"$CHARM_DIR/bin/runhook" {hook_name}
"""

# Keyed by (hook is "install", source vendored into the charm).
HOOK_STUB_TEMPLATES: Mapping[tuple[bool, bool], str] = {
    (True, False): INSTALL_HOOK_TEMPLATE,
    (True, True): INSTALL_HOOK_TEMPLATE,
    (False, True): SOURCE_HOOK_TEMPLATE,
    (False, False): PLAIN_HOOK_TEMPLATE,
}


@dataclass(frozen=True)
class HookStubParams:
    hook_name: str
    compiler_package: str = COMPILER_PACKAGE


def hook_stub(hook_name: str, *, source: bool) -> bytes:
    template = HOOK_STUB_TEMPLATES[(hook_name == "install", source)]
    params = HookStubParams(hook_name=shlex.quote(hook_name))
    return template.format(**asdict(params)).encode("utf-8")


def write_hooks(
    charm_dir: Path,
    hooks: Iterable[str],
    *,
    source: bool,
    logger: logging.Logger | None = None,
) -> list[Path]:
    """Ensure the charm has a stub for every hook in ``hooks``.

    Hook files that already exist are left alone so hand edits survive a
    rebuild. Returns the paths that were created.
    """

    log = logger or logging.getLogger(__name__)
    hook_dir = BundleLayout.from_root(charm_dir).hooks_dir
    log.debug("writing hooks in %s", charm_dir)
    make_dirs(hook_dir)
    try:
        existing = {entry.name for entry in hook_dir.iterdir()}
    except OSError as exc:
        raise BundleIOError("list", hook_dir, exc) from exc
    log.debug("found %d existing hooks", len(existing))

    created: list[Path] = []
    for hook_name in hooks:
        hook_path = hook_dir / hook_name
        if hook_name in existing:
            log.debug("keeping existing hook %s", hook_path)
            continue
        log.debug("creating hook %s", hook_path)
        write_file(hook_path, hook_stub(hook_name, source=source), EXECUTABLE_MODE)
        existing.add(hook_name)
        created.append(hook_path)
    return created


def write_meta(
    base_metadata: Path,
    charm_dir: Path,
    info: CharmInfo,
    *,
    logger: logging.Logger | None = None,
) -> Path:
    """Write metadata.yaml from the package's hand-written one.

    The name must match the charm directory name, otherwise the runtime
    ignores the charm.
    """

    log = logger or logging.getLogger(__name__)
    base = read_yaml_mapping(base_metadata)
    meta = build_meta(base, name=charm_dir.resolve().name, info=info)
    target = BundleLayout.from_root(charm_dir).metadata_file
    log.debug("writing %s", target)
    write_file(target, dump_yaml(meta))
    return target


def write_config(
    charm_dir: Path,
    config: Mapping[str, Option],
    *,
    logger: logging.Logger | None = None,
) -> Path | None:
    """Write config.yaml, or nothing at all when there are no options."""

    if not config:
        return None
    log = logger or logging.getLogger(__name__)
    target = BundleLayout.from_root(charm_dir).config_file
    log.debug("writing %s", target)
    write_file(target, dump_yaml(build_config(config)))
    return target
