"""Execution context handed to hook handlers."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

from .errors import ContextError, HookError
from .registry import Registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Context:
    """What a hook invocation knows about itself."""

    hook_name: str
    charm_dir: Path
    unit_name: str = ""
    relation_name: str = ""
    environ: Mapping[str, str] = field(default_factory=dict)

    def log(self, message: str) -> None:
        logger.info("%s: %s", self.hook_name, message)


def new_context_from_environment(
    registry: Registry,
    *,
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Context:
    """Build a context from the variables the orchestrator sets for hooks.

    The hook name comes from the first argument, as passed by the hook stubs,
    falling back to ``JUJU_HOOK_NAME``.
    """

    env = dict(os.environ if environ is None else environ)
    args = list(sys.argv[1:] if argv is None else argv)
    hook_name = args[0] if args else env.get("JUJU_HOOK_NAME", "")
    if not hook_name:
        raise ContextError("no hook name given")
    if hook_name not in registry.hooks():
        raise HookError(f"hook {hook_name!r} is not registered")
    charm_dir = env.get("CHARM_DIR")
    if not charm_dir:
        raise ContextError("CHARM_DIR not set")
    return Context(
        hook_name=hook_name,
        charm_dir=Path(charm_dir),
        unit_name=env.get("JUJU_UNIT_NAME", ""),
        relation_name=env.get("JUJU_RELATION", ""),
        environ=env,
    )


def main(registry: Registry, ctxt: Context) -> None:
    """Run every handler registered for the context's hook."""

    handlers = registry.handlers(ctxt.hook_name)
    if not handlers:
        raise HookError(f"no handlers for hook {ctxt.hook_name!r}")
    for handler in handlers:
        handler(ctxt)
