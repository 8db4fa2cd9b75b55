"""Sanity check that a freshly written charm reads back correctly."""

from __future__ import annotations

import logging
from pathlib import Path

from charmgen_core.charm import CharmDir, read_charm_dir
from charmgen_core.errors import CharmInputError, InvariantViolationError


def validate_charm_dir(
    charm_dir: Path,
    *,
    require_executable: bool,
    logger: logging.Logger | None = None,
) -> CharmDir:
    """Re-read ``charm_dir`` the way the orchestration runtime would.

    Failures here mean the pipeline wrote something broken, so they are
    reported as invariant violations rather than input errors.
    """

    log = logger or logging.getLogger(__name__)
    try:
        charm = read_charm_dir(charm_dir)
    except CharmInputError as exc:
        raise InvariantViolationError(
            f"charm will not read correctly; we've broken it, sorry: {exc}"
        ) from exc
    if require_executable and not charm.has_executable:
        raise InvariantViolationError(f"charm in {charm_dir} has no runhook executable")
    log.debug(
        "charm %s reads back with %d hooks and %d config options",
        charm.meta.name,
        len(charm.hooks),
        len(charm.config),
    )
    return charm
