"""Synchronous invocation of external tools (compiler, pip, git)."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from .errors import ToolchainError, ToolNotFoundError


@dataclass(frozen=True)
class EnvOverlay:
    """Immutable set of environment entries layered over a base environment."""

    entries: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", dict(self.entries))
        for key in self.entries:
            if not key or "=" in key:
                raise ValueError(f"invalid environment variable name {key!r}")

    def with_entry(self, key: str, value: str) -> "EnvOverlay":
        merged = dict(self.entries)
        merged[key] = value
        return EnvOverlay(merged)

    def apply(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return a new environment mapping; ``base`` is never modified."""

        env = dict(os.environ if base is None else base)
        env.update(self.entries)
        return env

    def __bool__(self) -> bool:
        return bool(self.entries)


class CommandRunner(Protocol):
    """Minimal interface the build stages need from the process layer."""

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        overlay: EnvOverlay | None = None,
        quiet: bool = False,
    ) -> subprocess.CompletedProcess[str]:
        ...


class ProcessRunner:
    """Run commands to completion, capturing their output for diagnostics."""

    def __init__(
        self,
        *,
        logger: logging.Logger | None = None,
        base_env: Mapping[str, str] | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.base_env = base_env

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        overlay: EnvOverlay | None = None,
        quiet: bool = False,
    ) -> subprocess.CompletedProcess[str]:
        command = [str(part) for part in argv]
        if not command:
            raise ValueError("empty command")
        self.logger.debug("run %s", " ".join(command))
        env = (overlay or EnvOverlay()).apply(self.base_env)
        try:
            result = subprocess.run(
                command,
                cwd=str(cwd) if cwd is not None else None,
                env=env,
                check=False,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise ToolNotFoundError(command[0]) from exc
        if result.returncode != 0:
            raise ToolchainError(
                command[0],
                result.returncode,
                _diagnostics(result.stdout, result.stderr),
            )
        if not quiet and result.stdout.strip():
            self.logger.debug("%s: %s", command[0], result.stdout.strip())
        if result.stderr.strip():
            self.logger.debug("%s (stderr): %s", command[0], result.stderr.strip())
        return result


def _diagnostics(stdout: str | None, stderr: str | None) -> str:
    parts = [text.strip() for text in (stderr, stdout) if text and text.strip()]
    return "\n".join(parts)
