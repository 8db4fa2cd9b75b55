"""Typed errors raised by the charm build pipeline."""

from __future__ import annotations

from pathlib import Path


class CharmBuildError(Exception):
    """Base class for charm build failures."""


class CharmInputError(CharmBuildError):
    """Raised when the target package declares something the build cannot accept."""


class IntrospectionError(CharmBuildError):
    """Raised when the registration probe reports data that cannot be decoded."""


class ToolchainError(CharmBuildError):
    """An external tool exited unsuccessfully."""

    def __init__(self, tool: str, returncode: int | None = None, output: str = "") -> None:
        self.tool = tool
        self.returncode = returncode
        self.output = output
        super().__init__(_format_tool_failure(tool, returncode, output))


class ToolNotFoundError(ToolchainError):
    """An external tool is not available on the execution path."""

    def __init__(self, tool: str, remedy: str | None = None) -> None:
        super().__init__(tool)
        self.remedy = remedy
        message = f"{tool} executable not found"
        if remedy:
            message = f"{message}; {remedy}"
        self.args = (message,)


class SnapshotToolNotFoundError(ToolNotFoundError):
    """The dependency snapshot tool is missing while vendoring."""


class InvariantViolationError(CharmBuildError):
    """The pipeline produced an artifact it cannot account for."""


class BundleIOError(CharmBuildError, OSError):
    """A file or directory operation on the bundle failed."""

    def __init__(self, operation: str, path: Path | str, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.path = Path(path)
        message = f"cannot {operation} {self.path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


def wrap_error(context: str, exc: CharmBuildError) -> CharmBuildError:
    """Return a copy of ``exc`` whose message is prefixed with ``context``.

    The class is preserved so callers can still tell toolchain failures from
    invariant violations after several layers of wrapping.
    """

    wrapped = exc.__class__.__new__(exc.__class__)
    wrapped.__dict__.update(exc.__dict__)
    wrapped.args = (f"{context}: {exc}",)
    wrapped.__cause__ = exc
    return wrapped


def _format_tool_failure(tool: str, returncode: int | None, output: str) -> str:
    detail = (output or "").strip()
    status = f"exit={returncode}" if returncode is not None else "no exit status"
    if detail:
        return f"{tool} failed ({status}): {detail}"
    return f"{tool} failed ({status})"
