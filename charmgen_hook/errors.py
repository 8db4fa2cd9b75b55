"""Errors raised by the hook registry and dispatcher."""


class HookError(Exception):
    """Base type for hook dispatch failures."""


class RegistryError(HookError):
    """Raised when a registration is invalid or duplicated."""


class ContextError(HookError):
    """Raised when the hook environment is incomplete."""
