"""Hook registration and dispatch used by generated charm programs."""

from .context import Context, main, new_context_from_environment
from .errors import ContextError, HookError, RegistryError
from .registry import Registry, register_main_hooks

__all__ = [
    "Context",
    "ContextError",
    "HookError",
    "Registry",
    "RegistryError",
    "main",
    "new_context_from_environment",
    "register_main_hooks",
]
