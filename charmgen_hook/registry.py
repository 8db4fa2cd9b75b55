"""In-memory registry of hooks, relations and config options declared by a charm."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, DefaultDict

from .errors import RegistryError

if TYPE_CHECKING:
    from .context import Context

__all__ = ["HookHandler", "Registry", "register_main_hooks"]

HookHandler = Callable[["Context"], None]


@dataclass(frozen=True)
class _RelationDecl:
    role: str
    interface: str
    scope: str | None


@dataclass(frozen=True)
class _OptionDecl:
    type: str
    description: str
    default: Any


class Registry:
    """Collects the registrations a charm package makes in ``register_hooks``."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, list[HookHandler]] = defaultdict(list)
        self._order: list[str] = []
        self._relations: dict[str, _RelationDecl] = {}
        self._config: dict[str, _OptionDecl] = {}

    def register_hook(self, name: str, handler: HookHandler) -> None:
        """Run ``handler`` when hook ``name`` fires; handlers run in registration order."""
        if not name:
            raise RegistryError("hook name cannot be empty")
        if name not in self._handlers:
            self._order.append(name)
        self._handlers[name].append(handler)

    def register_relation(
        self,
        name: str,
        *,
        role: str,
        interface: str,
        scope: str | None = None,
    ) -> None:
        if name in self._relations:
            raise RegistryError(f"relation {name!r} is already registered")
        self._relations[name] = _RelationDecl(role=role, interface=interface, scope=scope)

    def register_config(
        self,
        name: str,
        *,
        type: str = "string",
        description: str = "",
        default: Any = None,
    ) -> None:
        if name in self._config:
            raise RegistryError(f"config option {name!r} is already registered")
        self._config[name] = _OptionDecl(type=type, description=description, default=default)

    def hooks(self) -> tuple[str, ...]:
        return tuple(self._order)

    def handlers(self, name: str) -> tuple[HookHandler, ...]:
        return tuple(self._handlers.get(name, ()))

    def has_config(self) -> bool:
        return bool(self._config)

    def charm_info(self) -> dict[str, Any]:
        """JSON-ready snapshot of everything registered so far."""

        relations: dict[str, Any] = {}
        for name, decl in self._relations.items():
            entry: dict[str, Any] = {"role": decl.role, "interface": decl.interface}
            if decl.scope is not None:
                entry["scope"] = decl.scope
            relations[name] = entry
        config: dict[str, Any] = {}
        for name, decl in self._config.items():
            option: dict[str, Any] = {"type": decl.type, "description": decl.description}
            if decl.default is not None:
                option["default"] = decl.default
            config[name] = option
        return {"hooks": list(self._order), "relations": relations, "config": config}


def _refresh_config(ctxt: "Context") -> None:
    ctxt.log("config changed")


def register_main_hooks(registry: Registry) -> None:
    """Register the dispatch library's own hooks.

    A charm with config options always reacts to ``config-changed``.
    """

    if registry.has_config():
        registry.register_hook("config-changed", _refresh_config)
