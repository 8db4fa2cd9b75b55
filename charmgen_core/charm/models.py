"""Charm registrations: relations, config options and the hooks they come with."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from charmgen_core.errors import CharmInputError

ROLE_PROVIDER = "provider"
ROLE_REQUIRER = "requirer"
ROLE_PEER = "peer"

# metadata.yaml section that holds relations of each role
ROLE_SECTIONS: Dict[str, str] = {
    ROLE_PROVIDER: "provides",
    ROLE_REQUIRER: "requires",
    ROLE_PEER: "peers",
}

VALID_SCOPES = ("global", "container")

OPTION_TYPES: Dict[str, tuple[type, ...]] = {
    "string": (str,),
    "int": (int,),
    "float": (float, int),
    "boolean": (bool,),
}


@dataclass(frozen=True)
class Relation:
    name: str
    role: str
    interface: str
    scope: str | None = None

    def __post_init__(self) -> None:
        if self.role not in ROLE_SECTIONS:
            raise CharmInputError(f"unknown role {self.role!r} in relation {self.name!r}")
        if not self.interface:
            raise CharmInputError(f"relation {self.name!r} has no interface")
        if self.scope is not None and self.scope not in VALID_SCOPES:
            raise CharmInputError(
                f"relation {self.name!r} has invalid scope {self.scope!r}"
            )

    @property
    def section(self) -> str:
        return ROLE_SECTIONS[self.role]

    def to_meta(self) -> Dict[str, Any]:
        """Entry for this relation inside a metadata.yaml section."""
        result: Dict[str, Any] = {"interface": self.interface}
        if self.scope is not None:
            result["scope"] = self.scope
        return result

    def to_dict(self) -> Dict[str, Any]:
        result = {"role": self.role, **self.to_meta()}
        return result

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> "Relation":
        if not isinstance(data, Mapping):
            raise CharmInputError(f"relation {name!r} must be a mapping")
        scope = data.get("scope")
        return cls(
            name=str(name),
            role=str(data.get("role") or ""),
            interface=str(data.get("interface") or ""),
            scope=str(scope) if scope is not None else None,
        )


@dataclass(frozen=True)
class Option:
    type: str
    description: str = ""
    default: Any = None

    def __post_init__(self) -> None:
        allowed = OPTION_TYPES.get(self.type)
        if allowed is None:
            raise CharmInputError(f"unknown option type {self.type!r}")
        if self.default is None:
            return
        # bool is an int subclass; only "boolean" may carry one
        if isinstance(self.default, bool) and self.type != "boolean":
            raise CharmInputError(
                f"default {self.default!r} does not match option type {self.type!r}"
            )
        if not isinstance(self.default, allowed):
            raise CharmInputError(
                f"default {self.default!r} does not match option type {self.type!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.type, "description": self.description}
        if self.default is not None:
            result["default"] = self.default
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Option":
        if not isinstance(data, Mapping):
            raise CharmInputError("config option must be a mapping")
        return cls(
            type=str(data.get("type") or "string"),
            description=str(data.get("description") or ""),
            default=data.get("default"),
        )


@dataclass(frozen=True)
class CharmInfo:
    """Registration snapshot recovered from the compiled probe."""

    hooks: tuple[str, ...] = ()
    relations: Mapping[str, Relation] = field(default_factory=dict)
    config: Mapping[str, Option] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unique = tuple(dict.fromkeys(self.hooks))
        for hook_name in unique:
            check_hook_name(hook_name)
        object.__setattr__(self, "hooks", unique)
        object.__setattr__(self, "relations", dict(self.relations))
        object.__setattr__(self, "config", dict(self.config))

    def relations_by_section(self) -> Dict[str, Dict[str, Relation]]:
        sections: Dict[str, Dict[str, Relation]] = {
            section: {} for section in ROLE_SECTIONS.values()
        }
        for name, relation in self.relations.items():
            sections[relation.section][name] = relation
        return sections

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hooks": list(self.hooks),
            "relations": {name: rel.to_dict() for name, rel in self.relations.items()},
            "config": {name: opt.to_dict() for name, opt in self.config.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CharmInfo":
        if not isinstance(data, Mapping):
            raise CharmInputError("charm info must be a mapping")
        hooks_raw = data.get("hooks", [])
        if not isinstance(hooks_raw, list) or not all(isinstance(h, str) for h in hooks_raw):
            raise CharmInputError("hooks must be a list of names")
        relations_raw = data.get("relations", {})
        config_raw = data.get("config", {})
        if not isinstance(relations_raw, Mapping) or not isinstance(config_raw, Mapping):
            raise CharmInputError("relations and config must be mappings")
        relations = {
            str(name): Relation.from_dict(str(name), raw) for name, raw in relations_raw.items()
        }
        config: Dict[str, Option] = {}
        for name, raw in config_raw.items():
            try:
                config[str(name)] = Option.from_dict(raw)
            except CharmInputError as exc:
                raise CharmInputError(f"config option {name!r}: {exc}") from exc
        return cls(hooks=tuple(hooks_raw), relations=relations, config=config)


def check_hook_name(name: str) -> None:
    """Hook names become file names directly under ``hooks/``."""

    if not name or name in (".", "..") or "/" in name or "\\" in name or "\0" in name:
        raise CharmInputError(f"invalid hook name {name!r}: must be a plain file name")
