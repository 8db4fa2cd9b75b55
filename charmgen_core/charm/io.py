"""Reading and writing charm descriptors."""

from __future__ import annotations

import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml
from ops.charm import CharmMeta

from charmgen_core.errors import CharmInputError
from charmgen_core.paths import BundleLayout

from .models import ROLE_SECTIONS, CharmInfo, Option

AUTOGEN_MESSAGE = "This file is automatically generated. Do not edit."
YAML_AUTOGEN_COMMENT = f"# {AUTOGEN_MESSAGE}\n"


def read_yaml_mapping(path: Path) -> Dict[str, Any]:
    """Load ``path`` and insist on a top-level mapping."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CharmInputError(f"cannot read {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise CharmInputError(f"cannot parse {path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise CharmInputError(f"{path} does not contain a YAML mapping")
    return data


def dump_yaml(value: Any) -> str:
    return YAML_AUTOGEN_COMMENT + yaml.safe_dump(
        value, default_flow_style=False, sort_keys=False
    )


def build_meta(base: Mapping[str, Any], *, name: str, info: CharmInfo) -> Dict[str, Any]:
    """Return ``base`` renamed to ``name`` with relations taken from ``info``.

    The provides/requires/peers sections of ``base`` are discarded; empty
    sections are left out.
    """

    meta: Dict[str, Any] = {"name": name}
    for key, value in base.items():
        if key == "name" or key in ROLE_SECTIONS.values():
            continue
        meta[key] = value
    for section, relations in info.relations_by_section().items():
        if relations:
            meta[section] = {
                rel_name: relation.to_meta() for rel_name, relation in sorted(relations.items())
            }
    return meta


def build_config(options: Mapping[str, Option]) -> Dict[str, Any]:
    return {"options": {name: option.to_dict() for name, option in options.items()}}


def parse_config(data: Mapping[str, Any]) -> Dict[str, Option]:
    options_raw = data.get("options")
    if options_raw is None:
        return {}
    if not isinstance(options_raw, Mapping):
        raise CharmInputError("config options must be a mapping")
    options: Dict[str, Option] = {}
    for name, raw in options_raw.items():
        try:
            options[str(name)] = Option.from_dict(raw)
        except CharmInputError as exc:
            raise CharmInputError(f"config option {name!r}: {exc}") from exc
    return options


@dataclass(frozen=True)
class CharmDir:
    """A charm directory as the orchestration runtime would read it."""

    path: Path
    meta: CharmMeta
    config: Dict[str, Option] = field(default_factory=dict)
    hooks: tuple[str, ...] = ()
    has_executable: bool = False


def read_charm_dir(path: Path | str) -> CharmDir:
    """Parse a charm directory, raising ``CharmInputError`` when it is unusable."""

    layout = BundleLayout.from_root(path)
    raw_meta = read_yaml_mapping(layout.metadata_file)
    if not raw_meta.get("name"):
        raise CharmInputError(f"{layout.metadata_file} declares no name")
    try:
        meta = CharmMeta(raw_meta)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise CharmInputError(f"invalid metadata in {layout.metadata_file}: {exc!r}") from exc

    config: Dict[str, Option] = {}
    if layout.config_file.exists():
        config = parse_config(read_yaml_mapping(layout.config_file))

    hooks: list[str] = []
    if layout.hooks_dir.is_dir():
        for hook_path in sorted(layout.hooks_dir.iterdir()):
            if not hook_path.is_file():
                continue
            if not hook_path.stat().st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
                raise CharmInputError(f"hook {hook_path} is not executable")
            hooks.append(hook_path.name)

    return CharmDir(
        path=layout.root,
        meta=meta,
        config=config,
        hooks=tuple(hooks),
        has_executable=layout.executable.is_file(),
    )
