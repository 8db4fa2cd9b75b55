"""Charm data model and descriptor helpers."""

from .io import (
    AUTOGEN_MESSAGE,
    CharmDir,
    build_config,
    build_meta,
    dump_yaml,
    parse_config,
    read_charm_dir,
    read_yaml_mapping,
)
from .models import (
    ROLE_PEER,
    ROLE_PROVIDER,
    ROLE_REQUIRER,
    CharmInfo,
    Option,
    Relation,
)

__all__ = [
    "AUTOGEN_MESSAGE",
    "CharmDir",
    "CharmInfo",
    "Option",
    "Relation",
    "ROLE_PEER",
    "ROLE_PROVIDER",
    "ROLE_REQUIRER",
    "build_config",
    "build_meta",
    "dump_yaml",
    "parse_config",
    "read_charm_dir",
    "read_yaml_mapping",
]
