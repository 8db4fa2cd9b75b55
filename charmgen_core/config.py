"""Layered build settings: CLI, environment, project file, user file, defaults."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import tomllib

from .errors import CharmInputError
from .paths import UserDirs

CONFIG_FILE_NAME = "config.toml"
PROJECT_CONFIG_FILE_NAME = "charmgen.toml"

DEFAULT_TARGET_OS = "linux"
DEFAULT_TARGET_ARCH = "x86_64"
DEFAULT_SERIES = "trusty"

_DEFAULTS: dict[str, str] = {
    "compiler": "shiv",
    "snapshot_tool": "pip",
    "vcs": "git",
    "python": sys.executable,
    "series": DEFAULT_SERIES,
    "target_os": DEFAULT_TARGET_OS,
    "target_arch": DEFAULT_TARGET_ARCH,
}
_ENV_KEY_MAP: dict[str, str] = {
    "compiler": "CHARMGEN_COMPILER",
    "snapshot_tool": "CHARMGEN_SNAPSHOT_TOOL",
    "vcs": "CHARMGEN_VCS",
    "python": "CHARMGEN_PYTHON",
    "repository": "JUJU_REPOSITORY",
    "series": "CHARMGEN_SERIES",
    "target_os": "CHARMGEN_TARGET_OS",
    "target_arch": "CHARMGEN_TARGET_ARCH",
}

# pip platform tags for the deployment targets we know how to build for.
_PLATFORM_TAGS: dict[tuple[str, str], str] = {
    ("linux", "x86_64"): "manylinux2014_x86_64",
    ("linux", "amd64"): "manylinux2014_x86_64",
    ("linux", "aarch64"): "manylinux2014_aarch64",
    ("linux", "arm64"): "manylinux2014_aarch64",
}


def _load_config_from_file(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    section = data.get("charmgen", data)
    if not isinstance(section, dict):
        return {}
    return {key: str(value) for key, value in section.items() if not isinstance(value, dict)}


@dataclass(frozen=True)
class TargetPlatform:
    """Deployment platform the charm executable is built for."""

    os: str = DEFAULT_TARGET_OS
    arch: str = DEFAULT_TARGET_ARCH

    @property
    def platform_tag(self) -> str:
        tag = _PLATFORM_TAGS.get((self.os, self.arch))
        if tag is None:
            raise CharmInputError(f"unsupported target platform {self.os}/{self.arch}")
        return tag

    def pip_args(self) -> tuple[str, ...]:
        """Options that make an installing or downloading pip resolve for this platform.

        They go on the command line rather than in the environment: pip
        refuses them in the nested installs it runs for build dependencies.
        """

        return (
            "--platform",
            self.platform_tag,
            "--implementation",
            "cp",
            "--only-binary=:all:",
        )


@dataclass(frozen=True)
class ToolchainConfig:
    """Executables used by the pipeline and the platform it targets."""

    compiler: str = _DEFAULTS["compiler"]
    snapshot_tool: str = _DEFAULTS["snapshot_tool"]
    vcs: str = _DEFAULTS["vcs"]
    python: str = _DEFAULTS["python"]
    target: TargetPlatform = TargetPlatform()


@dataclass
class SettingsResolver:
    """Resolve settings honoring CLI, env, project, user, defaults order."""

    cli_overrides: Mapping[str, str] | None = None
    env: Mapping[str, str] | None = None
    project_dir: Path | None = None
    user_dirs: UserDirs | None = None
    defaults: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        self.user_dirs = self.user_dirs or UserDirs()
        self.cli_overrides = {
            key: value for key, value in (self.cli_overrides or {}).items() if value
        }
        self.env = os.environ if self.env is None else self.env
        base_defaults = dict(_DEFAULTS)
        if self.defaults:
            base_defaults.update(self.defaults)
        self.defaults = base_defaults

    def resolve_setting(self, key: str) -> str | None:
        if value := self.cli_overrides.get(key):
            return value
        if value := self._env_value(key):
            return value
        if value := self._project_layer().get(key):
            return value
        if value := self._user_layer().get(key):
            return value
        return self.defaults.get(key)

    def toolchain(self) -> ToolchainConfig:
        return ToolchainConfig(
            compiler=self._required("compiler"),
            snapshot_tool=self._required("snapshot_tool"),
            vcs=self._required("vcs"),
            python=self._required("python"),
            target=TargetPlatform(
                os=self._required("target_os"),
                arch=self._required("target_arch"),
            ),
        )

    def charm_dir_for(self, package_dir: Path) -> Path:
        """Default destination: ``<repository>/<series>/<package dir name>``."""

        repository = self.resolve_setting("repository")
        root = Path(repository).expanduser() if repository else Path.cwd()
        return (root / self._required("series") / package_dir.name).resolve()

    def _required(self, key: str) -> str:
        value = self.resolve_setting(key)
        if not value:
            raise KeyError(f"setting {key!r} has no value")
        return value

    def _env_value(self, key: str) -> str | None:
        alias = _ENV_KEY_MAP.get(key)
        if alias:
            return self.env.get(alias) or None
        return None

    def _project_layer(self) -> dict[str, str]:
        base = self.project_dir if self.project_dir is not None else Path.cwd()
        return _load_config_from_file(base / PROJECT_CONFIG_FILE_NAME)

    def _user_layer(self) -> dict[str, str]:
        return _load_config_from_file(self.user_dirs.config_dir() / CONFIG_FILE_NAME)
