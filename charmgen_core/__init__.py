"""Core pieces of the charmgen charm build pipeline."""

from .build import BuildRequest, BuildResult, build_charm
from .config import SettingsResolver, TargetPlatform, ToolchainConfig
from .errors import CharmBuildError
from .package import TargetPackage, resolve_package
from .paths import BundleLayout, UserDirs
from .process import EnvOverlay, ProcessRunner

__all__ = [
    "BuildRequest",
    "BuildResult",
    "build_charm",
    "BundleLayout",
    "CharmBuildError",
    "EnvOverlay",
    "ProcessRunner",
    "SettingsResolver",
    "TargetPackage",
    "TargetPlatform",
    "ToolchainConfig",
    "UserDirs",
    "resolve_package",
]
