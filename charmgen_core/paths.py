"""Platform-independent helpers for charmgen paths."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

_DEFAULT_APP_NAME = "charmgen"

# Fixed bundle layout expected by the orchestration runtime.
BIN_DIR = "bin"
HOOKS_DIR = "hooks"
EXECUTABLE_NAME = "runhook"
METADATA_FILE = "metadata.yaml"
CONFIG_FILE = "config.yaml"
COMPILE_SCRIPT = "compile"
SOURCE_DIR = "src"
APP_DIR = "app"
VENDOR_DIR = "vendor"
REQUIREMENTS_FILE = "requirements.txt"


@dataclass(frozen=True)
class UserDirs:
    """Expose the platform-configured location of the user config tree."""

    app_name: str = _DEFAULT_APP_NAME
    config_dir_override: Path | None = None

    def config_dir(self) -> Path:
        return (
            self.config_dir_override
            if self.config_dir_override
            else Path(user_config_dir(self.app_name, appauthor=False))
        )


@dataclass(frozen=True)
class BundleLayout:
    """Paths inside a charm directory."""

    root: Path

    @classmethod
    def from_root(cls, root: Path | str) -> "BundleLayout":
        return cls(root=Path(root))

    @property
    def executable(self) -> Path:
        return self.root / BIN_DIR / EXECUTABLE_NAME

    @property
    def hooks_dir(self) -> Path:
        return self.root / HOOKS_DIR

    @property
    def metadata_file(self) -> Path:
        return self.root / METADATA_FILE

    @property
    def config_file(self) -> Path:
        return self.root / CONFIG_FILE

    @property
    def program(self) -> "ProgramLayout":
        """Source tree of the runhook program (``src/runhook``)."""
        return ProgramLayout(root=self.root / SOURCE_DIR / EXECUTABLE_NAME, name=EXECUTABLE_NAME)

    @property
    def compile_script(self) -> Path:
        return self.root / COMPILE_SCRIPT


@dataclass(frozen=True)
class ProgramLayout:
    """Source tree of one synthesized program.

    ``app/`` becomes the executable's site-packages; the requirements file
    and vendored distributions sit beside it so they stay out of the build.
    """

    root: Path
    name: str

    @property
    def app_dir(self) -> Path:
        return self.root / APP_DIR

    @property
    def source_file(self) -> Path:
        return self.app_dir / f"{self.name}.py"

    @property
    def requirements_file(self) -> Path:
        return self.root / REQUIREMENTS_FILE

    @property
    def vendor_dir(self) -> Path:
        return self.root / VENDOR_DIR
