"""Resolve the import path of a charm package to its sources and requirement."""

from __future__ import annotations

import importlib.metadata
import importlib.util
import json
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse

from .errors import CharmInputError
from .paths import METADATA_FILE

HOOK_PACKAGE = "charmgen_hook"

_PROJECT_MARKERS = ("pyproject.toml", "setup.py", "setup.cfg")


@dataclass(frozen=True)
class TargetPackage:
    """A charm package located through the interpreter's import machinery.

    Exactly one of ``requirement`` and ``project_dir`` is set: an installed
    distribution that pip can fetch by name, or a local project that has to
    be built into a wheel first.
    """

    import_path: str
    directory: Path
    requirement: str | None = None
    project_dir: Path | None = None

    def __post_init__(self) -> None:
        if (self.requirement is None) == (self.project_dir is None):
            raise CharmInputError(
                f"package {self.import_path!r} needs either a requirement or a project directory"
            )

    @property
    def metadata_file(self) -> Path:
        return self.directory / METADATA_FILE


def resolve_package(import_path: str) -> TargetPackage:
    try:
        spec = importlib.util.find_spec(import_path)
    except (ImportError, ValueError) as exc:
        raise CharmInputError(f"cannot find package {import_path!r}: {exc}") from exc
    if spec is None:
        raise CharmInputError(f"cannot find package {import_path!r}")
    if spec.submodule_search_locations:
        directory = Path(next(iter(spec.submodule_search_locations)))
    elif spec.origin:
        raise CharmInputError(f"{import_path!r} is a module, not a package")
    else:
        raise CharmInputError(f"package {import_path!r} has no source directory")
    directory = directory.resolve()
    if not (directory / METADATA_FILE).is_file():
        raise CharmInputError(f"no {METADATA_FILE} found in {directory}")

    distribution = _installed_distribution(import_path)
    if distribution is not None:
        local = _local_source(distribution)
        if local is None:
            return TargetPackage(
                import_path=import_path,
                directory=directory,
                requirement=f"{distribution.metadata['Name']}=={distribution.version}",
            )
        return TargetPackage(import_path=import_path, directory=directory, project_dir=local)

    project_root = find_project_root(import_path, directory)
    if project_root is None:
        raise CharmInputError(
            f"package {import_path!r} is neither installed nor inside a buildable project"
        )
    return TargetPackage(import_path=import_path, directory=directory, project_dir=project_root)


def find_project_root(import_path: str, directory: Path) -> Path | None:
    """Project directory that ships ``import_path``, for flat and src layouts."""

    top_level = directory
    for _ in range(import_path.count(".")):
        top_level = top_level.parent
    candidates = [top_level.parent]
    if top_level.parent.name == "src":
        candidates.append(top_level.parent.parent)
    for candidate in candidates:
        if any((candidate / marker).is_file() for marker in _PROJECT_MARKERS):
            return candidate
    return None


def _installed_distribution(import_path: str) -> importlib.metadata.Distribution | None:
    top_level = import_path.split(".", 1)[0]
    for dist_name in importlib.metadata.packages_distributions().get(top_level) or []:
        try:
            return importlib.metadata.distribution(dist_name)
        except importlib.metadata.PackageNotFoundError:
            continue
    return None


def _local_source(distribution: importlib.metadata.Distribution) -> Path | None:
    """Source directory of a distribution installed from a local tree, if any."""

    raw = distribution.read_text("direct_url.json")
    if not raw:
        return None
    try:
        direct_url = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if "dir_info" not in direct_url:
        return None
    parsed = urlparse(direct_url.get("url", ""))
    if parsed.scheme != "file":
        return None
    path = Path(unquote(parsed.path))
    return path if path.is_dir() else None
