import importlib
from pathlib import Path

import pytest
import yaml
from conftest import FakeRunner

from charmgen_cli import __main__ as cli_entry


@pytest.fixture
def cli_main(monkeypatch: pytest.MonkeyPatch):
    module = importlib.import_module("charmgen_cli.main")
    for name in ("CHARMGEN_COMPILER", "CHARMGEN_SNAPSHOT_TOOL", "CHARMGEN_VCS", "CHARMGEN_PYTHON"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(module, "ProcessRunner", lambda logger=None: FakeRunner())
    return module


def test_console_entrypoint_delegates_to_cli_main(monkeypatch) -> None:
    cli_main = importlib.import_module("charmgen_cli.main")
    monkeypatch.setattr(cli_main, "main", lambda: 7)

    assert cli_entry.run() == 7
    assert cli_entry.main() == 7


def test_unknown_package_exits_with_error(cli_main, tmp_path: Path, capsys) -> None:
    code = cli_main.main(["charmgen_missing_charm"], start_dir=tmp_path)

    assert code == 1
    assert capsys.readouterr().err.startswith("charmgen: cannot find package")


def test_build_into_explicit_charm_dir(cli_main, charms_on_path, tmp_path: Path) -> None:
    charm_dir = tmp_path / "out" / "website"
    code = cli_main.main(
        ["sample_charm", "--charm-dir", str(charm_dir)], start_dir=tmp_path
    )

    assert code == 0
    assert yaml.safe_load((charm_dir / "metadata.yaml").read_text())["name"] == "website"
    assert (charm_dir / "bin" / "runhook").is_file()


def test_build_into_repository(cli_main, charms_on_path, tmp_path: Path) -> None:
    scratch = tmp_path / "scratch"
    code = cli_main.main(
        [
            "-v",
            "--source",
            "--repo",
            str(tmp_path / "repo"),
            "--series",
            "precise",
            "--temp-dir",
            str(scratch),
            "sample_charm",
        ],
        start_dir=tmp_path,
    )

    charm_dir = tmp_path / "repo" / "precise" / "sample_charm"
    assert code == 0
    assert (charm_dir / "compile").is_file()
    assert (scratch / "runhook").is_file()


def test_build_failure_is_reported(cli_main, charms_on_path, tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.setattr(
        cli_main, "ProcessRunner", lambda logger=None: FakeRunner(missing=["shiv"])
    )
    code = cli_main.main(
        ["sample_charm", "--charm-dir", str(tmp_path / "c")], start_dir=tmp_path
    )

    err = capsys.readouterr().err
    assert code == 1
    assert err.startswith("charmgen: cannot build hooks main package:")
    assert "shiv executable not found" in err
