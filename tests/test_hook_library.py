"""Tests for the registration and dispatch library used by charm programs."""

import runpy
import sys
from pathlib import Path

import pytest

from charmgen_core.build import HOOK_MAIN_TEMPLATE, generate_code
from charmgen_hook import (
    ContextError,
    HookError,
    Registry,
    RegistryError,
    main,
    new_context_from_environment,
    register_main_hooks,
)


def test_registry_reports_registrations() -> None:
    r = Registry()
    r.register_hook("install", lambda ctxt: None)
    r.register_hook("start", lambda ctxt: None)
    r.register_hook("install", lambda ctxt: None)
    r.register_relation("db", role="requirer", interface="mysql", scope="container")
    r.register_config("port", type="int", description="Port", default=80)
    register_main_hooks(r)

    assert r.charm_info() == {
        "hooks": ["install", "start", "config-changed"],
        "relations": {"db": {"role": "requirer", "interface": "mysql", "scope": "container"}},
        "config": {"port": {"type": "int", "description": "Port", "default": 80}},
    }
    assert len(r.handlers("install")) == 2


def test_main_hooks_need_config() -> None:
    r = Registry()
    register_main_hooks(r)
    assert r.hooks() == ()


def test_duplicate_registrations_are_rejected() -> None:
    r = Registry()
    r.register_relation("db", role="provider", interface="mysql")
    with pytest.raises(RegistryError):
        r.register_relation("db", role="provider", interface="pgsql")
    r.register_config("port")
    with pytest.raises(RegistryError):
        r.register_config("port")
    with pytest.raises(RegistryError):
        r.register_hook("", lambda ctxt: None)


def test_dispatch_runs_handlers_in_order(tmp_path: Path) -> None:
    calls = []
    r = Registry()
    r.register_hook("start", lambda ctxt: calls.append(("first", ctxt.unit_name)))
    r.register_hook("start", lambda ctxt: calls.append(("second", ctxt.unit_name)))

    ctxt = new_context_from_environment(
        r,
        argv=["start"],
        environ={"CHARM_DIR": str(tmp_path), "JUJU_UNIT_NAME": "web/0"},
    )
    main(r, ctxt)

    assert ctxt.charm_dir == tmp_path
    assert calls == [("first", "web/0"), ("second", "web/0")]


def test_context_falls_back_to_hook_name_variable(tmp_path: Path) -> None:
    r = Registry()
    r.register_hook("stop", lambda ctxt: None)
    ctxt = new_context_from_environment(
        r, argv=[], environ={"JUJU_HOOK_NAME": "stop", "CHARM_DIR": str(tmp_path)}
    )
    assert ctxt.hook_name == "stop"


def test_context_errors(tmp_path: Path) -> None:
    r = Registry()
    r.register_hook("start", lambda ctxt: None)
    with pytest.raises(HookError, match="not registered"):
        new_context_from_environment(r, argv=["stop"], environ={"CHARM_DIR": str(tmp_path)})
    with pytest.raises(ContextError, match="CHARM_DIR"):
        new_context_from_environment(r, argv=["start"], environ={})
    with pytest.raises(ContextError, match="no hook name"):
        new_context_from_environment(r, argv=[], environ={"CHARM_DIR": str(tmp_path)})


def _write_entry_point(tmp_path: Path) -> Path:
    path = tmp_path / "runhook.py"
    path.write_bytes(generate_code(HOOK_MAIN_TEMPLATE, "sample_charm"))
    return path


def test_generated_entry_point_runs_hook(
    charms_on_path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    entry_point = _write_entry_point(tmp_path)
    monkeypatch.setattr(sys, "argv", ["runhook", "start"])
    monkeypatch.setenv("CHARM_DIR", str(tmp_path))
    monkeypatch.setenv("JUJU_UNIT_NAME", "sample/0")

    runpy.run_path(str(entry_point), run_name="__main__")

    assert (tmp_path / "started").read_text() == "sample/0"


def test_generated_entry_point_rejects_unknown_hook(
    charms_on_path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    entry_point = _write_entry_point(tmp_path)
    monkeypatch.setattr(sys, "argv", ["runhook", "upgrade-charm"])
    monkeypatch.setenv("CHARM_DIR", str(tmp_path))

    with pytest.raises(SystemExit) as excinfo:
        runpy.run_path(str(entry_point), run_name="__main__")

    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("runhook: cannot create context:")
