"""A small charm used by the build tests."""


def _install(ctxt):
    ctxt.log("installing")


def _start(ctxt):
    (ctxt.charm_dir / "started").write_text(ctxt.unit_name, encoding="utf-8")


def register_hooks(r):
    r.register_hook("install", _install)
    r.register_hook("start", _start)
    r.register_relation("db", role="provider", interface="mysql")
    r.register_config("debug", type="boolean", description="Log verbosely.", default=False)
