"""Source templates for the charm entry point and the registration probe."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from charmgen_core.charm import AUTOGEN_MESSAGE
from charmgen_core.package import HOOK_PACKAGE

HOOK_MAIN_TEMPLATE = r'''# {autogen_message}

import sys

import {charm_package} as charm
from {hook_package} import Registry, main as run_hooks, new_context_from_environment, register_main_hooks


def main():
    r = Registry()
    charm.register_hooks(r)
    register_main_hooks(r)
    try:
        ctxt = new_context_from_environment(r)
    except Exception as exc:
        fatal("cannot create context: %s" % exc)
    try:
        run_hooks(r, ctxt)
    except Exception as exc:
        fatal(str(exc))


def fatal(message):
    sys.stderr.write("runhook: %s\n" % message)
    sys.exit(1)


if __name__ == "__main__":
    main()
'''

PROBE_TEMPLATE = r'''# {autogen_message}

import json
import sys

import {charm_package} as charm
from {hook_package} import Registry, register_main_hooks


def main():
    r = Registry()
    charm.register_hooks(r)
    register_main_hooks(r)
    json.dump(r.charm_info(), sys.stdout)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
'''


@dataclass(frozen=True)
class TemplateParams:
    charm_package: str
    hook_package: str = HOOK_PACKAGE
    autogen_message: str = AUTOGEN_MESSAGE


def generate_code(template: str, charm_package: str) -> bytes:
    """Render ``template`` for the charm package at ``charm_package``."""

    params = TemplateParams(charm_package=charm_package)
    return template.format(**asdict(params)).encode("utf-8")
