"""Stages of the charm build."""

from .builder import BuildRequest, BuildResult, build_charm
from .introspect import decode_charm_info, registered_charm_info
from .invoke import compile_command, compile_program, install_hook_library
from .synthesize import HOOK_MAIN_TEMPLATE, PROBE_TEMPLATE, generate_code
from .validate import validate_charm_dir
from .vendor import vendor_deps, write_compile_script
from .wheels import build_wheel, package_requirements
from .writer import hook_stub, write_config, write_hooks, write_meta

__all__ = [
    "BuildRequest",
    "BuildResult",
    "HOOK_MAIN_TEMPLATE",
    "PROBE_TEMPLATE",
    "build_charm",
    "build_wheel",
    "compile_command",
    "compile_program",
    "decode_charm_info",
    "generate_code",
    "install_hook_library",
    "hook_stub",
    "package_requirements",
    "registered_charm_info",
    "validate_charm_dir",
    "vendor_deps",
    "write_compile_script",
    "write_config",
    "write_hooks",
    "write_meta",
]
