"""
Transpiler backends.

A backend is any callable ``backend(source, filename=..., target_version=...,
**backend_options)`` returning either an ``ast.Module`` or Python source
text. Backends are looked up by name in the built-in table, then in the
``transrun.transpilers`` entry point group, or imported from a
``"package.module:attr"`` spec (``koatl:transpile`` works as is).
"""

import ast
import importlib
from importlib.metadata import entry_points

from transrun.errors import TranspileError

ENTRY_POINT_GROUP = "transrun.transpilers"
DEFAULT_TRANSPILER = "python"


def transpile_python(source, filename="<string>", target_version=None):
    return ast.parse(source, filename=filename, feature_version=target_version)


BUILTIN_TRANSPILERS = {
    "python": transpile_python,
}


def backend_name(backend):
    return getattr(backend, "__qualname__", None) or repr(backend)


def resolve_transpiler(spec=None):
    if spec is None:
        spec = DEFAULT_TRANSPILER

    if callable(spec):
        return spec

    if spec in BUILTIN_TRANSPILERS:
        return BUILTIN_TRANSPILERS[spec]

    if ":" in spec:
        module_name, _, attr = spec.partition(":")
        try:
            obj = importlib.import_module(module_name)
            for part in attr.split("."):
                obj = getattr(obj, part)
        except (ImportError, AttributeError) as e:
            raise TranspileError(f"Cannot load transpiler '{spec}': {e}") from e

        if not callable(obj):
            raise TranspileError(f"Transpiler '{spec}' is not callable")

        return obj

    for ep in entry_points(group=ENTRY_POINT_GROUP):
        if ep.name == spec:
            return ep.load()

    raise TranspileError(f"Unknown transpiler '{spec}'")
