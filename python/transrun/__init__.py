import sys

from .backends import resolve_transpiler
from .errors import TranspileError, LoadError

__all__ = ["transpile", "TranspileError", "LoadError"]


def transpile(source, filename="<string>", transpiler=None, **backend_options):
    """Translate ``source`` with the selected backend.

    Returns whatever the backend produced: an ``ast.Module`` or Python source
    text, both accepted by ``compile``.
    """
    backend = resolve_transpiler(transpiler)

    try:
        return backend(
            source,
            filename=filename,
            target_version=sys.version_info[:2],
            **backend_options,
        )
    except TranspileError:
        raise
    except Exception as e:
        raise TranspileError(
            f"Cannot transpile '{filename}': {e}", path=filename
        ) from e
