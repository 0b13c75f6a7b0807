import ast
import asyncio
import inspect
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from importlib.abc import Loader
from importlib.util import module_from_spec, spec_from_file_location

from transrun.errors import LoadError


def run_coroutine(coro):
    """Drive ``coro`` to completion. Inside a running event loop (a notebook
    kernel, an async caller) it gets its own loop on a worker thread, and
    this call still blocks until it finishes."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


def exec_code(code, module):
    """Run ``code`` in the module namespace. Code compiled with top-level
    await is a coroutine and is driven to completion here."""
    result = eval(code, module.__dict__)

    if code.co_flags & inspect.CO_COROUTINE:
        run_coroutine(result)


class ArtifactLoader(Loader):
    def __init__(self, filepath):
        self.filepath = str(filepath)

    def create_module(self, spec):
        return None

    def get_code(self, fullname):
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                source_code = f.read()
        except OSError as e:
            raise LoadError(
                f"Cannot read artifact '{self.filepath}': {e}",
                name=fullname,
                path=self.filepath,
            ) from e

        try:
            return compile(
                source_code,
                self.filepath,
                "exec",
                flags=ast.PyCF_ALLOW_TOP_LEVEL_AWAIT,
                dont_inherit=True,
            )
        except (SyntaxError, ValueError) as e:
            raise LoadError(
                f"Artifact '{self.filepath}' is not loadable: {e}",
                name=fullname,
                path=self.filepath,
            ) from e

    def exec_module(self, module):
        code = self.get_code(module.__name__)
        exec_code(code, module)


@contextmanager
def installed(module, argv=None):
    """Temporarily make ``module`` importable under its name, put its
    directory first on ``sys.path`` and swap ``sys.argv``."""
    name = module.__name__
    missing = object()
    saved_module = sys.modules.get(name, missing)
    saved_path = sys.path[:]
    saved_argv = sys.argv[:]

    sys.modules[name] = module
    sys.path.insert(0, os.path.dirname(os.path.abspath(module.__file__)))
    if argv is not None:
        sys.argv = list(argv)

    try:
        yield module
    finally:
        if saved_module is missing:
            sys.modules.pop(name, None)
        else:
            sys.modules[name] = saved_module
        sys.path[:] = saved_path
        sys.argv = saved_argv


def load_artifact(path, run_name="__main__", argv=None):
    if not os.path.isfile(path):
        raise LoadError(
            f"Artifact '{path}' does not exist", name=run_name, path=str(path)
        )

    path = str(path)
    spec = spec_from_file_location(run_name, path, loader=ArtifactLoader(path))
    module = module_from_spec(spec)

    with installed(module, argv=argv):
        spec.loader.exec_module(module)

    return module
