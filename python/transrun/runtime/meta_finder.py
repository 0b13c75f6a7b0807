import sys
import os
import linecache
from importlib.abc import MetaPathFinder, Loader
from importlib.util import spec_from_loader

from transrun import transpile


class SourceFinder(MetaPathFinder):
    """Finds ``{name}{suffix}`` modules and ``{name}/__init__{suffix}``
    packages on the search path and transpiles them on import."""

    def __init__(self, suffix, transpiler=None, backend_options=None):
        self.suffix = suffix
        self.transpiler = transpiler
        self.backend_options = dict(backend_options or {})

    def find_spec(self, fullname, path, target=None):
        if path is None:
            path = sys.path

        module_name = fullname.split(".")[-1]

        for entry in path:
            if not isinstance(entry, str):
                continue

            file_path = os.path.join(entry, f"{module_name}{self.suffix}")
            if os.path.isfile(file_path):
                return spec_from_loader(fullname, self._loader(file_path))

            package_path = os.path.join(entry, module_name)
            init_path = os.path.join(package_path, f"__init__{self.suffix}")

            if os.path.isdir(package_path) and os.path.isfile(init_path):
                spec = spec_from_loader(
                    fullname, self._loader(init_path), is_package=True
                )
                spec.submodule_search_locations = [package_path]
                return spec

        return None

    def _loader(self, file_path):
        return SourceLoader(file_path, self.transpiler, self.backend_options)


class SourceLoader(Loader):
    def __init__(self, filepath, transpiler=None, backend_options=None):
        self.filepath = filepath
        self.transpiler = transpiler
        self.backend_options = backend_options or {}

    def create_module(self, spec):
        return None

    def exec_module(self, module):
        module.__file__ = self.filepath

        with open(self.filepath, "r", encoding="utf-8") as f:
            source_code = f.read()

        linecache.cache[self.filepath] = (
            len(source_code),
            None,
            [line + "\n" for line in source_code.splitlines()],
            self.filepath,
        )

        transpiled_code = transpile(
            source_code,
            filename=self.filepath,
            transpiler=self.transpiler,
            **self.backend_options,
        )

        code = compile(transpiled_code, self.filepath, "exec")

        exec(code, module.__dict__)


def install_hook(suffix, transpiler=None, backend_options=None):
    finder = SourceFinder(suffix, transpiler, backend_options)
    sys.meta_path.insert(0, finder)
    return finder


def uninstall_hook(finder):
    if finder in sys.meta_path:
        sys.meta_path.remove(finder)
