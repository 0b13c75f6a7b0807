"""
Pytest configuration for transrun tests.
This allows pytest to discover and execute test_*.src files as test modules.
"""
import shutil
import sys
from pathlib import Path

import pytest

import transrun

E2E_DIR = Path(__file__).parent / "e2e"

# Add e2e directory to Python path so util module can be imported
sys.path.insert(0, str(E2E_DIR))


def pytest_collect_file(parent, file_path):
    """
    Custom collector to discover .src files as test modules.
    """
    if file_path.suffix == ".src" and file_path.name.startswith("test_"):
        return SrcModule.from_parent(parent, path=file_path)


class SrcModule(pytest.Module):
    """
    Custom pytest Module for .src files.
    Transpiles the .src file and collects test functions from it.
    """

    def collect(self):
        with open(self.path, "r") as f:
            source = f.read()

        try:
            py_ast = transrun.transpile(source, filename=str(self.path))

            module_namespace = {
                "__name__": self.path.stem,
                "__file__": str(self.path),
            }

            code_obj = compile(py_ast, str(self.path), "exec")
            exec(code_obj, module_namespace)
        except Exception as e:
            raise self.CollectError(f"Error transpiling {self.path}: {e}") from e

        for name, obj in module_namespace.items():
            if name.startswith("test_") and callable(obj):
                yield pytest.Function.from_parent(self, name=name, callobj=obj)


@pytest.fixture
def e2e_dir(tmp_path):
    """A scratch copy of tests/e2e, so artifacts land in tmp_path."""
    target = tmp_path / "e2e"
    shutil.copytree(E2E_DIR, target)
    return target


@pytest.fixture
def write_source(tmp_path):
    def write(name, text):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    return write
