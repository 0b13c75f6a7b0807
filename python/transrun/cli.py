import ast
import logging
from enum import Enum

from transrun import transpile
from transrun.backends import backend_name, resolve_transpiler
from transrun.errors import TranspileError
from transrun.options import TranspileOptions, TranspileResult
from transrun.runtime import install_hook, load_artifact, uninstall_hook

logger = logging.getLogger(__name__)


def transpile_from_source(
    source, script_path="<string>", transpiler=None, backend_options=None
):
    transpiled_code = transpile(
        source,
        filename=str(script_path),
        transpiler=transpiler,
        **(backend_options or {}),
    )

    if isinstance(transpiled_code, ast.AST):
        try:
            return ast.unparse(transpiled_code)
        except Exception as e:
            raise TranspileError(
                f"Cannot render transpiled '{script_path}': {e}", path=script_path
            ) from e

    if not isinstance(transpiled_code, str):
        kind = type(transpiled_code).__name__
        raise TranspileError(
            f"Transpiler returned {kind} for '{script_path}',"
            " expected ast.Module or str",
            path=script_path,
        )

    return transpiled_code


def read_source(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise TranspileError(f"Cannot read source '{path}': {e}", path=path) from e


def transpile_from_path(options: TranspileOptions) -> TranspileResult:
    """The transpile step: read ``options.in_file``, translate it and write
    the artifact. Returns the artifact path in ``TranspileResult.out_file``.

    Raises ``TranspileError`` when the source is unreadable, the backend
    fails, or the artifact cannot be written. A partially written artifact
    is left on disk.
    """
    backend = resolve_transpiler(options.transpiler)
    source = read_source(options.in_file)

    transpiled_code = transpile_from_source(
        source,
        script_path=options.in_file,
        transpiler=backend,
        backend_options=options.backend_options,
    )

    out_file = options.resolve_out_file()
    if out_file.resolve() == options.in_file.resolve():
        raise TranspileError(
            f"Artifact path '{out_file}' would overwrite the source", path=out_file
        )

    try:
        with open(out_file, "w", encoding="utf-8") as f:
            f.write(transpiled_code)
            if not transpiled_code.endswith("\n"):
                f.write("\n")
    except OSError as e:
        raise TranspileError(
            f"Cannot write artifact '{out_file}': {e}", path=out_file
        ) from e

    return TranspileResult(
        in_file=options.in_file, out_file=out_file, backend=backend_name(backend)
    )


def run_from_path(out_file, run_name="__main__", argv=None):
    """The load-and-run step: execute the artifact's top-level code in this
    process and return the resulting module. Exceptions raised by the
    artifact propagate unchanged."""
    return load_artifact(out_file, run_name=run_name, argv=argv)


class Stage(Enum):
    START = "start"
    TRANSPILING = "transpiling"
    TRANSPILE_FAILED = "transpile_failed"
    TRANSPILED = "transpiled"
    RUNNING = "running"
    RUN_FAILED = "run_failed"
    DONE = "done"


class Handoff:
    """One transpile-then-run cycle.

    ``transpile_step`` takes the options and returns an object with an
    ``out_file`` attribute; ``run_step`` takes that path. Both can be replaced,
    which is how the handoff is exercised without a real backend.
    """

    def __init__(
        self,
        options,
        argv=None,
        run_name="__main__",
        transpile_step=transpile_from_path,
        run_step=run_from_path,
    ):
        self.options = options
        self.argv = argv
        self.run_name = run_name
        self.transpile_step = transpile_step
        self.run_step = run_step

        self.stage = Stage.START
        self.result = None
        self.module = None

    def _enter(self, stage):
        logger.debug(
            "%s: %s -> %s", self.options.in_file, self.stage.name, stage.name
        )
        self.stage = stage

    def _install_source_hook(self):
        suffix = self.options.in_file.suffix
        if not suffix or suffix == ".py":
            return None

        return install_hook(
            suffix, self.options.transpiler, self.options.backend_options
        )

    def run(self):
        if self.stage is not Stage.START:
            raise RuntimeError(
                f"Handoff for '{self.options.in_file}' already ran ({self.stage.name})"
            )

        self._enter(Stage.TRANSPILING)
        try:
            self.result = self.transpile_step(self.options)
        except BaseException:
            self._enter(Stage.TRANSPILE_FAILED)
            raise
        self._enter(Stage.TRANSPILED)

        out_file = self.result.out_file
        logger.debug("artifact: %s", out_file)

        self._enter(Stage.RUNNING)
        finder = self._install_source_hook()
        try:
            self.module = self.run_step(
                out_file, run_name=self.run_name, argv=self.argv
            )
        except SystemExit as e:
            self._enter(Stage.DONE if e.code in (None, 0) else Stage.RUN_FAILED)
            raise
        except BaseException:
            self._enter(Stage.RUN_FAILED)
            raise
        finally:
            if finder is not None:
                uninstall_hook(finder)
        self._enter(Stage.DONE)

        return self.module


def transpile_and_run(in_file, argv=None, run_name="__main__", **options):
    if isinstance(in_file, TranspileOptions):
        options = in_file
    else:
        options = TranspileOptions(in_file=in_file, **options)

    return Handoff(options, argv=argv, run_name=run_name).run()
