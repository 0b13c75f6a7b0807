import asyncio
import pytest
import sys
from pathlib import Path

import transrun.cli
from transrun.cli import Handoff, Stage
from transrun.options import TranspileOptions


def get_test_data(dirs):
    data_dirs = [
        Path(__file__).parent / dirs,
    ]

    test_cases = []
    for data_dir in data_dirs:
        for file_path in data_dir.glob("*.src"):
            test_cases.append(pytest.param(file_path.name, id=str(file_path.name)))

    return test_cases


@pytest.mark.parametrize("test_file", get_test_data("e2e"))
def test_e2e(test_file, e2e_dir):
    source = e2e_dir / test_file
    handoff = Handoff(TranspileOptions(in_file=source), argv=[str(source)])

    handoff.run()

    assert handoff.stage is Stage.DONE
    assert handoff.result.out_file == source.with_suffix(".py")
    assert handoff.result.out_file.is_file()


def test_hello_prints_and_leaves_artifact(e2e_dir, capsys):
    transrun.cli.transpile_and_run(e2e_dir / "hello.src")

    assert capsys.readouterr().out == "hello\n"
    assert (e2e_dir / "hello.py").read_text() == "print('hello')\n"


def test_argv_is_handed_to_artifact(e2e_dir, capsys):
    source = e2e_dir / "argv.src"

    transrun.cli.transpile_and_run(source, argv=[str(source), "a", "b"])

    assert capsys.readouterr().out == "a b\n"


def test_top_level_await_finishes_before_return(e2e_dir):
    module = transrun.cli.transpile_and_run(e2e_dir / "top_level_await.src")

    assert module.result == 42


def test_artifact_imports_sibling_source(e2e_dir):
    sys.modules.pop("helper", None)

    transrun.cli.transpile_and_run(e2e_dir / "imports_helper.src")

    assert Path(sys.modules.pop("helper").__file__) == e2e_dir / "helper.src"


def test_run_error_propagates_unchanged(tmp_path):
    source = tmp_path / "bad.src"
    source.write_text((Path(__file__).parent / "fail-run" / "bad.src").read_text())
    handoff = Handoff(TranspileOptions(in_file=source))

    with pytest.raises(RuntimeError, match="bad artifact"):
        handoff.run()

    assert handoff.stage is Stage.RUN_FAILED
    assert (tmp_path / "bad.py").is_file()


def test_artifact_exit_code_is_kept(tmp_path):
    source = tmp_path / "exits.src"
    source.write_text((Path(__file__).parent / "fail-run" / "exits.src").read_text())
    handoff = Handoff(TranspileOptions(in_file=source))

    with pytest.raises(SystemExit) as excinfo:
        handoff.run()

    assert excinfo.value.code == 3
    assert handoff.stage is Stage.RUN_FAILED


def test_top_level_await_from_async_caller(e2e_dir):
    async def caller():
        return transrun.cli.transpile_and_run(e2e_dir / "top_level_await.src")

    assert asyncio.run(caller()).result == 42
