"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from compop.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def script_file(tmp_path):
    def _write(source: str):
        path = tmp_path / "script.cop"
        path.write_text(source)
        return str(path)
    return _write


class TestOps:
    def test_lists_operators(self, runner):
        result = runner.invoke(main, ["ops"])
        assert result.exit_code == 0
        for symbol in ("+=", "-=", "*=", "/="):
            assert symbol in result.output


class TestRun:
    def test_prints_bindings(self, runner, script_file):
        path = script_file("x = [1, 2, 3, 4, 5]\nx %+=% 1\nx %+=% 1\nx %+=% 1\n")
        result = runner.invoke(main, ["run", path])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"x": [4, 5, 6, 7, 8]}

    def test_set_seeds_scope(self, runner, script_file):
        path = script_file("x *= 2\n")
        result = runner.invoke(main, ["run", path, "--set", "x=[1, 2, 3]"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"x": [2, 4, 6]}

    def test_bad_set(self, runner, script_file):
        path = script_file("x += 1\n")
        result = runner.invoke(main, ["run", path, "--set", "x"])
        assert result.exit_code == 2

    def test_bad_set_json(self, runner, script_file):
        path = script_file("x += 1\n")
        result = runner.invoke(main, ["run", path, "--set", "x=[1,"])
        assert result.exit_code == 2

    def test_indexed_targets(self, runner, script_file):
        path = script_file("for i in range(len(x)):\n    out[i] *= x[i]\n")
        result = runner.invoke(main, [
            "run", path, "--set", "out=[1,1,1,1,1]", "--set", "x=[1,2,3,4,5]",
        ])
        assert result.exit_code == 0
        assert json.loads(result.output)["out"] == [1, 2, 3, 4, 5]

    def test_strict_rejects_indexed_target(self, runner, script_file):
        path = script_file("out[0] *= 2\n")
        result = runner.invoke(main, ["run", path, "--strict", "--set", "out=[1]"])
        assert result.exit_code == 1
        assert "Invalid assignment target" in result.output

    def test_strict_from_env(self, runner, script_file, monkeypatch):
        monkeypatch.setenv("COMPOP_ALLOW_PATHS", "0")
        path = script_file("out[0] *= 2\n")
        result = runner.invoke(main, ["run", path, "--set", "out=[1]"])
        assert result.exit_code == 1

    def test_script_error(self, runner, script_file):
        path = script_file("import os\n")
        result = runner.invoke(main, ["run", path])
        assert result.exit_code == 1
        assert "unsupported statement" in result.output

    def test_trace(self, runner, script_file, tmp_path):
        path = script_file("x = 1\nx += 2\n")
        trace_path = tmp_path / "trace.json"
        result = runner.invoke(main, ["run", path, "--trace", str(trace_path)])
        assert result.exit_code == 0
        data = json.loads(trace_path.read_text())
        assert data["events"][0]["before"] == 1
        assert data["events"][0]["after"] == 3

    def test_trace_written_on_error(self, runner, script_file, tmp_path):
        path = script_file("x = 1\nx /= 0\n")
        trace_path = tmp_path / "trace.json"
        result = runner.invoke(main, ["run", path, "--trace", str(trace_path)])
        assert result.exit_code == 1
        data = json.loads(trace_path.read_text())
        assert data["error"].startswith("ZeroDivisionError")

    def test_trace_written_on_syntax_error(self, runner, script_file, tmp_path):
        path = script_file("x = 1 +\n")
        trace_path = tmp_path / "trace.json"
        result = runner.invoke(main, ["run", path, "--trace", str(trace_path)])
        assert result.exit_code == 1
        data = json.loads(trace_path.read_text())
        assert data["error"].startswith("ScriptError")
        assert data["events"] == []
