"""Tests for the external tool wrappers, with subprocess.run stubbed out."""

import os
import subprocess

import pytest

from nino.config import NinoSettings
from nino.exceptions import ToolExecutionError, ToolTimeoutError
from nino.tools import (
    ToolResult,
    lino_pull,
    output_or_raise,
    render_graph_image,
    run_pimo,
    run_script,
    run_tool,
)


class FakeRun:
    """Records calls and answers with a canned CompletedProcess."""

    def __init__(self, returncode=0, stdout=b"", stderr=b"", raises=None, on_call=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.raises = raises
        self.on_call = on_call
        self.calls = []

    def __call__(self, args, **kwargs):
        self.calls.append((list(args), kwargs))
        if self.on_call:
            self.on_call(args, kwargs)
        if self.raises:
            raise self.raises
        return subprocess.CompletedProcess(args, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def fake_run(monkeypatch):
    def install(**kwargs):
        fake = FakeRun(**kwargs)
        monkeypatch.setattr(subprocess, "run", fake)
        return fake

    return install


@pytest.fixture
def settings():
    return NinoSettings(tool_timeout=5, dot_binary="/opt/graphviz/dot", pimo_binary="pimo", shell="sh")


class TestRunTool:
    def test_passes_timeout_and_input(self, fake_run):
        fake = fake_run(stdout=b"ok")

        result = run_tool(["echo"], timeout=3, input=b"data", cwd="/tmp")

        assert result.ok
        assert result.text == "ok"
        _, kwargs = fake.calls[0]
        assert kwargs["timeout"] == 3
        assert kwargs["input"] == b"data"
        assert kwargs["cwd"] == "/tmp"
        assert kwargs["stderr"] == subprocess.PIPE

    def test_merged_stderr(self, fake_run):
        fake = fake_run(stdout=b"")

        run_tool(["sh", "-c", "true"], timeout=3, merge_stderr=True)

        assert fake.calls[0][1]["stderr"] == subprocess.STDOUT

    def test_timeout(self, fake_run):
        fake_run(raises=subprocess.TimeoutExpired(["dot"], 5))

        with pytest.raises(ToolTimeoutError) as exc_info:
            run_tool(["/usr/bin/dot", "-Tsvg"], timeout=5)

        assert exc_info.value.tool == "dot"
        assert exc_info.value.timeout == 5
        assert "killed after 5s timeout" in str(exc_info.value)

    def test_missing_executable(self, fake_run):
        fake_run(raises=FileNotFoundError(2, "No such file or directory"))

        with pytest.raises(ToolExecutionError) as exc_info:
            run_tool(["pimo", "-c", "mask.yaml"], timeout=5)

        assert exc_info.value.tool == "pimo"
        assert "installed and on PATH" in exc_info.value.suggestions[0]


class TestOutputOrRaise:
    def test_success(self):
        assert output_or_raise(ToolResult(["dot"], 0, b"<svg/>")) == b"<svg/>"

    def test_failure_with_output_is_accepted(self, caplog):
        output = output_or_raise(ToolResult(["dot"], 1, b"<svg/>", b"Warning: syntax"))

        assert output == b"<svg/>"
        assert "still produced output" in caplog.text

    def test_failure_without_output(self):
        with pytest.raises(ToolExecutionError) as exc_info:
            output_or_raise(ToolResult(["dot"], 2, b"", b"Error: syntax error in line 1"))

        assert exc_info.value.returncode == 2
        assert "syntax error" in exc_info.value.output

    def test_success_without_output(self):
        with pytest.raises(ToolExecutionError, match="produced no output"):
            output_or_raise(ToolResult(["dot"], 0, b""))


class TestRenderGraphImage:
    def test_runs_configured_dot(self, fake_run, settings):
        fake = fake_run(stdout=b"<svg/>")

        assert render_graph_image("digraph G {\n}\n", "svg", settings) == b"<svg/>"
        args, kwargs = fake.calls[0]
        assert args == ["/opt/graphviz/dot", "-Tsvg"]
        assert kwargs["input"] == b"digraph G {\n}\n"
        assert kwargs["timeout"] == 5

    def test_unknown_format(self, fake_run, settings):
        fake = fake_run()

        with pytest.raises(ValueError):
            render_graph_image("digraph G {}", "pdf", settings)
        assert fake.calls == []


class TestRunPimo:
    def test_mask_file_is_written_then_removed(self, fake_run, settings):
        seen = {}

        def check_mask_file(args, kwargs):
            seen["path"] = args[2]
            with open(args[2], encoding="utf-8") as f:
                seen["content"] = f.read()

        fake_run(stdout=b'{"id": "XXXXX"}', on_call=check_mask_file)

        output = run_pimo("version: '1'\n", '{"id": "12345"}', settings)

        assert output == b'{"id": "XXXXX"}'
        assert seen["content"] == "version: '1'\n"
        assert os.path.basename(seen["path"]).startswith("mask-")
        assert not os.path.exists(seen["path"])

    def test_mask_file_removed_on_timeout(self, fake_run, settings):
        fake = fake_run(raises=subprocess.TimeoutExpired(["pimo"], 5))

        with pytest.raises(ToolTimeoutError):
            run_pimo("version: '1'\n", "{}", settings)
        assert not os.path.exists(fake.calls[0][0][2])


class TestRunScript:
    def test_returns_result_with_exit_code(self, fake_run, settings):
        fake = fake_run(returncode=3, stdout=b"partial output")

        result = run_script("make mask", settings, cwd="/srv")

        assert result.returncode == 3
        assert result.text == "partial output"
        assert fake.calls[0][0] == ["sh", "-c", "make mask"]
        assert fake.calls[0][1]["cwd"] == "/srv"

    def test_silent_failure(self, fake_run, settings):
        fake_run(returncode=1, stdout=b"")

        with pytest.raises(ToolExecutionError):
            run_script("false", settings)

    def test_silent_success(self, fake_run, settings):
        fake_run(returncode=0, stdout=b"")

        assert run_script("true", settings).ok


class TestLinoPull:
    def test_pull_one_row_from_source(self, fake_run, settings):
        fake = fake_run(stdout=b'{"id": 1}\n')

        assert lino_pull("orders", "/work/source", settings) == b'{"id": 1}\n'
        args, kwargs = fake.calls[0]
        assert args == ["lino", "pull", "--table", "orders", "source", "-l", "1"]
        assert kwargs["cwd"] == "/work/source"
