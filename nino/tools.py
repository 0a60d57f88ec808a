"""Wrappers around the external tools NINO delegates to: dot, pimo, lino and a shell."""

import os
import subprocess
import tempfile
from dataclasses import dataclass
from typing import List, Optional

from nino.config import NinoSettings
from nino.exceptions import ToolExecutionError, ToolTimeoutError
from nino.utils.logging import logger

IMAGE_FORMATS = ("svg", "png")


@dataclass
class ToolResult:
    """Outcome of one child process; `stdout` holds stderr too when merged."""

    args: List[str]
    returncode: int
    stdout: bytes
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")


def run_tool(
    args: List[str],
    timeout: float,
    input: Optional[bytes] = None,
    cwd: Optional[str] = None,
    merge_stderr: bool = False,
) -> ToolResult:
    """Run a tool to completion, killing it after `timeout` seconds.

    Raises:
        ToolTimeoutError: If the process had to be killed
        ToolExecutionError: If the executable (or working directory) does not exist
    """
    tool = os.path.basename(args[0])
    logger.debug("Running external tool", command=" ".join(args), cwd=cwd or ".")
    try:
        proc = subprocess.run(
            args,
            input=input,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            timeout=timeout,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        logger.error("External tool timed out", tool=tool, timeout=timeout)
        raise ToolTimeoutError(tool, timeout)
    except FileNotFoundError as e:
        raise ToolExecutionError(
            tool,
            f"could not start: {e.strerror or e}",
            suggestions=[f"Check that '{args[0]}' is installed and on PATH"],
        ) from e

    return ToolResult(list(args), proc.returncode, proc.stdout or b"", proc.stderr or b"")


def output_or_raise(result: ToolResult) -> bytes:
    """Accept a failed run that still produced output; reject an empty one."""
    tool = os.path.basename(result.args[0])
    if not result.ok:
        if not result.stdout:
            raise ToolExecutionError(
                tool,
                "exited with an error and produced no output",
                returncode=result.returncode,
                output=result.stderr.decode("utf-8", errors="replace"),
            )
        logger.warning(
            "Tool exited with an error but still produced output",
            tool=tool,
            returncode=result.returncode,
        )
    if not result.stdout:
        raise ToolExecutionError(tool, "produced no output", returncode=result.returncode)
    return result.stdout


def render_graph_image(document: str, fmt: str, settings: Optional[NinoSettings] = None) -> bytes:
    """Lay out a DOT document with Graphviz and return the image bytes."""
    if fmt not in IMAGE_FORMATS:
        raise ValueError(f"Unsupported format: {fmt}")
    settings = settings or NinoSettings()
    result = run_tool(
        [settings.dot_binary, f"-T{fmt}"],
        timeout=settings.tool_timeout,
        input=document.encode("utf-8"),
    )
    return output_or_raise(result)


def run_pimo(mask: str, data: str, settings: Optional[NinoSettings] = None) -> bytes:
    """Mask a JSON stream with a mask document; the document lives in a temp file for the call."""
    settings = settings or NinoSettings()
    with tempfile.NamedTemporaryFile("w", prefix="mask-", suffix=".yaml", delete=False, encoding="utf-8") as f:
        f.write(mask)
        mask_file = f.name
    try:
        result = run_tool(
            [settings.pimo_binary, "-c", mask_file],
            timeout=settings.tool_timeout,
            input=data.encode("utf-8"),
        )
    finally:
        os.remove(mask_file)
    return output_or_raise(result)


def run_script(script: str, settings: Optional[NinoSettings] = None, cwd: Optional[str] = None) -> ToolResult:
    """Run a script through the configured shell; output is stdout and stderr combined."""
    settings = settings or NinoSettings()
    logger.info("Executing script", shell=settings.shell)
    result = run_tool([settings.shell, "-c", script], timeout=settings.tool_timeout, cwd=cwd, merge_stderr=True)
    if not result.ok:
        # a silent script that fails is an error, a chatty one is reported as is
        output_or_raise(result)
    return result


def lino_pull(table: str, cwd: str, settings: Optional[NinoSettings] = None) -> bytes:
    """Fetch one sample row of `table` from the `source` connector of a folder."""
    settings = settings or NinoSettings()
    result = run_tool(
        [settings.lino_binary, "pull", "--table", table, "source", "-l", "1"],
        timeout=settings.tool_timeout,
        cwd=cwd,
        merge_stderr=True,
    )
    return output_or_raise(result)
