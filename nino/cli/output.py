"""Shared helpers for writing command results."""

import sys
from typing import Union

from nino.exceptions import WorkspaceError


def write_output(path: str, content: Union[str, bytes]) -> None:
    """Write to `path`, or to stdout when `path` is '-'."""
    data = content.encode("utf-8") if isinstance(content, str) else content
    if path == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
        return
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise WorkspaceError(f"Failed to write {path}: {e.strerror}") from e
    print(f"✅ File {path} generated successfully")
