"""Custom exceptions for NINO."""

from typing import List, Optional


class NinoException(Exception):
    """Base exception for all NINO errors."""

    pass


class DiscoveryError(NinoException):
    """An input path is missing or cannot be walked."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"✗ Invalid input path {path}: {reason}")


class SchemaParseError(NinoException):
    """A descriptor file could not be parsed against its schema."""

    def __init__(self, message: str, file: Optional[str] = None, kind: Optional[str] = None):
        self.message = message
        self.file = file
        self.kind = kind
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        """Format error message with location info."""
        parts = ["Descriptor parse error"]
        if self.file:
            parts.append(f"\n  File: {self.file}")
        if self.kind:
            parts.append(f"\n  Kind: {self.kind}")
        parts.append(f"\n  Error: {self.message}")
        return "".join(parts)


class NotFoundError(NinoException):
    """A folder, table, column or playbook is not part of the project."""

    pass


class FolderNotFoundError(NotFoundError):
    def __init__(self, folder: str, available: Optional[List[str]] = None):
        self.folder = folder
        self.available = available or []
        message = f"Folder '{folder}' not found"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class TableNotFoundError(NotFoundError):
    def __init__(self, table: str, folder: Optional[str] = None):
        self.table = table
        self.folder = folder
        if folder:
            super().__init__(f"Table '{table}' not found in folder '{folder}'")
        else:
            super().__init__(f"Table '{table}' not found in any folder")


class ColumnNotFoundError(NotFoundError):
    def __init__(self, table: str, column: str):
        self.table = table
        self.column = column
        super().__init__(f"No analysis data found for table '{table}', column '{column}'")


class PlaybookNotFoundError(NotFoundError):
    def __init__(self, folder: str):
        self.folder = folder
        super().__init__(f"No playbook.yaml found for folder '{folder}'")


class PlotError(NinoException):
    """Nothing plottable for the requested table or column."""

    pass


class RenderError(NinoException):
    """Unexpected fault while assembling a graph document."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        parts = [f"✗ Graph rendering failed: {self.message}"]
        if self.original_error:
            parts.append(f"\n  Type: {type(self.original_error).__name__}")
            parts.append(f"\n  Detail: {self.original_error}")
        return "".join(parts)


class ToolExecutionError(NinoException):
    """An external tool failed without producing usable output."""

    def __init__(
        self,
        tool: str,
        reason: str,
        returncode: Optional[int] = None,
        output: str = "",
        suggestions: Optional[List[str]] = None,
    ):
        self.tool = tool
        self.reason = reason
        self.returncode = returncode
        self.output = output
        self.suggestions = suggestions or []
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        """Format tool error with suggestions."""
        parts = [f"✗ {self.tool} failed: {self.reason}"]
        if self.returncode is not None:
            parts.append(f"\n  Exit code: {self.returncode}")
        if self.output:
            parts.append(f"\n  Output:\n{self.output}")
        if self.suggestions:
            parts.append("\n\n  Suggestions:")
            for i, suggestion in enumerate(self.suggestions, 1):
                parts.append(f"\n    {i}. {suggestion}")
        return "".join(parts)


class ToolTimeoutError(ToolExecutionError):
    """An external tool was killed after exceeding its timeout."""

    def __init__(self, tool: str, timeout: float):
        self.timeout = timeout
        super().__init__(tool, f"killed after {timeout:g}s timeout")


class WorkspaceError(NinoException):
    """A workspace file could not be read, written or located safely."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.message = message
        self.path = path
        super().__init__(f"{message}: {path}" if path else message)


class InvalidRequestError(WorkspaceError):
    """A request names an unsafe path or an unknown boilerplate kind."""

    pass


class FileConflictError(WorkspaceError):
    """A file to be created already exists."""

    pass
