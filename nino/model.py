"""In-memory project model built from one discovery + parse pass."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Optional, Tuple

from nino.config import (
    AnalyzeSchema,
    AnalyzeTable,
    DataConnectorSchema,
    DescriptorSchema,
    Playbook,
    RelationSchema,
    Table,
)
from nino.exceptions import FolderNotFoundError, NotFoundError, TableNotFoundError


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while loading or resolving the project."""

    source: str
    message: str
    kind: Optional[str] = None
    severity: str = "warning"

    def __str__(self) -> str:
        prefix = f"[{self.kind}] " if self.kind else ""
        return f"{prefix}{self.source}: {self.message}"


@dataclass
class FolderData:
    """Union of every record parsed for one folder (one graph cluster)."""

    name: str
    relations: RelationSchema = field(default_factory=RelationSchema)
    data_connectors: DataConnectorSchema = field(default_factory=DataConnectorSchema)
    analysis: AnalyzeSchema = field(default_factory=AnalyzeSchema)
    tables: List[Table] = field(default_factory=list)
    descriptors: Dict[str, DescriptorSchema] = field(default_factory=dict)
    target_tables: List[Table] = field(default_factory=list)
    target_analysis: AnalyzeSchema = field(default_factory=AnalyzeSchema)
    playbook: Optional[Playbook] = None

    def table(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def target_table(self, name: str) -> Optional[Table]:
        for table in self.target_tables:
            if table.name == name:
                return table
        return None


class ProjectData(Mapping):
    """Read-only mapping of folder name to FolderData.

    Instances are never mutated after construction; a reload builds a new one.
    """

    def __init__(
        self,
        folders: Optional[Dict[str, FolderData]] = None,
        diagnostics: Optional[List[Diagnostic]] = None,
        file_map: Optional[Dict[str, str]] = None,
    ):
        self._folders = MappingProxyType(dict(folders or {}))
        self.diagnostics: Tuple[Diagnostic, ...] = tuple(diagnostics or ())
        self.file_map = MappingProxyType(dict(file_map or {}))

        from nino.resolver import TableIndex

        self._table_index = TableIndex.build(self)

    def __getitem__(self, name: str) -> FolderData:
        return self._folders[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._folders)

    def __len__(self) -> int:
        return len(self._folders)

    def __repr__(self) -> str:
        return f"ProjectData(folders={list(self._folders)}, diagnostics={len(self.diagnostics)})"

    def folder(self, name: str) -> FolderData:
        """Return one folder or raise FolderNotFoundError."""
        if name not in self._folders:
            raise FolderNotFoundError(name, list(self._folders))
        return self._folders[name]

    @property
    def table_index(self):
        """Table name to owning folder."""
        return self._table_index

    def find_table(self, table_name: str, folder: Optional[str] = None) -> Tuple[str, Table]:
        """Locate a source table, in `folder` if given, else in any folder.

        Raises:
            TableNotFoundError: If no folder defines the table
        """
        if folder:
            table = self._folders[folder].table(table_name) if folder in self._folders else None
            if table is None:
                raise TableNotFoundError(table_name, folder)
            return folder, table

        for name, data in self._folders.items():
            table = data.table(table_name)
            if table is not None:
                return name, table
        raise TableNotFoundError(table_name)

    def find_analysis_table(self, table_name: str, folder: Optional[str] = None) -> AnalyzeTable:
        """Source-side analysis of a table, located the same way as find_table."""
        folder_name, _ = self.find_table(table_name, folder)
        analyzed = self._folders[folder_name].analysis.table(table_name)
        if analyzed is None:
            raise NotFoundError(f"No analysis data found for table '{table_name}'")
        return analyzed
