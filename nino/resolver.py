"""Resolution of relation endpoints to graph node identities across folders."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from nino.config import Relation
from nino.model import Diagnostic, ProjectData


def cluster_id(folder_name: str) -> str:
    """DOT-safe identifier fragment for a folder."""
    return folder_name.replace("-", "_")


def node_id(folder_name: str, table_name: str) -> str:
    """Globally unique node identity of a table."""
    return f"{cluster_id(folder_name)}_{table_name}"


@dataclass(frozen=True)
class ResolvedEdge:
    relation: str
    parent_folder: str
    parent_table: str
    child_folder: str
    child_table: str

    @property
    def source(self) -> str:
        return node_id(self.parent_folder, self.parent_table)

    @property
    def target(self) -> str:
        return node_id(self.child_folder, self.child_table)


class TableIndex:
    """Reverse index from table name to the folders defining it, in model order."""

    def __init__(self, owners: Dict[str, List[str]]):
        self._owners = owners

    @classmethod
    def build(cls, project: ProjectData) -> "TableIndex":
        owners: Dict[str, List[str]] = {}
        for folder_name, folder in project.items():
            for table in folder.tables:
                folders = owners.setdefault(table.name, [])
                if folder_name not in folders:
                    folders.append(folder_name)
        return cls(owners)

    def __contains__(self, table_name: str) -> bool:
        return table_name in self._owners

    def folders_for(self, table_name: str) -> List[str]:
        return list(self._owners.get(table_name, []))

    def folder_for(self, table_name: str, preferred: Optional[str] = None) -> Optional[str]:
        """Folder defining a table; `preferred` wins when it defines it too."""
        folders = self._owners.get(table_name)
        if not folders:
            return None
        if preferred in folders:
            return preferred
        return folders[0]

    def resolve(self, relation: Relation, declared_in: Optional[str] = None) -> Optional[ResolvedEdge]:
        """Resolve both ends of a relation, or None if either table is unknown."""
        parent_folder = self.folder_for(relation.parent.name, declared_in)
        child_folder = self.folder_for(relation.child.name, declared_in)
        if parent_folder is None or child_folder is None:
            return None
        return ResolvedEdge(
            relation=relation.name,
            parent_folder=parent_folder,
            parent_table=relation.parent.name,
            child_folder=child_folder,
            child_table=relation.child.name,
        )


def unresolved_message(relation: Relation, folder_name: str) -> str:
    return (
        f"could not find one or both tables for relation '{relation.name}' "
        f"({relation.parent.name} -> {relation.child.name}) defined in '{folder_name}'"
    )


def check_relations(project: ProjectData) -> List[Diagnostic]:
    """Report every relation that cannot be drawn."""
    index = project.table_index
    diagnostics = []
    for folder_name, folder in project.items():
        for relation in folder.relations.relations:
            if index.resolve(relation, folder_name) is None:
                diagnostics.append(
                    Diagnostic(folder_name, unresolved_message(relation, folder_name), kind="relations")
                )
    return diagnostics
