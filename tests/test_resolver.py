"""Tests for relation resolution across folders."""

from nino.config import Relation, RelationSchema, Table
from nino.model import FolderData, ProjectData
from nino.resolver import TableIndex, check_relations, cluster_id, node_id


def relation(name, parent, child):
    return Relation(name=name, parent=Table(name=parent), child=Table(name=child))


def folder(name, *tables):
    return FolderData(name=name, tables=[Table(name=t) for t in tables])


class TestIdentities:
    def test_cluster_id_replaces_dashes(self):
        assert cluster_id("my-folder") == "my_folder"

    def test_node_id(self):
        assert node_id("my-folder", "orders") == "my_folder_orders"


class TestTableIndex:
    def test_cross_folder_resolution(self, project):
        index = project.table_index

        edge = index.resolve(project["billing"].relations.relations[0], "billing")

        assert edge.source == "source_orders"
        assert edge.target == "billing_invoices"

    def test_unknown_table_does_not_resolve(self, project):
        ghost = project["billing"].relations.relations[1]

        assert project.table_index.resolve(ghost, "billing") is None

    def test_index_is_built_with_the_project(self):
        project = ProjectData({"a": folder("a", "t")})

        assert project.table_index is project.table_index
        assert project.table_index.folder_for("t") == "a"

    def test_declaring_folder_is_preferred(self):
        project = ProjectData({"a": folder("a", "t"), "b": folder("b", "t", "u")})
        index = TableIndex.build(project)

        assert index.folders_for("t") == ["a", "b"]
        assert index.folder_for("t", "b") == "b"
        assert index.folder_for("t", "c") == "a"
        assert index.folder_for("t") == "a"

    def test_membership(self):
        index = TableIndex.build(ProjectData({"a": folder("a", "t")}))

        assert "t" in index
        assert "missing" not in index
        assert index.folder_for("missing") is None


class TestCheckRelations:
    def test_reports_unresolved_relations(self, project):
        diagnostics = check_relations(project)

        assert len(diagnostics) == 1
        assert diagnostics[0].source == "billing"
        assert "invoices_ghosts" in diagnostics[0].message

    def test_clean_project(self):
        project = ProjectData(
            {
                "a": FolderData(
                    name="a",
                    tables=[Table(name="p"), Table(name="c")],
                    relations=RelationSchema(relations=[relation("p_c", "p", "c")]),
                )
            }
        )

        assert check_relations(project) == []
