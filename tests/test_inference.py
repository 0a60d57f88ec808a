"""Tests for file classification, parsing and the project fold."""

import logging
import os

import pytest

from nino.config import AnalyzeSchema, Playbook, TableSchema
from nino.exceptions import SchemaParseError
from nino.inference import FileKind, classify, infer_project, load_project, parse_file


class TestClassify:
    @pytest.mark.parametrize(
        "filename,kind",
        [
            ("relations.yaml", FileKind.RELATIONS),
            ("dataconnector.yaml", FileKind.DATA_CONNECTORS),
            ("analyze.yaml", FileKind.ANALYSIS),
            ("target-tables.yaml", FileKind.TARGET_TABLES),
            ("target-analyze.yaml", FileKind.TARGET_ANALYSIS),
            ("playbook.yaml", FileKind.PLAYBOOK),
            ("tables.yaml", FileKind.TABLES),
            ("anything-else.yml", FileKind.TABLES),
        ],
    )
    def test_reserved_names(self, filename, kind):
        assert classify(os.path.join("some", "dir", filename)).kind is kind

    def test_descriptor_carries_table_name(self):
        result = classify("orders-descriptor.yaml")

        assert result.kind is FileKind.DESCRIPTOR
        assert result.table_name == "orders"

    def test_matching_is_exact(self):
        assert classify("Relations.yaml").kind is FileKind.TABLES
        assert classify("relations.yml").kind is FileKind.TABLES
        assert classify("orders-descriptor.yml").kind is FileKind.TABLES
        assert classify("my-relations.yaml").kind is FileKind.TABLES


class TestParseFile:
    def test_empty_file_gives_empty_record(self, tmp_path):
        path = tmp_path / "analyze.yaml"
        path.write_text("")

        record = parse_file(str(path))

        assert isinstance(record, AnalyzeSchema)
        assert record.tables == []

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text("tables: [unclosed")

        with pytest.raises(SchemaParseError) as exc_info:
            parse_file(str(path))

        assert exc_info.value.file == str(path)
        assert exc_info.value.kind == "tables"

    def test_schema_mismatch(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text("tables:\n  - keys: [id]\n")

        with pytest.raises(SchemaParseError, match="name"):
            parse_file(str(path))

    def test_null_sections_fall_back_to_defaults(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text("version: v1\ntables:\n  - name: t\n    columns:\n")

        record = parse_file(str(path))

        assert isinstance(record, TableSchema)
        assert record.tables[0].columns == []

    def test_playbook_list(self, workspace):
        record = parse_file(str(workspace / "source" / "playbook.yaml"))

        assert isinstance(record, Playbook)
        assert record.plays[0].name == "Shop masking"
        assert [r.name for r in record.plays[0].roles] == ["OB-Live.nino"]


class TestInferProject:
    def test_folders_and_records(self, project):
        assert list(project) == ["billing", "source"]
        source = project["source"]

        assert [t.name for t in source.tables] == ["orders", "customers"]
        assert [t.name for t in source.target_tables] == ["orders"]
        assert list(source.descriptors) == ["orders"]
        assert [dc.name for dc in source.data_connectors.dataconnectors] == ["source", "target"]
        assert source.analysis.table("orders").count == 10
        assert source.target_analysis.table("orders") is not None
        assert source.playbook is not None
        assert project["billing"].playbook is None

    def test_tables_accumulate_across_files(self, workspace):
        (workspace / "billing" / "more.yaml").write_text("tables:\n  - name: payments\n")

        project = load_project([str(workspace)])

        assert [t.name for t in project["billing"].tables] == ["payments", "invoices"]

    def test_bad_file_is_skipped_with_diagnostic(self, workspace, caplog):
        (workspace / "billing" / "broken.yaml").write_text("tables: [unclosed")

        with caplog.at_level(logging.WARNING, logger="nino"):
            project = load_project([str(workspace)])

        assert [t.name for t in project["billing"].tables] == ["invoices"]
        assert len(project.diagnostics) == 1
        assert project.diagnostics[0].source.endswith("broken.yaml")
        assert project.diagnostics[0].kind == "tables"
        assert "Could not parse YAML file" in caplog.text

    def test_undecodable_file_is_skipped(self, workspace):
        (workspace / "billing" / "latin1.yaml").write_bytes(b"tables:\n  - name: caf\xe9\n")

        project = load_project([str(workspace)])

        assert [t.name for t in project["billing"].tables] == ["invoices"]
        assert len(project.diagnostics) == 1
        assert project.diagnostics[0].source.endswith("latin1.yaml")
        assert "not valid UTF-8" in project.diagnostics[0].message

    def test_dangling_symlink_is_skipped(self, workspace):
        os.symlink(workspace / "gone.yaml", workspace / "source" / "link.yaml")

        project = load_project([str(workspace)])

        assert len(project["source"].tables) == 2
        assert len(project.diagnostics) == 1
        assert project.diagnostics[0].source.endswith("link.yaml")
        assert "cannot read file" in project.diagnostics[0].message

    def test_root_files_fold_into_root_named_folder(self, workspace):
        (workspace / "tables.yaml").write_text("tables:\n  - name: loose\n")

        project = load_project([str(workspace)])

        assert project["shop"].tables[0].name == "loose"

    def test_project_is_read_only(self, project):
        with pytest.raises(TypeError):
            project["new"] = None

    def test_infer_empty_map(self):
        project = infer_project({})

        assert len(project) == 0
        assert project.diagnostics == ()
