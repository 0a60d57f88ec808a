"""Tests for YAML discovery and folder key derivation."""

import os

import pytest

from nino.discovery import find_yaml_files
from nino.exceptions import DiscoveryError
from nino.inference import folder_key


class TestFindYamlFiles:
    def test_walks_directories_recursively(self, workspace):
        file_map = find_yaml_files([str(workspace)])

        assert os.path.join(str(workspace), "source", "tables.yaml") in file_map
        assert os.path.join(str(workspace), "billing", "relations.yaml") in file_map
        assert set(file_map.values()) == {os.path.normpath(str(workspace))}

    def test_order_is_sorted(self, workspace):
        files = list(find_yaml_files([str(workspace)]))
        billing = [f for f in files if os.sep + "billing" + os.sep in f]
        source = [f for f in files if os.sep + "source" + os.sep in f]

        assert files.index(billing[-1]) < files.index(source[0])
        assert source == sorted(source)

    def test_yml_and_non_yaml_files(self, tmp_path):
        (tmp_path / "a.yml").write_text("tables: []")
        (tmp_path / "notes.txt").write_text("ignored")

        file_map = find_yaml_files([str(tmp_path)])

        assert list(file_map) == [os.path.join(str(tmp_path), "a.yml")]

    def test_single_file_uses_its_directory(self, workspace):
        path = str(workspace / "source" / "tables.yaml")

        file_map = find_yaml_files([path])

        assert file_map == {path: str(workspace / "source")}

    def test_missing_path_raises(self, tmp_path):
        with pytest.raises(DiscoveryError, match="Invalid input path"):
            find_yaml_files([str(tmp_path / "nope")])

    def test_repeated_runs_are_identical(self, workspace):
        assert list(find_yaml_files([str(workspace)])) == list(find_yaml_files([str(workspace)]))


class TestFolderKey:
    def test_file_at_root_uses_root_name(self, tmp_path):
        root = tmp_path / "petstore"
        assert folder_key(str(root / "relations.yaml"), str(root)) == "petstore"

    def test_file_in_subfolder_uses_subfolder(self, tmp_path):
        root = tmp_path / "petstore"
        assert folder_key(str(root / "sub" / "tables.yaml"), str(root)) == "sub"

    def test_deep_file_uses_first_level(self, tmp_path):
        root = tmp_path / "petstore"
        assert folder_key(str(root / "sub" / "deeper" / "tables.yaml"), str(root)) == "sub"

    def test_relative_dot_base(self):
        assert folder_key("tables.yaml", ".") == os.path.basename(os.path.abspath("."))
