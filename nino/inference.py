"""Schema inference: classify discovered YAML files and fold them into a ProjectData."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import yaml
from pydantic import ValidationError

from nino.config import (
    AnalyzeSchema,
    DataConnectorSchema,
    DescriptorSchema,
    Playbook,
    RelationSchema,
    TableSchema,
)
from nino.discovery import find_yaml_files
from nino.exceptions import SchemaParseError
from nino.model import Diagnostic, FolderData, ProjectData
from nino.utils.logging import logger

DESCRIPTOR_SUFFIX = "-descriptor.yaml"


class FileKind(str, Enum):
    """Semantic kind of a descriptor file, decided by its file name alone."""

    RELATIONS = "relations"
    DATA_CONNECTORS = "dataconnectors"
    ANALYSIS = "analysis"
    DESCRIPTOR = "descriptor"
    TARGET_TABLES = "target_tables"
    TARGET_ANALYSIS = "target_analysis"
    PLAYBOOK = "playbook"
    TABLES = "tables"


@dataclass(frozen=True)
class FileClassification:
    kind: FileKind
    table_name: Optional[str] = None  # only set for DESCRIPTOR


# Reserved names, checked in order. Matching is exact and case-sensitive.
_RESERVED_NAMES = [
    ("relations.yaml", FileKind.RELATIONS),
    ("dataconnector.yaml", FileKind.DATA_CONNECTORS),
    ("analyze.yaml", FileKind.ANALYSIS),
]
_LATE_RESERVED_NAMES = [
    ("target-tables.yaml", FileKind.TARGET_TABLES),
    ("target-analyze.yaml", FileKind.TARGET_ANALYSIS),
    ("playbook.yaml", FileKind.PLAYBOOK),
]

SCHEMAS = {
    FileKind.RELATIONS: RelationSchema,
    FileKind.DATA_CONNECTORS: DataConnectorSchema,
    FileKind.ANALYSIS: AnalyzeSchema,
    FileKind.DESCRIPTOR: DescriptorSchema,
    FileKind.TARGET_TABLES: TableSchema,
    FileKind.TARGET_ANALYSIS: AnalyzeSchema,
    FileKind.PLAYBOOK: Playbook,
    FileKind.TABLES: TableSchema,
}


def classify(filename: str) -> FileClassification:
    """Decide what a file describes from its base name; first match wins."""
    name = os.path.basename(filename)

    for reserved, kind in _RESERVED_NAMES:
        if name == reserved:
            return FileClassification(kind)

    if name.endswith(DESCRIPTOR_SUFFIX):
        return FileClassification(FileKind.DESCRIPTOR, name[: -len(DESCRIPTOR_SUFFIX)])

    for reserved, kind in _LATE_RESERVED_NAMES:
        if name == reserved:
            return FileClassification(kind)

    return FileClassification(FileKind.TABLES)


def folder_key(file: str, base_path: str) -> str:
    """Name of the cluster a file belongs to.

    Files directly under the base path fold into a cluster named after the base
    path itself; deeper files fold into their first-level subdirectory.
    """
    directory = os.path.normpath(os.path.dirname(file) or ".")
    base = os.path.normpath(base_path or ".")

    if directory == base:
        return os.path.basename(os.path.abspath(base))

    relative = os.path.relpath(directory, base)
    return relative.split(os.sep)[0]


def load_document(path: str) -> Any:
    """Read and parse one YAML document.

    Raises:
        SchemaParseError: If the file cannot be read or decoded, or is not valid YAML
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except UnicodeDecodeError as e:
        raise SchemaParseError(f"not valid UTF-8: {e.reason} at byte {e.start}", file=path) from e
    except OSError as e:
        raise SchemaParseError(f"cannot read file: {e.strerror or e}", file=path) from e
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SchemaParseError(str(e), file=path) from e


def parse_file(path: str, classification: Optional[FileClassification] = None):
    """Parse a file against the schema implied by its classification.

    An empty file yields an empty record of the right kind.

    Raises:
        SchemaParseError: If the YAML is malformed or does not fit the schema
    """
    classification = classification or classify(path)
    model = SCHEMAS[classification.kind]

    try:
        data = load_document(path)
    except SchemaParseError as e:
        raise SchemaParseError(e.message, file=path, kind=classification.kind.value) from e

    if data is None:
        return model()

    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise SchemaParseError(errors, file=path, kind=classification.kind.value) from e


def _register_passwords(schema: DataConnectorSchema) -> None:
    for dc in schema.dataconnectors:
        env_name = dc.password.value_from_env
        if env_name and os.environ.get(env_name):
            logger.register_secret(os.environ[env_name])


def _apply(folder: FolderData, classification: FileClassification, record) -> None:
    kind = classification.kind
    if kind is FileKind.RELATIONS:
        folder.relations = record
    elif kind is FileKind.DATA_CONNECTORS:
        folder.data_connectors = record
        _register_passwords(record)
    elif kind is FileKind.ANALYSIS:
        folder.analysis = record
    elif kind is FileKind.DESCRIPTOR:
        folder.descriptors[classification.table_name] = record
    elif kind is FileKind.TARGET_TABLES:
        folder.target_tables.extend(record.tables)
    elif kind is FileKind.TARGET_ANALYSIS:
        folder.target_analysis = record
    elif kind is FileKind.PLAYBOOK:
        folder.playbook = record
    elif kind is FileKind.TABLES:
        folder.tables.extend(record.tables)
    else:
        raise ValueError(f"Unhandled file kind: {kind}")


def infer_project(file_map: Dict[str, str]) -> ProjectData:
    """Parse every discovered file and fold the results into a new ProjectData.

    A file that fails to parse is skipped and reported in
    `ProjectData.diagnostics`; the other files are still processed.

    Args:
        file_map: Mapping of file path to base path, as returned by find_yaml_files

    Returns:
        A complete, read-only ProjectData
    """
    folders: Dict[str, FolderData] = {}
    diagnostics: List[Diagnostic] = []

    for file, base_path in file_map.items():
        key = folder_key(file, base_path)
        if key not in folders:
            folders[key] = FolderData(name=key)
        folder = folders[key]

        classification = classify(file)
        logger.debug("Classified file", file=file, folder=key, kind=classification.kind.value)

        try:
            record = parse_file(file, classification)
        except SchemaParseError as e:
            logger.warning("Could not parse YAML file, skipping", file=file, error=e.message)
            diagnostics.append(Diagnostic(file, e.message, kind=classification.kind.value))
            continue

        _apply(folder, classification, record)

    return ProjectData(folders, diagnostics, file_map)


def load_project(paths: Iterable[str]) -> ProjectData:
    """Discover and parse every YAML file under `paths`.

    Raises:
        DiscoveryError: If an input path is missing or unreadable
    """
    file_map = find_yaml_files(paths)
    logger.info("Found YAML files to process", count=len(file_map))
    project = infer_project(file_map)
    logger.info(
        "Schema inference complete",
        folders=len(project),
        diagnostics=len(project.diagnostics),
    )
    return project
