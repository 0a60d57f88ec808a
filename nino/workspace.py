"""
Workspace Files
===============

File-level operations on the directories NINO was started on: listing the
YAML tree, resolving request paths safely inside the input paths, and writing
new or updated files. Callers reload the ProjectStore after any write.
"""

import os
from typing import Dict, List, Optional, Sequence, Union

from nino.boilerplate import mask_descriptor, parse_kind, render_template, target_path, template_kinds
from nino.discovery import is_yaml_file
from nino.exceptions import (
    FileConflictError,
    FolderNotFoundError,
    InvalidRequestError,
    NotFoundError,
    WorkspaceError,
)
from nino.inference import DESCRIPTOR_SUFFIX
from nino.model import ProjectData
from nino.utils.logging import logger

TreeItem = Union[str, Dict[str, list]]

SKIPPED_DIRS = {"public"}


def workspace_root(input_paths: Sequence[str]) -> str:
    """Directory new files and folders are created in: the first input path."""
    if not input_paths:
        return "."
    root = input_paths[0]
    if os.path.isfile(root):
        return os.path.dirname(root) or "."
    return root


def safe_relative(path: str) -> str:
    """Normalize a request path and refuse anything that leaves its base.

    Raises:
        WorkspaceError: If the path is empty, absolute or climbs out with `..`
    """
    cleaned = (path or "").strip().lstrip("/")
    if not cleaned:
        raise InvalidRequestError("A path is required")
    cleaned = os.path.normpath(cleaned)
    if os.path.isabs(cleaned) or cleaned == ".." or cleaned.startswith(".." + os.sep):
        raise InvalidRequestError("Invalid path: cannot use absolute or parent paths", path)
    return cleaned


def build_file_tree(path: str) -> List[TreeItem]:
    """Nested listing of the YAML files under `path`.

    Files appear by name, directories as `{name: [...]}`. Hidden entries and
    `public` directories are skipped, as are directories without YAML files.
    """
    items: List[TreeItem] = []
    for name in sorted(os.listdir(path)):
        if name.startswith(".") or name in SKIPPED_DIRS:
            continue
        entry = os.path.join(path, name)
        if os.path.isdir(entry):
            children = build_file_tree(entry)
            if children:
                items.append({name: children})
        elif is_yaml_file(name):
            items.append(name)
    return items


def list_workspace(input_paths: Sequence[str]) -> Dict[str, List[TreeItem]]:
    """File tree of every input path under a single `Workspace` key."""
    workspace: List[TreeItem] = []
    for base in input_paths:
        base = os.path.normpath(base)
        if not os.path.exists(base):
            logger.warning("Input path no longer exists, skipping", path=base)
            continue

        if os.path.isdir(base):
            try:
                children = build_file_tree(base)
            except OSError as e:
                raise WorkspaceError(f"Failed to build file tree: {e}", base) from e
            if not children:
                continue
            name = os.path.basename(base)
            if name in ("", "."):
                workspace.extend(children)
            else:
                workspace.append({name: children})
        elif is_yaml_file(base):
            workspace.append(os.path.basename(base))
    return {"Workspace": workspace}


def _inside(path: str, base: str) -> bool:
    path = os.path.realpath(path)
    base = os.path.realpath(base)
    return os.path.commonpath([path, base]) == base


def find_secure_file_path(input_paths: Sequence[str], relative_path: str) -> str:
    """Absolute path of a workspace file named relative to an input path.

    Each input path is tried as `base/rel`. A request may also start with the
    input directory's own name, in which case that segment is dropped. The
    resolved file must stay inside `base`.

    Raises:
        WorkspaceError: If the path tries to escape the input paths
        NotFoundError: If no input path contains the file
    """
    rel = safe_relative(relative_path)
    for base in input_paths:
        if os.path.isfile(base):
            base = os.path.dirname(base) or "."
        candidates = [rel]
        head, _, rest = rel.partition(os.sep)
        if rest and head == os.path.basename(os.path.abspath(base)):
            candidates.append(rest)
        for name in candidates:
            candidate = os.path.join(base, name)
            if os.path.isfile(candidate) and _inside(candidate, base):
                logger.debug("File found", path=candidate)
                return os.path.abspath(candidate)
    raise NotFoundError(f"File '{relative_path}' not found in any configured input path")


def folder_directory(input_paths: Sequence[str], folder: str) -> str:
    """Directory holding the files of a project folder.

    Raises:
        FolderNotFoundError: If no input path maps to `folder`
    """
    for path in input_paths:
        if not os.path.exists(path):
            continue
        if os.path.isdir(path):
            if os.path.basename(os.path.abspath(path)) == folder:
                return path
            candidate = os.path.join(path, folder)
            if os.path.isdir(candidate):
                return candidate
        else:
            directory = os.path.dirname(path) or "."
            if os.path.basename(os.path.abspath(directory)) == folder:
                return directory
    raise FolderNotFoundError(folder)


def read_file(input_paths: Sequence[str], relative_path: str) -> bytes:
    path = find_secure_file_path(input_paths, relative_path)
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise WorkspaceError(f"Failed to read file: {e.strerror}", path) from e


def write_file(input_paths: Sequence[str], relative_path: str, content: bytes) -> str:
    """Replace the content of an existing workspace file."""
    path = find_secure_file_path(input_paths, relative_path)
    try:
        with open(path, "wb") as f:
            f.write(content)
    except OSError as e:
        raise WorkspaceError(f"Failed to write file: {e.strerror}", path) from e
    logger.info("File updated", path=path)
    return path


def _create(path: str, content: str) -> str:
    if os.path.exists(path):
        raise FileConflictError("File already exists", path)
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise WorkspaceError(f"Failed to create file: {e.strerror}", path) from e
    logger.info("File created", path=path)
    return path


def create_folder(input_paths: Sequence[str], name: str) -> str:
    path = os.path.join(workspace_root(input_paths), safe_relative(name))
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise WorkspaceError(f"Failed to create folder: {e.strerror}", path) from e
    logger.info("Folder created", path=path)
    return path


def create_from_template(input_paths: Sequence[str], kind: str, path: str, **context) -> str:
    """Write the boilerplate of `kind` for `path`, relative to the workspace root.

    Raises:
        WorkspaceError: On an unknown kind, an unsafe path, an existing file or
            a filesystem failure
    """
    template_kind = parse_kind(kind)
    if template_kind is None:
        raise InvalidRequestError(f"Unsupported file type '{kind}' (expected one of: {', '.join(template_kinds())})")
    target = os.path.join(workspace_root(input_paths), target_path(template_kind, safe_relative(path)))
    return _create(target, render_template(template_kind, **context))


def create_mask_file(project: ProjectData, input_paths: Sequence[str], folder: str, table_name: str) -> str:
    """Create `<table>-descriptor.yaml` next to the table's folder files.

    Raises:
        TableNotFoundError: If the folder does not define the table
        FolderNotFoundError: If the folder's directory cannot be located
    """
    folder_name, table = project.find_table(table_name, folder)
    directory = folder_directory(input_paths, folder_name)
    return _create(os.path.join(directory, f"{table.name}{DESCRIPTOR_SUFFIX}"), mask_descriptor(table))


def descriptor_table(filename: str) -> Optional[str]:
    """Table name of a descriptor file name, or None for any other file."""
    name = os.path.basename(filename)
    if not name.endswith(DESCRIPTOR_SUFFIX) or name == DESCRIPTOR_SUFFIX:
        return None
    return name[: -len(DESCRIPTOR_SUFFIX)]

