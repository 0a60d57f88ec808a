"""YAML file discovery across the input paths."""

import os
from typing import Dict, Iterable

from nino.exceptions import DiscoveryError
from nino.utils.logging import logger

YAML_SUFFIXES = (".yaml", ".yml")


def is_yaml_file(name: str) -> bool:
    return name.endswith(YAML_SUFFIXES)


def find_yaml_files(paths: Iterable[str]) -> Dict[str, str]:
    """Recursively search input paths for .yaml and .yml files.

    Directories are walked in sorted order so the returned mapping, and every
    model built from it, is stable across runs.

    Args:
        paths: Files or directories given on the command line

    Returns:
        Mapping of file path to the base path it was found under. A file given
        directly has its own directory as base path.

    Raises:
        DiscoveryError: If a path does not exist or a directory cannot be walked
    """
    paths = list(paths)
    file_map: Dict[str, str] = {}

    for path in paths:
        if not os.path.exists(path):
            raise DiscoveryError(path, "no such file or directory")

        if not os.path.isdir(path):
            if is_yaml_file(path):
                file_map[path] = os.path.dirname(path) or "."
            continue

        base_path = os.path.normpath(path)

        def on_error(err: OSError):
            raise DiscoveryError(path, f"error walking directory: {err}") from err

        for dirpath, dirnames, filenames in os.walk(base_path, onerror=on_error):
            dirnames.sort()
            for filename in sorted(filenames):
                if is_yaml_file(filename):
                    file_map[os.path.join(dirpath, filename)] = base_path

    logger.debug("YAML discovery complete", inputs=len(paths), files=len(file_map))
    return file_map
