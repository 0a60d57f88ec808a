"""Boilerplate files for new masks, playbooks, data connectors and scripts."""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from nino.config import Table
from nino.inference import DESCRIPTOR_SUFFIX

TEMPLATE_DIR = Path(__file__).parent / "templates"
SCRIPT_SUFFIX = ".sh"


class TemplateKind(str, Enum):
    MASK = "mask"
    PLAYBOOK = "playbook"
    DATA_CONNECTORS = "dataconnectors"
    BASH = "bash"


TEMPLATE_FILES = {
    TemplateKind.MASK: "mask.yaml.j2",
    TemplateKind.PLAYBOOK: "playbook.yaml.j2",
    TemplateKind.DATA_CONNECTORS: "dataconnector.yaml.j2",
    TemplateKind.BASH: "bash.sh.j2",
}

DEFAULTS: Dict[str, Any] = {
    "name": "LINO Example",
    "source_url": "postgresql://user@source:5432/db?sslmode=disable",
    "target_url": "postgresql://user@target:5433/db?sslmode=disable",
    "password_env": "ADMIN",
    "entities": ["example"],
    "columns": [],
}

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    keep_trailing_newline=True,
    undefined=StrictUndefined,
    autoescape=False,
)


def render_template(kind: TemplateKind, **context) -> str:
    """Render the boilerplate of a kind; missing context falls back to DEFAULTS."""
    kind = TemplateKind(kind)
    template = _env.get_template(TEMPLATE_FILES[kind])
    return template.render(**{**DEFAULTS, **context})


def mask_descriptor(table: Table) -> str:
    """Descriptor skeleton with one empty rule per column of `table`."""
    return render_template(TemplateKind.MASK, columns=[col.name for col in table.columns])


def target_path(kind: TemplateKind, path: str) -> str:
    """File path a boilerplate of `kind` is written to for a requested `path`.

    Masks and scripts get their suffix appended when missing; playbooks and
    data connectors are created under `path` with their reserved file name.
    """
    kind = TemplateKind(kind)
    if kind is TemplateKind.MASK:
        return path if path.endswith(DESCRIPTOR_SUFFIX) else path + DESCRIPTOR_SUFFIX
    if kind is TemplateKind.PLAYBOOK:
        return os.path.join(path, "playbook.yaml")
    if kind is TemplateKind.DATA_CONNECTORS:
        return os.path.join(path, "dataconnector.yaml")
    return path if path.endswith(SCRIPT_SUFFIX) else path + SCRIPT_SUFFIX


def template_kinds() -> List[str]:
    return [kind.value for kind in TemplateKind]


def parse_kind(value: str) -> Optional[TemplateKind]:
    try:
        return TemplateKind(value)
    except ValueError:
        return None
