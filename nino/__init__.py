"""NINO - Transformation plan viewer for LINO/PIMO workspaces."""

__version__ = "0.1.0"

from nino.inference import load_project
from nino.model import ProjectData

__all__ = [
    "load_project",
    "ProjectData",
    "__version__",
]


# Renderers pull in matplotlib and jinja2, import them on first use
def __getattr__(name):
    if name == "render_schema_graph":
        from nino.graph import render_schema_graph

        return render_schema_graph
    if name == "render_playbook":
        from nino.playbook import render_playbook

        return render_playbook
    if name == "ProjectStore":
        from nino.state import ProjectStore

        return ProjectStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
