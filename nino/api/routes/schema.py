"""Graph, playbook and plot endpoints, plus the project reload."""

from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response

from nino.api.deps import get_settings, get_store
from nino.config import NinoSettings
from nino.exceptions import PlaybookNotFoundError
from nino.graph import render_schema_graph
from nino.playbook import render_playbook
from nino.plots import plot_from_project
from nino.state import ProjectStore
from nino.tools import render_graph_image

router = APIRouter(tags=["schema"])

DOT_MEDIA_TYPE = "text/vnd.graphviz"
MEDIA_TYPES = {
    "dot": DOT_MEDIA_TYPE,
    "svg": "image/svg+xml",
    "png": "image/png",
}


class GraphFormat(str, Enum):
    DOT = "dot"
    SVG = "svg"
    PNG = "png"


def _graph_response(document: str, fmt: GraphFormat, settings: NinoSettings) -> Response:
    if fmt is GraphFormat.DOT:
        content = document.encode("utf-8")
    else:
        content = render_graph_image(document, fmt.value, settings)
    return Response(
        content=content,
        media_type=MEDIA_TYPES[fmt.value],
        headers={"Content-Disposition": f'attachment; filename="schema.{fmt.value}"'},
    )


@router.get("/schema.{fmt}")
def serve_schema(
    fmt: GraphFormat,
    store: ProjectStore = Depends(get_store),
    settings: NinoSettings = Depends(get_settings),
) -> Response:
    """Transformation graph of every folder."""
    return _graph_response(render_schema_graph(store.snapshot()), fmt, settings)


@router.get("/schema/{folder}.{fmt}")
def serve_folder_schema(
    folder: str,
    fmt: GraphFormat,
    store: ProjectStore = Depends(get_store),
    settings: NinoSettings = Depends(get_settings),
) -> Response:
    """Transformation graph restricted to one folder's cluster."""
    return _graph_response(render_schema_graph(store.snapshot(), folder), fmt, settings)


@router.get("/playbook/{folder}")
def serve_playbook(folder: str, store: ProjectStore = Depends(get_store)) -> Response:
    project = store.snapshot()
    data = project.get(folder)
    if data is None or data.playbook is None:
        raise PlaybookNotFoundError(folder)
    return Response(content=render_playbook(data.playbook), media_type=DOT_MEDIA_TYPE)


@router.get("/plot/{folder}/{table}")
def serve_plot(
    folder: str,
    table: str,
    column: Optional[str] = None,
    store: ProjectStore = Depends(get_store),
) -> Response:
    """PNG histogram grid of a table, or of one column with `?column=`."""
    image = plot_from_project(store.snapshot(), table, column_name=column, folder=folder)
    return Response(content=image, media_type="image/png")


@router.post("/reload", response_class=PlainTextResponse)
def reload_project(store: ProjectStore = Depends(get_store)) -> str:
    store.reload()
    return "Schemas reloaded successfully"
