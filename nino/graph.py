"""Transformation graph: one cluster per folder, one HTML-table node per table."""

from enum import Enum
from typing import Any, Dict, List, Optional

from nino.config import AnalyzeColumn, AnalyzeTable, DataConnectorSchema, MaskInfo, MaskType, Table
from nino.dot import Digraph, Html, escape, font, table, td, tr
from nino.exceptions import NinoException, RenderError
from nino.model import Diagnostic, FolderData, ProjectData
from nino.resolver import cluster_id, node_id, unresolved_message
from nino.utils.logging import logger

TITLE = "LINO-PIMO Transformation Plan"

LIGHTGREY_COLOR = "#eeeeee6e"
SOURCE_COLOR = "#FF000040"  # source side / readonly
TARGET_COLOR = "#0000FF40"  # target side / writable
HEADER_COLOR = "#E0E0E0"
EDGE_COLOR = "#555555"

KEY_ICON = "&#128273; "
READONLY_ICON = " &#128065; "
WRITABLE_ICON = " &#9999; "
MASK_ICONS = {
    MaskType.RANDOM_CHOICE: "&#127922; ",
    MaskType.INCREMENTAL: "&#10133; ",
    MaskType.REGEX: "&#128291; ",
}


class MetricsMode(str, Enum):
    """How many metric columns a table node carries."""

    NONE = "none"
    SINGLE = "single"  # source analysis only
    DUAL = "dual"  # target analysis present, source and target side by side


def format_metric(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)


def cluster_label(folder_name: str, connectors: DataConnectorSchema) -> str:
    """Folder title plus one row per data connector."""
    rows = [
        tr(
            td(
                font(f" {escape(folder_name)} ", point_size=32, color="darkolivegreen", bold=True),
                port="tab",
                align="CENTER",
                colspan=3,
            )
        )
    ]
    for dc in connectors.dataconnectors:
        bgcolor = SOURCE_COLOR if dc.readonly else TARGET_COLOR
        icon = READONLY_ICON if dc.readonly else WRITABLE_ICON
        rows.append(
            tr(
                td(font(escape(dc.name), point_size=16), bgcolor=bgcolor, align="LEFT"),
                td(font(escape(dc.url), point_size=10), align="LEFT"),
                td(font(icon, point_size=16), align="CENTER"),
            )
        )
    return table(
        rows,
        border=1,
        color="olive",
        cellborder=1,
        cellspacing=1,
        cellpadding=2,
        bgcolor="#f0f0f0ff",
    )


def metrics_header(analyzed: Optional[AnalyzeTable]) -> str:
    if analyzed is None:
        return "Metrics"
    return font("Count ", point_size=10) + font(str(analyzed.count), point_size=12, bold=True)


class TableNode:
    """Builds the HTML-like label of one table node."""

    def __init__(self, table_def: Table, folder: FolderData):
        self.table = table_def
        self.keys = set(table_def.keys)

        descriptor = folder.descriptors.get(table_def.name)
        self.masks: Optional[Dict[str, MaskInfo]] = (
            descriptor.rules_by_column() if descriptor is not None else None
        )
        self.analysis = folder.analysis.table(table_def.name)
        self.target_analysis = folder.target_analysis.table(table_def.name)
        self.target_table = folder.target_table(table_def.name)

        if self.target_analysis is not None:
            self.mode = MetricsMode.DUAL
        elif self.analysis is not None:
            self.mode = MetricsMode.SINGLE
        else:
            self.mode = MetricsMode.NONE

    def label(self) -> str:
        rows = [self.header_row()]
        rows.extend(self.column_row(col.name, col.export) for col in self.table.columns)
        return table(rows, border=1, color="olive", cellborder=1, cellspacing=0, cellpadding=2)

    def header_row(self) -> str:
        cells = [
            td(
                font(escape(self.table.name), point_size=20, color="white", bold=True),
                bgcolor="olive",
                colspan=2,
                cellpadding=4,
            )
        ]
        if self.masks is not None:
            cells.append(td(font("Mask", point_size=12), bgcolor=HEADER_COLOR, colspan=2))

        if self.mode is MetricsMode.SINGLE:
            cells.append(td(metrics_header(self.analysis), bgcolor=HEADER_COLOR))
        elif self.mode is MetricsMode.DUAL:
            source = metrics_header(self.analysis)
            target = metrics_header(self.target_analysis)
            if source == target:
                cells.append(td(source, bgcolor=LIGHTGREY_COLOR, colspan=2))
            else:
                cells.append(td(source, bgcolor=SOURCE_COLOR))
                cells.append(td(target, bgcolor=TARGET_COLOR))
        return tr(*cells)

    def column_row(self, name: str, export: str) -> str:
        key = KEY_ICON if name in self.keys else ""
        cells = [td(font(key + escape(name), bold=True), align="LEFT"), self._export_cell(name, export)]

        if self.masks is not None:
            cells.extend(self._mask_cells(self.masks.get(name)))

        if self.mode is MetricsMode.SINGLE:
            cells.append(self._metric_cell(self.analysis.column(name)))
        elif self.mode is MetricsMode.DUAL:
            source = self.analysis.column(name) if self.analysis is not None else None
            target = self.target_analysis.column(name)
            differ = (
                source is not None
                and target is not None
                and source.main_metric.min != target.main_metric.min
            )
            cells.append(self._metric_cell(source, SOURCE_COLOR if differ else None))
            cells.append(self._metric_cell(target, TARGET_COLOR if differ else None))
        return tr(*cells)

    def _export_cell(self, name: str, export: str) -> str:
        target_col = self.target_table.column(name) if self.target_table is not None else None
        if target_col is None or target_col.export == export:
            return td(font(escape(export), point_size=9), align="LEFT")

        split = table(
            [
                tr(td(font(escape(export), point_size=9), bgcolor=SOURCE_COLOR, align="LEFT")),
                tr(td(font(escape(target_col.export), point_size=9), bgcolor=TARGET_COLOR, align="LEFT")),
            ],
            border=0,
            cellborder=0,
            cellspacing=0,
        )
        return td(split)

    @staticmethod
    def _mask_cells(info: Optional[MaskInfo]) -> List[str]:
        if info is None:
            return [td(), td()]
        icon = MASK_ICONS.get(info.mask_type, escape(info.mask_type.value))
        return [
            td(font(icon, point_size=10), align="CENTER"),
            td(font(escape(info.mask_value), point_size=10), align="LEFT"),
        ]

    @staticmethod
    def _metric_cell(metric: Optional[AnalyzeColumn], bgcolor: Optional[str] = None) -> str:
        if metric is None:
            return td()
        return td(font(escape(format_metric(metric.main_metric.min)), point_size=9), bgcolor=bgcolor, align="LEFT")


class TransformationGraph:
    """Renders a ProjectData (optionally one folder of it) as a DOT document.

    The table index always covers every folder, so relations declared in the
    rendered folder can still point at tables living in other clusters.
    """

    def __init__(self, project: ProjectData, folder_filter: Optional[str] = None):
        self.project = project
        self.folder_filter = folder_filter or None
        self.warnings: List[Diagnostic] = []

    def build(self) -> Digraph:
        graph = Digraph("G")
        graph.set(
            "label",
            Html(
                table(
                    [tr(td(font(TITLE, point_size=42, color="darkolivegreen", bold=True), colspan=3))],
                    border=0,
                    cellborder=0,
                    cellspacing=4,
                    cellpadding=2,
                )
            ),
        )
        graph.set("labelloc", "t")
        graph.set("rankdir", "LR")
        graph.set("tooltip", "LINO-PIMO Transformation tooltip")
        graph.set_defaults("graph", {"splines": "curved", "class": "lino-graph"})
        graph.set_defaults("node", {"shape": "plain", "fontname": "Helvetica", "class": "lino-table"})
        graph.set_defaults("edge", {"fontname": "Helvetica", "fontsize": 10, "class": "lino-edge"})

        if self.folder_filter:
            folders = [self.project.folder(self.folder_filter)]
        else:
            folders = list(self.project.values())

        for folder in folders:
            self._add_cluster(graph, folder)
        return graph

    def _add_cluster(self, graph: Digraph, folder: FolderData) -> None:
        cluster = graph.subgraph(f"cluster_{cluster_id(folder.name)}")
        cluster.set("label", Html(cluster_label(folder.name, folder.data_connectors)))
        cluster.set("href", f"javascript:openExecutionGraph('{folder.name}')")
        cluster.set("style", "rounded")
        cluster.set("color", "olive")

        for table_def in folder.tables:
            cluster.node(
                node_id(folder.name, table_def.name),
                {
                    "href": f"javascript:openTableStat('{table_def.name}', '{folder.name}')",
                    "class": "table-dialog-trigger",
                    "tooltip": "table's details",
                    "label": Html(TableNode(table_def, folder).label()),
                },
            )

        index = self.project.table_index
        for relation in folder.relations.relations:
            edge = index.resolve(relation, folder.name)
            if edge is None:
                message = unresolved_message(relation, folder.name)
                logger.warning(f"{message}. Skipping edge.")
                self.warnings.append(Diagnostic(folder.name, message, kind="relations"))
                continue
            cluster.edge(edge.source, edge.target, label=f" {relation.name} ", color=EDGE_COLOR)

    def render(self) -> str:
        """Build and serialize the document.

        Raises:
            FolderNotFoundError: If the folder filter names an unknown folder
            RenderError: On any unexpected fault while assembling the document
        """
        try:
            return self.build().render()
        except NinoException:
            raise
        except Exception as e:
            logger.error("Unexpected error while generating graph", error=str(e))
            raise RenderError("could not assemble the transformation graph", original_error=e) from e


def render_schema_graph(project: ProjectData, folder_filter: Optional[str] = None) -> str:
    """Render the full project, or a single folder, as DOT text."""
    return TransformationGraph(project, folder_filter).render()
