"""String-length histograms rendered from analysis metrics."""

import io
import math
from typing import List, Optional, Tuple

from matplotlib.figure import Figure

from nino.config import AnalyzeColumn
from nino.exceptions import ColumnNotFoundError, PlotError
from nino.model import ProjectData
from nino.utils.logging import logger

CELL_WIDTH = 4  # inches
CELL_HEIGHT = 3
BAR_COLOR = "blue"


def grid_size(n: int) -> Tuple[int, int]:
    """(rows, cols) for n sub-charts, as square as possible with rows >= cols."""
    if n <= 0:
        raise ValueError("grid needs at least one cell")
    rows = min(math.ceil((1 + math.sqrt(1 + 4 * n)) / 2), n)
    cols = math.ceil(n / rows)
    return rows, cols


def _draw_histogram(ax, table_name: str, column: AnalyzeColumn) -> None:
    lengths = column.string_metric.lengths
    positions = list(range(len(lengths)))
    ax.bar(positions, [lf.freq for lf in lengths], color=BAR_COLOR)
    ax.set_xticks(positions)
    ax.set_xticklabels([str(lf.length) for lf in lengths])
    ax.set_title(f"Distribution for {table_name}.{column.name}", fontsize=10)
    ax.set_xlabel("Length", fontsize=9)
    ax.set_ylabel("Frequency", fontsize=9)
    ax.set_ylim(bottom=0)


def _to_png(fig: Figure) -> bytes:
    # never registered with pyplot, so no global figure state is shared
    buf = io.BytesIO()
    fig.tight_layout()
    fig.savefig(buf, format="png")
    return buf.getvalue()


def plot_column(table_name: str, column: AnalyzeColumn) -> bytes:
    """PNG bar chart of one column's length distribution.

    Raises:
        PlotError: If the column has no length histogram
    """
    if not column.plottable:
        raise PlotError(f"no string length distribution data to plot for column {column.name}")

    fig = Figure(figsize=(CELL_WIDTH, CELL_HEIGHT))
    ax = fig.subplots()
    _draw_histogram(ax, table_name, column)
    return _to_png(fig)


def plot_table(table_name: str, columns: List[AnalyzeColumn]) -> bytes:
    """PNG grid with one chart per plottable column.

    Raises:
        PlotError: If no column carries a length histogram
    """
    plottable = [col for col in columns if col.plottable]
    if not plottable:
        raise PlotError(f"no plottable columns found for table '{table_name}'")

    rows, cols = grid_size(len(plottable))
    logger.debug("Calculated grid size", table=table_name, rows=rows, cols=cols)

    fig = Figure(figsize=(CELL_WIDTH * cols, CELL_HEIGHT * rows))
    axes = fig.subplots(rows, cols, squeeze=False)
    cells = [ax for row in axes for ax in row]
    for ax, column in zip(cells, plottable):
        _draw_histogram(ax, table_name, column)
    for ax in cells[len(plottable):]:
        ax.set_visible(False)
    return _to_png(fig)


def plot_from_project(
    project: ProjectData,
    table_name: str,
    column_name: Optional[str] = None,
    folder: Optional[str] = None,
) -> bytes:
    """Locate a table's source analysis and plot one column or the whole table.

    Raises:
        TableNotFoundError: If no folder defines the table
        NotFoundError: If the table has no analysis
        ColumnNotFoundError: If the column is not part of the analysis
        PlotError: If there is nothing to plot
    """
    analyzed = project.find_analysis_table(table_name, folder)
    if column_name:
        column = analyzed.column(column_name)
        if column is None:
            raise ColumnNotFoundError(table_name, column_name)
        return plot_column(table_name, column)
    return plot_table(table_name, analyzed.columns)
