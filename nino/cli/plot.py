"""Plot CLI command."""

from nino.cli.output import write_output
from nino.config import NinoSettings
from nino.exceptions import NinoException
from nino.inference import load_project
from nino.plots import plot_from_project
from nino.utils.logging import logger


def plot_command(args, settings: NinoSettings) -> int:
    """Write the histogram grid of a table, or the histogram of one column, as PNG."""
    try:
        project = load_project(args.paths)
        if args.column:
            logger.info("Generating single plot", table=args.table, column=args.column)
            default_output = f"plot-{args.table}-{args.column}.png"
        else:
            logger.info("Generating composite plot", table=args.table)
            default_output = f"plot-{args.table}.png"

        image = plot_from_project(project, args.table, column_name=args.column, folder=args.folder)
        write_output(args.output or default_output, image)
        return 0

    except NinoException as e:
        print(f"❌ Failed to generate plot: {e}")
        return 1
