"""
Render CLI Commands
===================

Writes the transformation graph, or a folder's playbook flow, as DOT text or
as an image laid out by Graphviz.
"""

from nino.cli.output import write_output
from nino.config import NinoSettings
from nino.exceptions import NinoException, PlaybookNotFoundError
from nino.graph import TransformationGraph
from nino.inference import load_project
from nino.playbook import render_playbook
from nino.tools import render_graph_image
from nino.utils.logging import logger


def render_command(args, settings: NinoSettings) -> int:
    """
    Handle render subcommand.

    Args:
        args: Parsed command-line arguments
        settings: Resolved runtime settings

    Returns:
        Exit code
    """
    try:
        project = load_project(args.paths)
        renderer = TransformationGraph(project, args.folder)
        document = renderer.render()

        if args.format == "dot":
            content = document
        else:
            content = render_graph_image(document, args.format, settings)

        write_output(args.output or f"schema.{args.format}", content)

        if renderer.warnings:
            logger.warning("Some relations were not drawn", skipped=len(renderer.warnings))
        return 0

    except NinoException as e:
        print(f"❌ Error generating graph: {e}")
        return 1


def playbook_command(args, settings: NinoSettings) -> int:
    """Handle playbook subcommand."""
    try:
        project = load_project(args.paths)
        folder = args.folder
        if not folder:
            with_playbook = [name for name, data in project.items() if data.playbook is not None]
            if not with_playbook:
                print("❌ No playbook.yaml found in any folder")
                return 1
            folder = with_playbook[0]

        data = project.folder(folder)
        if data.playbook is None:
            raise PlaybookNotFoundError(folder)

        write_output(args.output or f"playbook-{folder}.dot", render_playbook(data.playbook))
        return 0

    except NinoException as e:
        print(f"❌ Error generating playbook graph: {e}")
        return 1
