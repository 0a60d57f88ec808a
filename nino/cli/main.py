"""Main CLI entry point."""

import argparse
import sys

import yaml
from pydantic import ValidationError

from nino.cli.plot import plot_command
from nino.cli.render import playbook_command, render_command
from nino.cli.serve import serve_command
from nino.cli.validate import validate_command
from nino.config import NinoSettings
from nino.utils.logging import configure_logging


def _add_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("paths", nargs="+", help="YAML files or folders to load")
    parser.add_argument("--folder", help="Restrict to one folder (cluster)")
    parser.add_argument("-o", "--output", help="Output file, '-' for stdout")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nino",
        description="NINO - LINO/PIMO transformation plan viewer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  nino render ./petstore                   Write schema.dot for every folder
  nino render ./petstore --format svg      Lay the graph out with Graphviz
  nino plot ./petstore -t owners           Histograms of a table's columns
  nino playbook ./petstore --folder source Flow of a folder's playbook.yaml
  nino validate ./petstore                 Report parse and relation problems
  nino serve ./petstore --port 2442        Start the web API
        """,
    )

    # Global arguments
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument("--structured-logs", action="store_true", default=None, help="Emit JSON log lines")
    parser.add_argument("--config", help="Path to a YAML settings file")
    parser.add_argument("--env", help="Environment section of the settings file to apply")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # nino render
    render_parser = subparsers.add_parser("render", help="Render the transformation graph")
    _add_paths(render_parser)
    render_parser.add_argument(
        "--format",
        choices=["dot", "svg", "png"],
        default="dot",
        help="Output format (default: dot)",
    )

    # nino plot
    plot_parser = subparsers.add_parser("plot", help="Plot string length distributions")
    _add_paths(plot_parser)
    plot_parser.add_argument("-t", "--table", required=True, help="Table to plot")
    plot_parser.add_argument("-c", "--column", help="Plot a single column")

    # nino playbook
    playbook_parser = subparsers.add_parser("playbook", help="Render a folder's playbook flow")
    _add_paths(playbook_parser)

    # nino validate
    validate_parser = subparsers.add_parser("validate", help="Check every descriptor file")
    validate_parser.add_argument("paths", nargs="+", help="YAML files or folders to load")

    # nino serve
    serve_parser = subparsers.add_parser("serve", help="Start the web API")
    serve_parser.add_argument("paths", nargs="+", help="YAML files or folders to load")
    serve_parser.add_argument("--host", help="Interface to bind (default: 127.0.0.1)")
    serve_parser.add_argument("-p", "--port", type=int, help="Port to listen on (default: 2442)")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = NinoSettings.load(
            args.config,
            env=args.env,
            overrides={
                "log_level": args.log_level,
                "structured_logs": args.structured_logs,
                "host": getattr(args, "host", None),
                "port": getattr(args, "port", None),
            },
        )
    except (OSError, ValueError, ValidationError, yaml.YAMLError) as e:
        print(f"❌ Invalid settings: {e}")
        return 1

    configure_logging(settings.structured_logs, settings.log_level)

    if args.command == "render":
        return render_command(args, settings)
    elif args.command == "plot":
        return plot_command(args, settings)
    elif args.command == "playbook":
        return playbook_command(args, settings)
    elif args.command == "validate":
        return validate_command(args, settings)
    elif args.command == "serve":
        return serve_command(args, settings)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
