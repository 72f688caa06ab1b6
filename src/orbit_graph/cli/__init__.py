"""
Command-line interface for orbit-graph.

Provides CLI commands via the `orbit-graph` command:

    orbit-graph layout <graph>     - Lay out a graph file and print positions
    orbit-graph config             - Show or initialize configuration

Examples:
    orbit-graph layout graph.yaml
    orbit-graph layout graph.yaml --no-cluster --padding 1.5 --check
    orbit-graph layout graph.json --format summary
    orbit-graph config --show
    orbit-graph config --init
"""

import argparse
from typing import List, Optional

from orbit_graph import __version__
from orbit_graph.config import OUTPUT_FORMATS

__all__ = ["main"]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for orbit-graph CLI."""
    parser = argparse.ArgumentParser(
        prog="orbit-graph",
        description="Deterministic orbital graph layout",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"orbit-graph {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Layout subcommand
    layout_parser = subparsers.add_parser("layout", help="Lay out a graph definition file")
    layout_parser.add_argument("graph", help="Path to a YAML or JSON graph file")
    layout_parser.add_argument(
        "--format", choices=OUTPUT_FORMATS, default=None, help="Output format"
    )
    layout_parser.add_argument(
        "--no-cluster",
        dest="cluster",
        action="store_false",
        default=None,
        help="Do not merge clusterable siblings",
    )
    layout_parser.add_argument(
        "--padding", type=float, default=None, help="Extra clearance between orbit neighbors"
    )
    layout_parser.add_argument(
        "--gap", type=float, default=None, help="Horizontal gap between unconnected components"
    )
    layout_parser.add_argument(
        "--check", action="store_true", help="Verify the layout has no overlaps"
    )
    layout_parser.add_argument("-v", "--verbose", action="store_true", default=None)
    layout_parser.add_argument("-q", "--quiet", action="store_true", default=None)

    # Config subcommand
    config_parser = subparsers.add_parser("config", help="Show or initialize configuration")
    action_group = config_parser.add_mutually_exclusive_group()
    action_group.add_argument(
        "--show", action="store_true", help="Show effective configuration with sources"
    )
    action_group.add_argument(
        "--init", action="store_true", help="Create template config file in current directory"
    )
    action_group.add_argument("--paths", action="store_true", help="Show config file paths")
    config_parser.add_argument(
        "--user",
        action="store_true",
        help="Use user config (~/.config/orbit-graph/config.toml) for --init",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "layout":
        from orbit_graph.cli.layout_cmd import run

        return run(args)

    if args.command == "config":
        from orbit_graph.cli.config_cmd import run

        return run(args)

    return 1
