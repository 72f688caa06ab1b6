"""CLI command that lays out a graph definition file.

Usage:
    orbit-graph layout graph.yaml
    orbit-graph layout graph.yaml --no-cluster --check
"""

import logging
import sys

from rich.console import Console
from rich.table import Table

from orbit_graph.collision import LayoutCheck, check_layout
from orbit_graph.config import Config, LayoutConfig
from orbit_graph.exceptions import OrbitGraphError
from orbit_graph.loader import load_graph
from orbit_graph.placement import Layout, distribute


def run(args) -> int:
    """Lay out a graph file and print the placements."""
    try:
        config = Config.load()
    except OrbitGraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    verbose = config.defaults.verbose if args.verbose is None else args.verbose
    quiet = config.defaults.quiet if args.quiet is None else args.quiet
    output_format = args.format or config.defaults.format

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        layout_config = LayoutConfig(
            cluster=config.layout.cluster if args.cluster is None else args.cluster,
            padding=config.layout.padding if args.padding is None else args.padding,
            component_gap=config.layout.component_gap if args.gap is None else args.gap,
            reserve_parent_slot=config.layout.reserve_parent_slot,
            tolerance=config.layout.tolerance,
        )
        layout = distribute(load_graph(args.graph), layout_config)
    except OrbitGraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    console = Console(quiet=quiet)
    if output_format == "summary":
        output_summary(console, layout)
    else:
        output_table(console, layout)

    if args.check:
        result = check_layout(layout, layout_config.tolerance)
        output_check(console, result)
        return 0 if result.is_valid else 1

    return 0


def _label(node_id) -> str:
    return ", ".join(str(member) for member in node_id)


def output_table(console: Console, layout: Layout) -> None:
    """Print one row per placed node."""
    table = Table(title=f"Layout ({len(layout)} nodes)")
    table.add_column("Node")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Orbit", justify="right")
    table.add_column("Radius", justify="right")
    table.add_column("Parent", style="dim")

    for node_id, placement in layout.placements.items():
        table.add_row(
            _label(node_id),
            f"{placement.x:.3f}",
            f"{placement.y:.3f}",
            f"{placement.orbit:.3f}",
            f"{placement.radius:.3f}",
            _label(placement.parent) if placement.parent is not None else "-",
        )

    console.print(table)


def output_summary(console: Console, layout: Layout) -> None:
    """Print layout statistics."""
    min_x, min_y, max_x, max_y = layout.bounds()
    clusters = [node_id for node_id in layout.placements if node_id.is_cluster]

    table = Table(title="Summary", show_header=False)
    table.add_column("Metric", style="dim")
    table.add_column("Value")
    table.add_row("Nodes", str(len(layout)))
    table.add_row("Components", str(len(layout.roots)))
    table.add_row("Clusters", str(len(clusters)))
    table.add_row("Relations", str(len(layout.edges())))
    table.add_row("Width", f"{max_x - min_x:.3f}")
    table.add_row("Height", f"{max_y - min_y:.3f}")
    table.add_row("Roots", "; ".join(_label(root) for root in layout.roots))
    console.print(table)


def output_check(console: Console, result: LayoutCheck) -> None:
    """Print overlap check findings."""
    if result.is_valid:
        console.print(f"[green]No overlaps among {result.total_nodes} nodes[/green]")
        return

    for overlap in result.overlaps:
        console.print(f"[red]OVERLAP[/red]: {overlap.message}")
    for node_id in result.out_of_bounds:
        console.print(f"[yellow]OUT OF BOUNDS[/yellow]: {node_id!r}")
