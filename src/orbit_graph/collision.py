"""Overlap and bounds checks for finished layouts.

Provides data structures and utilities for verifying a ``Layout`` before it
is handed to a renderer: no two placed nodes closer than the sum of their
radii, and no node extending into negative coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .nodes import NodeId
from .placement import Layout

__all__ = ["Overlap", "LayoutCheck", "find_overlaps", "check_layout"]

DEFAULT_TOLERANCE = 1e-3


@dataclass
class Overlap:
    """Two placed nodes closer than the sum of their radii.

    Attributes:
        first: Id of the first node
        second: Id of the second node
        distance: Distance between the node centers
        required: Sum of both radii
        connected: True if the two nodes are neighbors
    """

    first: NodeId
    second: NodeId
    distance: float
    required: float
    connected: bool = False

    @property
    def depth(self) -> float:
        """How far the two circles reach into each other."""
        return self.required - self.distance

    @property
    def message(self) -> str:
        return (
            f"{self.first!r} and {self.second!r} are {self.distance:.3f} apart, "
            f"need {self.required:.3f}"
        )


@dataclass
class LayoutCheck:
    """Result of checking a layout.

    Attributes:
        total_nodes: Number of placed nodes checked
        overlaps: Overlapping node pairs
        out_of_bounds: Nodes extending below zero on either axis
    """

    total_nodes: int = 0
    overlaps: list[Overlap] = field(default_factory=list)
    out_of_bounds: list[NodeId] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.overlaps and not self.out_of_bounds


def find_overlaps(
    layout: Layout,
    tolerance: float = DEFAULT_TOLERANCE,
    connected_only: bool = False,
) -> list[Overlap]:
    """Find every pair of placed nodes closer than the sum of their radii.

    Complexity is O(N^2) pairwise, evaluated with numpy.

    Args:
        layout: Layout to check
        tolerance: Shortfall below which a pair still counts as clear
        connected_only: Only report pairs that are neighbors

    Returns:
        Overlapping pairs, in placement order
    """
    ids = list(layout.placements)
    if len(ids) < 2:
        return []

    rows = np.array(
        [(p.x, p.y, p.radius) for p in layout.placements.values()], dtype=np.float64
    )
    xs, ys, rs = rows[:, 0], rows[:, 1], rows[:, 2]

    distance = np.hypot(xs[:, None] - xs[None, :], ys[:, None] - ys[None, :])
    required = rs[:, None] + rs[None, :]
    mask = np.triu(distance + tolerance < required, k=1)

    overlaps = []
    for i, j in zip(*np.nonzero(mask)):
        first, second = ids[i], ids[j]
        connected = second in layout.neighbors.get(first, ())
        if connected_only and not connected:
            continue
        overlaps.append(
            Overlap(
                first=first,
                second=second,
                distance=float(distance[i, j]),
                required=float(required[i, j]),
                connected=connected,
            )
        )
    return overlaps


def check_layout(layout: Layout, tolerance: float = DEFAULT_TOLERANCE) -> LayoutCheck:
    """Check a layout for overlapping nodes and negative coordinates.

    Args:
        layout: Layout to check
        tolerance: Rounding tolerance for both checks

    Returns:
        LayoutCheck with all findings
    """
    out_of_bounds = [
        node_id
        for node_id, p in layout.placements.items()
        if p.x - p.radius < -tolerance or p.y - p.radius < -tolerance
    ]
    return LayoutCheck(
        total_nodes=len(layout.placements),
        overlaps=find_overlaps(layout, tolerance),
        out_of_bounds=out_of_bounds,
    )
