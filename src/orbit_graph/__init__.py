"""
orbit-graph: Deterministic orbital layout for node graphs.

Assigns 2D coordinates to the nodes of a (possibly disconnected) graph so
that nodes never overlap, clusterable siblings are merged first, and heavier
subtrees radiate outward from their anchor on nested orbits.

Modules:
    geometry: Orbit packing math and 2D vectors
    nodes: Node ids, capability protocol, leaf and cluster nodes
    topology: Validation, connected components and weights
    clustering: Greedy sibling clustering
    placement: Orbital placement engine and layout result
    collision: Overlap checks for finished layouts
    loader: Graph definition files (YAML/JSON)

Quick Start::

    from orbit_graph import GraphNode, distribute, register

    layout = distribute([
        register(GraphNode(radius=2), "A", "B", "D"),
        register(GraphNode(radius=2), "B", "C"),
        register(GraphNode(radius=2), "C"),
        register(GraphNode(radius=2), "D"),
    ])
    for node_id, placement in layout.placements.items():
        print(node_id, placement.x, placement.y, placement.orbit)
"""

__version__ = "0.1.0"

from orbit_graph.clustering import Cluster, SiblingClusterer, cluster_siblings
from orbit_graph.collision import LayoutCheck, Overlap, check_layout, find_overlaps
from orbit_graph.config import LayoutConfig
from orbit_graph.exceptions import (
    DanglingReferenceError,
    InvalidConfigurationError,
    OrbitGraphError,
)
from orbit_graph.geometry import OrbitPacking, Vector2D, pack_orbit
from orbit_graph.nodes import (
    ClusterNode,
    ClusterPolicy,
    Clusterability,
    GraphNode,
    Node,
    NodeId,
    Registration,
    register,
)
from orbit_graph.placement import Layout, OrbitalPlacer, Placement, distribute
from orbit_graph.topology import Topology, validate

__all__ = [
    # Version
    "__version__",
    # Nodes
    "Clusterability",
    "ClusterNode",
    "ClusterPolicy",
    "GraphNode",
    "Node",
    "NodeId",
    "Registration",
    "register",
    # Engine
    "distribute",
    "Layout",
    "LayoutConfig",
    "OrbitalPlacer",
    "Placement",
    "Cluster",
    "SiblingClusterer",
    "cluster_siblings",
    "Topology",
    "validate",
    # Geometry
    "OrbitPacking",
    "Vector2D",
    "pack_orbit",
    # Checks
    "LayoutCheck",
    "Overlap",
    "check_layout",
    "find_overlaps",
    # Errors
    "OrbitGraphError",
    "DanglingReferenceError",
    "InvalidConfigurationError",
]
