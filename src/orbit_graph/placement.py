"""
Orbital placement of graph nodes.

Distributes a graph's nodes on a planetary system around each connected
component's weighted center:

1. The node with the highest depth-damped weight becomes the component's
   root and sits at the local origin.
2. Walking outward breadth-first, every anchor first clusters its unplaced
   neighbors, then orders the resulting children by descending subtree
   weight and places them on one shared orbit around itself.
3. Orbits are sized bottom-up: the circle packed for a child is the envelope
   of that child's whole subtree, so sibling subtrees never overlap and no
   subtree reaches into its anchor.
4. Components are laid out side by side in discovery order, and finally
   every coordinate is shifted so that no node extends below zero on
   either axis.

A node reachable through several paths is placed once, by the first anchor
that reaches it; the surplus relations remain available through
``Layout.edges()`` for drawing.

Usage::

    from orbit_graph import GraphNode, distribute, register

    layout = distribute([
        register(GraphNode(radius=2), "A", "B", "C"),
        register(GraphNode(radius=2), "B"),
        register(GraphNode(radius=2), "C"),
    ])
    print(layout["A"].x, layout["A"].y, layout["A"].orbit)
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .clustering import SiblingClusterer
from .config import LayoutConfig
from .geometry import OrbitPacking, Vector2D, pack_orbit
from .nodes import NodeId, Registration, node_radius, place_node
from .topology import Topology, heaviest_node, own_weight, validate

__all__ = ["Placement", "Layout", "OrbitalPlacer", "distribute"]

logger = logging.getLogger(__name__)

# Weights closer than this are considered equal when ordering siblings
_WEIGHT_DIGITS = 9


@dataclass
class Placement:
    """
    Computed position of one node.

    Attributes:
        x, y: Center of the node
        orbit: Radius of the ring the node sits on around its parent (0 for roots)
        radius: Exclusion radius of the node
        parent: Anchor the node was placed around (None for roots)
        depth: Distance from the component root in tree edges
    """

    x: float
    y: float
    orbit: float
    radius: float
    parent: NodeId | None = None
    depth: int = 0

    @property
    def position(self) -> Vector2D:
        return Vector2D(self.x, self.y)


@dataclass
class _ComponentTree:
    """Spanning tree of one component, built while clustering."""

    root: NodeId
    order: list[NodeId] = field(default_factory=list)
    parents: dict[NodeId, NodeId | None] = field(default_factory=dict)
    children: dict[NodeId, list[NodeId]] = field(default_factory=dict)


@dataclass
class Layout:
    """
    Result of a layout run.

    Attributes:
        placements: Position per final node id, parents before children
        topology: Final topology, with clusters substituted for their members
        roots: Root anchor of every component, in discovery order
    """

    placements: dict[NodeId, Placement] = field(default_factory=dict)
    topology: Topology = field(default_factory=Topology)
    roots: list[NodeId] = field(default_factory=list)

    @property
    def nodes(self) -> dict[NodeId, Any]:
        return self.topology.nodes

    @property
    def neighbors(self) -> dict[NodeId, set[NodeId]]:
        return self.topology.neighbors

    def __len__(self) -> int:
        return len(self.placements)

    def __iter__(self) -> Iterator[NodeId]:
        return iter(self.placements)

    def __contains__(self, key: object) -> bool:
        return self._resolve(key) in self.placements

    def __getitem__(self, key: Hashable) -> Placement:
        return self.placements[self._resolve(key)]

    def _resolve(self, key: Any) -> NodeId:
        return NodeId.of(key)

    def cluster_of(self, leaf: Hashable) -> NodeId | None:
        """The final id that contains the given original id, if any."""
        leaf_id = NodeId.of(leaf)
        for node_id in self.placements:
            if leaf_id in node_id:
                return node_id
        return None

    def edges(self) -> list[tuple[NodeId, NodeId]]:
        """Every relation between final nodes, each reported once."""
        edges = []
        for node_id in self.placements:
            for neighbor in self.topology.neighbors_of(node_id):
                if node_id.sort_key < neighbor.sort_key:
                    edges.append((node_id, neighbor))
        return edges

    def tree_edges(self) -> list[tuple[NodeId, NodeId]]:
        """The (parent, child) relations used for placement."""
        return [
            (placement.parent, node_id)
            for node_id, placement in self.placements.items()
            if placement.parent is not None
        ]

    def bounds(self) -> tuple[float, float, float, float]:
        """Bounding box ``(min_x, min_y, max_x, max_y)`` including node radii."""
        if not self.placements:
            return (0.0, 0.0, 0.0, 0.0)
        xs, ys, rs = _coordinates(self.placements.values())
        return (
            float((xs - rs).min()),
            float((ys - rs).min()),
            float((xs + rs).max()),
            float((ys + rs).max()),
        )

    def registrations(self) -> list[Registration]:
        """Final nodes registered under their final ids with their final neighbors."""
        return [
            Registration(
                id=node_id,
                node=self.topology.nodes[node_id],
                neighbors=frozenset(self.topology.neighbors[node_id]),
            )
            for node_id in self.placements
        ]


def _coordinates(placements: Iterable[Placement]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    rows = np.array([(p.x, p.y, p.radius) for p in placements], dtype=np.float64)
    return rows[:, 0], rows[:, 1], rows[:, 2]


class OrbitalPlacer:
    """
    Computes orbital layouts.

    A placer holds only configuration; every ``distribute()`` call works on
    its own topology and scratch state.
    """

    def __init__(self, config: LayoutConfig | None = None):
        """
        Initialize placer.

        Args:
            config: Layout options (defaults to ``LayoutConfig()``)
        """
        self.config = config or LayoutConfig()

    def distribute(self, registrations: Iterable[Registration]) -> Layout:
        """
        Lay out all registered nodes.

        Args:
            registrations: Every node of the graph with its declared neighbors

        Returns:
            Layout with a placement for every final (possibly clustered) node

        Raises:
            DanglingReferenceError: If a declared neighbor is not registered
            InvalidConfigurationError: If registrations or options are invalid
        """
        self.config.validate()
        topology = validate(registrations)
        layout = Layout(topology=topology)

        cursor = 0.0
        for component in topology.components():
            root = heaviest_node(topology, component)
            placements = self.place(topology, root)
            cursor = self._arrange(placements, cursor)
            layout.placements.update(placements)
            layout.roots.append(root)

        self._normalize(layout.placements)

        for node_id, placement in layout.placements.items():
            place_node(topology.nodes[node_id], placement.x, placement.y, placement.orbit)

        logger.debug(
            "Placed %d nodes in %d component(s)", len(layout.placements), len(layout.roots)
        )
        return layout

    def place(self, topology: Topology, root: NodeId) -> dict[NodeId, Placement]:
        """
        Place one connected component around *root* at the local origin.

        Clusters are substituted into *topology* as they are formed.

        Args:
            topology: Topology containing the component
            root: Root anchor of the component

        Returns:
            Placement per node of the component, in breadth-first order
        """
        tree = self._build_tree(topology, root)
        weights = self._subtree_weights(topology, tree)
        for kids in tree.children.values():
            kids.sort(key=lambda n: (-round(weights[n], _WEIGHT_DIGITS), n.sort_key))

        packings = self._pack(topology, tree)
        logger.debug("Component rooted at %r has %d node(s)", root, len(tree.order))
        return self._position(topology, tree, packings)

    def _build_tree(self, topology: Topology, root: NodeId) -> _ComponentTree:
        """Breadth-first spanning tree, clustering each anchor's children first."""
        tree = _ComponentTree(root=root, order=[root], parents={root: None})
        discovered = {root}
        clusterer = SiblingClusterer(topology)
        queue = deque([root])

        while queue:
            anchor = queue.popleft()
            if self.config.cluster:
                kids = clusterer.apply(clusterer.cluster(anchor, excluded=discovered))
            else:
                kids = clusterer.candidates(anchor, excluded=discovered)

            kids.sort(key=lambda n: n.sort_key)
            tree.children[anchor] = kids
            for kid in kids:
                discovered.add(kid)
                tree.parents[kid] = anchor
                tree.order.append(kid)
                queue.append(kid)

        return tree

    def _subtree_weights(self, topology: Topology, tree: _ComponentTree) -> dict[NodeId, float]:
        """Own weight plus the weights of all descendants, per node."""
        weights: dict[NodeId, float] = {}
        for node_id in reversed(tree.order):
            weights[node_id] = own_weight(topology, node_id) + sum(
                weights[kid] for kid in tree.children[node_id]
            )
        return weights

    def _pack(self, topology: Topology, tree: _ComponentTree) -> dict[NodeId, OrbitPacking]:
        """Size every anchor's orbit from its children's subtree envelopes."""
        envelopes: dict[NodeId, float] = {}
        packings: dict[NodeId, OrbitPacking] = {}

        for node_id in reversed(tree.order):
            radius = node_radius(topology.nodes[node_id])
            kids = tree.children[node_id]
            if not kids:
                envelopes[node_id] = radius
                continue

            radii = [envelopes[kid] for kid in kids]
            if self.config.reserve_parent_slot and tree.parents[node_id] is not None:
                radii.append(radius)

            packing = pack_orbit(radii, anchor_radius=radius, padding=self.config.padding)
            packings[node_id] = packing
            envelopes[node_id] = max(radius, packing.orbit + max(radii))

        return packings

    def _position(
        self,
        topology: Topology,
        tree: _ComponentTree,
        packings: dict[NodeId, OrbitPacking],
    ) -> dict[NodeId, Placement]:
        """Assign coordinates top-down, rotating each ring away from its parent."""
        root = tree.root
        placements = {
            root: Placement(
                x=0.0, y=0.0, orbit=0.0, radius=node_radius(topology.nodes[root])
            )
        }

        for anchor in tree.order:
            kids = tree.children[anchor]
            if not kids:
                continue
            packing = packings[anchor]
            center = placements[anchor].position

            rotation = 0.0
            parent = tree.parents[anchor]
            if parent is not None and len(packing) > len(kids):
                towards_parent = (placements[parent].position - center).angle()
                rotation = towards_parent - packing.angles[-1]

            logger.debug("Orbit of %r: radius %.3f for %d node(s)", anchor, packing.orbit, len(kids))
            for kid, angle in zip(kids, packing.angles):
                position = center + Vector2D.from_polar(packing.orbit, angle + rotation)
                placements[kid] = Placement(
                    x=position.x,
                    y=position.y,
                    orbit=packing.orbit,
                    radius=node_radius(topology.nodes[kid]),
                    parent=anchor,
                    depth=placements[anchor].depth + 1,
                )

        return placements

    def _arrange(self, placements: dict[NodeId, Placement], cursor: float) -> float:
        """Move a component right of *cursor*; returns the next free x."""
        xs, ys, rs = _coordinates(placements.values())
        min_x = float((xs - rs).min())
        max_x = float((xs + rs).max())
        min_y = float((ys - rs).min())

        dx = cursor - min_x
        dy = -min_y
        for placement in placements.values():
            placement.x += dx
            placement.y += dy
        return cursor + (max_x - min_x) + self.config.component_gap

    def _normalize(self, placements: dict[NodeId, Placement]) -> None:
        """Shift all nodes so the smallest ``x - r`` and ``y - r`` are zero."""
        if not placements:
            return
        xs, ys, rs = _coordinates(placements.values())
        dx = -float((xs - rs).min())
        dy = -float((ys - rs).min())
        for placement in placements.values():
            placement.x += dx
            placement.y += dy
        logger.debug("Normalized layout by (%.3f, %.3f)", dx, dy)


def distribute(
    registrations: Iterable[Registration],
    config: LayoutConfig | None = None,
) -> Layout:
    """
    Lay out a graph with the orbital placement algorithm.

    Convenience wrapper around ``OrbitalPlacer(config).distribute()``.
    """
    return OrbitalPlacer(config).distribute(registrations)
