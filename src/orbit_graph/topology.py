"""
Topology analysis for orbital layout.

Turns caller registrations into a validated, symmetric adjacency map,
splits it into connected components and scores nodes by weight:

- **validate**: registers every node, inserts both directions of every
  declared relation and fails with ``DanglingReferenceError`` listing every
  neighbor id that has no registration.
- **components**: one breadth-first traversal per unvisited node, in
  registration order.
- **centrality**: depth-damped cumulative weight over a breadth-first
  spanning tree, used to pick each component's root anchor.

Usage::

    from orbit_graph.topology import validate, heaviest_node

    topology = validate(registrations)
    for component in topology.components():
        root = heaviest_node(topology, component)
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .exceptions import DanglingReferenceError, InvalidConfigurationError
from .nodes import NodeId, Registration, node_weight

__all__ = [
    "Topology",
    "validate",
    "spanning_tree",
    "own_weight",
    "centrality",
    "heaviest_node",
]

logger = logging.getLogger(__name__)

# Scores closer than this are considered tied
_SCORE_DIGITS = 9


@dataclass
class Topology:
    """
    Validated node registry with symmetric adjacency.

    Attributes:
        nodes: Node per id, in registration order
        neighbors: Symmetric adjacency; every id in ``nodes`` has an entry
        order: Registration index per id; a cluster inherits its earliest member's
    """

    nodes: dict[NodeId, Any] = field(default_factory=dict)
    neighbors: dict[NodeId, set[NodeId]] = field(default_factory=dict)
    order: dict[NodeId, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def add_node(self, node_id: NodeId, node: Any) -> None:
        """Register a node without neighbors."""
        self.order.setdefault(node_id, len(self.order))
        self.nodes[node_id] = node
        self.neighbors.setdefault(node_id, set())

    def connect(self, first: NodeId, second: NodeId) -> None:
        """Insert a bi-directional relation between two registered nodes."""
        if first == second:
            return
        self.neighbors[first].add(second)
        self.neighbors[second].add(first)

    def neighbors_of(self, node_id: NodeId) -> list[NodeId]:
        """Neighbors of a node in canonical order."""
        return sorted(self.neighbors[node_id], key=lambda n: n.sort_key)

    def edge_count(self) -> int:
        return sum(len(n) for n in self.neighbors.values()) // 2

    def components(self) -> list[list[NodeId]]:
        """
        Split the graph into connected components.

        Components are returned in discovery order (registration order of
        their first node); each lists its ids in breadth-first order.
        """
        visited: set[NodeId] = set()
        components: list[list[NodeId]] = []
        for start in self.nodes:
            if start in visited:
                continue
            order, _ = spanning_tree(self, start, visited)
            components.append(order)
        return components

    def substitute(self, members: Iterable[NodeId], cluster_id: NodeId, node: Any) -> None:
        """
        Replace member nodes by a single cluster node.

        The cluster's neighbors are the union of the members' neighbors minus
        the members themselves; every other node pointing at a member points at
        the cluster instead.
        """
        member_set = set(members)
        cluster_neighbors: set[NodeId] = set()
        for member in member_set:
            cluster_neighbors.update(self.neighbors.pop(member, set()))
            del self.nodes[member]
        cluster_neighbors -= member_set

        for other in cluster_neighbors:
            adjacent = self.neighbors[other]
            adjacent -= member_set
            adjacent.add(cluster_id)

        self.order[cluster_id] = min(self.order[m] for m in member_set)
        self.nodes[cluster_id] = node
        self.neighbors[cluster_id] = cluster_neighbors


def validate(registrations: Iterable[Registration]) -> Topology:
    """
    Build a validated topology from registrations.

    Args:
        registrations: Registrations of every node in this layout run

    Returns:
        Topology with symmetric adjacency

    Raises:
        InvalidConfigurationError: If two registrations share an id
        DanglingReferenceError: If any declared neighbor id is not registered
    """
    registrations = list(registrations)
    topology = Topology()

    for registration in registrations:
        node_id = registration.node_id
        if node_id in topology:
            raise InvalidConfigurationError(
                "Node id registered more than once",
                context={"id": registration.id},
                suggestions=["Register each node exactly once per layout run"],
            )
        topology.add_node(node_id, registration.node)

    missing: dict[Hashable, list[Hashable]] = {}
    for registration in registrations:
        node_id = registration.node_id
        for neighbor_id in registration.neighbor_ids():
            if neighbor_id not in topology:
                missing.setdefault(neighbor_id.value, []).append(registration.id)
                continue
            topology.connect(node_id, neighbor_id)

    if missing:
        raise DanglingReferenceError(missing.keys(), referenced_by=missing)

    logger.debug(
        "Validated %d nodes with %d relations", len(topology), topology.edge_count()
    )
    return topology


def spanning_tree(
    topology: Topology,
    root: NodeId,
    visited: set[NodeId] | None = None,
) -> tuple[list[NodeId], dict[NodeId, NodeId | None]]:
    """
    Breadth-first spanning tree from *root*.

    Args:
        topology: Topology to traverse
        root: Start node
        visited: Ids to treat as already reached; updated in place

    Returns:
        Tuple of (ids in breadth-first order, parent per id)
    """
    if visited is None:
        visited = set()
    visited.add(root)
    order = [root]
    parents: dict[NodeId, NodeId | None] = {root: None}
    queue = deque([root])
    while queue:
        current = queue.popleft()
        for neighbor in topology.neighbors_of(current):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            parents[neighbor] = current
            order.append(neighbor)
            queue.append(neighbor)
    return order, parents


def own_weight(topology: Topology, node_id: NodeId) -> float:
    """Own weight of a registered node."""
    return node_weight(topology.nodes[node_id])


def centrality(topology: Topology, start: NodeId) -> float:
    """
    Depth-damped cumulative weight of the tree rooted at *start*.

    Each node scores its own weight plus the scores of its children divided
    by its depth (the start has depth 1), so nodes near the weighted middle
    of a component score highest.
    """
    order, parents = spanning_tree(topology, start)
    depths: dict[NodeId, int] = {start: 1}
    for node_id in order[1:]:
        depths[node_id] = depths[parents[node_id]] + 1

    child_sums: dict[NodeId, float] = {node_id: 0.0 for node_id in order}
    score = 0.0
    for node_id in reversed(order):
        score = own_weight(topology, node_id) + child_sums[node_id] / depths[node_id]
        parent = parents[node_id]
        if parent is not None:
            child_sums[parent] += score
    return score


def heaviest_node(topology: Topology, candidates: Sequence[NodeId]) -> NodeId | None:
    """
    The candidate with the highest centrality.

    Ties are broken by canonical id order, so the choice does not depend on
    registration order. Returns None when there are no candidates.
    """
    if not candidates:
        return None
    scores = {node_id: round(centrality(topology, node_id), _SCORE_DIGITS) for node_id in candidates}
    return min(candidates, key=lambda node_id: (-scores[node_id], node_id.sort_key))
