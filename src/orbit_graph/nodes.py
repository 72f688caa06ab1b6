"""
Node model for orbital graph layout.

Provides the identifiers, capability protocol and concrete node types the
layout engine works on:

- ``NodeId``: order-independent identity; a cluster's id is the flat set of
  the leaf ids it contains.
- ``Node``: the capability protocol. Only ``radius`` is required; weight,
  cluster policy, clusterability, merging and the position sink are optional
  and fall back to the defaults below when a node does not provide them.
- ``GraphNode`` / ``ClusterNode``: ready-made leaf and merged node types.
- ``Registration``: a node paired with its id and declared neighbor ids.

Usage::

    from orbit_graph.nodes import GraphNode, register

    registrations = [
        register(GraphNode(radius=2), "A", "B", "C"),
        register(GraphNode(radius=2), "B"),
        register(GraphNode(radius=2), "C"),
    ]
"""

from __future__ import annotations

import math
from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .exceptions import InvalidConfigurationError
from .geometry import Vector2D

__all__ = [
    "Clusterability",
    "NodeId",
    "ClusterPolicy",
    "DEFAULT_POLICY",
    "Node",
    "GraphNode",
    "ClusterNode",
    "Registration",
    "register",
    "node_radius",
    "node_weight",
    "node_policy",
    "clusterability",
    "merge_nodes",
    "place_node",
    "validate_node",
]


class Clusterability(Enum):
    """How a node allows being merged with another node."""

    DENY = "deny"  # Never merge with the other node
    SIBLINGS = "siblings"  # Merge when both are children of the same anchor


def _member_key(member: Hashable) -> tuple[str, str]:
    return (type(member).__name__, repr(member))


class NodeId:
    """
    Identifier of a node or of a cluster of nodes.

    Holds a flat, non-empty set of leaf ids. Clustering two ids unions their
    leaf sets, so cluster identity does not depend on merge order and merging
    an already merged id again is idempotent.
    """

    __slots__ = ("_members", "_sort_key")

    def __init__(self, members: Iterable[Hashable]):
        flat: set[Hashable] = set()
        for member in members:
            if isinstance(member, NodeId):
                flat.update(member._members)
            else:
                flat.add(member)
        if not flat:
            raise InvalidConfigurationError("A node id needs at least one member")
        self._members = frozenset(flat)
        self._sort_key = tuple(sorted(_member_key(m) for m in self._members))

    @classmethod
    def of(cls, value: Hashable) -> NodeId:
        """Wrap a caller id; existing ``NodeId`` values are returned unchanged."""
        if isinstance(value, NodeId):
            return value
        return cls((value,))

    def cluster_with(self, other: NodeId) -> NodeId:
        """Id of the cluster containing the leaves of both ids."""
        return NodeId((self, other))

    @property
    def members(self) -> frozenset[Hashable]:
        """The leaf ids contained in this id."""
        return self._members

    @property
    def value(self) -> Hashable:
        """The raw caller id for a leaf, or the frozenset of leaves for a cluster."""
        if len(self._members) == 1:
            return next(iter(self._members))
        return self._members

    @property
    def sort_key(self) -> tuple[tuple[str, str], ...]:
        """Canonical ordering key, independent of registration order."""
        return self._sort_key

    @property
    def is_cluster(self) -> bool:
        return len(self._members) > 1

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(sorted(self._members, key=_member_key))

    def __contains__(self, item: object) -> bool:
        if isinstance(item, NodeId):
            return item._members <= self._members
        return item in self._members

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, NodeId):
            return NotImplemented
        return self._members == other._members

    def __hash__(self) -> int:
        return hash(self._members)

    def __repr__(self) -> str:
        if len(self._members) == 1:
            return f"NodeId({self.value!r})"
        inner = ", ".join(repr(m) for m in self)
        return f"NodeId({{{inner}}})"


@dataclass(frozen=True)
class ClusterPolicy:
    """
    Cluster size limits of a node.

    Sizes count leaf nodes, so a node in a cluster of three has size 3.
    ``min_size`` is a soft preference: a node that cannot reach it stays on
    its own. ``max_size`` is a hard limit.
    """

    min_size: int = 0
    max_size: float = math.inf

    def __post_init__(self):
        if self.min_size < 0:
            raise InvalidConfigurationError(
                "Minimum cluster size must not be negative",
                context={"min_size": self.min_size},
            )
        if self.max_size < 1:
            raise InvalidConfigurationError(
                "Maximum cluster size must be at least 1",
                context={"max_size": self.max_size},
            )
        if self.min_size > self.max_size:
            raise InvalidConfigurationError(
                "Minimum cluster size exceeds maximum cluster size",
                context={"min_size": self.min_size, "max_size": self.max_size},
                suggestions=["Lower min_size or raise max_size"],
            )

    def allows(self, size: int) -> bool:
        """Whether a cluster of *size* leaves stays within the maximum."""
        return size <= self.max_size

    def satisfied_by(self, size: int) -> bool:
        """Whether a cluster of *size* leaves meets both limits."""
        return self.min_size <= size <= self.max_size

    def combine(self, other: ClusterPolicy) -> ClusterPolicy:
        """Tightest policy honoring both: largest minimum, smallest maximum."""
        max_size = min(self.max_size, other.max_size)
        min_size = min(max(self.min_size, other.min_size), max_size)
        return ClusterPolicy(min_size=int(min_size), max_size=max_size)


DEFAULT_POLICY = ClusterPolicy()


@runtime_checkable
class Node(Protocol):
    """
    Capability protocol of a layout node.

    Only ``radius`` is required. Optional members, used when present:

    - ``own_weight() -> float``: weight contribution, default 1.0
    - ``policy: ClusterPolicy``: cluster size limits, default unlimited
    - ``clusterable_with(other) -> Clusterability``: default ``DENY``
    - ``cluster_with(other) -> Node``: merge reducer
    - ``place(x, y, orbit)``: position sink, called once per layout run
    """

    @property
    def radius(self) -> float: ...


def node_radius(node: Any) -> float:
    """Exclusion radius of a node."""
    return float(node.radius)


def node_weight(node: Any) -> float:
    """Own weight of a node; 1.0 unless the node provides ``own_weight()``."""
    own_weight = getattr(node, "own_weight", None)
    if own_weight is None:
        return 1.0
    return float(own_weight())


def node_policy(node: Any) -> ClusterPolicy:
    """Cluster policy of a node; unlimited unless the node provides ``policy``."""
    policy = getattr(node, "policy", None)
    return policy if policy is not None else DEFAULT_POLICY


def _can_cluster(node: Any) -> bool:
    return callable(getattr(node, "clusterable_with", None)) and callable(
        getattr(node, "cluster_with", None)
    )


def clusterability(node: Any, other: Any) -> Clusterability:
    """
    Symmetric clusterability of two nodes.

    Both nodes must report ``SIBLINGS`` for each other; any asymmetric answer,
    or a node without the clustering capability, counts as ``DENY``.
    """
    if not (_can_cluster(node) and _can_cluster(other)):
        return Clusterability.DENY
    if node.clusterable_with(other) is not Clusterability.SIBLINGS:
        return Clusterability.DENY
    if other.clusterable_with(node) is not Clusterability.SIBLINGS:
        return Clusterability.DENY
    return Clusterability.SIBLINGS


def merge_nodes(node: Any, other: Any) -> Any:
    """Merge two clusterable nodes with the first node's reducer."""
    return node.cluster_with(other)


def place_node(node: Any, x: float, y: float, orbit: float) -> None:
    """Hand a computed position to a node's sink, if it has one."""
    place = getattr(node, "place", None)
    if callable(place):
        place(x, y, orbit)


def validate_node(node: Any, identifier: Hashable = None) -> None:
    """
    Check a node's radius and cluster policy.

    Raises:
        InvalidConfigurationError: If the radius is missing, non-finite or not
            positive, or the policy is not a ``ClusterPolicy``.
    """
    radius = getattr(node, "radius", None)
    try:
        value = float(radius)
    except (TypeError, ValueError):
        raise InvalidConfigurationError(
            "Node has no numeric radius",
            context={"id": identifier, "radius": radius},
            suggestions=["Give every node a 'radius' attribute or property"],
        ) from None
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidConfigurationError(
            "Node radius must be positive and finite",
            context={"id": identifier, "radius": radius},
        )
    if not isinstance(node_policy(node), ClusterPolicy):
        raise InvalidConfigurationError(
            "Node policy must be a ClusterPolicy",
            context={"id": identifier, "policy": node_policy(node)},
        )


def _tags_of(node: Any) -> frozenset:
    return frozenset(getattr(node, "tags", None) or ())


@dataclass(eq=False)
class GraphNode:
    """
    A leaf node.

    Two graph nodes are clusterable as siblings when their tag sets share at
    least one tag. Merging produces a ``ClusterNode``.

    Attributes:
        radius: Exclusion radius around the node's center
        weight: Own weight contribution used for anchoring and ordering
        tags: Properties deciding clusterability
        policy: Cluster size limits
        label: Free-form display label
        x, y, orbit: Position, filled in by a layout run
    """

    radius: float = 1.0
    weight: float = 1.0
    tags: frozenset = field(default_factory=frozenset)
    policy: ClusterPolicy = field(default_factory=ClusterPolicy)
    label: str = ""
    x: float | None = None
    y: float | None = None
    orbit: float | None = None

    def __post_init__(self):
        self.tags = frozenset(self.tags)
        validate_node(self, self.label or None)
        if not math.isfinite(self.weight) or self.weight <= 0.0:
            raise InvalidConfigurationError(
                "Node weight must be positive and finite",
                context={"label": self.label, "weight": self.weight},
            )

    def own_weight(self) -> float:
        return self.weight

    def clusterable_with(self, other: Any) -> Clusterability:
        if self.tags & _tags_of(other):
            return Clusterability.SIBLINGS
        return Clusterability.DENY

    def cluster_with(self, other: Any) -> ClusterNode:
        return ClusterNode.merge(self, other)

    def place(self, x: float, y: float, orbit: float) -> None:
        self.x, self.y, self.orbit = x, y, orbit

    @property
    def position(self) -> Vector2D | None:
        if self.x is None or self.y is None:
            return None
        return Vector2D(self.x, self.y)


@dataclass(eq=False)
class ClusterNode:
    """
    A node standing in for several merged nodes.

    Its radius preserves the members' combined area, its weight is the sum of
    the member weights, its tags are the tags all members share and its
    policy is the tightest combination of the member policies.
    """

    members: tuple[Any, ...]
    x: float | None = None
    y: float | None = None
    orbit: float | None = None

    @classmethod
    def merge(cls, *nodes: Any) -> ClusterNode:
        """Merge nodes into one cluster, flattening nested clusters."""
        members: list[Any] = []
        for node in nodes:
            if isinstance(node, ClusterNode):
                members.extend(node.members)
            else:
                members.append(node)
        return cls(members=tuple(members))

    @property
    def radius(self) -> float:
        return math.sqrt(sum(node_radius(m) ** 2 for m in self.members))

    @property
    def tags(self) -> frozenset:
        if not self.members:
            return frozenset()
        shared = _tags_of(self.members[0])
        for member in self.members[1:]:
            shared &= _tags_of(member)
        return shared

    @property
    def policy(self) -> ClusterPolicy:
        policy = DEFAULT_POLICY
        for member in self.members:
            policy = policy.combine(node_policy(member))
        return policy

    def own_weight(self) -> float:
        return sum(node_weight(m) for m in self.members)

    def clusterable_with(self, other: Any) -> Clusterability:
        if self.tags & _tags_of(other):
            return Clusterability.SIBLINGS
        return Clusterability.DENY

    def cluster_with(self, other: Any) -> ClusterNode:
        return ClusterNode.merge(self, other)

    def place(self, x: float, y: float, orbit: float) -> None:
        self.x, self.y, self.orbit = x, y, orbit

    def __len__(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class Registration:
    """
    A node registered under an id, with the ids of its declared neighbors.

    Neighbor declarations may be one-sided; the layout treats every relation
    as bi-directional. Constructing a registration validates the node.
    """

    id: Hashable
    node: Any
    neighbors: frozenset = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "neighbors", frozenset(self.neighbors))
        validate_node(self.node, self.id)

    @property
    def node_id(self) -> NodeId:
        return NodeId.of(self.id)

    def neighbor_ids(self) -> list[NodeId]:
        """Declared neighbors as ``NodeId`` values, in canonical order."""
        return sorted((NodeId.of(n) for n in self.neighbors), key=lambda i: i.sort_key)


def register(node: Any, identifier: Hashable, *neighbors: Hashable) -> Registration:
    """Register *node* under *identifier* with the given neighbor ids."""
    return Registration(id=identifier, node=node, neighbors=frozenset(neighbors))
