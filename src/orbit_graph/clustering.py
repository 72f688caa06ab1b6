"""
Sibling clustering for orbital layout.

Before an anchor's neighbors are placed on its orbit, neighbors that allow
it are merged into cluster nodes. Merging is greedy: every round performs
the one merge whose group can grow the largest, so a node compatible with
two candidate groups joins the larger one rather than the first one found.

Rules:

- Only neighbors of the anchor that are not excluded take part; the anchor
  and everything already placed are excluded.
- Two groups may merge when both report ``SIBLINGS`` for each other, they
  share no leaf id, and the merged size stays within every member's maximum
  cluster size.
- A member whose minimum cluster size the final group does not reach leaves
  the group and stays on its own; the remaining members stay merged. The
  minimum is a preference, never an error.
- Equal candidates are decided by registration order.

Usage::

    from orbit_graph.clustering import SiblingClusterer

    clusterer = SiblingClusterer(topology)
    clusters = clusterer.cluster(anchor_id, excluded={anchor_id})
    clusterer.apply(clusters)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .nodes import (
    ClusterPolicy,
    Clusterability,
    NodeId,
    clusterability,
    merge_nodes,
    node_policy,
)
from .topology import Topology

__all__ = ["Cluster", "SiblingClusterer", "cluster_siblings"]

logger = logging.getLogger(__name__)


@dataclass
class Cluster:
    """
    One entry of a clustering result.

    Attributes:
        id: Union of the leaf ids of all parts
        node: Node placed for the parts; the part's own node when single
        parts: Topology ids this entry stands for
    """

    id: NodeId
    node: Any
    parts: list[NodeId] = field(default_factory=list)

    @property
    def merged(self) -> bool:
        return len(self.parts) > 1


@dataclass
class _Group:
    """A candidate cluster during the greedy search."""

    id: NodeId
    node: Any
    index: int
    policy: ClusterPolicy
    parts: list[NodeId] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.id)


@dataclass
class _Merge:
    """A possible merge of two groups and how large it could grow."""

    first: _Group
    second: _Group
    node: Any
    policy: ClusterPolicy
    potential: int


class SiblingClusterer:
    """
    Greedy clustering of an anchor's neighbors.

    Operates on a ``Topology``; ``cluster()`` only computes groups while
    ``apply()`` substitutes them into the topology.
    """

    def __init__(self, topology: Topology):
        """
        Initialize clusterer with the topology to cluster.

        Args:
            topology: Validated topology; modified by ``apply()``
        """
        self.topology = topology

    def candidates(self, anchor: NodeId, excluded: Iterable[NodeId] = ()) -> list[NodeId]:
        """Neighbors of *anchor* taking part in clustering, in registration order."""
        excluded_set = set(excluded)
        excluded_set.add(anchor)
        neighbors = [n for n in self.topology.neighbors[anchor] if n not in excluded_set]
        return sorted(neighbors, key=lambda n: self.topology.order[n])

    def cluster(self, anchor: NodeId, excluded: Iterable[NodeId] = ()) -> dict[NodeId, Cluster]:
        """
        Group the clusterable neighbors of *anchor*.

        Args:
            anchor: Anchor whose neighbors are clustered
            excluded: Ids that never take part (ancestors, placed nodes)

        Returns:
            Mapping of resulting id to ``Cluster``, covering every candidate
            neighbor exactly once; single nodes map to an unmerged entry
        """
        groups = [self._single(node_id) for node_id in self.candidates(anchor, excluded)]

        while True:
            merge = self._best_merge(groups)
            if merge is None:
                break
            groups = self._perform(groups, merge)

        result: dict[NodeId, Cluster] = {}
        for group in groups:
            for cluster in self._settle(group):
                result[cluster.id] = cluster
        return result

    def apply(self, clusters: dict[NodeId, Cluster]) -> list[NodeId]:
        """
        Substitute computed clusters into the topology.

        Args:
            clusters: Result of ``cluster()``

        Returns:
            The resulting ids, in the order given
        """
        for cluster in clusters.values():
            if not cluster.merged:
                continue
            self.topology.substitute(cluster.parts, cluster.id, cluster.node)
            logger.debug("Clustered %d nodes into %r", len(cluster.parts), cluster.id)
        return list(clusters)

    def _single(self, node_id: NodeId) -> _Group:
        node = self.topology.nodes[node_id]
        return _Group(
            id=node_id,
            node=node,
            index=self.topology.order[node_id],
            policy=node_policy(node),
            parts=[node_id],
        )

    def _best_merge(self, groups: list[_Group]) -> _Merge | None:
        """The merge with the largest potential; earliest pair on ties."""
        best: _Merge | None = None
        for i, first in enumerate(groups):
            for second in groups[i + 1 :]:
                if first.id.members & second.id.members:
                    continue
                size = first.size + second.size
                policy = first.policy.combine(second.policy)
                if not policy.allows(size):
                    continue
                if clusterability(first.node, second.node) is not Clusterability.SIBLINGS:
                    continue

                node = merge_nodes(first.node, second.node)
                potential = size
                for other in groups:
                    if other is first or other is second:
                        continue
                    if not policy.combine(other.policy).allows(size + other.size):
                        continue
                    if clusterability(node, other.node) is Clusterability.SIBLINGS:
                        potential += other.size
                potential = int(min(potential, policy.max_size))

                if best is None or potential > best.potential:
                    best = _Merge(
                        first=first, second=second, node=node, policy=policy, potential=potential
                    )
        return best

    def _perform(self, groups: list[_Group], merge: _Merge) -> list[_Group]:
        first, second = merge.first, merge.second
        merged = _Group(
            id=first.id.cluster_with(second.id),
            node=merge.node,
            index=min(first.index, second.index),
            policy=merge.policy,
            parts=first.parts + second.parts,
        )
        remaining = [g for g in groups if g is not first and g is not second]
        remaining.append(merged)
        remaining.sort(key=lambda g: g.index)
        return remaining

    def _settle(self, group: _Group) -> list[Cluster]:
        """Release parts whose minimum cluster size the group does not reach."""
        nodes = self.topology.nodes
        kept = list(group.parts)
        while len(kept) > 1:
            size = sum(len(part) for part in kept)
            short = [part for part in kept if not node_policy(nodes[part]).satisfied_by(size)]
            if not short:
                break
            kept = [part for part in kept if part not in short]

        if kept == group.parts:
            return [Cluster(id=group.id, node=group.node, parts=kept)]
        if len(kept) < 2:
            kept = []

        released = [part for part in group.parts if part not in kept]
        logger.debug("Releasing %r from %r: minimum cluster size not reached", released, group.id)

        clusters = [Cluster(id=part, node=nodes[part], parts=[part]) for part in released]
        if kept:
            node = nodes[kept[0]]
            for part in kept[1:]:
                node = merge_nodes(node, nodes[part])
            clusters.append(Cluster(id=NodeId(kept), node=node, parts=kept))
        clusters.sort(key=lambda c: min(self.topology.order[part] for part in c.parts))
        return clusters


def cluster_siblings(
    topology: Topology,
    anchor: NodeId,
    excluded: Iterable[NodeId] = (),
) -> dict[NodeId, Cluster]:
    """
    Cluster the neighbors of *anchor* without modifying the topology.

    Convenience wrapper around ``SiblingClusterer.cluster()``.
    """
    return SiblingClusterer(topology).cluster(anchor, excluded)
