"""Tests for greedy sibling clustering."""

import pytest

from orbit_graph.clustering import SiblingClusterer, cluster_siblings
from orbit_graph.nodes import ClusterNode, ClusterPolicy, GraphNode, NodeId, register
from orbit_graph.topology import validate

ANCHOR = NodeId.of("X")


def build(*children):
    """Topology with anchor X connected to every (id, node) child."""
    registrations = [register(GraphNode(), "X", *(name for name, _ in children))]
    registrations += [register(node, name) for name, node in children]
    return validate(registrations)


def groups(clusters):
    return {frozenset(node_id.members) for node_id in clusters}


class TestSiblingClusterer:
    """Tests for SiblingClusterer.cluster()."""

    def test_do_not_cluster(self):
        """Nodes without shared tags stay apart."""
        topology = build(("A", GraphNode(tags={1})), ("B", GraphNode(tags={2})))
        clusters = cluster_siblings(topology, ANCHOR, {ANCHOR})
        assert groups(clusters) == {frozenset({"A"}), frozenset({"B"})}

    def test_do_cluster(self):
        """Nodes with a shared tag are merged."""
        topology = build(("A", GraphNode(tags={1})), ("B", GraphNode(tags={1})))
        clusters = cluster_siblings(topology, ANCHOR, {ANCHOR})

        assert groups(clusters) == {frozenset({"A", "B"})}
        cluster = clusters[NodeId(["A", "B"])]
        assert cluster.merged
        assert cluster.parts == [NodeId.of("A"), NodeId.of("B")]
        assert isinstance(cluster.node, ClusterNode)
        assert len(cluster.node) == 2

    def test_prioritize_cluster_size(self):
        """A node compatible with two groups joins the one that grows largest."""
        topology = build(
            ("A", GraphNode(tags={1, 3})),
            ("B", GraphNode(tags={2, 3})),
            ("C", GraphNode(tags={2, 4})),
            ("D", GraphNode(tags={2, 4})),
            ("E", GraphNode(tags={2, 4})),
        )
        clusters = cluster_siblings(topology, ANCHOR, {ANCHOR})
        assert groups(clusters) == {frozenset({"A"}), frozenset({"B", "C", "D", "E"})}

    def test_every_candidate_accounted_for(self):
        topology = build(*((name, GraphNode(tags={name in "AB"})) for name in "ABCDE"))
        clusters = cluster_siblings(topology, ANCHOR, {ANCHOR})

        leaves = [leaf for node_id in clusters for leaf in node_id.members]
        assert sorted(leaves) == list("ABCDE")

    def test_max_size_respected(self):
        policy = ClusterPolicy(max_size=2)
        topology = build(*((name, GraphNode(tags={"t"}, policy=policy)) for name in "ABCD"))
        clusters = cluster_siblings(topology, ANCHOR, {ANCHOR})

        assert groups(clusters) == {frozenset("AB"), frozenset("CD")}

    def test_min_size_out_of_reach(self):
        """A member whose minimum cannot be reached stays alone; its peers stay merged."""
        topology = build(
            ("A", GraphNode(tags={"t"})),
            ("B", GraphNode(tags={"t"}, policy=ClusterPolicy(min_size=5))),
            ("C", GraphNode(tags={"t"})),
            ("D", GraphNode(tags={"t"})),
        )
        clusters = cluster_siblings(topology, ANCHOR, {ANCHOR})

        assert groups(clusters) == {frozenset("ACD"), frozenset("B")}
        merged = clusters[NodeId(["A", "C", "D"])]
        assert merged.parts == [NodeId.of("A"), NodeId.of("C"), NodeId.of("D")]
        assert isinstance(merged.node, ClusterNode)
        assert len(merged.node) == 3
        assert clusters[NodeId.of("B")].node is topology.nodes[NodeId.of("B")]

    def test_min_size_release_cascades(self):
        """Releasing one member can leave another below its own minimum."""
        topology = build(
            ("A", GraphNode(tags={"t"}, policy=ClusterPolicy(min_size=3))),
            ("B", GraphNode(tags={"t"}, policy=ClusterPolicy(min_size=4))),
            ("C", GraphNode(tags={"t"})),
        )
        clusters = cluster_siblings(topology, ANCHOR, {ANCHOR})
        assert groups(clusters) == {frozenset("A"), frozenset("B"), frozenset("C")}
        assert not any(cluster.merged for cluster in clusters.values())

    def test_min_size_splits_group(self):
        """A pair too small for a member's minimum falls apart into singles."""
        topology = build(
            ("A", GraphNode(tags={"t"}, policy=ClusterPolicy(min_size=3))),
            ("B", GraphNode(tags={"t"})),
        )
        clusters = cluster_siblings(topology, ANCHOR, {ANCHOR})
        assert groups(clusters) == {frozenset({"A"}), frozenset({"B"})}

    def test_min_size_met(self):
        policy = ClusterPolicy(min_size=3)
        topology = build(*((name, GraphNode(tags={"t"}, policy=policy)) for name in "ABC"))
        clusters = cluster_siblings(topology, ANCHOR, {ANCHOR})
        assert groups(clusters) == {frozenset("ABC")}

    def test_excluded_nodes_ignored(self):
        topology = build(("A", GraphNode(tags={1})), ("B", GraphNode(tags={1})), ("C", GraphNode(tags={1})))
        clusters = cluster_siblings(topology, ANCHOR, {ANCHOR, NodeId.of("B")})
        assert groups(clusters) == {frozenset({"A", "C"})}

    def test_anchor_never_clustered(self):
        topology = validate([
            register(GraphNode(tags={1}), "X", "A"),
            register(GraphNode(tags={1}), "A"),
        ])
        clusters = cluster_siblings(topology, ANCHOR)
        assert groups(clusters) == {frozenset({"A"})}

    def test_cluster_does_not_modify_topology(self):
        topology = build(("A", GraphNode(tags={1})), ("B", GraphNode(tags={1})))
        cluster_siblings(topology, ANCHOR, {ANCHOR})
        assert NodeId.of("A") in topology
        assert len(topology) == 3


class TestApply:
    """Tests for SiblingClusterer.apply()."""

    def test_apply_substitutes_clusters(self):
        topology = build(
            ("A", GraphNode(tags={1})),
            ("B", GraphNode(tags={1})),
            ("C", GraphNode(tags={2})),
        )
        clusterer = SiblingClusterer(topology)
        result = clusterer.apply(clusterer.cluster(ANCHOR, {ANCHOR}))

        ab = NodeId(["A", "B"])
        assert result == [ab, NodeId.of("C")]
        assert ab in topology
        assert NodeId.of("A") not in topology
        assert topology.neighbors[ANCHOR] == {ab, NodeId.of("C")}

    def test_apply_replaces_only_merged_parts(self):
        """A leaf registered next to a cluster containing it is left alone."""
        ab = NodeId(["A", "B"])
        topology = build(
            (ab, ClusterNode.merge(GraphNode(tags={"t"}), GraphNode(tags={"t"}))),
            ("C", GraphNode(tags={"t"})),
            ("A", GraphNode(tags={"t"})),
        )
        clusterer = SiblingClusterer(topology)
        clusters = clusterer.cluster(ANCHOR, {ANCHOR})
        clusterer.apply(clusters)

        abc = NodeId(["A", "B", "C"])
        assert clusters[abc].parts == [ab, NodeId.of("C")]
        assert set(topology.nodes) == {ANCHOR, abc, NodeId.of("A")}
        assert topology.neighbors[ANCHOR] == {abc, NodeId.of("A")}

    def test_reclustering_is_idempotent(self):
        """Clustering an already clustered anchor again changes nothing."""
        topology = build(
            ("A", GraphNode(tags={1, 3})),
            ("B", GraphNode(tags={2, 3})),
            ("C", GraphNode(tags={2, 4})),
            ("D", GraphNode(tags={2, 4})),
            ("E", GraphNode(tags={2, 4})),
        )
        clusterer = SiblingClusterer(topology)
        first = clusterer.apply(clusterer.cluster(ANCHOR, {ANCHOR}))
        second = clusterer.apply(clusterer.cluster(ANCHOR, {ANCHOR}))

        assert set(first) == set(second)
        assert len(topology) == 3

    def test_candidates_in_registration_order(self):
        topology = build(("C", GraphNode()), ("A", GraphNode()), ("B", GraphNode()))
        candidates = SiblingClusterer(topology).candidates(ANCHOR)
        assert candidates == [NodeId.of("C"), NodeId.of("A"), NodeId.of("B")]


@pytest.mark.parametrize("count", [1, 2, 5, 9])
def test_uniform_tags_form_one_cluster(count):
    names = [f"n{i}" for i in range(count)]
    topology = build(*((name, GraphNode(tags={"same"})) for name in names))
    clusters = cluster_siblings(topology, ANCHOR, {ANCHOR})
    assert groups(clusters) == {frozenset(names)}
