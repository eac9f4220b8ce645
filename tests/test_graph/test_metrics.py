"""Tests for clusters, weights, entries, depth/distance and encodings."""

import math

import numpy as np
import pytest

from relgraph.graph.analytics import scale_values
from relgraph.graph.relationship import RelationGraph


class TestClusters:
    """Test weakly connected clustering."""

    def test_two_clusters(self, two_clusters: RelationGraph) -> None:
        """Disconnected groups become separate clusters in first-seen order."""
        assert two_clusters.clusters == [["a", "b", "c"], ["d", "e"]]

    def test_direction_is_ignored(self) -> None:
        """Nodes joined only by an incoming edge share a cluster."""
        graph = RelationGraph().to("b", "c").to("a", "b").to("x", "y")
        assert graph.clusters == [["b", "c", "a"], ["x", "y"]]

    def test_every_node_in_one_cluster(self, language_graph: RelationGraph) -> None:
        """Clusters partition the node list."""
        graph = language_graph.to("island", "atoll")
        flat = [node for cluster in graph.clusters for node in cluster]
        assert sorted(flat) == sorted(graph.nodes)
        assert len(flat) == len(set(flat))

    def test_empty(self) -> None:
        """An empty graph has no clusters."""
        assert RelationGraph().clusters == []


class TestWeight:
    """Test in-degree weights."""

    def test_distinct_referrers(self, referrers: RelationGraph) -> None:
        """weight counts distinct sources linking to the node."""
        assert referrers.weight("d") == 3
        assert referrers.weight("a") == 1
        assert referrers.weight("b") == 0

    def test_mixed_links(self) -> None:
        """Bidirectional links count once per referrer."""
        graph = RelationGraph().to("user-a", "user-c").both("user-b", "user-c")
        assert graph.weight("user-c") == 2
        assert graph.weight("user-a") == 0
        assert graph.weight("user-b") == 1

    def test_unknown_node(self, referrers: RelationGraph) -> None:
        """Unknown nodes weigh 0."""
        assert referrers.weight("zzz") == 0

    def test_log(self, referrers: RelationGraph) -> None:
        """log applies ln(weight + 1)."""
        assert referrers.weight("d", log=True) == pytest.approx(math.log(4))

    def test_weights(self, referrers: RelationGraph) -> None:
        """weights() maps every node in node order."""
        weights = referrers.weights()
        assert list(weights) == referrers.nodes
        assert dict(weights) == {"a": 1, "d": 3, "b": 0, "c": 0}

    def test_weights_normalized(self, referrers: RelationGraph) -> None:
        """normalize divides by the largest weight."""
        weights = dict(referrers.weights(normalize=True))
        assert weights["d"] == pytest.approx(1.0)
        assert weights["a"] == pytest.approx(1 / 3)
        assert weights["b"] == 0

    def test_weights_to_scale(self, referrers: RelationGraph) -> None:
        """to_scale divides by the total so the values sum to 1."""
        weights = dict(referrers.weights(normalize=True, to_scale=True))
        assert sum(weights.values()) == pytest.approx(1.0)
        assert weights["d"] == pytest.approx(0.75)


class TestEntry:
    """Test reachability entries."""

    def test_entry(self) -> None:
        """entry counts reachable children."""
        graph = RelationGraph().to("a", "b", "c", "d")
        assert graph.entry("a") == 3
        assert graph.entry("b") == 0

    def test_entries_with_cycle(self) -> None:
        """Nodes on a cycle reach themselves."""
        graph = RelationGraph().to("a", "b").to("a", "c").to("a", "d").to("b", "a")
        assert dict(graph.entries()) == {"a": 4, "b": 4, "c": 0, "d": 0}
        assert dict(graph.entries(normalize=True)) == {"a": 1, "b": 1, "c": 0, "d": 0}

    def test_entry_log(self) -> None:
        """log applies ln(entry + 1)."""
        graph = RelationGraph().to("a", "b", "c", "d")
        assert graph.entry("a", log=True) == pytest.approx(math.log(4))


class TestDepthAndDistance:
    """Test shortest hop counts."""

    def test_depth(self) -> None:
        """depth follows edge direction."""
        graph = RelationGraph().to("a", "b")
        assert graph.depth("a", "b") == 1
        assert graph.depth("b", "a") == math.inf

    def test_depth_same_node(self) -> None:
        """A node is 0 hops from itself."""
        assert RelationGraph().to("a", "b").depth("a", "a") == 0

    def test_depth_picks_shortest_branch(self) -> None:
        """The shortest of several paths wins."""
        graph = RelationGraph().to("a", "x", "t").to("x", "y").to("y", "t")
        assert graph.depth("a", "t") == 1

    def test_depth_in_cycle(self, cycle: RelationGraph) -> None:
        """Cycles do not loop forever."""
        assert cycle.depth("a", "c") == 2
        assert cycle.depth("a", "zzz") == math.inf

    def test_depth_log(self, chain: RelationGraph) -> None:
        """log applies ln(depth + 1); infinity stays infinite."""
        assert chain.depth("a", "c", log=True) == pytest.approx(math.log(3))
        assert chain.depth("d", "a", log=True) == math.inf

    def test_distance(self) -> None:
        """distance takes the shorter direction."""
        graph = RelationGraph().to("a", "b").to("b", "c")
        assert graph.distance("b", "a") == 1
        assert graph.distance("a", "c") == 2
        assert graph.distance("c", "a") == 2

    def test_distance_unreachable(self, two_clusters: RelationGraph) -> None:
        """Nodes in different clusters are infinitely far apart."""
        assert two_clusters.distance("a", "e") == math.inf


class TestEncodings:
    """Test one_hot, zero_vector, label and adjacency_matrix."""

    @pytest.fixture
    def graph(self) -> RelationGraph:
        return RelationGraph().to("a", "b").to("b", "c")

    def test_one_hot(self, graph: RelationGraph) -> None:
        """Each node gets its unit basis vector."""
        assert dict(graph.one_hot) == {
            "a": [1, 0, 0],
            "b": [0, 1, 0],
            "c": [0, 0, 1],
        }

    def test_zero_vector(self, graph: RelationGraph) -> None:
        """zero_vector matches the vector size."""
        assert graph.zero_vector == [0, 0, 0]

    def test_label(self, graph: RelationGraph) -> None:
        """Labels are 1-based in node order."""
        assert dict(graph.label) == {"a": 1, "b": 2, "c": 3}

    def test_adjacency_matrix(self, graph: RelationGraph) -> None:
        """Rows are sources, columns targets, in node order."""
        expected = np.array([[0, 1, 0], [0, 0, 1], [0, 0, 0]])
        np.testing.assert_array_equal(graph.adjacency_matrix(), expected)

    def test_empty_graph(self) -> None:
        """Empty graphs give empty encodings."""
        graph = RelationGraph()
        assert dict(graph.one_hot) == {}
        assert graph.zero_vector == []
        assert graph.adjacency_matrix().shape == (0, 0)


class TestScaleValues:
    """Test the shared scaling helper."""

    def test_passthrough(self) -> None:
        """No options returns the values unchanged."""
        assert scale_values([1, 2, 3]) == [1, 2, 3]

    def test_all_zero_is_not_divided(self) -> None:
        """A zero divisor leaves the values as they are."""
        assert scale_values([0, 0], normalize=True) == [0, 0]
        assert scale_values([], normalize=True, to_scale=True) == []

    def test_log_then_normalize(self) -> None:
        """log is applied before normalization."""
        values = scale_values([0, math.e - 1], log=True, normalize=True)
        assert values == pytest.approx([0.0, 1.0])
