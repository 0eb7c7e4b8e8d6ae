"""Tests for edge weight normalization."""

import warnings

import pytest

from spring_embedder import (
    MAX_NORMALIZED_WEIGHT,
    MIN_NORMALIZED_WEIGHT,
    EdgeWeightNormalizer,
    FruchtermanReingoldLayout,
    Graph,
    normalize_edge_weights,
)


def create_weighted_path(weights, weighted=True):
    """Path graph 0-1-2-... with the given edge weights."""
    return Graph.from_edges(
        [(i, i + 1, w) for i, w in enumerate(weights)],
        weighted=weighted,
    )


class TestNormalizeEdgeWeights:
    """Tests for normalize_edge_weights."""

    def test_unweighted_graph_maps_to_one(self):
        """Every edge of an unweighted graph maps to 1.0."""
        graph = create_weighted_path([3.0, 100.0, 7.0], weighted=False)
        result = normalize_edge_weights(graph)
        assert len(result) == 3
        assert all(w == 1.0 for w in result.values())

    def test_equal_weights_map_to_one(self):
        """All-equal nonzero weights map to 1.0 instead of dividing by zero."""
        graph = create_weighted_path([4.0, 4.0, 4.0])
        result = normalize_edge_weights(graph)
        assert list(result.values()) == [1.0, 1.0, 1.0]

    def test_default_weights_emit_no_warnings(self):
        """Graphs built with default weights normalize and lay out silently."""
        graph = Graph.from_edges([("a", "b"), ("b", "c")])
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert list(normalize_edge_weights(graph).values()) == [1.0, 1.0]
            positions = FruchtermanReingoldLayout(size=(100, 100), random_seed=1).layout(
                graph, 1
            )
        assert set(positions) == {"a", "b", "c"}

    def test_single_edge_maps_to_one(self):
        """A single weighted edge maps to 1.0."""
        graph = create_weighted_path([42.0])
        assert list(normalize_edge_weights(graph).values()) == [1.0]

    def test_min_and_max(self):
        """Weights {1, 5, 10}: minimum -> 1.0, maximum -> 10.0."""
        graph = create_weighted_path([1.0, 5.0, 10.0])
        edges = graph.edges
        result = normalize_edge_weights(graph)
        assert result[edges[0]] == pytest.approx(MIN_NORMALIZED_WEIGHT)
        assert result[edges[2]] == pytest.approx(MAX_NORMALIZED_WEIGHT)
        assert result[edges[1]] == pytest.approx(1.0 + 9.0 * 4.0 / 9.0)

    def test_results_in_range(self):
        """Normalized weights stay in [1, 10]."""
        graph = create_weighted_path([-3.0, 0.0, 0.5, 17.0, 2.0])
        for w in normalize_edge_weights(graph).values():
            assert MIN_NORMALIZED_WEIGHT <= w <= MAX_NORMALIZED_WEIGHT

    def test_parallel_edges_are_distinct_keys(self):
        """Parallel edges with equal endpoints get their own entries."""
        graph = Graph()
        graph.add_vertex("a")
        graph.add_vertex("b")
        low = graph.add_edge("a", "b", 1.0)
        high = graph.add_edge("a", "b", 3.0)
        result = normalize_edge_weights(graph)
        assert len(result) == 2
        assert result[low] == pytest.approx(1.0)
        assert result[high] == pytest.approx(10.0)

    def test_empty_graph(self):
        """A graph without edges normalizes to an empty map."""
        graph = Graph()
        graph.add_vertex("solo")
        assert normalize_edge_weights(graph) == {}

    def test_pure(self):
        """Repeated calls give equal results and leave the graph unchanged."""
        graph = create_weighted_path([1.0, 2.0, 3.0])
        first = normalize_edge_weights(graph)
        second = normalize_edge_weights(graph)
        assert first == second
        assert [e.weight for e in graph.edges] == [1.0, 2.0, 3.0]

    def test_normalizer_class(self):
        """EdgeWeightNormalizer delegates to normalize_edge_weights."""
        graph = create_weighted_path([2.0, 8.0])
        assert EdgeWeightNormalizer().normalize(graph) == normalize_edge_weights(graph)
