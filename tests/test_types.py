"""Tests for the graph types and input validation."""

import pytest

from spring_embedder import (
    Edge,
    Graph,
    GraphView,
    InvalidCanvasSizeError,
    InvalidEdgeError,
    InvalidIterationsError,
    ValidationError,
    star_of_stars,
    validate_canvas_size,
    validate_edge_endpoints,
    validate_iterations,
)


class TestGraph:
    """Tests for the Graph pseudograph."""

    def test_vertices_keep_insertion_order(self):
        """Vertices are listed in insertion order."""
        graph = Graph()
        for v in ["c", "a", "b"]:
            graph.add_vertex(v)
        assert graph.vertices == ["c", "a", "b"]

    def test_add_vertex_twice(self):
        """Adding an existing vertex is a no-op."""
        graph = Graph()
        assert graph.add_vertex(1) is True
        assert graph.add_vertex(1) is False
        assert graph.vertex_count == 1

    def test_self_loops_and_parallel_edges(self):
        """Self-loops and parallel edges are kept."""
        graph = Graph()
        graph.add_vertex("a")
        graph.add_vertex("b")
        graph.add_edge("a", "a")
        graph.add_edge("a", "b")
        graph.add_edge("a", "b")
        assert graph.edge_count == 3

    def test_edges_compare_by_identity(self):
        """Two edges with the same data are different keys."""
        e1 = Edge("a", "b", 1.0)
        e2 = Edge("a", "b", 1.0)
        assert e1 != e2
        assert len({e1: 1, e2: 2}) == 2

    def test_edge_accessors(self):
        """GraphView accessors return endpoints and weight."""
        graph = Graph()
        graph.add_vertex("a")
        graph.add_vertex("b")
        edge = graph.add_edge("a", "b", 2.5)
        assert graph.edge_source(edge) == "a"
        assert graph.edge_target(edge) == "b"
        assert graph.edge_weight(edge) == 2.5

    def test_add_edge_unknown_vertex_raises(self):
        """Edges must connect existing vertices."""
        graph = Graph()
        graph.add_vertex("a")
        with pytest.raises(InvalidEdgeError, match="target"):
            graph.add_edge("a", "missing")

    def test_from_edges_tuples(self):
        """Tuples with and without weights are accepted."""
        graph = Graph.from_edges([("a", "b"), ("b", "c", 4.0)])
        assert graph.vertices == ["a", "b", "c"]
        assert [e.weight for e in graph.edges] == [1.0, 4.0]

    def test_from_edges_dicts(self):
        """Link-like dicts are accepted."""
        graph = Graph.from_edges(
            [{"source": 0, "target": 1, "weight": 2.0}, {"source": 1, "target": 2}],
            vertices=[5],
        )
        assert graph.vertices == [5, 0, 1, 2]
        assert [e.weight for e in graph.edges] == [2.0, 1.0]

    def test_from_edges_bad_record(self):
        """Records with the wrong arity are rejected."""
        with pytest.raises(InvalidEdgeError):
            Graph.from_edges([("a",)])

    def test_is_graph_view(self):
        """Graph satisfies the GraphView protocol."""
        assert isinstance(Graph(), GraphView)

    def test_unweighted_flag(self):
        """The weighted flag is exposed."""
        assert Graph(weighted=False).is_weighted is False
        assert Graph().is_weighted is True


class TestDemoGraph:
    """Tests for the demo graph."""

    def test_star_of_stars_shape(self):
        """Hub, sub-hubs and leaves are all present."""
        graph = star_of_stars(3, 4)
        assert graph.vertex_count == 1 + 3 * (1 + 4)
        assert graph.edge_count == 3 + 3 * 4

    def test_star_of_stars_weights(self):
        """Hub edges weigh 10 and leaf edges 1."""
        graph = star_of_stars(2, 2)
        weights = sorted(e.weight for e in graph.edges)
        assert weights == [1.0, 1.0, 1.0, 1.0, 10.0, 10.0]


class TestValidation:
    """Tests for validation helpers."""

    def test_valid_size(self):
        """Valid size returns floats."""
        assert validate_canvas_size([640, 480]) == (640.0, 480.0)

    @pytest.mark.parametrize("size", [[0, 10], [10, 0], [-1, 10]])
    def test_invalid_size(self, size):
        """Non-positive dimensions raise."""
        with pytest.raises(InvalidCanvasSizeError, match="must be positive"):
            validate_canvas_size(size)

    def test_short_size(self):
        """Size needs two elements."""
        with pytest.raises(InvalidCanvasSizeError, match="must have 2 elements"):
            validate_canvas_size([10])

    def test_iterations_zero_is_valid(self):
        """Zero iterations are legal."""
        assert validate_iterations(0) == 0

    def test_negative_iterations(self):
        """Negative iteration counts raise."""
        with pytest.raises(InvalidIterationsError, match=">= 0"):
            validate_iterations(-1)

    def test_non_integer_iterations(self):
        """Float iteration counts raise."""
        with pytest.raises(InvalidIterationsError, match="integer"):
            validate_iterations(2.5)

    def test_validation_errors_are_value_errors(self):
        """Validation errors derive from ValueError."""
        assert issubclass(InvalidIterationsError, ValidationError)
        assert issubclass(ValidationError, ValueError)

    def test_edge_endpoints_valid(self):
        """A consistent graph has no issues."""
        assert validate_edge_endpoints(star_of_stars(2, 2)) == []

    def test_edge_endpoints_invalid(self):
        """Foreign graph views with dangling edges are reported."""

        class DanglingGraph:
            vertices = ["a"]
            edges = [("a", "b")]
            is_weighted = False

            def edge_source(self, edge):
                return edge[0]

            def edge_target(self, edge):
                return edge[1]

            def edge_weight(self, edge):
                return 1.0

        issues = validate_edge_endpoints(DanglingGraph(), strict=False)
        assert len(issues) == 1
        with pytest.raises(InvalidEdgeError, match="target 'b'"):
            validate_edge_endpoints(DanglingGraph())
