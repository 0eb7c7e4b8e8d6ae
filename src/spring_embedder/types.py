"""
Common types for the spring embedder.

This module provides the fundamental types shared by the layout driver and
the force engines:
- GraphView: Read-only protocol any graph provider can satisfy
- Graph: Directed weighted pseudograph implementing GraphView
- Edge: Edge with identity semantics (parallel edges are distinct)
- EventType: Layout lifecycle events
- Event: Event payload for callbacks
"""

from __future__ import annotations

from enum import IntEnum
from typing import (
    Any,
    Hashable,
    Iterable,
    Optional,
    Protocol,
    Sequence,
    TypedDict,
    Union,
    runtime_checkable,
)

from .validation import InvalidEdgeError
from .vector import Vector2D


class EventType(IntEnum):
    """
    Layout lifecycle events.

    - start: Layout iterations have begun
    - tick: Fired once per iteration, after the renderer saw the positions
    - end: All iterations are done
    """

    start = 0
    tick = 1
    end = 2


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    iteration: int
    temperature: float


class Edge:
    """
    Edge connecting two vertices.

    Edges compare by identity, so two parallel edges with the same endpoints
    and weight are still distinct keys in a weight map.

    Attributes:
        source: Source vertex
        target: Target vertex
        weight: Raw edge weight
    """

    __slots__ = ("source", "target", "weight")

    def __init__(self, source: Hashable, target: Hashable, weight: float = 1.0) -> None:
        self.source = source
        self.target = target
        self.weight = float(weight)

    def __repr__(self) -> str:
        return f"Edge({self.source!r} -> {self.target!r}, weight={self.weight:g})"


@runtime_checkable
class GraphView(Protocol):
    """Read-only view of a graph consumed by the layout."""

    @property
    def vertices(self) -> Sequence[Any]: ...

    @property
    def edges(self) -> Sequence[Any]: ...

    @property
    def is_weighted(self) -> bool: ...

    def edge_source(self, edge: Any) -> Any: ...

    def edge_target(self, edge: Any) -> Any: ...

    def edge_weight(self, edge: Any) -> float: ...


class Graph:
    """
    Directed weighted pseudograph.

    Vertices are arbitrary hashable values kept in insertion order. Self-loops
    and parallel edges are allowed.

    Example:
        graph = Graph()
        graph.add_vertex("a")
        graph.add_vertex("b")
        graph.add_edge("a", "b", weight=3.0)
    """

    def __init__(self, *, weighted: bool = True) -> None:
        self._vertices: dict[Hashable, None] = {}
        self._edges: list[Edge] = []
        self._weighted = bool(weighted)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[EdgeLike],
        *,
        vertices: Optional[Iterable[Hashable]] = None,
        weighted: bool = True,
    ) -> "Graph":
        """
        Build a graph from edge-like records.

        Endpoints that are not in ``vertices`` are added in order of first
        appearance.

        Args:
            edges: ``(u, v)`` or ``(u, v, w)`` tuples, or dicts with
                ``source``/``target`` and optional ``weight``
            vertices: Vertices to add first (isolated vertices go here)
            weighted: Whether edge weights are meaningful

        Returns:
            New Graph
        """
        graph = cls(weighted=weighted)
        if vertices is not None:
            for v in vertices:
                graph.add_vertex(v)

        for record in edges:
            if isinstance(record, dict):
                source = record.get("source")
                target = record.get("target")
                weight = record.get("weight", 1.0)
            else:
                if len(record) not in (2, 3):
                    raise InvalidEdgeError(f"Edge record must have 2 or 3 items, got {record!r}")
                source, target = record[0], record[1]
                weight = record[2] if len(record) == 3 else 1.0
            if source is None or target is None:
                raise InvalidEdgeError(f"Edge endpoints cannot be None: {record!r}")
            graph.add_vertex(source)
            graph.add_vertex(target)
            graph.add_edge(source, target, 1.0 if weight is None else weight)
        return graph

    def add_vertex(self, vertex: Hashable) -> bool:
        """Add a vertex. Returns False if it was already present."""
        if vertex in self._vertices:
            return False
        self._vertices[vertex] = None
        return True

    def add_edge(self, source: Hashable, target: Hashable, weight: float = 1.0) -> Edge:
        """
        Add an edge between two existing vertices.

        Raises:
            InvalidEdgeError: If either endpoint is not a vertex of the graph.
        """
        if source not in self._vertices:
            raise InvalidEdgeError(f"Edge source {source!r} is not a vertex of the graph")
        if target not in self._vertices:
            raise InvalidEdgeError(f"Edge target {target!r} is not a vertex of the graph")
        edge = Edge(source, target, weight)
        self._edges.append(edge)
        return edge

    # -------------------------------------------------------------------------
    # GraphView
    # -------------------------------------------------------------------------

    @property
    def vertices(self) -> list[Hashable]:
        return list(self._vertices)

    @property
    def edges(self) -> list[Edge]:
        return list(self._edges)

    @property
    def is_weighted(self) -> bool:
        return self._weighted

    def edge_source(self, edge: Edge) -> Hashable:
        return edge.source

    def edge_target(self, edge: Edge) -> Hashable:
        return edge.target

    def edge_weight(self, edge: Edge) -> float:
        return edge.weight

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def __contains__(self, vertex: object) -> bool:
        return vertex in self._vertices

    def __repr__(self) -> str:
        kind = "weighted" if self._weighted else "unweighted"
        return f"Graph({self.vertex_count} vertices, {self.edge_count} edges, {kind})"


# Type aliases
EdgeLike = Union[Sequence[Any], dict[str, Any]]
"""Input record for Graph.from_edges: (u, v), (u, v, w) or a dict."""

PositionMap = dict[Any, Vector2D]
"""Complete mapping from vertex to its position."""

SizeType = Union[tuple[float, float], list[float], Sequence[float]]
"""Layout area: (width, height) tuple, list, or sequence."""


__all__ = [
    "EventType",
    "Event",
    "Edge",
    "GraphView",
    "Graph",
    "EdgeLike",
    "PositionMap",
    "SizeType",
]
