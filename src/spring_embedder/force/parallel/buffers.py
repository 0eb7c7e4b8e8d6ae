"""
Flat buffer layout for the data-parallel engine.

Vertices are mapped to stable integer indices once per layout call. All
per-vertex state then lives in flat arrays where vertex ``i`` occupies slots
``2*i`` (x) and ``2*i + 1`` (y).

Attraction is computed per edge. To keep every work unit writing only its own
slots, edge ``e`` writes the contribution for its source to vector slot
``2*e`` and for its target to vector slot ``2*e + 1`` of the attraction
buffer. The summation stage gathers those slots back per vertex through a CSR
incidence list (``incidence_ptr``/``incidence_slots``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import numpy as np

from ...types import PositionMap
from ...vector import Vector2D


class VertexIndex:
    """
    Stable vertex <-> index mapping for one layout call.

    Example:
        index = VertexIndex(graph.vertices)
        i = index.index_of("a")
        index.vertex_at(i)  # "a"
    """

    def __init__(self, vertices: Sequence[Any]) -> None:
        self._vertices: list[Any] = list(vertices)
        self._indices: dict[Any, int] = {v: i for i, v in enumerate(self._vertices)}

    def index_of(self, vertex: Any) -> int:
        return self._indices[vertex]

    def vertex_at(self, index: int) -> Any:
        return self._vertices[index]

    @property
    def vertices(self) -> list[Any]:
        return self._vertices

    def __len__(self) -> int:
        return len(self._vertices)


@dataclass
class GraphBuffers:
    """
    Host-side buffers for one layout call.

    Attributes:
        positions: 2V current positions
        repulsive: 2V repulsion accumulator
        attractive: 4E per-edge attraction contributions
        displacements: 2V summed displacement
        edges: 2E (source index, target index) pairs
        weights: E normalized edge weights
        incidence_ptr: V+1 CSR row pointers into incidence_slots
        incidence_slots: 2E attraction vector slots, grouped by vertex
    """

    positions: np.ndarray
    repulsive: np.ndarray
    attractive: np.ndarray
    displacements: np.ndarray
    edges: np.ndarray
    weights: np.ndarray
    incidence_ptr: np.ndarray
    incidence_slots: np.ndarray

    @property
    def vertex_count(self) -> int:
        return len(self.positions) // 2

    @property
    def edge_count(self) -> int:
        return len(self.weights)


# Allocator signature: (name, length, dtype) -> zeroed array of that length
Allocator = Callable[[str, int, Any], np.ndarray]


def _default_allocator(name: str, length: int, dtype: Any) -> np.ndarray:
    return np.zeros(length, dtype=dtype)


def build_incidence(edges: np.ndarray, vertex_count: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Build the CSR vertex -> attraction-slot incidence list.

    Args:
        edges: Flat 2E array of (source, target) vertex indices

    Returns:
        (incidence_ptr, incidence_slots). Slots of vertex ``i`` are
        ``incidence_slots[incidence_ptr[i]:incidence_ptr[i + 1]]``.
    """
    # Slot s belongs to vertex edges[s]: slot 2e is the source end of edge e,
    # slot 2e + 1 the target end.
    owners = np.asarray(edges, dtype=np.int64)
    counts = np.bincount(owners, minlength=vertex_count)
    incidence_ptr = np.zeros(vertex_count + 1, dtype=np.int64)
    np.cumsum(counts, out=incidence_ptr[1:])
    incidence_slots = np.argsort(owners, kind="stable").astype(np.int64)
    return incidence_ptr, incidence_slots


def marshal_graph(
    graph: Any,
    positions: PositionMap,
    normalized_weights: dict[Any, float],
    dtype: Any = np.float32,
    allocator: Optional[Allocator] = None,
) -> tuple[VertexIndex, GraphBuffers]:
    """
    Flatten a graph and its positions into index-addressed buffers.

    Args:
        graph: Object implementing the GraphView protocol
        positions: Complete initial position map
        normalized_weights: Edge to normalized weight map
        dtype: Floating point type of the numeric buffers
        allocator: Provides zeroed arrays (the device buffer pool)

    Returns:
        (VertexIndex, GraphBuffers)
    """
    alloc = allocator or _default_allocator
    index = VertexIndex(graph.vertices)
    edges_list = list(graph.edges)
    n = len(index)
    m = len(edges_list)

    buffers = GraphBuffers(
        positions=alloc("positions", 2 * n, dtype),
        repulsive=alloc("repulsive", 2 * n, dtype),
        attractive=alloc("attractive", 4 * m, dtype),
        displacements=alloc("displacements", 2 * n, dtype),
        edges=alloc("edges", 2 * m, np.int64),
        weights=alloc("weights", m, dtype),
        incidence_ptr=np.zeros(n + 1, dtype=np.int64),
        incidence_slots=np.zeros(2 * m, dtype=np.int64),
    )

    for i, v in enumerate(index.vertices):
        pos = positions[v]
        buffers.positions[2 * i] = pos.x
        buffers.positions[2 * i + 1] = pos.y

    for e, edge in enumerate(edges_list):
        buffers.edges[2 * e] = index.index_of(graph.edge_source(edge))
        buffers.edges[2 * e + 1] = index.index_of(graph.edge_target(edge))
        buffers.weights[e] = normalized_weights[edge]

    ptr, slots = build_incidence(buffers.edges, n)
    buffers.incidence_ptr = ptr
    buffers.incidence_slots = slots
    return index, buffers


def read_positions(index: VertexIndex, positions: np.ndarray) -> PositionMap:
    """
    Copy a flat position buffer back into a new vertex-keyed map.

    Values are widened to Python floats.
    """
    flat = positions.tolist()
    return {
        v: Vector2D(flat[2 * i], flat[2 * i + 1]) for i, v in enumerate(index.vertices)
    }


__all__ = [
    "VertexIndex",
    "GraphBuffers",
    "Allocator",
    "build_incidence",
    "marshal_graph",
    "read_positions",
]
