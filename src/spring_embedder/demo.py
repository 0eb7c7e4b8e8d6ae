"""
Demo graphs.
"""

from __future__ import annotations

from .types import Graph

CENTER = "center"


def star_of_stars(centers: int, nodes_per_center: int) -> Graph:
    """
    Two-level star: a hub linked to ``centers`` sub-hubs, each with leaves.

    Hub edges weigh 10, leaf edges weigh 1, so after normalization the hub
    edges pull ten times harder than the leaf edges.

    Args:
        centers: Number of sub-hubs
        nodes_per_center: Leaves per sub-hub

    Returns:
        Weighted Graph with ``1 + centers * (1 + nodes_per_center)`` vertices
    """
    if centers < 0 or nodes_per_center < 0:
        raise ValueError("centers and nodes_per_center must be >= 0")

    graph = Graph(weighted=True)
    graph.add_vertex(CENTER)
    for c in range(centers):
        center = f"{CENTER}{c}"
        graph.add_vertex(center)
        graph.add_edge(CENTER, center, 10.0)

    for c in range(centers):
        for i in range(nodes_per_center):
            node = f"node_{c}_{i}"
            graph.add_vertex(node)
            graph.add_edge(f"{CENTER}{c}", node, 1.0)

    return graph


__all__ = ["CENTER", "star_of_stars"]
