"""
Edge weight normalization.

Raw edge weights are rescaled into [1, 10] so they can be used directly as a
multiplier on the attractive force: the heaviest edge pulls ten times harder
than the lightest one.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

MIN_NORMALIZED_WEIGHT = 1.0
MAX_NORMALIZED_WEIGHT = 10.0


def normalize_edge_weights(graph: Any) -> dict[Any, float]:
    """
    Rescale the edge weights of a graph into [1, 10].

    - Unweighted graph: every edge maps to 1.0.
    - Otherwise ``w`` maps to ``1 + 9 * (w - min) / (max - min)``.
    - If all weights are equal (including a single edge) every edge maps
      to 1.0.

    Args:
        graph: Object implementing the GraphView protocol

    Returns:
        New dict from edge to normalized weight
    """
    edges = list(graph.edges)

    if not graph.is_weighted:
        return {edge: MIN_NORMALIZED_WEIGHT for edge in edges}

    weights = [float(graph.edge_weight(edge)) for edge in edges]
    if not weights:
        return {}

    min_weight = min(weights)
    max_weight = max(weights)
    spread = max_weight - min_weight
    if spread == 0:
        if len(edges) > 1:
            logger.debug(
                "All %d edges weigh %s; every normalized weight is 1.0",
                len(edges),
                min_weight,
            )
        return {edge: MIN_NORMALIZED_WEIGHT for edge in edges}

    span = MAX_NORMALIZED_WEIGHT - MIN_NORMALIZED_WEIGHT
    return {
        edge: MIN_NORMALIZED_WEIGHT + span * (w - min_weight) / spread
        for edge, w in zip(edges, weights)
    }


class EdgeWeightNormalizer:
    """
    Stateless wrapper around :func:`normalize_edge_weights`.

    Example:
        weights = EdgeWeightNormalizer().normalize(graph)
    """

    def normalize(self, graph: Any) -> dict[Any, float]:
        """Return the normalized weight of every edge in ``graph``."""
        return normalize_edge_weights(graph)


__all__ = [
    "MIN_NORMALIZED_WEIGHT",
    "MAX_NORMALIZED_WEIGHT",
    "normalize_edge_weights",
    "EdgeWeightNormalizer",
]
