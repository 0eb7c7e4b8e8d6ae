"""
Input validation utilities for the spring embedder.

Provides centralized validation functions for the layout area, iteration
counts and graph edges. Raises descriptive exceptions on invalid input.
"""

from __future__ import annotations

from typing import Any, Sequence


class ValidationError(ValueError):
    """Base exception for layout validation errors."""

    pass


class InvalidCanvasSizeError(ValidationError):
    """Raised when layout area dimensions are invalid."""

    pass


class InvalidEdgeError(ValidationError):
    """Raised when an edge references vertices outside the graph."""

    pass


class InvalidIterationsError(ValidationError):
    """Raised when an iteration count is negative or not an integer."""

    pass


def validate_canvas_size(size: Sequence[float]) -> tuple[float, float]:
    """
    Validate layout area dimensions.

    Args:
        size: [width, height] sequence

    Returns:
        Validated (width, height) tuple

    Raises:
        InvalidCanvasSizeError: If dimensions are invalid
    """
    if len(size) < 2:
        raise InvalidCanvasSizeError(
            f"Canvas size must have 2 elements [width, height], got {len(size)}"
        )

    width, height = float(size[0]), float(size[1])

    if not width > 0:
        raise InvalidCanvasSizeError(f"Canvas width must be positive, got {width}")
    if not height > 0:
        raise InvalidCanvasSizeError(f"Canvas height must be positive, got {height}")

    return width, height


def validate_iterations(iterations: Any) -> int:
    """
    Validate iteration count is a non-negative integer.

    Zero is legal: the layout then returns the initial placement.

    Args:
        iterations: Number of iterations

    Returns:
        Validated iteration count

    Raises:
        InvalidIterationsError: If iterations is negative or not integral
    """
    if isinstance(iterations, bool) or not isinstance(iterations, int):
        if hasattr(iterations, "__index__"):
            iterations = iterations.__index__()
        else:
            raise InvalidIterationsError(
                f"iterations must be an integer, got {type(iterations).__name__}"
            )
    if iterations < 0:
        raise InvalidIterationsError(f"iterations must be >= 0, got {iterations}")
    return int(iterations)


def validate_edge_endpoints(graph: Any, strict: bool = True) -> list[tuple[int, str]]:
    """
    Validate that every edge of a graph view connects known vertices.

    Args:
        graph: Object implementing the GraphView protocol
        strict: If True, raises on invalid. If False, returns list of issues.

    Returns:
        List of (edge_index, issue_description) tuples

    Raises:
        InvalidEdgeError: If strict=True and invalid edges found
    """
    vertices = set(graph.vertices)
    issues: list[tuple[int, str]] = []

    for i, edge in enumerate(graph.edges):
        src = graph.edge_source(edge)
        tgt = graph.edge_target(edge)
        if src not in vertices:
            issues.append((i, f"Edge {i}: source {src!r} is not a vertex"))
        if tgt not in vertices:
            issues.append((i, f"Edge {i}: target {tgt!r} is not a vertex"))

    if strict and issues:
        msg = "Invalid edges:\n" + "\n".join(issue[1] for issue in issues)
        raise InvalidEdgeError(msg)

    return issues


__all__ = [
    "ValidationError",
    "InvalidCanvasSizeError",
    "InvalidEdgeError",
    "InvalidIterationsError",
    "validate_canvas_size",
    "validate_iterations",
    "validate_edge_endpoints",
]
