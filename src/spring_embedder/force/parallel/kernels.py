"""
Numpy kernels for the data-parallel engine.

Each kernel computes the output slots of one contiguous index range
``[lo, hi)`` of its global work size and reads everything else. Units of the
same kernel never write the same slot, so a device may run the ranges in any
order or concurrently. Buffers are flat, vertex ``i`` at ``2*i``/``2*i + 1``.

Global work sizes:
- zero: length of the buffer
- repulsion: vertex count
- attraction: edge count
- summation: vertex count
- update: vertex count
"""

from __future__ import annotations

import numpy as np


def zero(lo: int, hi: int, buffer: np.ndarray) -> None:
    """Clear ``buffer[lo:hi]``."""
    buffer[lo:hi] = 0


def repulsion(
    lo: int,
    hi: int,
    positions: np.ndarray,
    repulsive: np.ndarray,
    k: float,
    c: float,
) -> None:
    """
    Total repulsion on vertices ``lo..hi-1`` from every other vertex.

    ``force = normalize(delta) * c * k^2 / d`` which is ``delta * c * k^2 / d^2``.
    Pairs at distance zero (including a vertex with itself) contribute nothing.
    """
    pos = positions.reshape(-1, 2)
    block = pos[lo:hi]
    dx = block[:, 0:1] - pos[:, 0]
    dy = block[:, 1:2] - pos[:, 1]
    dist_sq = dx * dx + dy * dy

    nonzero = dist_sq > 0
    coef = np.zeros_like(dist_sq)
    np.divide(c * k * k, dist_sq, out=coef, where=nonzero)

    out = repulsive.reshape(-1, 2)
    out[lo:hi, 0] = (dx * coef).sum(axis=1)
    out[lo:hi, 1] = (dy * coef).sum(axis=1)


def attraction(
    lo: int,
    hi: int,
    positions: np.ndarray,
    edges: np.ndarray,
    weights: np.ndarray,
    attractive: np.ndarray,
    k: float,
    c: float,
) -> None:
    """
    Attraction along edges ``lo..hi-1``.

    ``force = normalize(delta) * c * d^2 / k * w`` which is
    ``delta * c * d * w / k``. The source end receives ``-force`` (slot
    ``2e``), the target end ``+force`` (slot ``2e + 1``). Zero-length edges
    and self-loops yield a zero force.
    """
    if hi <= lo:
        return
    pos = positions.reshape(-1, 2)
    ends = edges.reshape(-1, 2)[lo:hi]
    delta = pos[ends[:, 0]] - pos[ends[:, 1]]
    dist = np.sqrt((delta * delta).sum(axis=1))
    force = delta * (dist * weights[lo:hi] * (c / k))[:, None]

    out = attractive.reshape(-1, 2, 2)
    out[lo:hi, 0] = -force
    out[lo:hi, 1] = force


def summation(
    lo: int,
    hi: int,
    repulsive: np.ndarray,
    attractive: np.ndarray,
    incidence_ptr: np.ndarray,
    incidence_slots: np.ndarray,
    displacements: np.ndarray,
) -> None:
    """Displacement of vertices ``lo..hi-1``: repulsion plus incident attraction."""
    width = hi - lo
    if width <= 0:
        return
    start = incidence_ptr[lo]
    stop = incidence_ptr[hi]
    slots = incidence_slots[start:stop]
    owners = np.repeat(np.arange(width), np.diff(incidence_ptr[lo : hi + 1]))
    values = attractive.reshape(-1, 2)[slots]

    out = displacements.reshape(-1, 2)
    rep = repulsive.reshape(-1, 2)
    out[lo:hi, 0] = rep[lo:hi, 0] + np.bincount(owners, weights=values[:, 0], minlength=width)
    out[lo:hi, 1] = rep[lo:hi, 1] + np.bincount(owners, weights=values[:, 1], minlength=width)


def update(
    lo: int,
    hi: int,
    positions: np.ndarray,
    displacements: np.ndarray,
    temperature: float,
    width: float,
    height: float,
) -> None:
    """
    Move vertices ``lo..hi-1`` by their displacement capped at ``temperature``
    and clamp them to ``[0, width] x [0, height]``.
    """
    if hi <= lo:
        return
    pos = positions.reshape(-1, 2)[lo:hi]
    disp = displacements.reshape(-1, 2)[lo:hi]
    length = np.sqrt((disp * disp).sum(axis=1))

    scale = np.zeros_like(length)
    np.divide(np.minimum(length, temperature), length, out=scale, where=length > 0)

    moved = pos + disp * scale[:, None]
    np.clip(moved[:, 0], 0, width, out=moved[:, 0])
    np.clip(moved[:, 1], 0, height, out=moved[:, 1])
    pos[:] = moved


KERNELS = {
    "zero": zero,
    "repulsion": repulsion,
    "attraction": attraction,
    "summation": summation,
    "update": update,
}


__all__ = [
    "zero",
    "repulsion",
    "attraction",
    "summation",
    "update",
    "KERNELS",
]
