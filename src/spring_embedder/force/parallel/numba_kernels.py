"""
Compiled kernels for the data-parallel engine.

Same five kernels as :mod:`.kernels`, written as ``numba`` ``prange`` loops:
one loop iteration is one independent work unit writing only its own output
slots. :func:`compile_kernels` compiles them eagerly for one buffer dtype so
that compilation problems surface when the engine is created.
"""

from __future__ import annotations

import math
from typing import Any, Callable

import numba
import numpy as np
from numba import prange


def _zero(lo, hi, buffer):
    for i in prange(lo, hi):
        buffer[i] = 0


def _repulsion(lo, hi, positions, repulsive, k, c):
    n = positions.shape[0] // 2
    ck_sq = c * k * k
    for i in prange(lo, hi):
        xi = positions[2 * i]
        yi = positions[2 * i + 1]
        fx = 0.0
        fy = 0.0
        for j in range(n):
            dx = xi - positions[2 * j]
            dy = yi - positions[2 * j + 1]
            dist_sq = dx * dx + dy * dy
            if dist_sq > 0:
                s = ck_sq / dist_sq
                fx += dx * s
                fy += dy * s
        repulsive[2 * i] = fx
        repulsive[2 * i + 1] = fy


def _attraction(lo, hi, positions, edges, weights, attractive, k, c):
    for e in prange(lo, hi):
        src = edges[2 * e]
        tgt = edges[2 * e + 1]
        dx = positions[2 * src] - positions[2 * tgt]
        dy = positions[2 * src + 1] - positions[2 * tgt + 1]
        s = math.sqrt(dx * dx + dy * dy) * weights[e] * c / k
        attractive[4 * e] = -dx * s
        attractive[4 * e + 1] = -dy * s
        attractive[4 * e + 2] = dx * s
        attractive[4 * e + 3] = dy * s


def _summation(lo, hi, repulsive, attractive, incidence_ptr, incidence_slots, displacements):
    for i in prange(lo, hi):
        fx = 0.0
        fy = 0.0
        for p in range(incidence_ptr[i], incidence_ptr[i + 1]):
            slot = incidence_slots[p]
            fx += attractive[2 * slot]
            fy += attractive[2 * slot + 1]
        displacements[2 * i] = repulsive[2 * i] + fx
        displacements[2 * i + 1] = repulsive[2 * i + 1] + fy


def _update(lo, hi, positions, displacements, temperature, width, height):
    for i in prange(lo, hi):
        dx = displacements[2 * i]
        dy = displacements[2 * i + 1]
        x = positions[2 * i]
        y = positions[2 * i + 1]
        length = math.sqrt(dx * dx + dy * dy)
        if length > 0:
            s = min(length, temperature) / length
            x = x + dx * s
            y = y + dy * s
        positions[2 * i] = min(max(x, 0.0), width)
        positions[2 * i + 1] = min(max(y, 0.0), height)


def _signatures(dtype: Any) -> dict[str, str]:
    ft = np.dtype(dtype).name
    vec = f"{ft}[::1]"
    idx = "int64[::1]"
    return {
        "zero": f"void(int64, int64, {vec})",
        "repulsion": f"void(int64, int64, {vec}, {vec}, float64, float64)",
        "attraction": f"void(int64, int64, {vec}, {idx}, {vec}, {vec}, float64, float64)",
        "summation": f"void(int64, int64, {vec}, {vec}, {idx}, {idx}, {vec})",
        "update": f"void(int64, int64, {vec}, {vec}, float64, float64, float64)",
    }


_SOURCES = {
    "zero": _zero,
    "repulsion": _repulsion,
    "attraction": _attraction,
    "summation": _summation,
    "update": _update,
}


def compile_kernels(dtype: Any) -> dict[str, Callable[..., None]]:
    """
    Compile every kernel for buffers of ``dtype``.

    Returns:
        Kernel name to compiled function
    """
    signatures = _signatures(dtype)
    return {
        name: numba.njit(signatures[name], parallel=True)(func)
        for name, func in _SOURCES.items()
    }


__all__ = ["compile_kernels"]
