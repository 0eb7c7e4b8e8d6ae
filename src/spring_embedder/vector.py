"""
Immutable 2D vector used for all position and force math.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Vector2D:
    """
    A 2-dimensional vector.

    Every operation returns a new instance. Equality is component-wise.

    Example:
        v = Vector2D(3.0, 4.0)
        v.length()       # 5.0
        v.normalize()    # Vector2D(x=0.6, y=0.8)
        v + Vector2D(1.0, 1.0)
    """

    x: float
    y: float

    @classmethod
    def zero(cls) -> Vector2D:
        """The zero vector."""
        return cls(0.0, 0.0)

    def add(self, other: Vector2D) -> Vector2D:
        """Sum of this vector and ``other``."""
        return Vector2D(self.x + other.x, self.y + other.y)

    def subtract(self, other: Vector2D) -> Vector2D:
        """Difference between this vector and ``other``."""
        return Vector2D(self.x - other.x, self.y - other.y)

    def scale(self, scalar: float) -> Vector2D:
        """This vector multiplied by ``scalar``."""
        return Vector2D(self.x * scalar, self.y * scalar)

    def dot(self, other: Vector2D) -> float:
        """Dot product with ``other``."""
        return self.x * other.x + self.y * other.y

    def length(self) -> float:
        """Magnitude of the vector."""
        return math.sqrt(self.x * self.x + self.y * self.y)

    def normalize(self) -> Vector2D:
        """
        Unit-length vector with the same direction.

        Raises:
            ZeroDivisionError: If this is the zero vector.
        """
        magnitude = self.length()
        if magnitude == 0:
            raise ZeroDivisionError("Cannot normalize a zero vector")
        return Vector2D(self.x / magnitude, self.y / magnitude)

    def div(self, scalar: float) -> Vector2D:
        """
        This vector divided by ``scalar``.

        Raises:
            ZeroDivisionError: If ``scalar`` is zero.
        """
        if scalar == 0:
            raise ZeroDivisionError("Cannot divide a vector by zero")
        return Vector2D(self.x / scalar, self.y / scalar)

    def is_close(self, other: Vector2D, tol: float = 1e-9) -> bool:
        """True if both components differ by at most ``tol``."""
        return abs(self.x - other.x) <= tol and abs(self.y - other.y) <= tol

    # -------------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------------

    def __add__(self, other: Vector2D) -> Vector2D:
        return self.add(other)

    def __sub__(self, other: Vector2D) -> Vector2D:
        return self.subtract(other)

    def __mul__(self, scalar: float) -> Vector2D:
        return self.scale(scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vector2D:
        return self.div(scalar)

    def __neg__(self) -> Vector2D:
        return Vector2D(-self.x, -self.y)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y


__all__ = ["Vector2D"]
