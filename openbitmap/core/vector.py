"""
Two-dimensional direction/magnitude value.

A Vector is created either from polar coordinates (angle and length) or from
cartesian components. The missing representation is computed lazily and cached.
"""

import math
from typing import Iterable, Optional, Tuple

from openbitmap.core.utils import clamp

_TWO_PI = 2 * math.pi


class Vector:
    """Direction and magnitude with lazily cached polar form."""

    __slots__ = ("_vx", "_vy", "_phi", "_length")

    def __init__(self, phi: float, length: float = 1.0):
        self._vx = math.cos(phi) * length
        self._vy = math.sin(phi) * length
        self._phi: Optional[float] = None
        self._length: Optional[float] = length

    @classmethod
    def from_components(cls, vx: float, vy: float) -> "Vector":
        vector = cls.__new__(cls)
        vector._vx = float(vx)
        vector._vy = float(vy)
        vector._phi = None
        vector._length = None
        return vector

    @classmethod
    def invalid(cls) -> "Vector":
        """A vector without components; is_valid() returns False."""
        vector = cls.__new__(cls)
        vector._vx = None
        vector._vy = None
        vector._phi = None
        vector._length = None
        return vector

    def is_valid(self) -> bool:
        return self._vx is not None and self._vy is not None

    @property
    def vx(self) -> float:
        return self._vx

    @property
    def vy(self) -> float:
        return self._vy

    @property
    def v(self) -> Tuple[float, float]:
        return (self._vx, self._vy)

    @property
    def phi(self) -> float:
        """Angle in [0, 2*pi)."""
        if self._phi is None:
            self._phi = math.fmod(math.atan2(self._vy, self._vx) + _TWO_PI, _TWO_PI)
        return self._phi

    @property
    def length(self) -> float:
        if self._length is None:
            self._length = math.hypot(self._vx, self._vy)
        return self._length

    def mix(self, vectors: Iterable[Tuple[float, "Vector"]]) -> "Vector":
        sum_w = 0.0
        sum_vx = 0.0
        sum_vy = 0.0

        for weight, vector in vectors:
            sum_w += weight
            sum_vx += weight * vector.vx
            sum_vy += weight * vector.vy

        weight = clamp(1.0 - sum_w, 0.0, 1.0)
        return Vector.from_components(weight * self._vx + sum_vx, weight * self._vy + sum_vy)

    def __mul__(self, rhs: float) -> "Vector":
        return Vector.from_components(self._vx * rhs, self._vy * rhs)

    def __truediv__(self, rhs: float) -> "Vector":
        return Vector.from_components(self._vx / rhs, self._vy / rhs)

    def __add__(self, rhs):
        if isinstance(rhs, Vector):
            return Vector.from_components(self._vx + rhs.vx, self._vy + rhs.vy)
        if isinstance(rhs, (int, float)):
            # Adding a scalar rotates by that angle
            return Vector(math.fmod(self.phi + rhs + _TWO_PI, _TWO_PI), self.length)
        return NotImplemented

    def __sub__(self, rhs):
        if isinstance(rhs, Vector):
            return Vector.from_components(self._vx - rhs.vx, self._vy - rhs.vy)
        if isinstance(rhs, (int, float)):
            return Vector(math.fmod(self.phi - rhs + _TWO_PI, _TWO_PI), self.length)
        return NotImplemented

    def __eq__(self, other):
        if not isinstance(other, Vector):
            return NotImplemented
        return self._vx == other._vx and self._vy == other._vy

    def __hash__(self):
        return hash((self._vx, self._vy))

    # Ordering compares lengths
    def __lt__(self, other: "Vector") -> bool:
        return self.length < other.length

    def __gt__(self, other: "Vector") -> bool:
        return other.length < self.length

    def __le__(self, other: "Vector") -> bool:
        return not other.length < self.length

    def __ge__(self, other: "Vector") -> bool:
        return not self.length < other.length

    def __repr__(self):
        return f"Vector(vx={self._vx!r}, vy={self._vy!r})"
