"""Scalar sample wrapper that supports the weighted mix used by interpolation."""

from typing import Iterable, Tuple

from openbitmap.constants.constants import PixelDepth
from openbitmap.core.utils import clamp, convert


class MixableScalar:
    """A single sample of a given depth, mixable like a Color."""

    __slots__ = ("_value", "_depth")

    def __init__(self, value, depth: PixelDepth = PixelDepth.UINT8):
        self._value = depth.cast(value)
        self._depth = depth

    @property
    def value(self):
        return self._value

    @property
    def depth(self) -> PixelDepth:
        return self._depth

    def mix(self, scalars: Iterable[Tuple[float, "MixableScalar"]]) -> "MixableScalar":
        total = 0.0
        sum_w = 0.0

        for weight, scalar in scalars:
            sum_w += weight
            total += weight * scalar.value

        weight = clamp(1.0 - sum_w, 0.0, 1.0)
        return MixableScalar(convert(weight * self._value + total, self._depth), self._depth)

    def __int__(self):
        return int(self._value)

    def __float__(self):
        return float(self._value)

    def __eq__(self, other):
        if isinstance(other, MixableScalar):
            return self._value == other._value
        if isinstance(other, (int, float)):
            return self._value == other
        return NotImplemented

    def __hash__(self):
        return hash(self._value)

    def __repr__(self):
        return f"MixableScalar({self._value!r}, {self._depth.name})"
