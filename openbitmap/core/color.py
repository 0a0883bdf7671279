"""
Immutable pixel value over one of the supported pixel depths.

A Color carries red, green, blue and alpha samples in the domain of its
PixelDepth. Gray colors are colors whose three RGB components are equal.
Arithmetic saturates at the bounds of the depth instead of wrapping.
"""

import logging
from typing import Iterable, Tuple

from openbitmap.constants.constants import PixelDepth
from openbitmap.core.utils import (bounded_add, bounded_sub, clamp, convert,
                                   gray_from_rgb, round_half_away)

logger = logging.getLogger(__name__)


class Color:
    """
    Four-component (R, G, B, A) pixel value.

    Attributes:
        red, green, blue, alpha: Samples in the domain of ``depth``
        depth: The PixelDepth the samples belong to
    """

    __slots__ = ("_red", "_green", "_blue", "_alpha", "_depth")

    def __init__(self, red, green, blue, alpha=None, *, depth: PixelDepth = PixelDepth.UINT8):
        self._depth = depth
        self._red = depth.cast(red)
        self._green = depth.cast(green)
        self._blue = depth.cast(blue)
        self._alpha = depth.max_value if alpha is None else depth.cast(alpha)

    @classmethod
    def from_gray(cls, gray, alpha=None, *, depth: PixelDepth = PixelDepth.UINT8) -> "Color":
        """Create a gray color whose three RGB components equal ``gray``."""
        return cls(gray, gray, gray, alpha, depth=depth)

    @property
    def red(self):
        return self._red

    @property
    def green(self):
        return self._green

    @property
    def blue(self):
        return self._blue

    @property
    def alpha(self):
        return self._alpha

    @property
    def depth(self) -> PixelDepth:
        return self._depth

    def gray(self):
        """Exact when R == G == B, else 0.299R + 0.587G + 0.114B rounded to nearest."""
        return gray_from_rgb(self._red, self._green, self._blue, self._depth)

    def is_colored(self) -> bool:
        return self._red != self._green or self._red != self._blue

    def with_brightness(self, y) -> "Color":
        """
        Return this color with its luma replaced by ``y``.

        Colored values are converted to YUV, the Y component is replaced and the
        result is converted back, clamped into range and rounded. Gray values
        simply become ``Color.from_gray(y)``.
        """
        if not self.is_colored():
            return Color.from_gray(y, self._alpha, depth=self._depth)

        r, g, b = self._red, self._green, self._blue
        u = -0.14713 * r - 0.28886 * g + 0.436 * b
        v = 0.615 * r - 0.51498 * g - 0.10001 * b

        red = y + 1.13983 * v
        green = y - 0.39465 * u - 0.58060 * v
        blue = y + 2.03211 * u

        return Color(self._to_component(red), self._to_component(green), self._to_component(blue),
                     self._alpha, depth=self._depth)

    def _to_component(self, value: float):
        value = clamp(value, 0.0, float(self._depth.max_value))
        if self._depth.is_float:
            return value
        return min(round_half_away(value), self._depth.max_value)

    def mix(self, colors: Iterable[Tuple[float, "Color"]]) -> "Color":
        """
        Weighted mix of this color with others.

        Each entry contributes ``weight * color``; this color contributes with the
        remaining weight ``clamp(1 - sum(weights), 0, 1)``.
        """
        sum_w = sum_r = sum_g = sum_b = sum_a = 0.0

        for weight, color in colors:
            sum_w += weight
            sum_r += weight * color.red
            sum_g += weight * color.green
            sum_b += weight * color.blue
            sum_a += weight * color.alpha

        weight = clamp(1.0 - sum_w, 0.0, 1.0)
        depth = self._depth

        return Color(convert(weight * self._red + sum_r, depth),
                     convert(weight * self._green + sum_g, depth),
                     convert(weight * self._blue + sum_b, depth),
                     convert(weight * self._alpha + sum_a, depth),
                     depth=depth)

    def components(self) -> Tuple:
        return (self._red, self._green, self._blue, self._alpha)

    def _same_depth(self, other: "Color") -> bool:
        return isinstance(other, Color) and other._depth is self._depth

    def __add__(self, rhs):
        depth = self._depth
        if isinstance(rhs, Color):
            if not self._same_depth(rhs):
                return NotImplemented
            return Color(bounded_add(self._red, rhs._red, depth),
                         bounded_add(self._green, rhs._green, depth),
                         bounded_add(self._blue, rhs._blue, depth),
                         self._alpha, depth=depth)
        if isinstance(rhs, (int, float)):
            return Color(bounded_add(self._red, rhs, depth),
                         bounded_add(self._green, rhs, depth),
                         bounded_add(self._blue, rhs, depth),
                         self._alpha, depth=depth)
        return NotImplemented

    def __sub__(self, rhs):
        depth = self._depth
        if isinstance(rhs, Color):
            if not self._same_depth(rhs):
                return NotImplemented
            return Color(bounded_sub(self._red, rhs._red, depth),
                         bounded_sub(self._green, rhs._green, depth),
                         bounded_sub(self._blue, rhs._blue, depth),
                         self._alpha, depth=depth)
        if isinstance(rhs, (int, float)):
            return Color(bounded_sub(self._red, rhs, depth),
                         bounded_sub(self._green, rhs, depth),
                         bounded_sub(self._blue, rhs, depth),
                         self._alpha, depth=depth)
        return NotImplemented

    def __mul__(self, rhs):
        if not isinstance(rhs, (int, float)):
            return NotImplemented
        highest = self._depth.max_value

        def scale(component):
            product = component * rhs
            if product >= highest:
                return highest
            return self._depth.cast(product)

        return Color(scale(self._red), scale(self._green), scale(self._blue),
                     self._alpha, depth=self._depth)

    def __truediv__(self, rhs):
        if not isinstance(rhs, (int, float)):
            return NotImplemented
        if self._depth.is_float:
            return Color(self._red / rhs, self._green / rhs, self._blue / rhs,
                         self._alpha, depth=self._depth)
        # Unsigned division truncates
        return Color(int(self._red / rhs), int(self._green / rhs), int(self._blue / rhs),
                     self._alpha, depth=self._depth)

    def __eq__(self, other):
        if not isinstance(other, Color):
            return NotImplemented
        return self.components() == other.components()

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __hash__(self):
        return hash(self.components())

    # Ordering compares brightness only, across depths
    def __lt__(self, other):
        if not isinstance(other, Color):
            return NotImplemented
        return self.gray() < other.gray()

    def __gt__(self, other):
        if not isinstance(other, Color):
            return NotImplemented
        return other.gray() < self.gray()

    def __le__(self, other):
        if not isinstance(other, Color):
            return NotImplemented
        return not other.gray() < self.gray()

    def __ge__(self, other):
        if not isinstance(other, Color):
            return NotImplemented
        return not self.gray() < other.gray()

    def __repr__(self):
        return (f"Color(red={self._red!r}, green={self._green!r}, blue={self._blue!r}, "
                f"alpha={self._alpha!r}, depth={self._depth.name})")
