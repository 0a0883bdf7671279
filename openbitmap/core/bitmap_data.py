"""
Typed pixel container and the pixel algorithms that run on it.

BitmapData stores ``height * width * channels`` samples of one PixelDepth in a
flat, row-major, unpadded PixelBuffer. The five concrete subclasses fix the
depth; BitmapData itself is never instantiated.

Per-pixel accessors index the flat buffer directly and perform no bounds
checking. ``plot`` is the bounds-checked writer. Bulk operations (fill,
arithmetic, differences, display conversion) are vectorised with numpy, and
region statistics fan out over row bands (see ``reduction``).
"""

import logging
import math
from typing import Callable, Dict, Optional, Sequence, Tuple, Type

import numpy as np

from openbitmap.constants.constants import ChannelLayout, PixelDepth
from openbitmap.core import display, statistics
from openbitmap.core.color import Color
from openbitmap.core.config import GlobalBitmapConfig, resolve_global_config
from openbitmap.core.exceptions import (GeometryMismatchError,
                                        InvalidAlphaError)
from openbitmap.core.interpolation import interpolate
from openbitmap.core.memory import PixelBuffer
from openbitmap.core.mixable_scalar import MixableScalar
from openbitmap.core.reduction import clamp_rect
from openbitmap.core.utils import clamp, gray_from_rgb, gray_from_rgb_array, round_half_away
from openbitmap.core.vector import Vector

logger = logging.getLogger(__name__)

PointVisitor = Callable[[int, int], bool]
SubpixelVisitor = Callable[[float, float], bool]


class BitmapData:
    """
    Raster of ``width x height`` pixels with 1, 3 or 4 channels of one depth.

    Channel roles follow the channel count: 1 is gray, 3 is R, G, B and 4 is
    A, R, G, B. The display-brightness range only affects ``convert_to_depth8``.

    Attributes:
        pixel_depth: PixelDepth of every sample (fixed per subclass)
    """

    pixel_depth: PixelDepth = None

    def __init__(self, width: int = 0, height: int = 0, channels: int = 1, *,
                 buffer: Optional[PixelBuffer] = None):
        if self.pixel_depth is None:
            raise TypeError("BitmapData is abstract; use BitmapData.for_depth(depth) or a typed subclass")
        if width < 0 or height < 0:
            raise ValueError(f"BitmapData: negative size {width} x {height}")

        self._layout = ChannelLayout.from_channels(channels)
        self._width = width
        self._height = height

        count = width * height * channels
        if buffer is None and count > 0:
            buffer = PixelBuffer.allocate(count, self.pixel_depth)
        self._buffer = buffer

        self._min_brightness = self.pixel_depth.cast(0)
        self._max_brightness = self.pixel_depth.max_value

    @staticmethod
    def for_depth(depth: PixelDepth) -> Type["BitmapData"]:
        """Concrete subclass for ``depth``."""
        return _BY_DEPTH[depth]

    @classmethod
    def from_buffer(cls, source, width: int, height: int, channels: int) -> "BitmapData":
        """
        Wrap caller memory without copying.

        The caller keeps ``source`` valid for the lifetime of the returned bitmap.
        """
        layout = ChannelLayout.from_channels(channels)
        buffer = PixelBuffer.borrow(source, width * height * layout.channels, cls.pixel_depth)
        return cls(width, height, channels, buffer=buffer)

    # Geometry

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def channels(self) -> int:
        return self._layout.channels

    @property
    def layout(self) -> ChannelLayout:
        return self._layout

    @property
    def depth(self) -> int:
        """Signed depth code: byte size for unsigned integers, negative for float."""
        return self.pixel_depth.value

    @property
    def bytes_per_pixel(self) -> int:
        return self.channels * self.pixel_depth.itemsize

    @property
    def stride(self) -> int:
        """Bytes per row; rows are never padded."""
        return self._width * self.bytes_per_pixel

    @property
    def size(self) -> int:
        """Buffer size in bytes."""
        return self._height * self.stride

    @property
    def empty(self) -> bool:
        return self.size == 0 or self._buffer is None

    @property
    def buffer(self) -> Optional[PixelBuffer]:
        return self._buffer

    @property
    def pixels(self) -> np.ndarray:
        """The samples as a (height, width, channels) view of the buffer."""
        if self._buffer is None:
            return np.zeros((self._height, self._width, self.channels), dtype=self.pixel_depth.dtype)
        return self._buffer.array.reshape(self._height, self._width, self.channels)

    def geometry(self) -> Tuple[int, int, int, int]:
        return (self._width, self._height, self.channels, self.depth)

    # Display-brightness range

    def _to_sample(self, value):
        depth = self.pixel_depth
        if depth.is_float:
            return clamp(float(value), depth.lowest, depth.max_value)
        return clamp(int(value), 0, depth.max_value)

    @property
    def min_brightness(self):
        return self._min_brightness

    @min_brightness.setter
    def min_brightness(self, value):
        self._min_brightness = self._to_sample(value)

    @property
    def max_brightness(self):
        return self._max_brightness

    @max_brightness.setter
    def max_brightness(self, value):
        self._max_brightness = self._to_sample(value)

    def set_brightness_range_for_display(self, minimum, maximum) -> None:
        self.min_brightness = minimum
        self.max_brightness = maximum

    # Pixel access

    def _sample(self, x: int, y: int, index: int):
        return self._buffer.array[(y * self._width + x) * self.channels + index].item()

    def get_red(self, x: int, y: int):
        return self._sample(x, y, self._layout.red_index)

    def get_green(self, x: int, y: int):
        return self._sample(x, y, self._layout.green_index)

    def get_blue(self, x: int, y: int):
        return self._sample(x, y, self._layout.blue_index)

    def get_alpha(self, x: int, y: int):
        """Alpha sample; the depth maximum for layouts without alpha."""
        index = self._layout.alpha_index
        if index is None:
            return self.pixel_depth.max_value
        return self._sample(x, y, index)

    def get_gray(self, x: int, y: int):
        """Stored gray sample for single-channel images, luma of R, G, B otherwise."""
        index = self._layout.gray_index
        if index is not None:
            return self._sample(x, y, index)
        return gray_from_rgb(self.get_red(x, y), self.get_green(x, y), self.get_blue(x, y),
                             self.pixel_depth)

    def get(self, x: int, y: int) -> Color:
        if self._layout is ChannelLayout.GRAY:
            return Color.from_gray(self.get_gray(x, y), depth=self.pixel_depth)
        return Color(self.get_red(x, y), self.get_green(x, y), self.get_blue(x, y),
                     self.get_alpha(x, y), depth=self.pixel_depth)

    def sample(self, dx: float, dy: float) -> Color:
        """Color at a real position, interpolated from the surrounding pixels."""
        return interpolate(dx, dy, 0.0, 0.0, self._width - 1.0, self._height - 1.0, self.get)

    def sample_gray(self, dx: float, dy: float):
        """Gray value at a real position, interpolated from the surrounding pixels."""
        depth = self.pixel_depth

        def getter(x: int, y: int) -> MixableScalar:
            return MixableScalar(self.get_gray(x, y), depth)

        return interpolate(dx, dy, 0.0, 0.0, self._width - 1.0, self._height - 1.0, getter).value

    def gray_plane(self, x0: int, y0: int, x1: int, y1: int) -> np.ndarray:
        """Gray samples of the inclusive rectangle as a 2-D array."""
        block = self.pixels[y0:y1 + 1, x0:x1 + 1]
        if self._layout is ChannelLayout.GRAY:
            return block[..., 0]
        layout = self._layout
        return gray_from_rgb_array(block[..., layout.red_index], block[..., layout.green_index],
                                   block[..., layout.blue_index], self.pixel_depth)

    # Classification

    def is_red(self, x: int, y: int) -> bool:
        if self._layout is ChannelLayout.GRAY:
            return False
        red = self.get_red(x, y)
        return red > self.get_green(x, y) and red > self.get_blue(x, y)

    def is_green(self, x: int, y: int) -> bool:
        if self._layout is ChannelLayout.GRAY:
            return False
        green = self.get_green(x, y)
        return green > self.get_red(x, y) and green > self.get_blue(x, y)

    def is_blue(self, x: int, y: int) -> bool:
        if self._layout is ChannelLayout.GRAY:
            return False
        blue = self.get_blue(x, y)
        return blue > self.get_red(x, y) and blue > self.get_green(x, y)

    def is_brighter_than_neighbours(self, i: int, j: int, current=None) -> bool:
        """
        True if ``current`` (default: the gray value at (i, j)) strictly exceeds
        the gray value of every existing 8-neighbour.
        """
        if current is None:
            current = self.get_gray(i, j)
        for nj in range(max(0, j - 1), min(self._height, j + 2)):
            for ni in range(max(0, i - 1), min(self._width, i + 2)):
                if (ni, nj) != (i, j) and not current > self.get_gray(ni, nj):
                    return False
        return True

    # Region statistics

    def _region(self, x0: int, y0: int, x1: int, y1: int):
        return clamp_rect(x0, y0, x1, y1, self._width, self._height)

    def max_color(self, x0: int, y0: int, x1: int, y1: int,
                  config: Optional[GlobalBitmapConfig] = None) -> statistics.ColorExtremum:
        """Brightest color (by gray value) inside the clamped rectangle."""
        parallel = resolve_global_config(config).parallel
        return statistics.max_color(self.gray_plane, self.get, self._region(x0, y0, x1, y1),
                                    self.pixel_depth, parallel)

    def min_color(self, x0: int, y0: int, x1: int, y1: int,
                  config: Optional[GlobalBitmapConfig] = None) -> statistics.ColorExtremum:
        """Darkest color (by gray value) inside the clamped rectangle."""
        parallel = resolve_global_config(config).parallel
        return statistics.min_color(self.gray_plane, self.get, self._region(x0, y0, x1, y1),
                                    self.pixel_depth, parallel)

    def max_gray(self, x0: int, y0: int, x1: int, y1: int, with_std_deviation: bool = False,
                 config: Optional[GlobalBitmapConfig] = None) -> statistics.MaxGrayResult:
        parallel = resolve_global_config(config).parallel
        return statistics.max_gray(self.gray_plane, self._region(x0, y0, x1, y1),
                                   self.pixel_depth, parallel, with_std_deviation)

    def max_gray2(self, x0: int, y0: int, x1: int, y1: int,
                  config: Optional[GlobalBitmapConfig] = None) -> statistics.MaxGray2Result:
        parallel = resolve_global_config(config).parallel
        return statistics.max_gray2(self.gray_plane, self._region(x0, y0, x1, y1),
                                    self.pixel_depth, parallel)

    def min_gray(self, x0: int, y0: int, x1: int, y1: int,
                 config: Optional[GlobalBitmapConfig] = None) -> statistics.MinGrayResult:
        parallel = resolve_global_config(config).parallel
        return statistics.min_gray(self.gray_plane, self._region(x0, y0, x1, y1),
                                   self.pixel_depth, parallel)

    def below(self, center_x: int, center_y: int, r: float, distribution: Sequence[float],
              center_of_distribution: int) -> bool:
        """
        Check that the neighbourhood of a pixel stays under a radial profile.

        Every pixel within Euclidean distance ``r`` of the center must have a gray
        value of at most ``ceil(center_gray * distribution[c + floor(d)] / distribution[c])``,
        where ``c`` is ``center_of_distribution`` and ``d`` the pixel's distance.

        Raises:
            IndexError: If ``distribution`` is too short for ``r``
        """
        x0 = max(0, round_half_away(center_x - r))
        y0 = max(0, round_half_away(center_y - r))
        x1 = min(self._width - 1, round_half_away(center_x + r))
        y1 = min(self._height - 1, round_half_away(center_y + r))
        if x1 < x0 or y1 < y0:
            return True

        center = self.get(center_x, center_y).gray()
        profile = np.asarray(distribution, dtype=np.float64)
        normalize = profile[center_of_distribution]

        ys, xs = np.mgrid[y0:y1 + 1, x0:x1 + 1]
        distance = np.sqrt((xs - center_x) ** 2 + (ys - center_y) ** 2)
        inside = distance <= r

        steps = center_of_distribution + np.floor(distance[inside]).astype(np.int64)
        limits = np.ceil(center * profile[steps] / normalize)
        grays = self.gray_plane(x0, y0, x1, y1)[inside].astype(np.float64)
        return not bool(np.any(grays > limits))

    # Writing and drawing

    def _check_alpha(self, color: Color, operation: str) -> None:
        if color.depth is not self.pixel_depth:
            raise TypeError(
                f"{operation}: expected a Color of depth {self.pixel_depth.name}, got {color.depth.name}"
            )
        if self._layout.alpha_index is None and color.alpha != self.pixel_depth.max_value:
            raise InvalidAlphaError(operation, color.alpha, self.channels)

    def plot(self, x: int, y: int, color: Color) -> bool:
        """
        Write one pixel; out-of-range coordinates are ignored.

        Returns:
            Always True, so plot can drive a line walk.

        Raises:
            InvalidAlphaError: If the layout has no alpha channel and ``color`` is
                not opaque. The buffer is left unchanged.
        """
        if x < 0 or y < 0 or x >= self._width or y >= self._height:
            return True
        self._check_alpha(color, "BitmapData.plot")

        array = self._buffer.array
        base = (y * self._width + x) * self.channels
        layout = self._layout

        if layout.gray_index is not None:
            array[base + layout.gray_index] = color.gray()
        else:
            array[base + layout.red_index] = color.red
            array[base + layout.green_index] = color.green
            array[base + layout.blue_index] = color.blue

        if layout.alpha_index is not None:
            array[base + layout.alpha_index] = color.alpha
        return True

    def fill(self, color: Color) -> None:
        """Plot ``color`` into every pixel."""
        self._check_alpha(color, "BitmapData.fill")
        if self.empty:
            return
        pixels = self.pixels
        layout = self._layout
        if layout.gray_index is not None:
            pixels[..., layout.gray_index] = color.gray()
        else:
            pixels[..., layout.red_index] = color.red
            pixels[..., layout.green_index] = color.green
            pixels[..., layout.blue_index] = color.blue
        if layout.alpha_index is not None:
            pixels[..., layout.alpha_index] = color.alpha

    def walk_line(self, x0: int, y0: int, x1: int, y1: int, visit: PointVisitor) -> None:
        """
        Visit every integer point from (x0, y0) to (x1, y1) inclusive (Bresenham).

        Only points inside the bitmap are visited. The walk stops as soon as
        ``visit`` returns a falsy value.
        """
        dx = abs(x1 - x0)
        sx = 1 if x0 < x1 else -1
        dy = -abs(y1 - y0)
        sy = 1 if y0 < y1 else -1
        err = dx + dy

        while True:
            if 0 <= x0 < self._width and 0 <= y0 < self._height:
                if not visit(x0, y0):
                    return

            if x0 == x1 and y0 == y1:
                break
            e2 = 2 * err

            if e2 >= dy:
                err += dy
                x0 += sx

            if e2 <= dx:
                err += dx
                y0 += sy

    def walk_line_subpixel(self, x0: float, y0: float, x1: float, y1: float,
                           visit: SubpixelVisitor) -> None:
        """
        Visit ``ceil(length) + 1`` evenly spaced real points from (x0, y0) to (x1, y1).

        Points are not clipped to the bitmap. The walk stops as soon as ``visit``
        returns a falsy value. A zero-length segment visits its start once.
        """
        len_x = x1 - x0
        len_y = y1 - y0
        length = int(math.ceil(math.hypot(len_x, len_y)))
        if length == 0:
            visit(x0, y0)
            return

        dx = len_x / length
        dy = len_y / length
        x, y = x0, y0
        for _ in range(length + 1):
            if not visit(x, y):
                return
            x += dx
            y += dy

    def draw_line(self, x0: int, y0: int, x1: int, y1: int, color: Color) -> None:
        self.walk_line(x0, y0, x1, y1, lambda x, y: self.plot(x, y, color))

    def draw_vector(self, x0: int, y0: int, vector: Vector, color: Color) -> None:
        """Draw from (x0, y0) to the rounded end point of ``vector`` applied there."""
        self.draw_line(x0, y0, round_half_away(x0 + vector.vx), round_half_away(y0 + vector.vy), color)

    # Arithmetic

    def _require_same_geometry(self, other: "BitmapData", operation: str) -> None:
        if self.geometry() != other.geometry():
            raise GeometryMismatchError(operation, self.geometry(), other.geometry())

    def _rgb_indices(self) -> list:
        layout = self._layout
        if layout.gray_index is not None:
            return [layout.gray_index]
        return [layout.red_index, layout.green_index, layout.blue_index]

    def _combine(self, rhs: "BitmapData", subtract: bool, operation: str) -> "BitmapData":
        self._require_same_geometry(rhs, operation)
        if self.empty:
            return self

        depth = self.pixel_depth
        indices = self._rgb_indices()
        left = self.pixels[..., indices]
        right = rhs.pixels[..., indices]

        if depth.is_float:
            with np.errstate(over="ignore"):
                result = left - right if subtract else left + right
            result = np.clip(result, depth.lowest, depth.max_value)
        elif subtract:
            result = np.where(right > left, 0, left - right).astype(depth.dtype)
        else:
            result = left + right  # wraps; overflow shows as a sum below an operand
            result = np.where(result < left, depth.dtype.type(depth.max_value), result)

        self.pixels[..., indices] = result
        return self

    def __iadd__(self, rhs: "BitmapData") -> "BitmapData":
        """Saturating per-pixel add of R, G, B (or gray); alpha is kept."""
        if not isinstance(rhs, BitmapData):
            return NotImplemented
        return self._combine(rhs, False, "BitmapData.__iadd__")

    def __isub__(self, rhs: "BitmapData") -> "BitmapData":
        """Saturating per-pixel subtract of R, G, B (or gray); alpha is kept."""
        if not isinstance(rhs, BitmapData):
            return NotImplemented
        return self._combine(rhs, True, "BitmapData.__isub__")

    def __add__(self, rhs: "BitmapData") -> "BitmapData":
        if not isinstance(rhs, BitmapData):
            return NotImplemented
        result = self.copy()
        result += rhs
        return result

    def __sub__(self, rhs: "BitmapData") -> "BitmapData":
        if not isinstance(rhs, BitmapData):
            return NotImplemented
        result = self.copy()
        result -= rhs
        return result

    def absolute_diff(self, other: "BitmapData") -> "BitmapData":
        """
        New bitmap holding ``|a - b|`` for every sample, alpha included, clamped to the depth maximum.

        Raises:
            GeometryMismatchError: If width, height, channels or depth differ
        """
        self._require_same_geometry(other, "BitmapData.absolute_diff")
        result = type(self)(self._width, self._height, self.channels)
        if self.empty:
            return result

        left = self._buffer.array
        right = other.buffer.array
        if self.pixel_depth.is_float:
            with np.errstate(over="ignore"):
                diff = np.clip(np.abs(left - right), 0.0, self.pixel_depth.max_value)
        else:
            diff = np.where(left >= right, left - right, right - left)
        np.copyto(result.buffer.array, diff)
        return result

    def contains_colors(self) -> bool:
        """True if any pixel has R, G, B not all equal."""
        if self._layout is ChannelLayout.GRAY or self.empty:
            return False
        pixels = self.pixels
        layout = self._layout
        red = pixels[..., layout.red_index]
        return bool(np.any((red != pixels[..., layout.green_index])
                           | (red != pixels[..., layout.blue_index])))

    # Display

    def convert_to_depth8(self, gamma: float = 0.0, x: int = 0, y: int = 0, w: int = 0, h: int = 0,
                          scaled_width: int = 0, scaled_height: int = 0, *,
                          gamma_table: Optional[display.GammaTable] = None,
                          config: Optional[GlobalBitmapConfig] = None) -> np.ndarray:
        """Render a crop into a fresh 8-bit buffer; see ``display.convert_to_depth8``."""
        return display.convert_to_depth8(
            self.pixels, self.pixel_depth, self._min_brightness, self._max_brightness,
            gamma, x, y, w, h, scaled_width, scaled_height,
            display=resolve_global_config(config).display, gamma_table=gamma_table,
        )

    # Copying

    def copy_to(self, destination: "BitmapData") -> None:
        """
        Copy samples and display-brightness range into a bitmap of the same geometry.

        Raises:
            GeometryMismatchError: If the destination has a different geometry
        """
        if self != destination:
            raise GeometryMismatchError("BitmapData.copy_to", self.geometry(), destination.geometry())
        if self._buffer is not None and destination.buffer is not None:
            np.copyto(destination.buffer.array, self._buffer.array)
        destination._min_brightness = self._min_brightness
        destination._max_brightness = self._max_brightness

    def assign(self, source: "BitmapData") -> "BitmapData":
        """
        Make this bitmap a copy of ``source``.

        The existing buffer is reused when the geometry matches; otherwise a new
        owned buffer is allocated.
        """
        if source is self:
            return self
        if source.pixel_depth is not self.pixel_depth:
            raise TypeError(
                f"BitmapData.assign: cannot assign {source.pixel_depth.name} data to {self.pixel_depth.name}"
            )
        if source != self:
            self._layout = source.layout
            self._width = source.width
            self._height = source.height
            count = self._width * self._height * self.channels
            self._buffer = PixelBuffer.allocate(count, self.pixel_depth) if count > 0 else None
        source.copy_to(self)
        return self

    def copy(self) -> "BitmapData":
        """Deep copy into a freshly owned buffer."""
        result = type(self)(self._width, self._height, self.channels)
        self.copy_to(result)
        return result

    def __copy__(self) -> "BitmapData":
        return self.copy()

    def __deepcopy__(self, memo: Dict) -> "BitmapData":
        return self.copy()

    # Comparison by geometry

    def __eq__(self, other) -> bool:
        if not isinstance(other, BitmapData):
            return NotImplemented
        return self.geometry() == other.geometry()

    def __ne__(self, other) -> bool:
        if not isinstance(other, BitmapData):
            return NotImplemented
        return self.geometry() != other.geometry()

    __hash__ = None

    def _total_bytes(self) -> int:
        return self._width * self._height * self.channels * abs(self.depth)

    def __lt__(self, other: "BitmapData") -> bool:
        if not isinstance(other, BitmapData):
            return NotImplemented
        return self._total_bytes() < other._total_bytes()

    def __gt__(self, other: "BitmapData") -> bool:
        if not isinstance(other, BitmapData):
            return NotImplemented
        return self._total_bytes() > other._total_bytes()

    def __le__(self, other: "BitmapData") -> bool:
        if not isinstance(other, BitmapData):
            return NotImplemented
        return self._total_bytes() <= other._total_bytes()

    def __ge__(self, other: "BitmapData") -> bool:
        if not isinstance(other, BitmapData):
            return NotImplemented
        return self._total_bytes() >= other._total_bytes()

    def __repr__(self) -> str:
        ownership = self._buffer.ownership.value if self._buffer is not None else "none"
        return (f"{type(self).__name__}({self._width} x {self._height}, "
                f"channels={self.channels}, buffer={ownership})")


class BitmapDataUInt8(BitmapData):
    pixel_depth = PixelDepth.UINT8


class BitmapDataUInt16(BitmapData):
    pixel_depth = PixelDepth.UINT16


class BitmapDataUInt32(BitmapData):
    pixel_depth = PixelDepth.UINT32


class BitmapDataUInt64(BitmapData):
    pixel_depth = PixelDepth.UINT64


class BitmapDataFloat64(BitmapData):
    pixel_depth = PixelDepth.FLOAT64


_BY_DEPTH: Dict[PixelDepth, Type[BitmapData]] = {
    PixelDepth.UINT8: BitmapDataUInt8,
    PixelDepth.UINT16: BitmapDataUInt16,
    PixelDepth.UINT32: BitmapDataUInt32,
    PixelDepth.UINT64: BitmapDataUInt64,
    PixelDepth.FLOAT64: BitmapDataFloat64,
}
