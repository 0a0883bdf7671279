"""
Depth-erased bitmap.

A Bitmap holds exactly one BitmapData alternative, chosen by an alternative tag
(0..4, see PixelDepth.tag) that is set at construction and never changes.
Every accessor goes through ``_active``, the single dispatch point, which
rejects a tag that does not match the held alternative.

Bitmaps cross the host boundary as parameter records (see ``openbitmap.io``).
"""

import logging
from typing import Any, Dict, Optional, Union

import numpy as np

from openbitmap.constants.constants import (BUFFER_KEY, CHANNELS_KEY, DEPTH_KEY,
                                            HEIGHT_KEY, MAX_BRIGHTNESS_KEY,
                                            MIN_BRIGHTNESS_KEY, WIDTH_KEY,
                                            PixelDepth, depth_from_tag)
from openbitmap.core.bitmap_data import (BitmapData, BitmapDataFloat64,
                                         BitmapDataUInt8, BitmapDataUInt16,
                                         BitmapDataUInt32, BitmapDataUInt64)
from openbitmap.core.config import GlobalBitmapConfig
from openbitmap.core.display import GammaTable
from openbitmap.core.exceptions import EmptyBitmapError, UnsupportedDepthError
from openbitmap.core.memory import PixelBuffer
from openbitmap.io.parameters import (ParameterKind, get_mapped_value_or_raise,
                                      get_optional_number)

logger = logging.getLogger(__name__)


def _as_pixel_depth(depth: Union[int, PixelDepth]) -> PixelDepth:
    if isinstance(depth, PixelDepth):
        return depth
    return PixelDepth.from_depth(depth)


class Bitmap:
    """
    Bitmap of any supported depth.

    Attributes:
        tag: Alternative tag of the held data (0..3 unsigned integers, 4 float)
    """

    __slots__ = ("_tag", "_data")

    def __init__(self, data: Optional[BitmapData] = None):
        if data is None:
            data = BitmapDataUInt8()
        self._tag = data.pixel_depth.tag
        self._data = data

    @classmethod
    def allocate(cls, width: int, height: int, channels: int,
                 depth: Union[int, PixelDepth]) -> "Bitmap":
        """Allocate a zeroed bitmap."""
        pixel_depth = _as_pixel_depth(depth)
        return cls(BitmapData.for_depth(pixel_depth)(width, height, channels))

    @classmethod
    def from_buffer(cls, buffer: Any, width: int, height: int, channels: int,
                    depth: Union[int, PixelDepth]) -> "Bitmap":
        """Wrap caller memory without copying; the caller keeps it alive."""
        pixel_depth = _as_pixel_depth(depth)
        return cls(BitmapData.for_depth(pixel_depth).from_buffer(buffer, width, height, channels))

    @classmethod
    def from_parameters(cls, record: Dict[str, Any], buffer_key: str = BUFFER_KEY) -> "Bitmap":
        """
        Build a bitmap borrowing the buffer described by a parameter record.

        Args:
            record: Mapping with the buffer, width, height, channels and depth keys,
                and optionally minBrightness and maxBrightness
            buffer_key: Key holding the buffer

        Raises:
            MissingParameterError: If a required key is absent or ill-typed
            UnsupportedDepthError: If the depth is not one of the supported codes
            UnsupportedConfigurationError: If the channel count is not 1, 3 or 4
        """
        call_site = "Bitmap.from_parameters"
        buffer = get_mapped_value_or_raise(record, buffer_key, ParameterKind.BUFFER, call_site)
        width = int(get_mapped_value_or_raise(record, WIDTH_KEY, ParameterKind.INTEGER, call_site))
        height = int(get_mapped_value_or_raise(record, HEIGHT_KEY, ParameterKind.INTEGER, call_site))
        channels = int(get_mapped_value_or_raise(record, CHANNELS_KEY, ParameterKind.INTEGER, call_site))
        depth = int(get_mapped_value_or_raise(record, DEPTH_KEY, ParameterKind.INTEGER, call_site))

        bitmap = cls.from_buffer(buffer, width, height, channels, depth)

        minimum = get_optional_number(record, MIN_BRIGHTNESS_KEY, call_site)
        if minimum is not None:
            bitmap.min_brightness = minimum
        maximum = get_optional_number(record, MAX_BRIGHTNESS_KEY, call_site)
        if maximum is not None:
            bitmap.max_brightness = maximum

        logger.debug(f"Created bitmap from parameters: {width} x {height}, "
                     f"channels={channels}, depth={depth}")
        return bitmap

    def to_parameters(self) -> Dict[str, Any]:
        """
        Describe this bitmap as a parameter record.

        The buffer is emitted as the flat numpy view of the pixel memory, so a
        bitmap rebuilt from the record borrows the same memory.

        Raises:
            EmptyBitmapError: If the bitmap holds no pixels
        """
        data = self._active("Bitmap.to_parameters")
        if data.empty:
            raise EmptyBitmapError("Bitmap.to_parameters: cannot export an empty bitmap")
        return {
            BUFFER_KEY: data.buffer.array,
            WIDTH_KEY: data.width,
            HEIGHT_KEY: data.height,
            CHANNELS_KEY: data.channels,
            DEPTH_KEY: data.depth,
            MIN_BRIGHTNESS_KEY: data.min_brightness,
            MAX_BRIGHTNESS_KEY: data.max_brightness,
        }

    def _active(self, operation: str) -> BitmapData:
        match (self._tag, self._data):
            case ((0, BitmapDataUInt8() as data) | (1, BitmapDataUInt16() as data)
                  | (2, BitmapDataUInt32() as data) | (3, BitmapDataUInt64() as data)
                  | (4, BitmapDataFloat64() as data)):
                return data
            case _:
                raise UnsupportedDepthError(depth_from_tag(self._tag), operation)

    @property
    def tag(self) -> int:
        return self._tag

    @property
    def data(self) -> BitmapData:
        """The active BitmapData alternative."""
        return self._active("Bitmap.data")

    def data_as(self, depth: Union[int, PixelDepth]) -> BitmapData:
        """
        The active alternative, checked to be of ``depth``.

        Raises:
            UnsupportedDepthError: If another alternative is active
        """
        pixel_depth = _as_pixel_depth(depth)
        data = self._active("Bitmap.data_as")
        if data.pixel_depth is not pixel_depth:
            raise UnsupportedDepthError(pixel_depth.value, f"Bitmap.data_as (active depth {data.depth})")
        return data

    @property
    def width(self) -> int:
        return self._active("Bitmap.width").width

    @property
    def height(self) -> int:
        return self._active("Bitmap.height").height

    @property
    def channels(self) -> int:
        return self._active("Bitmap.channels").channels

    @property
    def depth(self) -> int:
        """Signed depth code recovered from the alternative tag."""
        return depth_from_tag(self._tag)

    @property
    def pixel_depth(self) -> PixelDepth:
        return self._active("Bitmap.pixel_depth").pixel_depth

    @property
    def buffer(self) -> Optional[PixelBuffer]:
        return self._active("Bitmap.buffer").buffer

    @property
    def empty(self) -> bool:
        return self._active("Bitmap.empty").empty

    @property
    def min_brightness(self):
        return self._active("Bitmap.min_brightness").min_brightness

    @min_brightness.setter
    def min_brightness(self, value: float):
        self._active("Bitmap.min_brightness").min_brightness = value

    @property
    def max_brightness(self):
        return self._active("Bitmap.max_brightness").max_brightness

    @max_brightness.setter
    def max_brightness(self, value: float):
        self._active("Bitmap.max_brightness").max_brightness = value

    def set_brightness_range_for_display(self, minimum: float, maximum: float) -> None:
        self._active("Bitmap.set_brightness_range_for_display").set_brightness_range_for_display(
            minimum, maximum)

    def convert_to_depth8(self, gamma: float = 0.0, x: int = 0, y: int = 0, w: int = 0, h: int = 0,
                          scaled_width: int = 0, scaled_height: int = 0, *,
                          gamma_table: Optional[GammaTable] = None,
                          config: Optional[GlobalBitmapConfig] = None) -> np.ndarray:
        return self._active("Bitmap.convert_to_depth8").convert_to_depth8(
            gamma, x, y, w, h, scaled_width, scaled_height, gamma_table=gamma_table, config=config)

    def absolute_diff(self, other: "Bitmap") -> "Bitmap":
        """
        Per-sample absolute difference of two bitmaps of identical geometry and depth.

        Raises:
            GeometryMismatchError: If width, height, channels or depth differ
        """
        data = self._active("Bitmap.absolute_diff")
        return Bitmap(data.absolute_diff(other._active("Bitmap.absolute_diff")))

    def contains_colors(self) -> bool:
        return self._active("Bitmap.contains_colors").contains_colors()

    def copy(self) -> "Bitmap":
        """Deep copy of the active alternative."""
        return Bitmap(self._active("Bitmap.copy").copy())

    def __copy__(self) -> "Bitmap":
        return self.copy()

    def __deepcopy__(self, memo: Dict) -> "Bitmap":
        return self.copy()

    def __eq__(self, other) -> bool:
        """Bitmaps are equal when width, height, channels and depth agree."""
        if not isinstance(other, Bitmap):
            return NotImplemented
        return self._active("Bitmap.__eq__") == other._active("Bitmap.__eq__")

    def __ne__(self, other) -> bool:
        if not isinstance(other, Bitmap):
            return NotImplemented
        return self._active("Bitmap.__ne__") != other._active("Bitmap.__ne__")

    __hash__ = None

    def __repr__(self) -> str:
        return f"Bitmap(depth={self.depth}, data={self._data!r})"
