"""
Consolidated constants for OpenBitmap.

This module defines the closed set of pixel depths, the channel layouts,
the keys of the host parameter record and the display defaults.
"""

from enum import Enum
from typing import Optional, Set

import numpy as np

from openbitmap.core.exceptions import (UnsupportedConfigurationError,
                                        UnsupportedDepthError)


class PixelDepth(Enum):
    """
    Signed depth encoding of a pixel component.

    The value is the component size in bytes, negated for floating point.
    The order of declaration defines the alternative tag (0..4) used by Bitmap.
    """
    UINT8 = 1
    UINT16 = 2
    UINT32 = 4
    UINT64 = 8
    FLOAT64 = -8

    @classmethod
    def from_depth(cls, depth: int) -> "PixelDepth":
        try:
            return cls(depth)
        except ValueError:
            raise UnsupportedDepthError(depth, "PixelDepth.from_depth") from None

    @classmethod
    def from_tag(cls, tag: int) -> "PixelDepth":
        if 0 <= tag < len(_DEPTHS_BY_TAG):
            return _DEPTHS_BY_TAG[tag]
        raise UnsupportedDepthError(depth_from_tag(tag), "PixelDepth.from_tag")

    @property
    def tag(self) -> int:
        return _DEPTHS_BY_TAG.index(self)

    @property
    def dtype(self) -> np.dtype:
        match self:
            case PixelDepth.UINT8:
                return np.dtype(np.uint8)
            case PixelDepth.UINT16:
                return np.dtype(np.uint16)
            case PixelDepth.UINT32:
                return np.dtype(np.uint32)
            case PixelDepth.UINT64:
                return np.dtype(np.uint64)
            case PixelDepth.FLOAT64:
                return np.dtype(np.float64)

    @property
    def itemsize(self) -> int:
        return abs(self.value)

    @property
    def is_float(self) -> bool:
        return self.value < 0

    @property
    def max_value(self):
        """Largest representable sample (Python int for unsigned types)."""
        if self.is_float:
            return float(np.finfo(np.float64).max)
        return int(np.iinfo(self.dtype).max)

    @property
    def lowest(self):
        """Smallest representable sample."""
        if self.is_float:
            return -float(np.finfo(np.float64).max)
        return 0

    def cast(self, value):
        """Convert a Python number into the sample domain of this depth."""
        return float(value) if self.is_float else int(value)


_DEPTHS_BY_TAG = (PixelDepth.UINT8, PixelDepth.UINT16, PixelDepth.UINT32,
                  PixelDepth.UINT64, PixelDepth.FLOAT64)


def depth_from_tag(tag: int) -> int:
    """Recover the signed depth from an alternative tag (0..3 unsigned, 4 float)."""
    if tag < 0:
        return tag
    return (1 << tag) if tag < 4 else -(1 << (tag - 1))


class ChannelLayout(Enum):
    """
    Channel role mapping derived from the channel count.

    Each member carries the buffer index of (gray, alpha, red, green, blue);
    None marks a role the layout does not have.
    """
    GRAY = 1
    RGB = 3
    ARGB = 4

    @classmethod
    def from_channels(cls, channels: int, operation: str = "BitmapData") -> "ChannelLayout":
        try:
            return cls(channels)
        except ValueError:
            raise UnsupportedConfigurationError(
                f"{operation}: Unsupported number of channels: {channels}"
            ) from None

    @property
    def channels(self) -> int:
        return self.value

    @property
    def gray_index(self) -> Optional[int]:
        return 0 if self is ChannelLayout.GRAY else None

    @property
    def alpha_index(self) -> Optional[int]:
        return 0 if self is ChannelLayout.ARGB else None

    @property
    def red_index(self) -> int:
        return 1 if self is ChannelLayout.ARGB else 0

    @property
    def green_index(self) -> int:
        match self:
            case ChannelLayout.GRAY:
                return 0
            case ChannelLayout.RGB:
                return 1
            case ChannelLayout.ARGB:
                return 2

    @property
    def blue_index(self) -> int:
        match self:
            case ChannelLayout.GRAY:
                return 0
            case ChannelLayout.RGB:
                return 2
            case ChannelLayout.ARGB:
                return 3


SUPPORTED_DEPTHS: Set[int] = {depth.value for depth in PixelDepth}
SUPPORTED_CHANNEL_COUNTS: Set[int] = {layout.value for layout in ChannelLayout}

# Host parameter record keys
BUFFER_KEY = "imageBuffer"
WIDTH_KEY = "width"
HEIGHT_KEY = "height"
CHANNELS_KEY = "channels"
DEPTH_KEY = "depth"
MIN_BRIGHTNESS_KEY = "minBrightness"
MAX_BRIGHTNESS_KEY = "maxBrightness"

# Display conversion defaults
DEFAULT_SENTINEL_BYTE = 55
DEFAULT_GRAY_ROW_ALIGNMENT = 4
DEFAULT_COLOR_ROW_ALIGNMENT = 1
GAMMA_TABLE_SIZE = 65536

# Parallel reduction defaults
DEFAULT_MIN_ROWS_PER_BAND = 16
