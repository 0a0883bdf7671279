"""
OpenBitmap: an in-memory raster engine over typed pixel buffers.

This module provides the public API for OpenBitmap. It re-exports the
depth-erased Bitmap facade, the typed BitmapData containers and the value
types used by the pixel algorithms.
"""

import logging

__version__ = "0.1.0"


# Set up basic logging configuration if none exists
def _ensure_basic_logging():
    """Ensure basic logging is configured if no configuration exists."""
    root_logger = logging.getLogger()

    # Only configure if no handlers exist and level is too high
    if not root_logger.handlers and root_logger.level > logging.INFO:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

# Configure basic logging on import
_ensure_basic_logging()

from openbitmap.constants.constants import ChannelLayout, PixelDepth
from openbitmap.core.bitmap import Bitmap
from openbitmap.core.bitmap_data import (BitmapData, BitmapDataFloat64,
                                         BitmapDataUInt8, BitmapDataUInt16,
                                         BitmapDataUInt32, BitmapDataUInt64)
from openbitmap.core.color import Color
from openbitmap.core.exceptions import (EmptyBitmapError, GeometryMismatchError,
                                        InvalidAlphaError, MissingParameterError,
                                        OpenBitmapError,
                                        UnsupportedConfigurationError,
                                        UnsupportedDepthError)
from openbitmap.core.interpolation import interpolate
from openbitmap.core.mixable_scalar import MixableScalar
from openbitmap.core.vector import Vector

__all__ = [
    # Containers
    "Bitmap",
    "BitmapData",
    "BitmapDataUInt8",
    "BitmapDataUInt16",
    "BitmapDataUInt32",
    "BitmapDataUInt64",
    "BitmapDataFloat64",

    # Value types
    "Color",
    "MixableScalar",
    "Vector",
    "interpolate",

    # Key types
    "PixelDepth",
    "ChannelLayout",

    # Errors
    "OpenBitmapError",
    "UnsupportedConfigurationError",
    "UnsupportedDepthError",
    "GeometryMismatchError",
    "MissingParameterError",
    "InvalidAlphaError",
    "EmptyBitmapError",
]
