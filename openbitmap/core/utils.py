"""
Numeric helpers shared by the pixel value types and the pixel algorithms.

All helpers are depth-aware: they take the PixelDepth whose sample domain the
result must fit into.
"""

import logging
import math

import numpy as np

from openbitmap.constants.constants import PixelDepth

logger = logging.getLogger(__name__)


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def round_half_away_array(values: np.ndarray) -> np.ndarray:
    """Vectorised round_half_away; returns float64."""
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def clamp(value, lowest, highest):
    return max(lowest, min(highest, value))


def bounded_add(value, delta, depth: PixelDepth):
    """
    Add delta to a sample, saturating at the bounds of the depth.

    Integer results are truncated toward zero when delta is fractional.
    """
    highest = depth.max_value
    lowest = depth.lowest

    if depth.is_float:
        result = value + delta
        if math.isnan(result):
            return result
        return clamp(result, lowest, highest)

    if delta >= highest or value > highest - delta:
        return highest
    if delta <= -highest or value < lowest - delta:
        return lowest
    return int(value + delta)


def bounded_sub(value, delta, depth: PixelDepth):
    return bounded_add(value, -delta, depth)


def convert(num: float, depth: PixelDepth):
    """
    Convert a mixed (weighted) value back into the sample domain.

    Floats only lose infinities that the input did not have; integers are
    rounded to nearest and clamped into range.
    """
    if depth.is_float:
        result = float(num)
        if math.isinf(result) and not math.isinf(num):
            result = depth.max_value if num >= 0 else depth.lowest
        return result

    if depth is PixelDepth.UINT64:
        # uint64 conversion truncates after adding one half
        return clamp(int(num + 0.5), 0, depth.max_value) if num > 0 else 0

    return clamp(round_half_away(num), depth.lowest, depth.max_value)


def gray_from_rgb(red, green, blue, depth: PixelDepth):
    """Luma of one RGB sample; exact when the three components are equal."""
    if red == green and red == blue:
        return red
    luma = 0.299 * red + 0.587 * green + 0.114 * blue
    if depth.is_float:
        return luma
    return clamp(round_half_away(luma), 0, depth.max_value)


def gray_from_rgb_array(red: np.ndarray, green: np.ndarray, blue: np.ndarray,
                        depth: PixelDepth) -> np.ndarray:
    """Vectorised gray_from_rgb over same-shaped component planes."""
    equal = (red == green) & (red == blue)
    luma = 0.299 * red.astype(np.float64) + 0.587 * green.astype(np.float64) \
        + 0.114 * blue.astype(np.float64)

    if depth.is_float:
        return np.where(equal, red, luma)

    rounded = np.clip(round_half_away_array(luma), 0, float_ceiling(depth)).astype(depth.dtype)
    return np.where(equal, red, rounded)


def float_ceiling(depth: PixelDepth) -> float:
    """Largest float64 that converts into the sample domain without overflow."""
    if depth is PixelDepth.UINT64:
        # float64 cannot represent 2**64 - 1; the nearest value below 2**64 is safe
        return float(np.nextafter(np.float64(2.0 ** 64), 0.0))
    return float(depth.max_value)
