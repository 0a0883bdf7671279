"""
8-bit display conversion.

Raw samples are mapped onto 0..255 through the display-brightness range of the
bitmap, optionally blended with a logarithmic tone curve controlled by gamma.
Color images become BGRA, gray images become one byte per pixel with rows
padded to the configured alignment.

The gamma marker is process-wide state: a GammaTable regenerates its lookup
table only when a different gamma is requested, under a lock that also guards
readers. Tests inject their own GammaTable instead of using the default one.
"""

import logging
import math
import threading
from typing import Optional

import numpy as np

from openbitmap.constants.constants import GAMMA_TABLE_SIZE, PixelDepth
from openbitmap.core.config import DisplayConfig
from openbitmap.core.exceptions import UnsupportedConfigurationError
from openbitmap.core.utils import round_half_away, round_half_away_array

logger = logging.getLogger(__name__)

_LOG2 = math.log(2.0)


def _gamma_weight(gamma: float) -> float:
    return min(gamma * 2, 1.0)


class GammaTable:
    """
    Lazily regenerated logarithmic tone-curve lookup table.

    Thread Safety:
        All access goes through one lock; regeneration happens only when the
        requested gamma differs from the cached one.
    """

    def __init__(self, size: int = GAMMA_TABLE_SIZE):
        self._lock = threading.Lock()
        self._size = size
        self._gamma: Optional[float] = None
        self._table = np.zeros(size, dtype=np.uint8)
        self._regenerations = 0

    @property
    def current_gamma(self) -> Optional[float]:
        with self._lock:
            return self._gamma

    @property
    def regenerations(self) -> int:
        """How many times the table has been rebuilt."""
        with self._lock:
            return self._regenerations

    def table(self) -> np.ndarray:
        with self._lock:
            return self._table.copy()

    def ensure(self, gamma: float) -> float:
        """Make ``gamma`` the current gamma, regenerating the table if it changed."""
        with self._lock:
            if gamma != self._gamma:
                self._table = self._build(gamma)
                self._gamma = gamma
                self._regenerations += 1
                logger.debug(f"Regenerated gamma table for gamma={gamma}")
            return self._gamma

    def _build(self, gamma: float) -> np.ndarray:
        gamma1 = _gamma_weight(gamma)
        delta = 9 - gamma * 6
        factor = 256.0 / (math.log(float(self._size)) / _LOG2 - delta)

        v = np.arange(self._size, dtype=np.float64)
        val0 = v / 256.0
        with np.errstate(divide="ignore"):
            result = np.log(v) / _LOG2 - delta
        val1 = np.where(result > 0, result * factor, 0.0)
        t = gamma1 * val1 + (1 - gamma1) * val0
        return np.clip(t, 0, 255).astype(np.uint8)


_default_gamma_table = GammaTable()


def get_default_gamma_table() -> GammaTable:
    """The process-wide gamma cache."""
    return _default_gamma_table


def calculate_display_value(values, min_brightness, max_brightness, gamma: float) -> np.ndarray:
    """
    Map raw samples onto 0..255.

    Samples are clamped into the display-brightness range and rescaled linearly.
    With a nonzero gamma the linear value is blended with a logarithmic curve
    weighted by ``min(gamma * 2, 1)``. The result is rounded and clamped.
    """
    values = np.asarray(values)
    low = float(min_brightness)
    high = float(max_brightness)
    span = high - low

    clamped = np.clip(values.astype(np.float64), low, high)
    diff = np.maximum(clamped - low, 0.0)
    if span > 0:
        val0 = 255.0 * diff / span
    else:
        val0 = np.zeros_like(diff)

    if gamma == 0:
        return np.clip(round_half_away_array(val0), 0, 255).astype(np.uint8)

    gamma1 = _gamma_weight(gamma)
    delta = 9 - gamma * 6
    factor = 256.0 / (math.log1p(span) / _LOG2 - delta)

    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.log(clamped) / _LOG2 - delta
    val1 = np.where(result > 0, result * factor, 0.0)
    t = gamma1 * val1 + (1 - gamma1) * val0
    return np.clip(round_half_away_array(t), 0, 255).astype(np.uint8)


def _to_display_channels(samples: np.ndarray, channels: int, min_brightness, max_brightness,
                         gamma: float) -> np.ndarray:
    """Convert an (..., channels) sample block into (..., dest_channels) bytes."""
    def display(index: int) -> np.ndarray:
        return calculate_display_value(samples[..., index], min_brightness, max_brightness, gamma)

    if channels == 3:
        opaque = np.full(samples.shape[:-1], 255, dtype=np.uint8)
        return np.stack((display(2), display(1), display(0), opaque), axis=-1)  # B, G, R, A
    if channels == 4:
        return np.stack((display(3), display(2), display(1), display(0)), axis=-1)  # B, G, R, A
    return display(0)[..., np.newaxis]


def convert_to_depth8(pixels: np.ndarray, depth: PixelDepth, min_brightness, max_brightness,
                      gamma: float = 0.0, x: int = 0, y: int = 0, w: int = 0, h: int = 0,
                      scaled_width: int = 0, scaled_height: int = 0, *,
                      display: Optional[DisplayConfig] = None,
                      gamma_table: Optional[GammaTable] = None) -> np.ndarray:
    """
    Render a crop of a (height, width, channels) sample array into a fresh 8-bit buffer.

    Args:
        pixels: Source samples
        depth: Pixel depth of the source
        min_brightness, max_brightness: Display-brightness range
        gamma: Tone-curve blend; 0 for a linear mapping
        x, y, w, h: Source crop; non-positive w/h extend to the image edge
        scaled_width, scaled_height: Output size; non-positive means the crop size
        display: Sentinel and alignment settings
        gamma_table: Gamma cache to consult (defaults to the process-wide one)

    Returns:
        Flat uint8 array of ``aligned_width * scaled_height * dest_channels`` bytes.
        Destination pixels without a source pixel hold the sentinel byte. When
        the output size differs from the crop, the crop is fitted into the output
        keeping its aspect ratio and the letterbox bars hold the sentinel.

    Raises:
        UnsupportedConfigurationError: If the source has an unsupported channel count
    """
    display = display or DisplayConfig()
    gamma_table = gamma_table or get_default_gamma_table()
    height, width, channels = pixels.shape

    if w <= 0:
        w = width - x
    if h <= 0:
        h = height - y
    if scaled_width <= 0:
        scaled_width = w
    if scaled_height <= 0:
        scaled_height = h

    gamma = gamma_table.ensure(gamma)

    if channels == 1:
        dest_channels = 1
        align = display.gray_row_alignment
    elif channels in (3, 4):
        dest_channels = 4
        align = display.color_row_alignment
    else:
        raise UnsupportedConfigurationError(
            f"convert_to_depth8: Unsupported number of channels: {channels}"
        )

    logger.debug(
        f"Converting image to depth 8: {x}/{y} (scaled from {w} x {h} to {scaled_width} x "
        f"{scaled_height}), destChannels={dest_channels}, depth={depth.name}"
    )

    aligned_width = (scaled_width + align - 1) // align * align
    out = np.zeros((max(0, scaled_height), max(0, aligned_width), dest_channels), dtype=np.uint8)
    sentinel = display.sentinel

    def render(src_rows: np.ndarray, src_cols: np.ndarray) -> np.ndarray:
        if height == 0 or width == 0:
            return np.full((src_rows.size, src_cols.size, dest_channels), sentinel, dtype=np.uint8)
        rows_ok = (src_rows >= 0) & (src_rows < height)
        cols_ok = (src_cols >= 0) & (src_cols < width)
        block = pixels[np.clip(src_rows, 0, max(0, height - 1))][:, np.clip(src_cols, 0, max(0, width - 1))]
        rendered = _to_display_channels(block, channels, min_brightness, max_brightness, gamma)
        valid = rows_ok[:, np.newaxis] & cols_ok[np.newaxis, :]
        rendered[~valid] = sentinel
        return rendered

    if scaled_width == w and scaled_height == h:
        if w > 0 and h > 0:
            out[:h, :w] = render(y + np.arange(h), x + np.arange(w))
        return out.ravel()

    if w <= 0 or h <= 0:
        out[...] = sentinel
        return out.ravel()

    aspect_ratio = w / h
    destination_is_wider = scaled_width / scaled_height > aspect_ratio
    if destination_is_wider:
        fill_width = min(scaled_width, round_half_away(scaled_height * aspect_ratio))
        fill_height = scaled_height
    else:
        fill_width = scaled_width
        fill_height = min(scaled_height, round_half_away(scaled_width / aspect_ratio))

    out[fill_height:, :, :] = sentinel
    out[:fill_height, fill_width:, :] = sentinel

    if fill_width > 0 and fill_height > 0:
        src_cols = x + round_half_away_array(np.arange(fill_width) * w / fill_width).astype(np.int64)
        src_rows = y + round_half_away_array(np.arange(fill_height) * h / fill_height).astype(np.int64)
        out[:fill_height, :fill_width] = render(src_rows, src_cols)

    return out.ravel()
