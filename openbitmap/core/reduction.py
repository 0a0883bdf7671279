"""
Parallel region reductions over gray samples.

A rectangle is split into horizontal row bands. Each band is reduced on a
worker thread into a BandSummary (two largest and two smallest samples with
their positions, the bounding box of samples equal to the band maximum, sum and
count). The summaries are merged on the calling thread in row order.

Ties between equal samples always resolve to the first position in row-major
order, independently of how the rectangle was partitioned.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import numpy as np

from openbitmap.constants.constants import PixelDepth
from openbitmap.core.config import ParallelConfig

logger = logging.getLogger(__name__)

# (value, y, x); row-major position breaks ties
Sample = Tuple[object, int, int]
GrayReader = Callable[[int, int, int, int], np.ndarray]


@dataclass(frozen=True)
class Rect:
    """Inclusive pixel rectangle."""
    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return max(0, self.x1 - self.x0 + 1)

    @property
    def height(self) -> int:
        return max(0, self.y1 - self.y0 + 1)

    @property
    def count(self) -> int:
        return self.width * self.height

    def is_empty(self) -> bool:
        return self.count == 0


def clamp_rect(x0: int, y0: int, x1: int, y1: int, width: int, height: int) -> Rect:
    """Clamp a caller rectangle into [0, width-1] x [0, height-1]."""
    return Rect(max(0, x0), max(0, y0), min(width - 1, x1), min(height - 1, y1))


@dataclass
class BandSummary:
    top: List[Sample] = field(default_factory=list)
    bottom: List[Sample] = field(default_factory=list)
    max_box: Optional[Tuple[int, int, int, int]] = None
    total: object = 0
    count: int = 0


def _band_sum(samples: np.ndarray, depth: PixelDepth):
    if depth.is_float:
        return float(np.sum(samples, dtype=np.float64))
    if depth is PixelDepth.UINT64:
        return int(np.sum(samples.astype(object)))
    return int(np.sum(samples, dtype=np.uint64))


def _two_extremes(flat: np.ndarray, pick: Callable[[np.ndarray], int]) -> List[int]:
    """Flat indices of the first and second extremum (first occurrence wins ties)."""
    first = int(pick(flat))
    if flat.size == 1:
        return [first]
    rest = np.concatenate((flat[:first], flat[first + 1:]))
    second = int(pick(rest))
    if second >= first:
        second += 1
    return [first, second]


def summarize_band(read_gray: GrayReader, rect: Rect, depth: PixelDepth) -> BandSummary:
    """Reduce one band of the rectangle."""
    samples = read_gray(rect.x0, rect.y0, rect.x1, rect.y1)
    flat = samples.ravel()
    if flat.size == 0:
        return BandSummary()

    width = rect.width

    def to_sample(index: int) -> Sample:
        y, x = divmod(index, width)
        return (flat[index].item(), rect.y0 + y, rect.x0 + x)

    top = [to_sample(i) for i in _two_extremes(flat, np.argmax)]
    bottom = [to_sample(i) for i in _two_extremes(flat, np.argmin)]

    ys, xs = np.nonzero(samples == samples.ravel()[np.argmax(flat)])
    max_box = (rect.x0 + int(xs.min()), rect.y0 + int(ys.min()),
               rect.x0 + int(xs.max()), rect.y0 + int(ys.max()))

    return BandSummary(top=top, bottom=bottom, max_box=max_box,
                       total=_band_sum(flat, depth), count=int(flat.size))


def merge_summaries(summaries: List[BandSummary]) -> BandSummary:
    """Fold band summaries in row order into one summary of the whole rectangle."""
    merged = BandSummary()
    for summary in summaries:
        if summary.count == 0:
            continue

        if merged.count == 0 or summary.top[0][0] > merged.top[0][0]:
            merged.max_box = summary.max_box
        elif summary.top[0][0] == merged.top[0][0]:
            ax0, ay0, ax1, ay1 = merged.max_box
            bx0, by0, bx1, by1 = summary.max_box
            merged.max_box = (min(ax0, bx0), min(ay0, by0), max(ax1, bx1), max(ay1, by1))

        merged.top = sorted(merged.top + summary.top,
                            key=lambda s: (-s[0], s[1], s[2]))[:2]
        merged.bottom = sorted(merged.bottom + summary.bottom,
                               key=lambda s: (s[0], s[1], s[2]))[:2]
        merged.total += summary.total
        merged.count += summary.count

    return merged


def split_rows(rect: Rect, config: ParallelConfig) -> List[Rect]:
    """Partition a rectangle into contiguous row bands, one per worker at most."""
    if rect.is_empty():
        return []
    max_bands = max(1, math.ceil(rect.height / max(1, config.min_rows_per_band)))
    num_bands = max(1, min(config.num_workers, max_bands))
    rows_per_band = math.ceil(rect.height / num_bands)

    bands = []
    for start in range(rect.y0, rect.y1 + 1, rows_per_band):
        end = min(rect.y1, start + rows_per_band - 1)
        bands.append(Rect(rect.x0, start, rect.x1, end))
    return bands


def _fan_out(function: Callable, bands: List[Rect], config: ParallelConfig) -> list:
    if len(bands) <= 1:
        return [function(band) for band in bands]
    logger.debug(f"Reducing {len(bands)} bands on {config.num_workers} workers")
    with ThreadPoolExecutor(max_workers=min(config.num_workers, len(bands)),
                            thread_name_prefix="openbitmap-reduce-") as executor:
        # map preserves band order, which the merge step relies on
        return list(executor.map(function, bands))


def reduce_region(read_gray: GrayReader, rect: Rect, depth: PixelDepth,
                  config: ParallelConfig) -> BandSummary:
    """Summarize every gray sample inside ``rect``."""
    bands = split_rows(rect, config)
    summaries = _fan_out(lambda band: summarize_band(read_gray, band, depth), bands, config)
    return merge_summaries(summaries)


def standard_deviation(read_gray: GrayReader, rect: Rect, mean: float,
                       config: ParallelConfig) -> float:
    """
    Population standard deviation, as a second pass over the rectangle.

    Bands only produce the squared deviations; they are summed once with
    ``math.fsum``, which is exactly rounded, so the result does not depend on
    how the rectangle was partitioned.
    """
    if rect.is_empty():
        return 0.0

    def squared_deviations(band: Rect) -> np.ndarray:
        samples = read_gray(band.x0, band.y0, band.x1, band.y1).astype(np.float64)
        return ((samples - mean) ** 2).ravel()

    bands = split_rows(rect, config)
    total = math.fsum(np.concatenate(_fan_out(squared_deviations, bands, config)).tolist())
    return math.sqrt(total / rect.count)


def biased_average(total, count: int, depth: PixelDepth):
    """Region average with the fixed +1 rounding offset: (sum + 1) / count."""
    if count == 0:
        return depth.cast(0)
    if depth.is_float:
        return (total + 1) / count
    return (total + 1) // count
