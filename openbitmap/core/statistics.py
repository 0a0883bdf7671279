"""
Region statistics over the gray samples of a bitmap.

Each function reduces a clamped rectangle once (see ``reduction``) and reads
its answer off the merged summary. Results are frozen dataclasses; coordinates
that were never established (empty region, or no sample beyond the starting
value of the search) are ``None``.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from openbitmap.constants.constants import PixelDepth
from openbitmap.core.color import Color
from openbitmap.core.config import ParallelConfig
from openbitmap.core.reduction import (GrayReader, Rect,
                                       biased_average, reduce_region,
                                       standard_deviation)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColorExtremum:
    """Brightest or darkest color of a region, compared by gray value."""
    color: Color
    x: Optional[int]
    y: Optional[int]


@dataclass(frozen=True)
class MaxGrayResult:
    """Brightest, second brightest and darkest gray sample of a region."""
    value: object
    x: Optional[int]
    y: Optional[int]
    average: object
    second_value: object
    second_x: Optional[int]
    second_y: Optional[int]
    darkest_value: object
    darkest_x: Optional[int]
    darkest_y: Optional[int]
    std_deviation: Optional[float] = None
    """Population standard deviation; only computed on request."""


@dataclass(frozen=True)
class MaxGray2Result:
    """
    Brightest gray sample of a region, located at the centre of the bounding box
    of every sample equal to it.
    """
    value: object
    x: Optional[float]
    y: Optional[float]
    average: object
    second_value: object
    second_x: Optional[int]
    second_y: Optional[int]


@dataclass(frozen=True)
class MinGrayResult:
    """Darkest and second darkest gray sample of a region."""
    value: object
    x: Optional[int]
    y: Optional[int]
    average: object
    second_value: object
    second_x: Optional[int]
    second_y: Optional[int]


def _above(samples, index: int, floor):
    """The indexed sample if it lies strictly above ``floor``, else (floor, None, None)."""
    if len(samples) > index and samples[index][0] > floor:
        return samples[index]
    return (floor, None, None)


def _below(samples, index: int, ceiling):
    if len(samples) > index and samples[index][0] < ceiling:
        return samples[index]
    return (ceiling, None, None)


def max_gray(read_gray: GrayReader, rect: Rect, depth: PixelDepth, config: ParallelConfig,
             with_std_deviation: bool = False) -> MaxGrayResult:
    """
    Brightest and second brightest gray sample of ``rect``, plus its darkest one.

    The search starts from zero: a region whose samples never exceed zero
    reports zero without coordinates. Equal samples count separately, so the
    second brightest equals the brightest when the maximum occurs twice.
    """
    summary = reduce_region(read_gray, rect, depth, config)
    floor = depth.cast(0)

    value, x, y = _as_xy(_above(summary.top, 0, floor))
    second_value, second_x, second_y = _as_xy(_above(summary.top, 1, floor))
    darkest_value, darkest_x, darkest_y = _as_xy(_below(summary.bottom, 0, depth.max_value))

    std = None
    if with_std_deviation:
        mean = summary.total / summary.count if summary.count else 0.0
        std = standard_deviation(read_gray, rect, float(mean), config)

    return MaxGrayResult(value=value, x=x, y=y,
                         average=biased_average(summary.total, summary.count, depth),
                         second_value=second_value, second_x=second_x, second_y=second_y,
                         darkest_value=darkest_value, darkest_x=darkest_x, darkest_y=darkest_y,
                         std_deviation=std)


def max_gray2(read_gray: GrayReader, rect: Rect, depth: PixelDepth,
              config: ParallelConfig) -> MaxGray2Result:
    """
    Brightest gray sample of ``rect`` located at the midpoint of its tie box.

    The search has no floor: the true maximum is reported, and a region with a
    single pixel reports the depth's lowest value as second brightest.
    """
    summary = reduce_region(read_gray, rect, depth, config)
    lowest = depth.lowest
    average = biased_average(summary.total, summary.count, depth)

    if summary.count == 0:
        return MaxGray2Result(value=lowest, x=None, y=None, average=average,
                              second_value=lowest, second_x=None, second_y=None)

    x0, y0, x1, y1 = summary.max_box
    second_value, second_x, second_y = _as_xy(
        summary.top[1] if len(summary.top) > 1 else (lowest, None, None)
    )
    return MaxGray2Result(value=summary.top[0][0], x=(x0 + x1) / 2.0, y=(y0 + y1) / 2.0,
                          average=average, second_value=second_value,
                          second_x=second_x, second_y=second_y)


def min_gray(read_gray: GrayReader, rect: Rect, depth: PixelDepth,
             config: ParallelConfig) -> MinGrayResult:
    """Darkest and second darkest gray sample of ``rect``; the search starts from the depth maximum."""
    summary = reduce_region(read_gray, rect, depth, config)
    ceiling = depth.max_value

    value, x, y = _as_xy(_below(summary.bottom, 0, ceiling))
    second_value, second_x, second_y = _as_xy(_below(summary.bottom, 1, ceiling))

    return MinGrayResult(value=value, x=x, y=y,
                         average=biased_average(summary.total, summary.count, depth),
                         second_value=second_value, second_x=second_x, second_y=second_y)


def _as_xy(sample):
    """Reorder a (value, y, x) sample into (value, x, y)."""
    value, y, x = sample
    return value, x, y


def max_color(read_gray: GrayReader, get_color: Callable[[int, int], Color], rect: Rect,
              depth: PixelDepth, config: ParallelConfig) -> ColorExtremum:
    """Brightest color of ``rect``; the search starts from the depth's lowest value."""
    summary = reduce_region(read_gray, rect, depth, config)
    value, x, y = _as_xy(_above(summary.top, 0, depth.lowest))
    if x is None:
        return ColorExtremum(Color.from_gray(value, depth=depth), None, None)
    return ColorExtremum(get_color(x, y), x, y)


def min_color(read_gray: GrayReader, get_color: Callable[[int, int], Color], rect: Rect,
              depth: PixelDepth, config: ParallelConfig) -> ColorExtremum:
    """Darkest color of ``rect``; the search starts from the depth maximum."""
    summary = reduce_region(read_gray, rect, depth, config)
    value, x, y = _as_xy(_below(summary.bottom, 0, depth.max_value))
    if x is None:
        return ColorExtremum(Color.from_gray(value, depth=depth), None, None)
    return ColorExtremum(get_color(x, y), x, y)
