"""
Sub-pixel sampling by multi-directional weighted interpolation.

The general case does not use a plain bilinear average. It forms two
candidate mixes from the four surrounding samples:

- a mix of the four edge-midpoint interpolations (top, bottom, left, right),
  weighted by the proximity of the sampling position to each edge midpoint;
- a direct mix of the four corner samples, weighted by the proximity of the
  sampling position to each corner;

and blends the two with a weight of twice the smallest edge-midpoint distance.
Proximity is ``max(0, 1 - distance)``.
"""

import logging
import math
from typing import Callable, Iterable, Protocol, Tuple, TypeVar

logger = logging.getLogger(__name__)


class Mixable(Protocol):
    def mix(self, items: Iterable[Tuple[float, "Mixable"]]) -> "Mixable":
        ...


M = TypeVar("M", bound=Mixable)
Getter = Callable[[int, int], M]


def interpolate(dx: float, dy: float, min_x: float, min_y: float, max_x: float, max_y: float,
                get: Getter) -> M:
    """
    Sample a mixable value at the real position (dx, dy).

    Args:
        dx, dy: Sampling position
        min_x, min_y, max_x, max_y: Continuous domain the integer position is clamped into
        get: Returns the mixable value at an integer position

    Returns:
        The exact sample when the position is on the integer grid (or has no
        neighbour in the fractional direction), a 1-D mix along one axis, or the
        2-D blend described in the module docstring.
    """
    ix = int(math.floor(max(min_x, min(max_x, dx))))
    iy = int(math.floor(max(min_y, min(max_y, dy))))
    x = dx - ix
    y = dy - iy

    if x <= 0.0 or ix + 1 > max_x:
        if y <= 0.0 or iy + 1 > max_y:
            return get(ix, iy)
        a = get(ix, iy)
        c = get(ix, iy + 1)
        return a.mix([(y, c)])

    if y <= 0.0 or iy + 1 > max_y:
        a = get(ix, iy)
        b = get(ix + 1, iy)
        return a.mix([(x, b)])

    x_neg = 1 - x
    y_neg = 1 - y

    # distances to the corners
    da = math.sqrt(x * x + y * y)                  # top left
    dc = math.sqrt(x * x + y_neg * y_neg)          # bottom left
    db = math.sqrt(x_neg * x_neg + y * y)          # top right
    dd = math.sqrt(x_neg * x_neg + y_neg * y_neg)  # bottom right

    # distances to the edge midpoints
    dab = abs(y)      # top
    dcd = abs(y_neg)  # bottom
    dac = abs(x)      # left
    dbd = abs(x_neg)  # right

    ai = max(0.0, 1 - da)
    bi = max(0.0, 1 - db)
    ci = max(0.0, 1 - dc)
    di = max(0.0, 1 - dd)
    abi = max(0.0, 1 - dab)
    cdi = max(0.0, 1 - dcd)
    aci = max(0.0, 1 - dac)
    bdi = max(0.0, 1 - dbd)

    t = ai + bi + ci + di
    s = abi + cdi + aci + bdi

    a = get(ix, iy)
    b = get(ix + 1, iy)
    c = get(ix, iy + 1)
    d = get(ix + 1, iy + 1)

    ab = a if x == 0.0 else a.mix([(x, b)])  # top
    cd = c if x == 0.0 else c.mix([(x, d)])  # bottom
    ac = a if y == 0.0 else a.mix([(y, c)])  # left
    bd = b if y == 0.0 else b.mix([(y, d)])  # right

    if s == 0.0:
        edge_mix = ab.mix([(0.25, cd), (0.25, ac), (0.25, bd)])
    else:
        edge_mix = ab.mix([(cdi / s, cd), (aci / s, ac), (bdi / s, bd)])

    if t == 0.0:
        corner_mix = a.mix([(0.25, b), (0.25, c), (0.25, d)])
    else:
        corner_mix = a.mix([(bi / t, b), (ci / t, c), (di / t, d)])

    weight = 2 * min(dab, dcd, dac, dbd)
    return edge_mix.mix([(weight, corner_mix)])
