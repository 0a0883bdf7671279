"""Global pytest configuration and shared bitmap fixtures for OpenBitmap tests."""
import os

import numpy as np
import pytest

from openbitmap.constants import PixelDepth
from openbitmap.core.bitmap_data import BitmapDataUInt8
from openbitmap.core.color import Color
from openbitmap.core.config import GlobalBitmapConfig, ParallelConfig
from openbitmap.core.display import GammaTable


def pytest_addoption(parser):
    """Add command-line options for reduction test configuration."""

    # Helper function to get default from environment variable
    def env_default(env_var, default_value):
        return os.getenv(env_var, default_value)

    parser.addoption(
        "--ob-workers",
        action="store",
        default=env_default("OB_TEST_WORKERS", "4"),
        help="Worker threads used by region-reduction tests (default: 4)."
    )


@pytest.fixture
def bitmap_config(request):
    """Config that splits every region into single-row bands across several workers."""
    workers = int(request.config.getoption("--ob-workers"))
    return GlobalBitmapConfig(parallel=ParallelConfig(num_workers=workers, min_rows_per_band=1))


@pytest.fixture
def serial_config():
    return GlobalBitmapConfig(parallel=ParallelConfig(num_workers=1, min_rows_per_band=1))


@pytest.fixture
def gamma_table():
    """A private gamma cache, so tests never share the process-wide one."""
    return GammaTable()


@pytest.fixture(params=list(PixelDepth), ids=lambda depth: depth.name)
def pixel_depth(request):
    return request.param


@pytest.fixture
def gradient_gray():
    """5 x 4 single-channel uint8 bitmap; pixel (x, y) holds 10 * (y * 5 + x)."""
    data = BitmapDataUInt8(5, 4, 1)
    data.pixels[..., 0] = (np.arange(20, dtype=np.uint8) * 10).reshape(4, 5)
    return data


@pytest.fixture
def primaries_rgb():
    """3 x 1 RGB uint8 bitmap holding pure red, blue and green."""
    data = BitmapDataUInt8(3, 1, 3)
    data.plot(0, 0, Color(255, 0, 0))
    data.plot(1, 0, Color(0, 0, 255))
    data.plot(2, 0, Color(0, 255, 0))
    return data
