"""Tests for 8-bit display conversion and the gamma cache."""
import numpy as np
import pytest

from openbitmap.constants import PixelDepth
from openbitmap.core.bitmap_data import BitmapDataUInt8, BitmapDataUInt16
from openbitmap.core.color import Color
from openbitmap.core.config import DisplayConfig, GlobalBitmapConfig
from openbitmap.core.display import (GammaTable, calculate_display_value,
                                     convert_to_depth8)

SENTINEL = 55


@pytest.fixture
def small_gray():
    """3 x 2 gray uint8 bitmap with values that never map onto the sentinel."""
    data = BitmapDataUInt8(3, 2, 1)
    data.pixels[..., 0] = [[0, 100, 200], [255, 100, 0]]
    return data


class TestCalculateDisplayValue:

    def test_full_range_is_identity(self):
        values = np.arange(256, dtype=np.uint8)

        np.testing.assert_array_equal(calculate_display_value(values, 0, 255, 0.0), values)

    def test_linear_rescale_rounds_half_away(self):
        result = calculate_display_value(np.array([500, 2000, 0], dtype=np.uint16), 0, 1000, 0.0)

        assert list(result) == [128, 255, 0]

    def test_values_below_range_clamp_to_zero(self):
        result = calculate_display_value(np.array([5, 10, 20], dtype=np.uint16), 10, 20, 0.0)

        assert list(result) == [0, 0, 255]

    def test_degenerate_range_maps_to_zero(self):
        result = calculate_display_value(np.array([3, 7], dtype=np.uint8), 7, 7, 0.0)

        assert list(result) == [0, 0]

    def test_gamma_blends_logarithmic_curve(self):
        result = calculate_display_value(np.array([64, 128, 255], dtype=np.uint8), 0, 255, 0.5)

        assert list(result) == [0, 128, 255]


class TestUnscaledConversion:

    def test_gray_rows_are_padded_to_four(self, small_gray, gamma_table):
        out = small_gray.convert_to_depth8(gamma_table=gamma_table)

        assert out.dtype == np.uint8
        assert list(out) == [0, 100, 200, 0, 255, 100, 0, 0]

    def test_in_bounds_crop_never_emits_sentinel(self, small_gray, gamma_table):
        out = small_gray.convert_to_depth8(0.0, 1, 0, 2, 2, gamma_table=gamma_table)

        assert SENTINEL not in out
        assert list(out) == [100, 200, 0, 0, 100, 0, 0, 0]

    def test_crop_beyond_bounds_fills_sentinel(self, gamma_table):
        data = BitmapDataUInt8(2, 2, 1)
        data.fill(Color.from_gray(100))

        out = data.convert_to_depth8(0.0, 1, 0, 2, 2, gamma_table=gamma_table)

        assert list(out) == [100, SENTINEL, 0, 0, 100, SENTINEL, 0, 0]

    def test_rgb_becomes_bgra(self, gamma_table):
        data = BitmapDataUInt8(1, 1, 3)
        data.plot(0, 0, Color(10, 20, 30))

        assert list(data.convert_to_depth8(gamma_table=gamma_table)) == [30, 20, 10, 255]

    def test_argb_becomes_bgra(self, gamma_table):
        data = BitmapDataUInt8(1, 1, 4)
        data.plot(0, 0, Color(10, 20, 30, 40))

        assert list(data.convert_to_depth8(gamma_table=gamma_table)) == [30, 20, 10, 40]

    def test_out_of_bounds_color_pixels_fill_every_channel(self, gamma_table):
        data = BitmapDataUInt8(1, 1, 4)
        data.fill(Color(1, 2, 3, 4))

        out = data.convert_to_depth8(0.0, -1, 0, 2, 1, gamma_table=gamma_table)

        assert list(out[:4]) == [SENTINEL] * 4
        assert list(out[4:]) == [3, 2, 1, 4]

    def test_brightness_range_is_applied(self, gamma_table):
        data = BitmapDataUInt16(2, 1, 1)
        data.set_brightness_range_for_display(0, 1000)
        data.pixels[..., 0] = [500, 4000]

        assert list(data.convert_to_depth8(gamma_table=gamma_table)) == [128, 255, 0, 0]

    def test_custom_display_config(self, small_gray, gamma_table):
        config = GlobalBitmapConfig(display=DisplayConfig(sentinel=7, gray_row_alignment=1))

        out = small_gray.convert_to_depth8(0.0, 2, 0, 2, 1, gamma_table=gamma_table, config=config)

        assert list(out) == [200, 7]


class TestScaledConversion:

    @pytest.fixture
    def square(self):
        data = BitmapDataUInt8(2, 2, 1)
        data.pixels[..., 0] = [[10, 20], [30, 40]]
        return data

    def test_wider_destination_gets_right_bar(self, square, gamma_table):
        out = square.convert_to_depth8(0.0, 0, 0, 0, 0, 4, 2, gamma_table=gamma_table)

        assert list(out) == [10, 20, SENTINEL, SENTINEL, 30, 40, SENTINEL, SENTINEL]

    def test_taller_destination_gets_bottom_bar(self, square, gamma_table):
        out = square.convert_to_depth8(0.0, 0, 0, 0, 0, 2, 4, gamma_table=gamma_table).reshape(4, 4)

        assert list(out[0, :2]) == [10, 20]
        assert list(out[1, :2]) == [30, 40]
        assert (out[2:] == SENTINEL).all()

    def test_downscale_uses_nearest_neighbour(self, gamma_table):
        data = BitmapDataUInt8(4, 4, 1)
        data.pixels[..., 0] = np.arange(16, dtype=np.uint8).reshape(4, 4) * 10

        out = data.convert_to_depth8(0.0, 0, 0, 0, 0, 2, 2, gamma_table=gamma_table).reshape(2, 4)

        assert list(out[:, :2].ravel()) == [0, 20, 80, 100]

    def test_color_letterbox(self, gamma_table):
        data = BitmapDataUInt8(1, 1, 3)
        data.plot(0, 0, Color(1, 2, 3))

        out = data.convert_to_depth8(0.0, 0, 0, 0, 0, 2, 1, gamma_table=gamma_table)

        assert list(out) == [3, 2, 1, 255] + [SENTINEL] * 4


class TestGammaTable:

    def test_regenerates_only_on_change(self, gamma_table):
        gamma_table.ensure(0.3)
        gamma_table.ensure(0.3)

        assert gamma_table.regenerations == 1

        gamma_table.ensure(0.4)
        assert gamma_table.regenerations == 2
        assert gamma_table.current_gamma == 0.4

    def test_conversion_updates_injected_table(self, small_gray, gamma_table):
        small_gray.convert_to_depth8(0.25, gamma_table=gamma_table)
        small_gray.convert_to_depth8(0.25, gamma_table=gamma_table)

        assert gamma_table.current_gamma == 0.25
        assert gamma_table.regenerations == 1

    def test_linear_table(self, gamma_table):
        gamma_table.ensure(0.0)
        table = gamma_table.table()

        assert len(table) == 65536
        assert (table[0], table[256], table[65535]) == (0, 1, 255)

    def test_tables_are_independent(self):
        first = GammaTable()
        second = GammaTable()

        first.ensure(0.5)

        assert second.current_gamma is None


def test_module_function_on_raw_pixels(gamma_table):
    pixels = np.array([[[7]]], dtype=np.uint8)

    out = convert_to_depth8(pixels, PixelDepth.UINT8, 0, 255, gamma_table=gamma_table)

    assert list(out) == [7, 0, 0, 0]
