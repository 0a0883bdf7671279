"""Tests for the depth-erased Bitmap facade and its parameter records."""
import copy
import ctypes

import numpy as np
import pytest

from openbitmap import Bitmap, BitmapDataFloat64, BitmapDataUInt16, Color, PixelDepth
from openbitmap.constants.constants import depth_from_tag
from openbitmap.core.exceptions import (EmptyBitmapError, GeometryMismatchError,
                                        MissingParameterError,
                                        UnsupportedConfigurationError,
                                        UnsupportedDepthError)


@pytest.fixture
def record():
    memory = np.zeros(4 * 3 * 4, dtype=np.uint16)
    return {
        "imageBuffer": memory,
        "width": 4,
        "height": 3,
        "channels": 4,
        "depth": 2,
        "minBrightness": 10.0,
        "maxBrightness": 1000.0,
    }


class TestConstruction:

    @pytest.mark.parametrize("depth, tag", [(1, 0), (2, 1), (4, 2), (8, 3), (-8, 4)])
    def test_depth_and_tag(self, depth, tag):
        bitmap = Bitmap.allocate(4, 3, 3, depth)

        assert (bitmap.depth, bitmap.tag) == (depth, tag)
        assert bitmap.data.depth == depth
        assert not bitmap.empty

    def test_unsupported_depth(self):
        with pytest.raises(UnsupportedDepthError) as error:
            Bitmap.allocate(2, 2, 1, 3)

        assert error.value.depth == 3

    def test_unsupported_channels(self):
        with pytest.raises(UnsupportedConfigurationError):
            Bitmap.allocate(2, 2, 2, 1)

    def test_default_is_empty(self):
        bitmap = Bitmap()

        assert bitmap.empty
        assert (bitmap.width, bitmap.height) == (0, 0)

    def test_wraps_typed_data(self):
        data = BitmapDataFloat64(2, 2, 1)

        bitmap = Bitmap(data)

        assert bitmap.data is data
        assert bitmap.data_as(PixelDepth.FLOAT64) is data
        assert bitmap.pixel_depth is PixelDepth.FLOAT64

    def test_data_as_other_depth(self):
        with pytest.raises(UnsupportedDepthError):
            Bitmap.allocate(1, 1, 1, 1).data_as(PixelDepth.UINT16)

    def test_corrupt_tag_is_rejected_at_dispatch(self):
        bitmap = Bitmap.allocate(1, 1, 1, 1)
        bitmap._tag = 7

        with pytest.raises(UnsupportedDepthError) as error:
            bitmap.width

        assert error.value.depth == depth_from_tag(7)
        assert "Bitmap.width" in str(error.value)


class TestParameterRecord:

    def test_round_trip(self, record):
        bitmap = Bitmap.from_parameters(record)

        again = Bitmap.from_parameters(bitmap.to_parameters())

        assert (again.width, again.height, again.channels, again.depth) == (4, 3, 4, 2)
        assert again.buffer.address == record["imageBuffer"].ctypes.data
        assert (again.min_brightness, again.max_brightness) == (10, 1000)
        assert again.buffer.is_borrowed

    def test_borrowed_buffer_is_shared(self, record):
        bitmap = Bitmap.from_parameters(record)

        bitmap.data.plot(3, 2, Color(1, 2, 3, 4, depth=PixelDepth.UINT16))

        assert list(record["imageBuffer"][-4:]) == [4, 1, 2, 3]

    def test_brightness_is_optional(self, record):
        del record["minBrightness"]
        del record["maxBrightness"]

        bitmap = Bitmap.from_parameters(record)

        assert (bitmap.min_brightness, bitmap.max_brightness) == (0, 65535)

    @pytest.mark.parametrize("key", ["imageBuffer", "width", "height", "channels", "depth"])
    def test_missing_key(self, record, key):
        del record[key]

        with pytest.raises(MissingParameterError) as error:
            Bitmap.from_parameters(record)

        assert error.value.key == key
        assert "Bitmap.from_parameters" in str(error.value)

    @pytest.mark.parametrize("key, value", [
        ("width", "4"), ("channels", True), ("depth", 2.0), ("imageBuffer", "memory"),
        ("imageBuffer", 0), ("minBrightness", "low"),
    ])
    def test_ill_typed_value(self, record, key, value):
        record[key] = value

        with pytest.raises(MissingParameterError, match=key):
            Bitmap.from_parameters(record)

    def test_numpy_integers_are_accepted(self, record):
        record["width"] = np.int64(4)

        assert Bitmap.from_parameters(record).width == 4

    def test_unsupported_depth_in_record(self, record):
        record["depth"] = 16

        with pytest.raises(UnsupportedDepthError):
            Bitmap.from_parameters(record)

    def test_custom_buffer_key(self, record):
        record["pixels"] = record.pop("imageBuffer")

        assert Bitmap.from_parameters(record, buffer_key="pixels").width == 4

    def test_integer_address(self):
        memory = (ctypes.c_uint8 * 4)()
        record = {"imageBuffer": ctypes.addressof(memory), "width": 2, "height": 2,
                  "channels": 1, "depth": 1}

        bitmap = Bitmap.from_parameters(record)
        bitmap.data.plot(1, 0, Color.from_gray(42))

        assert memory[1] == 42
        assert bitmap.buffer.address == ctypes.addressof(memory)

    def test_empty_bitmap_cannot_be_exported(self):
        with pytest.raises(EmptyBitmapError):
            Bitmap().to_parameters()


class TestDelegation:

    def test_brightness_setters_truncate_and_clamp(self):
        bitmap = Bitmap.allocate(1, 1, 1, 1)

        bitmap.max_brightness = 300.7
        bitmap.min_brightness = 12.9

        assert (bitmap.min_brightness, bitmap.max_brightness) == (12, 255)

    def test_float_brightness_keeps_fraction(self):
        bitmap = Bitmap.allocate(1, 1, 1, -8)

        bitmap.set_brightness_range_for_display(0.25, 0.75)

        assert (bitmap.min_brightness, bitmap.max_brightness) == (0.25, 0.75)

    def test_absolute_diff(self):
        left = Bitmap.allocate(2, 1, 1, 2)
        right = Bitmap.allocate(2, 1, 1, 2)
        left.data.pixels[..., 0] = [5, 100]
        right.data.pixels[..., 0] = [10, 1]

        result = left.absolute_diff(right)

        assert isinstance(result, Bitmap)
        assert list(result.data.pixels.ravel()) == [5, 99]

    def test_absolute_diff_of_different_depths(self):
        with pytest.raises(GeometryMismatchError):
            Bitmap.allocate(1, 1, 1, 1).absolute_diff(Bitmap.allocate(1, 1, 1, 2))

    def test_contains_colors(self):
        bitmap = Bitmap.allocate(1, 1, 3, 1)
        assert not bitmap.contains_colors()

        bitmap.data.plot(0, 0, Color(1, 2, 3))
        assert bitmap.contains_colors()

    def test_convert_to_depth8(self, gamma_table):
        bitmap = Bitmap(BitmapDataUInt16(1, 1, 3))
        bitmap.set_brightness_range_for_display(0, 100)
        bitmap.data.plot(0, 0, Color(100, 50, 0, depth=PixelDepth.UINT16))

        assert list(bitmap.convert_to_depth8(gamma_table=gamma_table)) == [0, 128, 255, 255]

    def test_copy_is_deep(self):
        bitmap = Bitmap.allocate(2, 2, 1, 1)

        duplicate = copy.deepcopy(bitmap)
        duplicate.data.plot(0, 0, Color.from_gray(9))

        assert duplicate == bitmap
        assert duplicate.buffer.address != bitmap.buffer.address
        assert bitmap.data.get_gray(0, 0) == 0

    def test_equality_is_geometry(self):
        assert Bitmap.allocate(2, 2, 1, 1) == Bitmap.allocate(2, 2, 1, 1)
        assert Bitmap.allocate(2, 2, 1, 1) != Bitmap.allocate(2, 2, 1, 2)
