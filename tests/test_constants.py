"""Tests for the depth encoding and channel layouts."""
import numpy as np
import pytest

from openbitmap.constants import ChannelLayout, PixelDepth
from openbitmap.constants.constants import depth_from_tag
from openbitmap.core.exceptions import UnsupportedConfigurationError, UnsupportedDepthError
from openbitmap.core.memory import BufferOwnership, PixelBuffer


class TestPixelDepth:

    @pytest.mark.parametrize("depth, dtype", [
        (1, np.uint8), (2, np.uint16), (4, np.uint32), (8, np.uint64), (-8, np.float64),
    ])
    def test_encoding_round_trips(self, depth, dtype):
        pixel_depth = PixelDepth.from_depth(depth)

        assert pixel_depth.dtype == np.dtype(dtype)
        assert pixel_depth.value == depth
        assert depth_from_tag(pixel_depth.tag) == depth
        assert PixelDepth.from_tag(pixel_depth.tag) is pixel_depth

    @pytest.mark.parametrize("depth", [0, 3, 16, -4])
    def test_other_depths_are_rejected(self, depth):
        with pytest.raises(UnsupportedDepthError, match=f"Unsupported image depth {depth}"):
            PixelDepth.from_depth(depth)

    def test_invalid_tag(self):
        with pytest.raises(UnsupportedDepthError):
            PixelDepth.from_tag(5)

    def test_bounds(self):
        assert PixelDepth.UINT64.max_value == 2 ** 64 - 1
        assert PixelDepth.UINT8.lowest == 0
        assert PixelDepth.FLOAT64.lowest == -PixelDepth.FLOAT64.max_value


class TestChannelLayout:

    def test_roles(self):
        assert (ChannelLayout.GRAY.gray_index, ChannelLayout.GRAY.alpha_index) == (0, None)
        assert (ChannelLayout.RGB.red_index, ChannelLayout.RGB.blue_index) == (0, 2)
        argb = ChannelLayout.ARGB
        assert (argb.alpha_index, argb.red_index, argb.green_index, argb.blue_index) == (0, 1, 2, 3)

    @pytest.mark.parametrize("channels", [0, 2, 5])
    def test_unsupported_channel_counts(self, channels):
        with pytest.raises(UnsupportedConfigurationError):
            ChannelLayout.from_channels(channels)


class TestPixelBuffer:

    def test_allocate_is_zeroed_and_owned(self):
        buffer = PixelBuffer.allocate(6, PixelDepth.UINT32)

        assert buffer.ownership is BufferOwnership.OWNED
        assert buffer.nbytes == 24
        assert not buffer.array.any()

    def test_copy_of_borrowed_buffer_is_owned(self):
        memory = np.arange(4, dtype=np.uint8)
        borrowed = PixelBuffer.borrow(memory, 4, PixelDepth.UINT8)

        owned = borrowed.copy()

        assert owned.ownership is BufferOwnership.OWNED
        assert owned.address != borrowed.address
        np.testing.assert_array_equal(owned.array, memory)

    def test_non_contiguous_arrays_are_rejected(self):
        with pytest.raises(ValueError, match="contiguous"):
            PixelBuffer.borrow(np.zeros(8, dtype=np.uint8)[::2], 4, PixelDepth.UINT8)
