"""
Memory module for OpenBitmap.

This module provides the pixel buffer with an explicit ownership declaration:
buffers are either allocated by the bitmap or borrowed from the caller.
"""

from .buffer import BufferOwnership, PixelBuffer

__all__ = [
    'BufferOwnership',
    'PixelBuffer',
]
