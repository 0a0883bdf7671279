"""
Pixel buffer with declared ownership.

A PixelBuffer exposes its samples as a flat numpy array of the pixel dtype.
OWNED buffers are allocated (zeroed) by the buffer itself. BORROWED buffers are
zero-copy views onto memory the caller manages; the caller keeps that memory
alive for the lifetime of every bitmap that borrows it and releases it
afterwards.
"""

import ctypes
import logging
from enum import Enum
from typing import Any, Optional

import numpy as np

from openbitmap.constants.constants import PixelDepth

logger = logging.getLogger(__name__)


class BufferOwnership(Enum):
    OWNED = "owned"
    BORROWED = "borrowed"


class PixelBuffer:
    """
    Flat sample storage for one bitmap.

    Attributes:
        array: Flat numpy array of ``count`` samples of the pixel dtype
        ownership: Whether the bitmap allocated the memory or borrows it
        source: The caller object a borrowed buffer views (kept referenced)
    """

    def __init__(self, array: np.ndarray, ownership: BufferOwnership, source: Any = None):
        if array.ndim != 1:
            raise ValueError(f"PixelBuffer requires a flat array, got {array.ndim}D")
        self._array = array
        self._ownership = ownership
        self._source = source

    @classmethod
    def allocate(cls, count: int, depth: PixelDepth) -> "PixelBuffer":
        """Allocate a zeroed buffer of ``count`` samples."""
        return cls(np.zeros(count, dtype=depth.dtype), BufferOwnership.OWNED)

    @classmethod
    def borrow(cls, source: Any, count: int, depth: PixelDepth) -> "PixelBuffer":
        """
        Wrap caller memory without copying.

        Args:
            source: Any object exposing the buffer protocol (numpy array, bytearray,
                memoryview, ctypes array) or an integer memory address
            count: Number of samples the bitmap needs
            depth: Pixel depth the memory is interpreted as

        Raises:
            ValueError: If the memory is smaller than ``count`` samples or not contiguous
        """
        nbytes = count * depth.itemsize

        if isinstance(source, int) and not isinstance(source, bool):
            if source == 0:
                raise ValueError("PixelBuffer.borrow: null address")
            memory = (ctypes.c_ubyte * nbytes).from_address(source)
        else:
            memory = source

        if isinstance(memory, np.ndarray) and not memory.flags.c_contiguous:
            raise ValueError("PixelBuffer.borrow: borrowed numpy arrays must be C-contiguous")

        available = memoryview(memory).nbytes
        if available < nbytes:
            raise ValueError(
                f"PixelBuffer.borrow: buffer holds {available} bytes, {nbytes} required"
            )

        array = np.frombuffer(memory, dtype=depth.dtype, count=count)
        logger.debug(f"Borrowed {nbytes} bytes at 0x{array.ctypes.data:x} as {depth.name}")
        return cls(array, BufferOwnership.BORROWED, source=memory)

    @property
    def array(self) -> np.ndarray:
        return self._array

    @property
    def ownership(self) -> BufferOwnership:
        return self._ownership

    @property
    def is_borrowed(self) -> bool:
        return self._ownership is BufferOwnership.BORROWED

    @property
    def source(self) -> Optional[Any]:
        return self._source

    @property
    def address(self) -> int:
        return self._array.ctypes.data

    @property
    def nbytes(self) -> int:
        return self._array.nbytes

    def copy(self) -> "PixelBuffer":
        """Deep copy into a freshly owned buffer."""
        return PixelBuffer(self._array.copy(), BufferOwnership.OWNED)
