"""
Custom exceptions for the OpenBitmap core system.
Ensures that errors are specific and fail loudly.
"""


class OpenBitmapError(Exception):
    """Base class for all OpenBitmap custom exceptions."""
    pass


class UnsupportedConfigurationError(OpenBitmapError, ValueError):
    """Raised when a bitmap is configured with an unsupported channel count or depth."""
    pass


class UnsupportedDepthError(UnsupportedConfigurationError):
    """
    Raised when a depth value or alternative tag is outside the closed set of pixel types.

    Attributes:
        depth: The offending signed depth value
        operation: The operation that rejected it
    """

    def __init__(self, depth: int, operation: str):
        self.depth = depth
        self.operation = operation
        super().__init__(f"{operation}: Unsupported image depth {depth}")


class GeometryMismatchError(OpenBitmapError, ValueError):
    """
    Raised when an operation requires two bitmaps of identical geometry.

    Attributes:
        operation: The operation that was attempted
        left: (width, height, channels, depth) of the receiver
        right: (width, height, channels, depth) of the argument
    """

    def __init__(self, operation: str, left: tuple, right: tuple):
        self.operation = operation
        self.left = left
        self.right = right
        super().__init__(
            f"{operation}: Bitmaps have different geometry "
            f"(width, height, channels, depth): {left} != {right}"
        )


class MissingParameterError(OpenBitmapError, KeyError):
    """
    Raised when a required field is absent from a parameter record or has the wrong type.

    Attributes:
        key: The record key that could not be resolved
        call_site: Name of the function that requested it
        reason: Why the value was rejected
    """

    def __init__(self, key: str, call_site: str, reason: str):
        self.key = key
        self.call_site = call_site
        self.reason = reason
        super().__init__(key)

    def __str__(self) -> str:
        return f"{self.call_site}: parameter '{self.key}' {self.reason}"


class InvalidAlphaError(OpenBitmapError, ValueError):
    """
    Raised when a non-opaque alpha is written into a layout without an alpha channel.

    Attributes:
        alpha: The alpha value that was rejected
        channels: Channel count of the target bitmap
    """

    def __init__(self, operation: str, alpha, channels: int):
        self.alpha = alpha
        self.channels = channels
        super().__init__(
            f"{operation}: Cannot set alpha channel to {alpha} in an image with {channels} channels."
        )


class EmptyBitmapError(OpenBitmapError, RuntimeError):
    """Raised when an operation needs pixel data but the bitmap is empty."""
    pass
