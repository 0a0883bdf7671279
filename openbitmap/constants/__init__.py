from openbitmap.constants.constants import (ChannelLayout, PixelDepth,
                                            SUPPORTED_CHANNEL_COUNTS,
                                            SUPPORTED_DEPTHS)

__all__ = [
    "ChannelLayout",
    "PixelDepth",
    "SUPPORTED_CHANNEL_COUNTS",
    "SUPPORTED_DEPTHS",
]
