"""
Host boundary for OpenBitmap.

Bitmaps cross the host boundary as flat parameter records: plain dicts keyed by
the names in ``openbitmap.constants``.
"""

from openbitmap.io.parameters import (ParameterKind, get_mapped_value_or_raise,
                                      get_optional_number)

__all__ = [
    "ParameterKind",
    "get_mapped_value_or_raise",
    "get_optional_number",
]
