"""
Typed access to host parameter records.

A parameter record is a string-keyed mapping. Required image fields are read
with ``get_mapped_value_or_raise``, which fails with MissingParameterError when
the key is absent or the value has the wrong semantic type. Optional numeric
fields are read with ``get_optional_number``.
"""

import logging
from enum import Enum
from numbers import Integral, Real
from typing import Any, Mapping, Optional

from openbitmap.core.exceptions import MissingParameterError

logger = logging.getLogger(__name__)


class ParameterKind(Enum):
    """Semantic type expected for a record value."""
    BUFFER = "buffer"
    INTEGER = "integer"
    NUMBER = "number"

    def accepts(self, value: Any) -> bool:
        match self:
            case ParameterKind.BUFFER:
                return _is_buffer(value)
            case ParameterKind.INTEGER:
                return isinstance(value, Integral) and not isinstance(value, bool)
            case ParameterKind.NUMBER:
                return isinstance(value, Real) and not isinstance(value, bool)


def _is_buffer(value: Any) -> bool:
    """Buffer-protocol objects and non-null integer addresses are buffers."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value != 0
    try:
        memoryview(value)
    except TypeError:
        return False
    return True


def get_mapped_value_or_raise(record: Mapping[str, Any], key: str, kind: ParameterKind,
                              call_site: str) -> Any:
    """
    Return ``record[key]`` after checking its semantic type.

    Args:
        record: The parameter record
        key: Required key
        kind: Semantic type the value must have
        call_site: Name of the calling operation, used in the error message

    Raises:
        MissingParameterError: If the key is absent or its value is not of ``kind``
    """
    if key not in record:
        raise MissingParameterError(key, call_site, "is missing")

    value = record[key]
    if not kind.accepts(value):
        raise MissingParameterError(
            key, call_site, f"must be of kind {kind.value}, got {type(value).__name__}"
        )
    return value


def get_optional_number(record: Mapping[str, Any], key: str, call_site: str) -> Optional[Real]:
    """Return a numeric ``record[key]`` or None when the key is absent."""
    if key not in record:
        return None
    return get_mapped_value_or_raise(record, key, ParameterKind.NUMBER, call_site)
