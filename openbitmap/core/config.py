"""
Global configuration dataclasses for OpenBitmap.

This module defines the configuration objects consulted by the pixel
algorithms: worker fan-out for region reductions and the display conversion
defaults. Configuration is intended to be immutable and provided as Python
objects.
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type

from openbitmap.constants.constants import (DEFAULT_COLOR_ROW_ALIGNMENT,
                                            DEFAULT_GRAY_ROW_ALIGNMENT,
                                            DEFAULT_MIN_ROWS_PER_BAND,
                                            DEFAULT_SENTINEL_BYTE)

logger = logging.getLogger(__name__)


def _default_num_workers() -> int:
    override = os.getenv("OPENBITMAP_NUM_WORKERS")
    if override:
        num_workers = int(override)
        if num_workers <= 0:
            raise ValueError(f"OPENBITMAP_NUM_WORKERS must be positive, got {override}")
        return num_workers
    return os.cpu_count() or 1


@dataclass(frozen=True)
class ParallelConfig:
    """Configuration for data-parallel region reductions."""
    num_workers: int = field(default_factory=_default_num_workers)
    """Number of worker threads a region reduction fans out to. Reads OPENBITMAP_NUM_WORKERS."""

    min_rows_per_band: int = DEFAULT_MIN_ROWS_PER_BAND
    """Smallest number of rows handed to a single worker."""


@dataclass(frozen=True)
class DisplayConfig:
    """Configuration for 8-bit display conversion."""
    sentinel: int = DEFAULT_SENTINEL_BYTE
    """Byte written where the destination has no source pixel."""

    gray_row_alignment: int = DEFAULT_GRAY_ROW_ALIGNMENT
    """Row alignment (in pixels) of single-channel output buffers."""

    color_row_alignment: int = DEFAULT_COLOR_ROW_ALIGNMENT
    """Row alignment (in pixels) of BGRA output buffers."""


@dataclass(frozen=True)
class GlobalBitmapConfig:
    """
    Root configuration object for an OpenBitmap session.
    This object is intended to be instantiated at application startup and treated as immutable.
    """
    parallel: ParallelConfig = field(default_factory=ParallelConfig)
    """Configuration for parallel reductions."""

    display: DisplayConfig = field(default_factory=DisplayConfig)
    """Configuration for display conversion."""


# Generic thread-local storage for any global config type
_global_config_contexts: Dict[Type, threading.local] = {}


def set_current_global_config(config_type: Type, config_instance: Any) -> None:
    """Set current global config for any dataclass type."""
    if config_type not in _global_config_contexts:
        _global_config_contexts[config_type] = threading.local()
    _global_config_contexts[config_type].value = config_instance


def get_current_global_config(config_type: Type) -> Optional[Any]:
    """Get current global config for any dataclass type."""
    context = _global_config_contexts.get(config_type)
    return getattr(context, 'value', None) if context else None


def get_default_global_config() -> GlobalBitmapConfig:
    """Provides a default instance of GlobalBitmapConfig."""
    logger.debug("Initializing with default GlobalBitmapConfig.")
    return GlobalBitmapConfig()


def resolve_global_config(config: Optional[GlobalBitmapConfig] = None) -> GlobalBitmapConfig:
    """Return the explicit config, else the thread's current one, else the defaults."""
    if config is not None:
        return config
    current = get_current_global_config(GlobalBitmapConfig)
    if current is not None:
        return current
    return get_default_global_config()
