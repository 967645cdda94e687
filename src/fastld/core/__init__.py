"""Core configuration and shared utilities for fastld.

This package contains:
- config: LDConfig dataclass and default thresholds
- errors: Exception hierarchy for input, header, ordering and record errors
- progress: progressbar2 wrapper for streamed iteration
"""

from fastld.core.config import DEFAULT_MAX_DISTANCE, DEFAULT_MIN_R2, LDConfig
from fastld.core.errors import (
    FastLDError,
    HeaderError,
    InputError,
    MalformedRecordError,
    UnsortedInputError,
)

__all__ = [
    "DEFAULT_MAX_DISTANCE",
    "DEFAULT_MIN_R2",
    "LDConfig",
    "FastLDError",
    "HeaderError",
    "InputError",
    "MalformedRecordError",
    "UnsortedInputError",
]
