"""
si_series.metadata - ScanImage comment metadata handling.

this package provides:
- core types (axis sizes, series mode, key registry)
- comment block parsing and format sniffing
- axis resolution and filename suffix expectations
- an in-memory metadata store
"""
from .base import (
    AxisSizes,
    MetadataMap,
    SeriesMode,
    ScanImageKey,
    SCANIMAGE_KEYS,
    SCANIMAGE_MARKER,
)

from .comment import (
    is_scanimage,
    parse_comment,
)

from .scanimage import (
    SuffixExpectation,
    parse_int_value,
    parse_count_value,
    get_key_value,
    get_num_zplanes,
    get_num_channels,
    get_num_timepoints,
    resolve_axes,
    get_suffix_expectation,
    get_series_start,
    get_stack_info,
)

from .store import (
    MetadataStore,
    PixelsMetadata,
)

__all__ = [
    # base types
    "AxisSizes",
    "MetadataMap",
    "SeriesMode",
    "ScanImageKey",
    "SCANIMAGE_KEYS",
    "SCANIMAGE_MARKER",
    # parsing
    "is_scanimage",
    "parse_comment",
    # axis resolution
    "SuffixExpectation",
    "parse_int_value",
    "parse_count_value",
    "get_key_value",
    "get_num_zplanes",
    "get_num_channels",
    "get_num_timepoints",
    "resolve_axes",
    "get_suffix_expectation",
    "get_series_start",
    "get_stack_info",
    # store
    "MetadataStore",
    "PixelsMetadata",
]
