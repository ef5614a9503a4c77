# SPDX-License-Identifier: MIT
"""Read path: filter compilation, time ranges, querying and live tailing."""

from .executor import QueryExecutor
from .filters import (
    BooleanFilter,
    Equals,
    FieldComparison,
    FilterCompiler,
    FilterExpression,
    Match,
    parse_filter,
    validate_read_options,
)
from .live import LiveTail
from .normalize import PointNormalizer
from .time_range import TimeRangeResolver

__all__ = [
    "BooleanFilter",
    "Equals",
    "FieldComparison",
    "FilterCompiler",
    "FilterExpression",
    "LiveTail",
    "Match",
    "PointNormalizer",
    "QueryExecutor",
    "TimeRangeResolver",
    "parse_filter",
    "validate_read_options",
]
