# SPDX-License-Identifier: MIT
"""Read and write Graphite time series from a stream-processing host."""

from .adapter import GraphiteAdapter
from .config import CarbonSettings, GraphiteSettings, QueryRateLimit, WebappSettings
from .errors import (
    GraphiteAdapterError,
    InvalidFilterError,
    InvalidTimeRangeError,
    MissingTimeRangeError,
    StatementValidationError,
    TransportError,
    UnknownOptionError,
)
from .models import Point, ReadResult, TimeRange, WriteOutcome

__all__ = [
    "CarbonSettings",
    "GraphiteAdapter",
    "GraphiteAdapterError",
    "GraphiteSettings",
    "InvalidFilterError",
    "InvalidTimeRangeError",
    "MissingTimeRangeError",
    "Point",
    "QueryRateLimit",
    "ReadResult",
    "StatementValidationError",
    "TimeRange",
    "TransportError",
    "UnknownOptionError",
    "WebappSettings",
    "WriteOutcome",
]
