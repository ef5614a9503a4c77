# SPDX-License-Identifier: MIT
"""Error taxonomy surfaced to the host runtime.

Every error carries a stable ``code`` that hosts and tests can match on
without parsing messages.  Validation errors are raised before any I/O is
attempted; :class:`TransportError` wraps failures talking to graphite-web or
carbon and is never retried internally.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "FILTER_SHAPE_MESSAGE",
    "GraphiteAdapterError",
    "InvalidFilterError",
    "InvalidTimeRangeError",
    "MissingTimeRangeError",
    "StatementValidationError",
    "TransportError",
    "UnknownOptionError",
]

FILTER_SHAPE_MESSAGE = 'filter expression must match: name="XXX"/name~"X.*"'


class GraphiteAdapterError(Exception):
    """Base class for all adapter errors."""

    code = "GRAPHITE-ADAPTER-ERROR"

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return self.message


class StatementValidationError(GraphiteAdapterError):
    """A read or write statement was rejected before touching the store."""

    code = "INVALID-STATEMENT"


class InvalidFilterError(StatementValidationError):
    code = "INVALID-FILTER"

    def __init__(self, detail: Optional[str] = None) -> None:
        message = FILTER_SHAPE_MESSAGE if not detail else f"{FILTER_SHAPE_MESSAGE} ({detail})"
        super().__init__(message)


class UnknownOptionError(StatementValidationError):
    code = "UNKNOWN-OPTION"

    def __init__(self, option: str) -> None:
        super().__init__(f"unknown read-graphite option {option}")
        self.option = option


class MissingTimeRangeError(StatementValidationError):
    code = "MISSING-TIME-RANGE"

    def __init__(self) -> None:
        super().__init__("read graphite requires -last or at least one of -from/-to")


class InvalidTimeRangeError(StatementValidationError):
    code = "INVALID-TIME-RANGE"


class TransportError(GraphiteAdapterError):
    """graphite-web or carbon could not be reached or answered nonsense."""

    code = "TRANSPORT-ERROR"

    def __init__(self, message: str, *, endpoint: Optional[str] = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint
