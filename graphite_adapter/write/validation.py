# SPDX-License-Identifier: MIT
"""Per-point validation of records handed to ``write graphite``.

A record that cannot be written is never an error for the statement: it is
dropped and reported as a warning, one warning per dropped record.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from numbers import Real
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from graphite_adapter.models import Point
from graphite_adapter.timeutils import Clock, parse_instant, utc_now

__all__ = [
    "Invalid",
    "REQUIRED_FIELDS",
    "Valid",
    "ValidationResult",
    "WriteValidator",
    "missing_field_message",
]

REQUIRED_FIELDS = ("name", "value")


def missing_field_message(field: str) -> str:
    return f'required field "{field}" not found in data'


@dataclass(frozen=True)
class Valid:
    point: Point


@dataclass(frozen=True)
class Invalid:
    field: str
    message: str


ValidationResult = Union[Valid, Invalid]


def _is_number(value: Any) -> bool:
    return isinstance(value, (Real, Decimal)) and not isinstance(value, bool)


class WriteValidator:
    """Check records for a string ``name`` and a numeric ``value``.

    ``time`` is optional; records without one are stamped with the emission
    time passed by the caller, or the current time.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock

    def validate(self, record: Any, *, emitted_at: Optional[datetime] = None) -> ValidationResult:
        fields: Mapping[str, Any] = record if isinstance(record, Mapping) else {}

        name = fields.get("name")
        if not isinstance(name, str):
            return Invalid("name", missing_field_message("name"))
        value = fields.get("value")
        if not _is_number(value):
            return Invalid("value", missing_field_message("value"))

        if not name or any(char.isspace() for char in name):
            return Invalid("name", f'invalid metric name "{name}"')
        try:
            number = float(value)
        except OverflowError:
            return Invalid("value", f'value out of range for metric "{name}"')
        if not math.isfinite(number):
            return Invalid("value", f'invalid value {number} for metric "{name}"')

        raw_time = fields.get("time")
        if raw_time is None:
            time = emitted_at if emitted_at is not None else self._clock()
        else:
            try:
                time = parse_instant(raw_time)
            except ValueError:
                return Invalid("time", f'invalid time {raw_time!r} for metric "{name}"')
        return Valid(Point(name=name, time=time, value=number))

    def partition(
        self, records: Iterable[Any], *, emitted_at: Optional[datetime] = None
    ) -> Tuple[List[Point], List[Invalid]]:
        """Split *records* into writable points and rejections, preserving order."""

        accepted: List[Point] = []
        rejected: List[Invalid] = []
        for record in records:
            result = self.validate(record, emitted_at=emitted_at)
            if isinstance(result, Valid):
                accepted.append(result.point)
            else:
                rejected.append(result)
        return accepted, rejected
