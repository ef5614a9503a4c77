# SPDX-License-Identifier: MIT
"""Value objects exchanged between the adapter components and the host.

Points and ranges are immutable ``pydantic`` models so a point that made it
past validation can be handed to any component without defensive copies.
Outcomes returned to the host are plain frozen dataclasses.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from numbers import Real
from typing import Any, Dict, Literal, NewType, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator, model_validator

from graphite_adapter.timeutils import to_epoch_seconds, truncate_to_second

__all__ = [
    "Point",
    "QueryRequest",
    "ReadResult",
    "TailOptions",
    "TargetPattern",
    "TimeRange",
    "UNBOUNDED_LIVE",
    "WriteOutcome",
]

TargetPattern = NewType("TargetPattern", str)

UNBOUNDED_LIVE: Literal["unbounded-live"] = "unbounded-live"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Point(_FrozenModel):
    """A single named sample at second precision."""

    name: StrictStr = Field(..., min_length=1)
    time: datetime
    value: float

    @field_validator("time")
    @classmethod
    def _truncate_time(cls, value: datetime) -> datetime:
        return truncate_to_second(value)

    @field_validator("value", mode="before")
    @classmethod
    def _require_real(cls, value: Any) -> Any:
        # bool is an int subclass; a flag is not a sample
        if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
            raise ValueError(f"value must be a real number, got {value!r}")
        return value

    @property
    def epoch_seconds(self) -> int:
        return to_epoch_seconds(self.time)

    def as_record(self) -> Dict[str, Any]:
        """Return the point as the record shape consumed by the host runtime."""

        value: Union[int, float] = self.value
        if math.isfinite(self.value) and self.value.is_integer():
            value = int(self.value)
        return {"time": self.time, "name": self.name, "value": value}


class TimeRange(_FrozenModel):
    """Resolved read window. The start bound is always exclusive."""

    start: Optional[datetime]
    end: Union[datetime, Literal["unbounded-live"]]
    start_exclusive: Literal[True] = True

    @model_validator(mode="after")
    def _check_order(self) -> "TimeRange":
        if self.start is not None and isinstance(self.end, datetime) and self.start > self.end:
            raise ValueError("time range start must not be later than its end")
        return self

    @property
    def is_live(self) -> bool:
        return self.end == UNBOUNDED_LIVE


class QueryRequest(_FrozenModel):
    """One call against the render API covering ``(start, end]``."""

    target: StrictStr = Field(..., min_length=1)
    start: Optional[datetime]
    end: datetime

    def to_params(self) -> Dict[str, str]:
        start = 0 if self.start is None else to_epoch_seconds(self.start)
        return {
            "target": self.target,
            "from": str(start),
            "until": str(to_epoch_seconds(self.end)),
            "format": "json",
        }


@dataclass(frozen=True)
class TailOptions:
    """Polling parameters for a live-tail read."""

    poll_interval: timedelta
    lag: timedelta = timedelta(0)


@dataclass(frozen=True)
class ReadResult:
    points: Tuple[Point, ...] = ()
    warnings: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()

    def records(self) -> list[Dict[str, Any]]:
        return [point.as_record() for point in self.points]


@dataclass(frozen=True)
class WriteOutcome:
    """Per-statement write report: warnings for dropped points, errors for failed batches."""

    warnings: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()
    points_sent: int = 0
