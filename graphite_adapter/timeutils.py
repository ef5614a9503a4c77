# SPDX-License-Identifier: MIT
"""Time helpers shared by the read and write paths.

Graphite stores points at one second resolution, so every instant that
crosses the adapter boundary is normalised to a timezone-aware UTC
``datetime`` with the sub-second part truncated.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Optional

import pandas as pd

__all__ = [
    "Clock",
    "LIVE_END_TOKEN",
    "from_epoch_seconds",
    "is_live_token",
    "parse_duration",
    "parse_instant",
    "to_epoch_seconds",
    "to_utc",
    "truncate_to_second",
    "utc_now",
]

Clock = Callable[[], datetime]

LIVE_END_TOKEN = "end"
_NOW_TOKEN = "now"
_AGO_SUFFIX = " ago"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def truncate_to_second(value: datetime) -> datetime:
    return to_utc(value).replace(microsecond=0)


def to_epoch_seconds(value: datetime) -> int:
    return math.floor(to_utc(value).timestamp())


def from_epoch_seconds(value: float | int) -> datetime:
    if isinstance(value, bool) or not math.isfinite(value):
        raise ValueError(f"invalid epoch timestamp {value!r}")
    try:
        return datetime.fromtimestamp(math.floor(value), tz=timezone.utc)
    except (OverflowError, OSError) as exc:
        raise ValueError(f"epoch timestamp {value!r} is out of range") from exc


def _strip_expression(text: str) -> str:
    # Host time literals are written as :5 minutes ago: / :now: / :end:
    return text.strip().strip(":").strip()


def is_live_token(value: Any) -> bool:
    """Return ``True`` when *value* is the reserved unbounded-end marker."""

    return isinstance(value, str) and _strip_expression(value).lower() == LIVE_END_TOKEN


def parse_duration(value: Any) -> timedelta:
    """Resolve a duration expression such as ``"5 minutes"`` or ``timedelta(hours=2)``.

    Bare numbers are read as seconds.
    """

    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid duration {value!r}")
    if isinstance(value, (int, float, Decimal)):
        return timedelta(seconds=float(value))
    if isinstance(value, str):
        text = _strip_expression(value)
        if not text:
            raise ValueError("empty duration expression")
        try:
            parsed = pd.Timedelta(text)
        except (ValueError, TypeError) as exc:
            raise ValueError(f"invalid duration {value!r}") from exc
        if pd.isna(parsed):
            raise ValueError(f"invalid duration {value!r}")
        return parsed.to_pytimedelta()
    raise ValueError(f"invalid duration {value!r}")


def parse_instant(value: Any, *, now: Optional[datetime] = None) -> datetime:
    """Resolve an absolute or relative time expression into a UTC instant.

    Accepted forms are ``datetime`` objects, epoch seconds, ISO-8601 strings,
    ``"now"``, and ``"<duration> ago"``.  Relative forms are anchored on
    *now*, which defaults to the current wall clock.  The result is truncated
    to whole seconds.
    """

    if isinstance(value, datetime):
        return truncate_to_second(value)
    if isinstance(value, bool):
        raise ValueError(f"invalid time {value!r}")
    if isinstance(value, (int, float, Decimal)):
        return from_epoch_seconds(float(value))
    if not isinstance(value, str):
        raise ValueError(f"invalid time {value!r}")

    anchor = truncate_to_second(now if now is not None else utc_now())
    text = _strip_expression(value)
    lowered = text.lower()
    if lowered == _NOW_TOKEN:
        return anchor
    if lowered.endswith(_AGO_SUFFIX):
        return truncate_to_second(anchor - parse_duration(text[: -len(_AGO_SUFFIX)]))
    try:
        stamp = pd.Timestamp(text)
    except (ValueError, TypeError, OverflowError) as exc:
        raise ValueError(f"invalid time {value!r}") from exc
    if pd.isna(stamp):
        raise ValueError(f"invalid time {value!r}")
    if stamp.tzinfo is None:
        stamp = stamp.tz_localize("UTC")
    return truncate_to_second(stamp.floor("s").to_pydatetime())
