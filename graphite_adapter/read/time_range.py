# SPDX-License-Identifier: MIT
"""Resolve ``-from``/``-to``/``-last`` read options into a concrete window."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Mapping

from graphite_adapter.errors import InvalidTimeRangeError, MissingTimeRangeError
from graphite_adapter.models import UNBOUNDED_LIVE, TailOptions, TimeRange
from graphite_adapter.timeutils import (
    Clock,
    is_live_token,
    parse_duration,
    parse_instant,
    truncate_to_second,
    utc_now,
)

__all__ = ["TimeRangeResolver"]


class TimeRangeResolver:
    """Turn the time options of one read into a :class:`TimeRange`.

    Relative expressions (``"5 minutes ago"``, ``"now"``) are anchored on a
    single reading of *clock* taken when :meth:`resolve` is called, so
    ``-from`` and ``-to`` always agree on what "now" means.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock

    def resolve(self, options: Mapping[str, Any]) -> TimeRange:
        has_last = options.get("last") is not None
        has_from = options.get("from") is not None
        has_to = options.get("to") is not None

        if not (has_last or has_from or has_to):
            raise MissingTimeRangeError()
        if has_last and (has_from or has_to):
            raise InvalidTimeRangeError("-last option should not be combined with -from or -to")

        now = truncate_to_second(self._clock())

        if has_last:
            window = self._duration("last", options["last"])
            if window <= timedelta(0):
                raise InvalidTimeRangeError("-last must be a positive duration")
            return TimeRange(start=now - window, end=now)

        start = self._instant("from", options["from"], now) if has_from else None

        if has_to and is_live_token(options["to"]):
            return TimeRange(start=start if start is not None else now, end=UNBOUNDED_LIVE)

        end = self._instant("to", options["to"], now) if has_to else now
        if start is not None and start > end:
            raise InvalidTimeRangeError("-from must not be later than -to")
        return TimeRange(start=start, end=end)

    def resolve_tail(self, options: Mapping[str, Any], *, default_interval: timedelta) -> TailOptions:
        """Read the live-tail polling options ``-every`` and ``-lag``."""

        interval = default_interval
        if options.get("every") is not None:
            interval = self._duration("every", options["every"])
            if interval <= timedelta(0):
                raise InvalidTimeRangeError("-every must be a positive duration")
        lag = timedelta(0)
        if options.get("lag") is not None:
            lag = self._duration("lag", options["lag"])
            if lag < timedelta(0):
                raise InvalidTimeRangeError("-lag must not be negative")
        return TailOptions(poll_interval=interval, lag=lag)

    @staticmethod
    def _instant(option: str, value: Any, now: datetime) -> datetime:
        try:
            return parse_instant(value, now=now)
        except ValueError as exc:
            raise InvalidTimeRangeError(f"-{option}: {exc}") from exc

    @staticmethod
    def _duration(option: str, value: Any) -> timedelta:
        try:
            return parse_duration(value)
        except ValueError as exc:
            raise InvalidTimeRangeError(f"-{option}: {exc}") from exc
