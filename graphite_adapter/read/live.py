# SPDX-License-Identifier: MIT
"""Live tailing: poll Graphite for newly arrived points until cancelled.

A :class:`LiveTail` owns a cursor, the newest point time it has delivered.
Each poll asks for ``(cursor, now - lag]`` so points that show up late in
the store are still picked up, and anything at or before the cursor is
dropped so no point is delivered twice.  Points inside a poll are delivered
in ``(time, name)`` order and the cursor moves only after the whole poll has
been delivered, which keeps points that share a timestamp across series.

The loop suspends in exactly two places: the query and the wait between
polls.  :meth:`LiveTail.cancel` wakes the wait immediately, cancels a query
in flight and discards whatever it would have returned.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import AsyncIterator, Awaitable, Callable, List, Optional

from graphite_adapter.models import Point, QueryRequest, TailOptions, TargetPattern
from graphite_adapter.timeutils import Clock, truncate_to_second, utc_now
from graphite_adapter.utils.logging import get_logger

__all__ = ["LiveTail", "PollFunction"]

logger = get_logger(__name__)

PollFunction = Callable[[QueryRequest], Awaitable[List[Point]]]


class LiveTail:
    """A cancellable, single-use live read over one target pattern."""

    def __init__(
        self,
        poll: PollFunction,
        target: TargetPattern,
        start: datetime,
        options: TailOptions,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self._poll = poll
        self._target = target
        self._cursor: Optional[datetime] = truncate_to_second(start)
        self._interval = options.poll_interval
        self._lag = options.lag
        self._clock = clock
        self._cancelled = asyncio.Event()
        self._inflight: Optional[asyncio.Future[List[Point]]] = None
        self._started = False
        self._finished = False
        self.polls = 0

    @property
    def target(self) -> TargetPattern:
        return self._target

    @property
    def cursor(self) -> Optional[datetime]:
        """Newest delivered point time, ``None`` once the tail has ended."""

        return self._cursor

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def poll_interval(self) -> timedelta:
        return self._interval

    def start(self) -> AsyncIterator[Point]:
        """Return the point stream. A tail can be started only once."""

        if self._started:
            raise RuntimeError("live tail has already been started")
        self._started = True
        return self._run()

    def cancel(self) -> None:
        """Stop the tail. Safe to call repeatedly and from any task."""

        if self._cancelled.is_set():
            return
        self._cancelled.set()
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        logger.info("live_tail_cancelled", target=self._target, cursor=self._cursor, polls=self.polls)
        self._cursor = None

    async def _run(self) -> AsyncIterator[Point]:
        logger.info("live_tail_started", target=self._target, cursor=self._cursor)
        try:
            while not self._cancelled.is_set():
                floor = self._cursor
                if floor is None:
                    return
                upper = truncate_to_second(self._clock()) - self._lag
                if upper > floor:
                    points = await self._poll_once(QueryRequest(target=self._target, start=floor, end=upper))
                    # cancel() may land after the poll finished but before we resumed
                    if points is None or self._cancelled.is_set():
                        return
                    newest = floor
                    for point in points:
                        if point.time <= floor:
                            continue
                        if self._cancelled.is_set():
                            return
                        yield point
                        newest = max(newest, point.time)
                    self._cursor = newest
                await self._sleep()
        finally:
            self._finished = True
            self._cursor = None

    async def _poll_once(self, request: QueryRequest) -> Optional[List[Point]]:
        self.polls += 1
        self._inflight = asyncio.ensure_future(self._poll(request))
        try:
            return await self._inflight
        except asyncio.CancelledError:
            if self._cancelled.is_set():
                return None
            raise
        finally:
            self._inflight = None

    async def _sleep(self) -> None:
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=self._interval.total_seconds())
        except asyncio.TimeoutError:
            pass

