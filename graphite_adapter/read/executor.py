# SPDX-License-Identifier: MIT
"""Run compiled reads against the render API."""

from __future__ import annotations

from datetime import timedelta
from typing import AsyncIterator, List, Optional

from graphite_adapter.adapters.render import RenderClient
from graphite_adapter.models import Point, QueryRequest, TailOptions, TargetPattern, TimeRange
from graphite_adapter.read.live import LiveTail
from graphite_adapter.read.normalize import PointNormalizer
from graphite_adapter.timeutils import Clock, utc_now
from graphite_adapter.utils.logging import get_logger
from graphite_adapter.utils.metrics import AdapterMetrics, get_adapter_metrics

__all__ = ["QueryExecutor"]

logger = get_logger(__name__)

DEFAULT_TAIL_OPTIONS = TailOptions(poll_interval=timedelta(seconds=1))


class QueryExecutor:
    """Execute a target pattern over a :class:`TimeRange`.

    Bounded ranges are served by a single query.  Live ranges are served by a
    :class:`LiveTail` which keeps polling until it is cancelled.  Transport
    failures propagate to the caller in both modes.
    """

    def __init__(
        self,
        client: RenderClient,
        *,
        normalizer: Optional[PointNormalizer] = None,
        clock: Clock = utc_now,
        metrics: Optional[AdapterMetrics] = None,
    ) -> None:
        self._client = client
        self._normalizer = normalizer or PointNormalizer()
        self._clock = clock
        self._metrics = metrics or get_adapter_metrics()

    async def _query(self, request: QueryRequest, *, mode: str) -> List[Point]:
        with logger.operation("render_query", target=request.target, mode=mode) as op:
            with self._metrics.measure_query(mode):
                raw = await self._client.query(request)
            points = self._normalizer.normalize(raw, start=request.start, end=request.end)
            op["points"] = len(points)
        self._metrics.record_points_read(mode, len(points))
        return points

    async def fetch(self, target: TargetPattern, time_range: TimeRange) -> List[Point]:
        """Return every point of a bounded range, ordered by time then name."""

        end = time_range.end
        if isinstance(end, str):
            raise ValueError("fetch() needs a bounded time range; use tail() for live reads")
        request = QueryRequest(target=target, start=time_range.start, end=end)
        return await self._query(request, mode="bounded")

    def tail(
        self,
        target: TargetPattern,
        time_range: TimeRange,
        options: TailOptions = DEFAULT_TAIL_OPTIONS,
    ) -> LiveTail:
        """Create (but do not start) a live tail for an unbounded range."""

        if not time_range.is_live or time_range.start is None:
            raise ValueError("tail() needs a live time range with a start")

        async def _poll(request: QueryRequest) -> List[Point]:
            return await self._query(request, mode="live")

        return LiveTail(_poll, target, time_range.start, options, clock=self._clock)

    def execute(
        self,
        target: TargetPattern,
        time_range: TimeRange,
        options: TailOptions = DEFAULT_TAIL_OPTIONS,
    ) -> AsyncIterator[Point]:
        """Lazily stream the points of *time_range*.

        The stream is finite for bounded ranges.  For live ranges it ends only
        when the consumer closes it (``aclose()``) or the task consuming it is
        cancelled; use :meth:`tail` when a separate cancel handle is needed.
        """

        if time_range.is_live:
            return self.tail(target, time_range, options).start()
        return self._stream_bounded(target, time_range)

    async def _stream_bounded(self, target: TargetPattern, time_range: TimeRange) -> AsyncIterator[Point]:
        for point in await self.fetch(target, time_range):
            yield point
