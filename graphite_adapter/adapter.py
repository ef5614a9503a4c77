# SPDX-License-Identifier: MIT
"""Statement-level entry points used by the host runtime.

``read graphite`` and ``write graphite`` statements map onto
:meth:`GraphiteAdapter.read`, :meth:`GraphiteAdapter.tail` and
:meth:`GraphiteAdapter.write`.  One adapter holds the pooled render API
client and the carbon connection; every statement otherwise runs
independently.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping, Optional, Tuple

import httpx

from graphite_adapter.adapters.base import RateLimitConfig
from graphite_adapter.adapters.carbon import CarbonClient
from graphite_adapter.adapters.render import RenderClient
from graphite_adapter.config import GraphiteSettings
from graphite_adapter.errors import InvalidTimeRangeError, TransportError
from graphite_adapter.models import ReadResult, TailOptions, TargetPattern, TimeRange, WriteOutcome
from graphite_adapter.read.executor import QueryExecutor
from graphite_adapter.read.filters import FilterCompiler, FilterTree, validate_read_options
from graphite_adapter.read.live import LiveTail
from graphite_adapter.read.time_range import TimeRangeResolver
from graphite_adapter.timeutils import Clock, utc_now
from graphite_adapter.utils.logging import get_logger, statement_context
from graphite_adapter.utils.metrics import AdapterMetrics, get_adapter_metrics
from graphite_adapter.write.batcher import WriteBatcher
from graphite_adapter.write.validation import WriteValidator

__all__ = ["GraphiteAdapter"]

logger = get_logger(__name__)


class GraphiteAdapter:
    """Read and write Graphite points on behalf of host statements.

    Example::

        async with GraphiteAdapter(GraphiteSettings()) as graphite:
            await graphite.write([{"name": "servers.web01.cpu", "value": 0.5}])
            result = await graphite.read({"last": "5 minutes"}, 'name~"servers.*.cpu"')
    """

    def __init__(
        self,
        settings: Optional[GraphiteSettings] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Clock = utc_now,
        metrics: Optional[AdapterMetrics] = None,
    ) -> None:
        self.settings = settings or GraphiteSettings()
        self._clock = clock
        self._metrics = metrics or get_adapter_metrics()

        rate_limit = None
        if self.settings.query_rate_limit is not None:
            rate_limit = RateLimitConfig(
                rate=self.settings.query_rate_limit.max_requests,
                period_seconds=self.settings.query_rate_limit.period_seconds,
            )
        self._render = RenderClient(self.settings.webapp, rate_limit=rate_limit, client=http_client)
        self._carbon = CarbonClient(self.settings.carbon)

        self._filters = FilterCompiler()
        self._time_ranges = TimeRangeResolver(clock=clock)
        self._executor = QueryExecutor(self._render, clock=clock, metrics=self._metrics)
        self._validator = WriteValidator(clock=clock)
        self._batcher = WriteBatcher(self._carbon, metrics=self._metrics)

    def _prepare_read(
        self, options: Mapping[str, Any], filter_tree: Optional[FilterTree]
    ) -> Tuple[TargetPattern, TimeRange, Mapping[str, Any]]:
        normalized = validate_read_options(options)
        target = self._filters.compile(filter_tree)
        time_range = self._time_ranges.resolve(normalized)
        return target, time_range, normalized

    async def read(self, options: Mapping[str, Any], filter_tree: Optional[FilterTree]) -> ReadResult:
        """Run a bounded read.

        Raises:
            StatementValidationError: the options or filter are invalid, or
                the read asks for live mode.
            TransportError: graphite-web failed; the read is not retried.
        """

        with statement_context():
            target, time_range, _ = self._prepare_read(options, filter_tree)
            if time_range.is_live:
                raise InvalidTimeRangeError("live reads (-to :end:) must be run with tail()")
            points = await self._executor.fetch(target, time_range)
            return ReadResult(points=tuple(points))

    def tail(self, options: Mapping[str, Any], filter_tree: Optional[FilterTree]) -> LiveTail:
        """Validate a live read and return its (not yet started) :class:`LiveTail`."""

        with statement_context():
            target, time_range, normalized = self._prepare_read(options, filter_tree)
            if not time_range.is_live:
                raise InvalidTimeRangeError("tail() requires -to :end:")
            tail_options: TailOptions = self._time_ranges.resolve_tail(
                normalized,
                default_interval=timedelta(seconds=self.settings.poll_interval_seconds),
            )
            return self._executor.tail(target, time_range, tail_options)

    async def write(
        self, records: Iterable[Any], *, emitted_at: Optional[datetime] = None
    ) -> WriteOutcome:
        """Validate *records* and send the valid ones to carbon.

        Dropped records become warnings.  A failed carbon batch is reported
        in ``WriteOutcome.errors`` rather than raised, so the host can show it
        next to the warnings collected for the same statement.
        """

        with statement_context():
            points, rejected = self._validator.partition(records, emitted_at=emitted_at)
            warnings = [rejection.message for rejection in rejected]
            for rejection in rejected:
                self._metrics.record_rejected(rejection.field)
                logger.warning("point_dropped", field=rejection.field, reason=rejection.message)
            try:
                return await self._batcher.send(points, warnings=warnings)
            except TransportError as exc:
                return WriteOutcome(warnings=tuple(warnings), errors=(str(exc),))

    async def aclose(self) -> None:
        await self._render.aclose()
        await self._carbon.aclose()

    async def __aenter__(self) -> "GraphiteAdapter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
