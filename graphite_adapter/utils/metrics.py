# SPDX-License-Identifier: MIT
"""Prometheus instrumentation for Graphite reads and writes."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from prometheus_client import Counter, Histogram


class AdapterMetrics:
    """Counters and latency histograms for the adapter's store traffic."""

    def __init__(self, registry: Optional[Any] = None) -> None:
        self.registry = registry

        self.query_duration = Histogram(
            "graphite_adapter_query_duration_seconds",
            "Time spent waiting on the render API",
            ["mode"],
            registry=registry,
        )
        self.queries_total = Counter(
            "graphite_adapter_queries_total",
            "Render API queries issued",
            ["mode", "status"],
            registry=registry,
        )
        self.points_read = Counter(
            "graphite_adapter_points_read_total",
            "Points delivered to readers",
            ["mode"],
            registry=registry,
        )
        self.points_written = Counter(
            "graphite_adapter_points_written_total",
            "Points transmitted to carbon",
            registry=registry,
        )
        self.points_rejected = Counter(
            "graphite_adapter_points_rejected_total",
            "Points dropped by write validation",
            ["field"],
            registry=registry,
        )
        self.write_failures = Counter(
            "graphite_adapter_write_failures_total",
            "Carbon batches that failed to transmit",
            registry=registry,
        )

    @contextmanager
    def measure_query(self, mode: str) -> Iterator[None]:
        started = time.perf_counter()
        status = "success"
        try:
            yield
        except Exception:
            status = "failure"
            raise
        finally:
            self.query_duration.labels(mode=mode).observe(time.perf_counter() - started)
            self.queries_total.labels(mode=mode, status=status).inc()

    def record_points_read(self, mode: str, count: int) -> None:
        if count:
            self.points_read.labels(mode=mode).inc(count)

    def record_points_written(self, count: int) -> None:
        if count:
            self.points_written.inc(count)

    def record_rejected(self, field: str) -> None:
        self.points_rejected.labels(field=field).inc()

    def record_write_failure(self) -> None:
        self.write_failures.inc()


_metrics: Optional[AdapterMetrics] = None


def get_adapter_metrics(registry: Optional[Any] = None) -> AdapterMetrics:
    """Return the process-wide :class:`AdapterMetrics` instance.

    Passing *registry* on the first call binds the collectors to it; tests
    construct :class:`AdapterMetrics` directly with a private registry instead.
    """

    global _metrics
    if _metrics is None:
        _metrics = AdapterMetrics(registry)
    return _metrics


__all__ = ["AdapterMetrics", "get_adapter_metrics"]
