# SPDX-License-Identifier: MIT
"""Encode validated points and ship them to carbon in one batch."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from graphite_adapter.adapters.carbon import CarbonClient
from graphite_adapter.models import Point, WriteOutcome
from graphite_adapter.utils.logging import get_logger
from graphite_adapter.utils.metrics import AdapterMetrics, get_adapter_metrics

__all__ = ["WriteBatcher", "encode_batch", "encode_point"]

logger = get_logger(__name__)


def _format_value(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def encode_point(point: Point) -> str:
    """Render one plaintext protocol line, ``<name> <value> <epoch-seconds>``."""

    return f"{point.name} {_format_value(point.value)} {point.epoch_seconds}\n"


def encode_batch(points: Iterable[Point]) -> bytes:
    return "".join(encode_point(point) for point in points).encode("utf-8")


class WriteBatcher:
    """Send every valid point of one write statement as a single carbon batch.

    A batch either reaches the socket as a whole or the statement gets a
    :class:`~graphite_adapter.errors.TransportError`; carbon gives no
    per-line acknowledgement to build anything finer on.
    """

    def __init__(self, carbon: CarbonClient, *, metrics: Optional[AdapterMetrics] = None) -> None:
        self._carbon = carbon
        self._metrics = metrics or get_adapter_metrics()

    async def send(self, points: Sequence[Point], *, warnings: Sequence[str] = ()) -> WriteOutcome:
        if not points:
            return WriteOutcome(warnings=tuple(warnings))

        payload = encode_batch(points)
        with logger.operation(
            "carbon_write", endpoint=self._carbon.endpoint, points=len(points), bytes=len(payload)
        ):
            try:
                await self._carbon.send(payload)
            except Exception:
                self._metrics.record_write_failure()
                raise
        self._metrics.record_points_written(len(points))
        return WriteOutcome(warnings=tuple(warnings), points_sent=len(points))
