# SPDX-License-Identifier: MIT
"""Convert render API series into ordered :class:`Point` records."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence

from graphite_adapter.errors import TransportError
from graphite_adapter.models import Point
from graphite_adapter.timeutils import from_epoch_seconds

__all__ = ["PointNormalizer", "point_order"]


def point_order(point: Point) -> tuple[datetime, str]:
    """Sort key merging several series: by time, then lexically by name."""

    return point.time, point.name


class PointNormalizer:
    """Flatten ``[{"target": ..., "datapoints": [[value, epoch], ...]}]`` into points.

    Graphite fills empty slots of a series with ``null``; those slots are not
    points.  A value of ``0`` is a real sample and is kept.  When *start* or
    *end* are given, points outside ``(start, end]`` are discarded.
    """

    def normalize(
        self,
        raw_series: Sequence[Any],
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Point]:
        if not isinstance(raw_series, list):
            raise TransportError("render response must be a list of series")

        points: List[Point] = []
        for series in raw_series:
            if (
                not isinstance(series, Mapping)
                or not isinstance(series.get("target"), str)
                or not isinstance(series.get("datapoints"), list)
            ):
                raise TransportError("render response contains a malformed series")
            name = series["target"]
            for entry in series["datapoints"]:
                if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                    raise TransportError(f"malformed datapoint {entry!r} in series {name}")
                value, stamp = entry
                if value is None:
                    continue
                try:
                    time = from_epoch_seconds(stamp)
                    point = Point(name=name, time=time, value=value)
                except (TypeError, ValueError) as exc:
                    raise TransportError(f"malformed datapoint {entry!r} in series {name}") from exc
                if start is not None and point.time <= start:
                    continue
                if end is not None and point.time > end:
                    continue
                points.append(point)

        points.sort(key=point_order)
        return points
