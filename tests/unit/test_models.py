from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from graphite_adapter.models import UNBOUNDED_LIVE, Point, QueryRequest, ReadResult, TimeRange

NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_point_truncates_time_and_renders_integral_values() -> None:
    point = Point(name="cpu", time=NOW + timedelta(milliseconds=999), value=3)
    assert point.time == NOW
    assert point.epoch_seconds == 1_735_732_800
    assert point.as_record() == {"time": NOW, "name": "cpu", "value": 3}
    assert isinstance(point.as_record()["value"], int)


@pytest.mark.parametrize("value", [True, "1", None])
def test_point_rejects_non_numeric_values(value: object) -> None:
    with pytest.raises(ValidationError):
        Point(name="cpu", time=NOW, value=value)


def test_point_is_immutable() -> None:
    point = Point(name="cpu", time=NOW, value=1.5)
    with pytest.raises(ValidationError):
        point.value = 2.0  # type: ignore[misc]


def test_time_range_rejects_inverted_bounds() -> None:
    with pytest.raises(ValidationError):
        TimeRange(start=NOW, end=NOW - timedelta(seconds=1))


def test_live_range() -> None:
    live = TimeRange(start=NOW, end=UNBOUNDED_LIVE)
    assert live.is_live
    assert live.start_exclusive is True
    assert not TimeRange(start=None, end=NOW).is_live


def test_query_request_params() -> None:
    request = QueryRequest(target="a.*", start=None, end=NOW)
    assert request.to_params() == {"target": "a.*", "from": "0", "until": "1735732800", "format": "json"}


def test_read_result_records() -> None:
    result = ReadResult(points=(Point(name="a", time=NOW, value=0.5),))
    assert result.records() == [{"time": NOW, "name": "a", "value": 0.5}]
