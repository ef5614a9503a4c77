from __future__ import annotations

from datetime import datetime, timezone
from typing import AsyncIterator

import pytest
import pytest_asyncio

from graphite_adapter.adapters.carbon import CarbonClient
from graphite_adapter.config import CarbonSettings
from graphite_adapter.errors import TransportError
from graphite_adapter.models import Point
from graphite_adapter.utils.metrics import AdapterMetrics
from graphite_adapter.write.batcher import WriteBatcher, encode_batch, encode_point
from tests.fixtures.graphite import CarbonListener, FakeGraphite

T = datetime(2025, 1, 1, 12, 0, 0, 900_000, tzinfo=timezone.utc)
EPOCH = 1_735_732_800


@pytest_asyncio.fixture
async def carbon(carbon_listener: CarbonListener) -> AsyncIterator[CarbonClient]:
    client = CarbonClient(CarbonSettings(host="127.0.0.1", port=carbon_listener.port, timeout_seconds=1.0))
    yield client
    await client.aclose()


def test_encode_point_truncates_to_epoch_seconds() -> None:
    assert encode_point(Point(name="m", time=T, value=0)) == f"m 0 {EPOCH}\n"


def test_encode_point_keeps_fractional_values() -> None:
    assert encode_point(Point(name="m", time=T, value=2.5)) == f"m 2.5 {EPOCH}\n"
    assert encode_point(Point(name="m", time=T, value=-1)) == f"m -1 {EPOCH}\n"


def test_encode_batch_is_one_line_per_point() -> None:
    payload = encode_batch([Point(name="a", time=T, value=1), Point(name="b", time=T, value=2)])
    assert payload == f"a 1 {EPOCH}\nb 2 {EPOCH}\n".encode()


@pytest.mark.asyncio
async def test_send_transmits_batch_and_carries_warnings(
    carbon: CarbonClient, fake_graphite: FakeGraphite, metrics: AdapterMetrics
) -> None:
    batcher = WriteBatcher(carbon, metrics=metrics)
    points = [Point(name="m", time=T, value=v) for v in (1, 2, 3)]

    outcome = await batcher.send(points, warnings=['required field "name" not found in data'])

    await fake_graphite.wait_for_lines(3)
    assert outcome.errors == ()
    assert outcome.warnings == ('required field "name" not found in data',)
    assert outcome.points_sent == 3
    assert fake_graphite.lines == [f"m {v} {EPOCH}" for v in (1, 2, 3)]
    assert metrics.registry is not None
    assert metrics.registry.get_sample_value("graphite_adapter_points_written_total") == 3.0


@pytest.mark.asyncio
async def test_send_without_points_does_not_connect(carbon: CarbonClient, carbon_listener: CarbonListener) -> None:
    outcome = await WriteBatcher(carbon).send([], warnings=["w"])
    assert outcome.warnings == ("w",)
    assert outcome.points_sent == 0
    assert carbon_listener.connections == 0


@pytest.mark.asyncio
async def test_send_failure_raises_for_whole_batch(carbon_listener: CarbonListener, metrics: AdapterMetrics) -> None:
    port = carbon_listener.port
    await carbon_listener.stop()
    client = CarbonClient(CarbonSettings(host="127.0.0.1", port=port, timeout_seconds=1.0))

    with pytest.raises(TransportError) as excinfo:
        await WriteBatcher(client, metrics=metrics).send([Point(name="m", time=T, value=1)])

    assert excinfo.value.code == "TRANSPORT-ERROR"
    assert excinfo.value.endpoint == f"127.0.0.1:{port}"
    assert metrics.registry is not None
    assert metrics.registry.get_sample_value("graphite_adapter_write_failures_total") == 1.0
    await client.aclose()
