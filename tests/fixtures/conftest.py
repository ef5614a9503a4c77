# SPDX-License-Identifier: MIT
from __future__ import annotations

from datetime import datetime, timezone
from typing import AsyncIterator

import pytest
import pytest_asyncio
from prometheus_client import CollectorRegistry

from graphite_adapter import CarbonSettings, GraphiteAdapter, GraphiteSettings
from graphite_adapter.utils.metrics import AdapterMetrics
from tests.fixtures.graphite import CarbonListener, FakeGraphite, MutableClock


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def metrics() -> AdapterMetrics:
    return AdapterMetrics(CollectorRegistry())


@pytest.fixture
def fake_graphite() -> FakeGraphite:
    return FakeGraphite()


@pytest_asyncio.fixture
async def carbon_listener(fake_graphite: FakeGraphite) -> AsyncIterator[CarbonListener]:
    listener = await CarbonListener(fake_graphite).start()
    yield listener
    await listener.stop()


@pytest.fixture
def graphite_settings(carbon_listener: CarbonListener) -> GraphiteSettings:
    return GraphiteSettings(
        carbon=CarbonSettings(host="127.0.0.1", port=carbon_listener.port, timeout_seconds=2.0),
        poll_interval_seconds=0.05,
    )


@pytest_asyncio.fixture
async def graphite(
    fake_graphite: FakeGraphite,
    graphite_settings: GraphiteSettings,
    metrics: AdapterMetrics,
) -> AsyncIterator[GraphiteAdapter]:
    http_client = fake_graphite.http_client()
    adapter = GraphiteAdapter(graphite_settings, http_client=http_client, metrics=metrics)
    yield adapter
    await adapter.aclose()
    await http_client.aclose()
