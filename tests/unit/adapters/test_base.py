from __future__ import annotations

import asyncio

import pytest

from graphite_adapter.adapters import base


@pytest.mark.asyncio
async def test_policy_without_protections_runs_operation() -> None:
    policy = base.FaultTolerancePolicy()

    async def operation() -> str:
        return "ok"

    assert await policy.run(operation) == "ok"


@pytest.mark.asyncio
async def test_policy_timeout_raises() -> None:
    policy = base.FaultTolerancePolicy(timeout=base.TimeoutConfig(total_seconds=0.01))

    async def slow() -> None:
        await asyncio.sleep(1)

    with pytest.raises(asyncio.TimeoutError):
        await policy.run(slow)


@pytest.mark.asyncio
async def test_policy_does_not_retry_failures() -> None:
    policy = base.FaultTolerancePolicy(timeout=base.TimeoutConfig(total_seconds=1))
    calls = 0

    async def flaky() -> None:
        nonlocal calls
        calls += 1
        raise ConnectionError("boom")

    with pytest.raises(ConnectionError):
        await policy.run(flaky)
    assert calls == 1


@pytest.mark.asyncio
async def test_policy_enters_rate_limiter(monkeypatch: pytest.MonkeyPatch) -> None:
    entries: list[str] = []

    class DummyLimiter:
        def __init__(self, rate: int, period: float) -> None:
            self.rate = rate
            self.period = period

        def has_capacity(self, amount: float = 1) -> bool:
            return True

        async def __aenter__(self) -> "DummyLimiter":
            entries.append("enter")
            return self

        async def __aexit__(self, exc_type, exc, tb) -> None:
            entries.append("exit")

    monkeypatch.setattr(base, "AsyncLimiter", DummyLimiter)
    policy = base.FaultTolerancePolicy(rate_limit=base.RateLimitConfig(rate=2, period_seconds=0.1))

    async def operation() -> int:
        return 1

    assert await policy.run(operation) == 1
    assert await policy.run(operation) == 1
    assert entries == ["enter", "exit", "enter", "exit"]
