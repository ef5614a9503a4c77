# SPDX-License-Identifier: MIT
"""Shared plumbing for the clients that talk to graphite-web and carbon."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from aiolimiter import AsyncLimiter

from graphite_adapter.utils.logging import get_logger

__all__ = [
    "FaultTolerancePolicy",
    "RateLimitConfig",
    "StoreClient",
    "TimeoutConfig",
]

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RateLimitConfig:
    """Maximum number of store calls allowed per period."""

    rate: int
    period_seconds: float

    def create_limiter(self) -> AsyncLimiter:
        return AsyncLimiter(self.rate, self.period_seconds)


@dataclass(frozen=True)
class TimeoutConfig:
    total_seconds: float


class FaultTolerancePolicy:
    """Wraps store I/O with an optional rate limit and timeout.

    Failures are propagated unchanged: the adapter never retries a query or a
    carbon flush on its own, re-running a statement is up to the host.
    """

    def __init__(
        self,
        *,
        rate_limit: Optional[RateLimitConfig] = None,
        timeout: Optional[TimeoutConfig] = None,
    ) -> None:
        self.timeout = timeout
        self._limiter = rate_limit.create_limiter() if rate_limit else None

    async def _apply_timeout(self, operation: Callable[[], Awaitable[T]]) -> T:
        if self.timeout is None:
            return await operation()
        return await asyncio.wait_for(operation(), timeout=self.timeout.total_seconds)

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Execute *operation* under the configured protections."""

        if self._limiter is None:
            return await self._apply_timeout(operation)
        if not self._limiter.has_capacity():
            logger.debug("store_call_throttled")
        async with self._limiter:
            return await self._apply_timeout(operation)


class StoreClient(ABC):
    """Base class for a connection to one Graphite endpoint."""

    def __init__(
        self,
        *,
        rate_limit: Optional[RateLimitConfig] = None,
        timeout: Optional[TimeoutConfig] = None,
    ) -> None:
        self._policy = FaultTolerancePolicy(rate_limit=rate_limit, timeout=timeout)

    async def _run_with_policy(self, operation: Callable[[], Awaitable[T]]) -> T:
        return await self._policy.run(operation)

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Human readable address used in errors and log records."""

    async def aclose(self) -> None:
        """Release connections held by the client."""

    async def __aenter__(self) -> "StoreClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
