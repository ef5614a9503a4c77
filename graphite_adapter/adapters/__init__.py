# SPDX-License-Identifier: MIT
"""Clients for the Graphite query and ingestion endpoints."""

from .base import FaultTolerancePolicy, RateLimitConfig, StoreClient, TimeoutConfig
from .carbon import CarbonClient
from .render import RenderClient

__all__ = [
    "CarbonClient",
    "FaultTolerancePolicy",
    "RateLimitConfig",
    "RenderClient",
    "StoreClient",
    "TimeoutConfig",
]
