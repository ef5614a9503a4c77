# SPDX-License-Identifier: MIT
"""Shared utilities for the Graphite adapter."""

from .logging import (
    JSONFormatter,
    StructuredLogger,
    configure_logging,
    get_logger,
    statement_context,
)
from .metrics import AdapterMetrics, get_adapter_metrics

__all__ = [
    "AdapterMetrics",
    "JSONFormatter",
    "StructuredLogger",
    "configure_logging",
    "get_adapter_metrics",
    "get_logger",
    "statement_context",
]
