# SPDX-License-Identifier: MIT
"""Structured JSON logging for the Graphite adapter.

Every read or write statement runs under a statement identifier carried in a
:class:`~contextvars.ContextVar`, so log lines emitted by the query executor,
the live-tail loop and the carbon writer can be correlated back to the host
statement that triggered them.
"""
from __future__ import annotations

import json
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional
from uuid import uuid4

_STATEMENT_ID_VAR: ContextVar[Optional[str]] = ContextVar(
    "graphite_adapter_statement_id", default=None
)


def generate_statement_id() -> str:
    """Return a fresh statement identifier."""

    return uuid4().hex[:16]


def get_statement_id() -> Optional[str]:
    """Return the statement identifier bound to the current context, if any."""

    return _STATEMENT_ID_VAR.get()


@contextmanager
def statement_context(statement_id: Optional[str] = None) -> Iterator[str]:
    """Bind *statement_id* (or a new one) for the duration of the block."""

    resolved = statement_id or generate_statement_id()
    token = _STATEMENT_ID_VAR.set(resolved)
    try:
        yield resolved
    finally:
        _STATEMENT_ID_VAR.reset(token)


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        statement_id = getattr(record, "statement_id", None)
        if statement_id:
            payload["statement_id"] = statement_id
        fields = getattr(record, "fields", None)
        if fields:
            payload.update(fields)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class StructuredLogger:
    """Thin wrapper over :mod:`logging` that accepts keyword fields."""

    def __init__(self, name: str) -> None:
        self.logger = logging.getLogger(name)

    def _log(self, level: int, msg: str, **fields: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        extra: Dict[str, Any] = {"statement_id": get_statement_id()}
        if fields:
            extra["fields"] = fields
        self.logger.log(level, msg, extra=extra)

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, **fields: Any) -> None:
        self._log(logging.ERROR, msg, **fields)

    @contextmanager
    def operation(self, operation_name: str, **context: Any) -> Iterator[Dict[str, Any]]:
        """Log the start, completion and failure of an operation with its duration.

        The yielded dictionary may be updated by the caller; its contents are
        included in the completion record::

            with logger.operation("render_query", target="servers.*") as op:
                series = await client.query(request)
                op["series"] = len(series)
        """

        started = time.perf_counter()
        op_context: Dict[str, Any] = {"operation": operation_name, **context}
        self.debug(f"Starting operation: {operation_name}", **op_context)
        try:
            yield op_context
        except Exception as exc:
            self.error(
                f"Failed operation: {operation_name}",
                **op_context,
                duration_seconds=time.perf_counter() - started,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            raise
        self.debug(
            f"Completed operation: {operation_name}",
            **op_context,
            duration_seconds=time.perf_counter() - started,
        )


def configure_logging(level: str = "INFO", use_json: bool = True, stream: Any = None) -> None:
    """Install a single stream handler on the root logger.

    Hosts embedding the adapter normally own logging setup; this helper exists
    for scripts and ad hoc debugging sessions.
    """

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    root.handlers.clear()
    handler = logging.StreamHandler(stream or sys.stderr)
    if use_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    root.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Return a :class:`StructuredLogger` for *name* (typically ``__name__``)."""

    return StructuredLogger(name)


__all__ = [
    "JSONFormatter",
    "StructuredLogger",
    "configure_logging",
    "generate_statement_id",
    "get_logger",
    "get_statement_id",
    "statement_context",
]
