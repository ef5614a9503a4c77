# SPDX-License-Identifier: MIT
"""Client for the carbon plaintext listener (the ingestion endpoint).

Carbon's plaintext protocol is a stream of ``<name> <value> <epoch>\\n``
lines over TCP with no acknowledgements.  One connection is kept open per
client and shared by all writes; a lock serialises batches so lines from two
statements never interleave on the socket.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Tuple

from graphite_adapter.adapters.base import StoreClient, TimeoutConfig
from graphite_adapter.config import CarbonSettings
from graphite_adapter.errors import TransportError
from graphite_adapter.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = ["CarbonClient"]


class CarbonClient(StoreClient):
    def __init__(self, settings: CarbonSettings) -> None:
        super().__init__(timeout=TimeoutConfig(total_seconds=settings.timeout_seconds))
        self._settings = settings
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._lock = asyncio.Lock()

    @property
    def endpoint(self) -> str:
        return f"{self._settings.host}:{self._settings.port}"

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def _open(self) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        return await asyncio.open_connection(self._settings.host, self._settings.port)

    async def _ensure_connection(self) -> asyncio.StreamWriter:
        if self._writer is not None and (
            self._writer.is_closing() or (self._reader is not None and self._reader.at_eof())
        ):
            # carbon hung up since the last batch
            await self._drop_connection()
        if self._writer is None:
            self._reader, self._writer = await self._run_with_policy(self._open)
            logger.info("carbon_connected", endpoint=self.endpoint)
        return self._writer

    async def _drop_connection(self) -> None:
        writer, self._reader, self._writer = self._writer, None, None
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as exc:
            logger.debug("carbon_close_failed", endpoint=self.endpoint, error=str(exc))

    async def send(self, payload: bytes) -> None:
        """Write *payload* and wait until it has been flushed to the socket.

        Raises:
            TransportError: the connection could not be opened or broke while
                the batch was being written.  The connection is discarded and
                reopened by the next call.
        """

        async with self._lock:
            try:
                writer = await self._ensure_connection()
                writer.write(payload)
                await self._run_with_policy(writer.drain)
            except (OSError, asyncio.TimeoutError) as exc:
                await self._drop_connection()
                raise TransportError(
                    f"carbon at {self.endpoint} rejected the batch: {exc!r}",
                    endpoint=self.endpoint,
                ) from exc

    async def aclose(self) -> None:
        async with self._lock:
            await self._drop_connection()
