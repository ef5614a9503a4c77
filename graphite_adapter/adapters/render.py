# SPDX-License-Identifier: MIT
"""Client for the graphite-web render API (the query endpoint)."""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import httpx

from graphite_adapter.adapters.base import RateLimitConfig, StoreClient, TimeoutConfig
from graphite_adapter.config import WebappSettings
from graphite_adapter.errors import TransportError
from graphite_adapter.models import QueryRequest
from graphite_adapter.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = ["RenderClient"]

RENDER_PATH = "/render"


class RenderClient(StoreClient):
    """Issue ``/render`` queries and return the raw JSON series list."""

    def __init__(
        self,
        settings: WebappSettings,
        *,
        rate_limit: Optional[RateLimitConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(
            rate_limit=rate_limit,
            timeout=TimeoutConfig(total_seconds=settings.timeout_seconds),
        )
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=settings.base_url, auth=settings.basic_auth()
        )

    @property
    def endpoint(self) -> str:
        return f"{self._settings.base_url}{RENDER_PATH}"

    async def query(self, request: QueryRequest) -> List[Any]:
        """Run *request* and return the decoded series list.

        Raises:
            TransportError: the webapp is unreachable, answered with an error
                status, or returned something other than a JSON list.
        """

        params = request.to_params()

        async def _call() -> httpx.Response:
            return await self._client.get(RENDER_PATH, params=params)

        try:
            response = await self._run_with_policy(_call)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"render API answered HTTP {exc.response.status_code} for target {request.target}",
                endpoint=self.endpoint,
            ) from exc
        except (httpx.HTTPError, OSError, asyncio.TimeoutError) as exc:
            raise TransportError(
                f"render API at {self.endpoint} is unreachable: {exc!r}",
                endpoint=self.endpoint,
            ) from exc
        except ValueError as exc:
            raise TransportError(
                "render API returned a body that is not valid JSON",
                endpoint=self.endpoint,
            ) from exc

        if not isinstance(payload, list):
            raise TransportError(
                f"render API returned {type(payload).__name__}, expected a list of series",
                endpoint=self.endpoint,
            )
        logger.debug(
            "render_query",
            target=request.target,
            start=params["from"],
            until=params["until"],
            series=len(payload),
        )
        return payload

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
