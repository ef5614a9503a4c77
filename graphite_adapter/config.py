# SPDX-License-Identifier: MIT
"""Adapter configuration.

Settings are resolved once, frozen, and handed to :class:`GraphiteAdapter`
at construction.  Values can come from keyword arguments or from the
environment using the ``GRAPHITE_`` prefix with ``__`` as the nesting
delimiter, e.g. ``GRAPHITE_WEBAPP__HOST`` or ``GRAPHITE_CARBON__PORT``.
"""

from __future__ import annotations

from typing import Literal, Optional

import httpx
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveFloat,
    PositiveInt,
    SecretStr,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "CarbonSettings",
    "GraphiteSettings",
    "QueryRateLimit",
    "WebappSettings",
]


class WebappSettings(BaseModel):
    """Connection details for the graphite-web render API."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = Field("localhost", min_length=1)
    port: PositiveInt = 8080
    scheme: Literal["http", "https"] = "http"
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    timeout_seconds: PositiveFloat = Field(
        10.0, description="Upper bound on a single render API round trip."
    )

    @model_validator(mode="after")
    def _validate_credentials(self) -> "WebappSettings":
        if (self.username is None) != (self.password is None):
            raise ValueError("webapp username and password must be configured together")
        return self

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    def basic_auth(self) -> Optional[httpx.BasicAuth]:
        if self.username is None or self.password is None:
            return None
        return httpx.BasicAuth(self.username, self.password.get_secret_value())


class CarbonSettings(BaseModel):
    """Connection details for the carbon plaintext listener."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = Field("localhost", min_length=1)
    port: PositiveInt = 2003
    timeout_seconds: PositiveFloat = Field(
        5.0, description="Upper bound on connecting to and flushing a batch into carbon."
    )


class QueryRateLimit(BaseModel):
    """Ceiling on render API requests shared by every read of one adapter."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_requests: PositiveInt
    period_seconds: PositiveFloat


class GraphiteSettings(BaseSettings):
    """Top level adapter configuration."""

    webapp: WebappSettings = Field(default_factory=WebappSettings)
    carbon: CarbonSettings = Field(default_factory=CarbonSettings)
    poll_interval_seconds: PositiveFloat = Field(
        1.0,
        description="Default delay between live-tail polls when a read does not pass -every.",
    )
    query_rate_limit: Optional[QueryRateLimit] = None

    model_config = SettingsConfigDict(
        env_prefix="GRAPHITE_",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )
