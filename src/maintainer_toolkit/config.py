# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Process configuration read from ``TOOLKIT_*`` environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BindingName = Literal["stdio", "sse", "streamableHttp"]
BINDINGS: tuple[BindingName, ...] = ("stdio", "sse", "streamableHttp")


class ServerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TOOLKIT_", extra="ignore", populate_by_name=True)

    server_name: str = "mcp-maintainer-toolkit"
    server_version: str = "0.1.0"

    transport: BindingName = "stdio"
    host: str = "127.0.0.1"
    # Only the HTTP bindings listen on a port; stdio ignores it.
    port: int = Field(default=3001, ge=1, le=65535, validation_alias=AliasChoices("TOOLKIT_PORT", "PORT"))
    log_level: str = "info"

    resource_update_interval: float | None = Field(default=10.0, gt=0)
    streamable_http_stateless: bool = False


__all__ = ["BINDINGS", "BindingName", "ServerSettings"]
