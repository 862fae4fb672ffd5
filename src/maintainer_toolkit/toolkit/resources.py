# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Static demo resources ``test://static/resource/1`` through ``10``.

Odd ids serve plain text; even ids serve a binary blob.  Clients that
subscribe to any of them receive periodic ``notifications/resources/updated``
pushes from the server's resource update timer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..resource import ResourceSpec


if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..server import MCPServer

RESOURCE_COUNT = 10
URI_PREFIX = "test://static/resource/"


def resource_uri(resource_id: int) -> str:
    return f"{URI_PREFIX}{resource_id}"


def build_resource(resource_id: int) -> ResourceSpec:
    if resource_id % 2:

        def read_text() -> str:
            return f"Resource {resource_id}: This is a plaintext resource"

        return ResourceSpec(
            name=resource_uri(resource_id),
            fn=read_text,
            title=f"Resource {resource_id}",
            mime_type="text/plain",
        )

    def read_blob() -> bytes:
        return f"Resource {resource_id}: This is a base64 blob".encode()

    return ResourceSpec(
        name=resource_uri(resource_id),
        fn=read_blob,
        title=f"Resource {resource_id}",
        mime_type="application/octet-stream",
    )


def register_resources(server: MCPServer) -> None:
    for resource_id in range(1, RESOURCE_COUNT + 1):
        server.register_resource(build_resource(resource_id))


__all__ = ["RESOURCE_COUNT", "build_resource", "register_resources", "resource_uri"]
