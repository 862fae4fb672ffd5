# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Command-line entry point.

Usage::

    $ python -m maintainer_toolkit                 # stdio
    $ python -m maintainer_toolkit sse --port 3001
    $ python -m maintainer_toolkit streamableHttp --host 0.0.0.0
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
import sys

from .config import BINDINGS, ServerSettings
from .toolkit import create_server
from .utils import get_logger, setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="maintainer-toolkit",
        description="Run the MCP maintainer toolkit server",
    )
    parser.add_argument("binding", nargs="?", default=None, help=f"Transport binding ({', '.join(BINDINGS)})")
    parser.add_argument("--host", default=None, help="Interface for the HTTP bindings")
    parser.add_argument("--port", type=int, default=None, help="Port for the HTTP bindings (ignored by stdio)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    overrides: dict[str, object] = {}
    if args.binding is not None:
        if args.binding not in BINDINGS:
            print(f"Unknown script: {args.binding}", file=sys.stderr)
            print("Available scripts:", file=sys.stderr)
            for name in BINDINGS:
                print(f"- {name}", file=sys.stderr)
            return 1
        overrides["transport"] = args.binding
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port

    settings = ServerSettings(**overrides)
    setup_logger(level=settings.log_level)
    logger = get_logger("maintainer_toolkit.cli")

    server = create_server(settings)
    try:
        asyncio.run(
            server.serve(
                transport=settings.transport,
                host=settings.host,
                port=settings.port,
                log_level=settings.log_level.lower(),
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    except Exception:
        logger.exception("Error running %s server", settings.transport)
        return 1
    return 0


__all__ = ["build_parser", "main"]
