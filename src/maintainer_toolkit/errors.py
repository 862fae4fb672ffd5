# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Error taxonomy shared by the registry, validator, dispatcher and sessions.

Only :class:`TransportFault` ends a session.  Every other error is terminal to
a single invocation and is returned to the caller as an error result.
"""

from __future__ import annotations

from typing import Any


class ToolkitError(Exception):
    """Base class for errors raised by the toolkit core."""


class DuplicateNameError(ToolkitError):
    """A capability with the same key is already registered for its kind."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"Duplicate {kind}: {name}")
        self.kind = kind
        self.name = name


class NotFoundError(ToolkitError):
    """No capability of ``kind`` is registered under ``name``."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"Unknown {kind}: {name}")
        self.kind = kind
        self.name = name


class ValidationError(ToolkitError):
    """Arguments violate a declared schema.

    Attributes:
        path: Location of the offending value, as object keys and array
            indices from the root.
        expected: Human-readable constraint that failed.
        actual: The value that was supplied (``None`` when absent).
    """

    def __init__(self, path: tuple[str | int, ...], expected: str, actual: Any) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"{self.field or '<root>'}: expected {expected}, got {actual!r}")

    @property
    def field(self) -> str:
        """Return the path rendered as ``items[0].quantity``."""

        rendered = ""
        for part in self.path:
            if isinstance(part, int):
                rendered += f"[{part}]"
            elif rendered:
                rendered += f".{part}"
            else:
                rendered = part
        return rendered


class HandlerFault(ToolkitError):
    """A capability handler raised an unexpected exception."""

    def __init__(self, kind: str, name: str, cause: BaseException) -> None:
        super().__init__(f"Error executing {kind} {name}: {cause}")
        self.kind = kind
        self.name = name
        self.cause = cause


class TransportFault(ToolkitError):
    """The channel behind a session broke; the session must be torn down."""

    def __init__(self, session_id: str, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Transport failure on session {session_id}{detail}")
        self.session_id = session_id
        self.cause = cause


__all__ = [
    "ToolkitError",
    "DuplicateNameError",
    "NotFoundError",
    "ValidationError",
    "HandlerFault",
    "TransportFault",
]
