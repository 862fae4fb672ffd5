# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Renderers behind the ``formatData`` tool."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Literal

import orjson
import yaml


OutputFormat = Literal["json", "yaml", "table"]


def as_json(data: Any) -> str:
    return orjson.dumps(data, option=orjson.OPT_INDENT_2, default=str).decode()


def as_yaml(data: Any) -> str:
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True).rstrip("\n")


def as_table(data: Any) -> str:
    """Render rows (a list of mappings) or a single mapping as a pipe table.

    Columns come from the first row's keys.
    """

    if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
        if not data:
            return "Empty array"
        first = data[0]
        headers = list(first) if isinstance(first, Mapping) else []
        lines = [" | ".join(headers), " | ".join("---" for _ in headers)]
        for row in data:
            cells = row if isinstance(row, Mapping) else {}
            lines.append(" | ".join(_cell(cells.get(header)) for header in headers))
        return "\n".join(lines) + "\n"

    if isinstance(data, Mapping):
        lines = ["Key | Value", "--- | ---"]
        lines.extend(f"{key} | {_cell(value)}" for key, value in data.items())
        return "\n".join(lines) + "\n"

    return _cell(data)


def render(data: Any, output: OutputFormat) -> str:
    if output == "json":
        return as_json(data)
    if output == "yaml":
        return as_yaml(data)
    if output == "table":
        return as_table(data)
    return _cell(data)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return orjson.dumps(value, default=str).decode()
    return str(value)


__all__ = ["OutputFormat", "as_json", "as_table", "as_yaml", "render"]
