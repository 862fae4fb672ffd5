# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Demo tools used to exercise MCP clients.

The tools fall into four groups: basics (``echo``, ``add``,
``getCurrentTime``), data (``formatData``), protocol features
(``longRunningTask`` streams progress, ``annotatedResponse`` attaches content
annotations) and input-form testing (``complexOrder``,
``strictTypeValidation``, ``unionTypeTest``), whose schemas are deliberately
rich so clients can be checked against nested objects, arrays, formats and
optional fields.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import anyio
from mcp import types

from ..adapters import text_block
from ..context import get_context
from ..schema import AnyValue, Array, Boolean, Enum, Number, Object, String
from ..tool import tool
from .formatting import render


if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..server import MCPServer


# ---------------------------------------------------------------------------
# Basics
# ---------------------------------------------------------------------------


@tool(
    "echo",
    description="Echoes back the input message",
    input_schema=Object(fields={"message": String(description="Message to echo back")}),
)
def echo(message: str) -> str:
    return f"Echo: {message}"


@tool(
    "add",
    description="Adds two numbers together",
    input_schema=Object(
        fields={
            "a": Number(description="First number"),
            "b": Number(description="Second number"),
        }
    ),
)
def add(a: float, b: float) -> str:
    return f"The sum of {_num(a)} and {_num(b)} is {_num(a + b)}."


@tool(
    "getCurrentTime",
    description="Gets the current date and time",
    input_schema=Object(
        fields={
            "timezone": String(
                optional=True,
                description="Timezone (e.g., 'UTC', 'America/New_York'). Defaults to local timezone.",
            )
        }
    ),
)
def get_current_time(timezone: str | None = None) -> str:
    if timezone:
        try:
            zone = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Invalid timezone: {timezone}") from None
        return f"Current time: {_locale_string(datetime.now(zone))} ({timezone})"
    return f"Current time: {_locale_string(datetime.now().astimezone())} (local timezone)"


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


@tool(
    "formatData",
    description="Formats data in different output formats",
    input_schema=Object(
        fields={
            "data": AnyValue(description="Data to format"),
            "format": Enum(values=("json", "yaml", "table"), default="json", description="Output format"),
        }
    ),
)
def format_data(format: str, data: Any = None) -> str:
    return f"Data formatted as {format}:\n\n{render(data, format)}"  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Protocol features
# ---------------------------------------------------------------------------


@tool(
    "longRunningTask",
    description="Demonstrates a long-running task with progress updates",
    input_schema=Object(
        fields={
            "duration": Number(default=5, description="Duration of the task in seconds"),
            "steps": Number(default=3, description="Number of steps in the task"),
            "taskName": String(default="Processing", description="Name of the task"),
        }
    ),
)
async def long_running_task(duration: float, steps: float, taskName: str) -> str:
    ctx = get_context()
    step_duration = duration / steps if steps > 0 else 0

    step = 1
    while step <= steps:
        await anyio.sleep(max(step_duration, 0))
        await ctx.report_progress(step, total=steps)
        step += 1

    return f"{taskName} completed! Duration: {_num(duration)} seconds, Steps: {_num(steps)}."


_PRIORITIES = {"info": 0.5, "warning": 0.7, "error": 1.0, "success": 0.6}
_AUDIENCES: dict[str, tuple[types.Role, ...]] = {
    "info": ("user", "assistant"),
    "warning": ("user",),
    "error": ("user", "assistant"),
    "success": ("user",),
}


@tool(
    "annotatedResponse",
    description="Demonstrates annotated responses with metadata",
    input_schema=Object(
        fields={
            "messageType": Enum(values=("info", "warning", "error", "success"), description="Type of message"),
            "includeMetadata": Boolean(default=True, description="Whether to include metadata"),
        }
    ),
)
def annotated_response(messageType: str, includeMetadata: bool) -> list[types.TextContent]:
    content = [
        text_block(
            f"This is a {messageType} message demonstrating annotations.",
            priority=_PRIORITIES[messageType],
            audience=_AUDIENCES[messageType],
            messageType=messageType,
        )
    ]
    if includeMetadata:
        generated = datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        content.append(
            text_block(
                f"Metadata: Generated at {generated}",
                priority=0.2,
                audience=("assistant",),
                category="metadata",
            )
        )
    return content


# ---------------------------------------------------------------------------
# Input-form testing
# ---------------------------------------------------------------------------

_ADDRESS = Object(
    description="Shipping address details",
    fields={
        "street": String(description="Street address"),
        "city": String(description="City name"),
        "state": String(description="State or province"),
        "zipCode": String(description="ZIP or postal code"),
        "country": String(default="US", description="Country code (ISO 3166-1 alpha-2)"),
    },
)

_ORDER_ITEM = Object(
    fields={
        "productName": String(description="Name of the product"),
        "productSku": String(description="Product SKU or identifier"),
        "quantity": Number(minimum=1, description="Number of items (must be positive)"),
        "unitPrice": Number(minimum=0, description="Price per unit in USD"),
        "category": Enum(
            values=("electronics", "clothing", "books", "home", "other"),
            description="Product category",
        ),
        "metadata": Object(
            optional=True,
            description="Additional product metadata",
            fields={
                "weight": Number(optional=True, description="Weight in pounds"),
                "dimensions": Object(
                    optional=True,
                    description="Dimensions in inches",
                    fields={"length": Number(), "width": Number(), "height": Number()},
                ),
            },
        ),
    }
)

_DISCOUNT = Object(
    fields={
        "code": String(description="Discount code"),
        "amount": Number(description="Discount amount"),
        "type": Enum(values=("percentage", "fixed"), description="Type of discount"),
    }
)


@tool(
    "complexOrder",
    description="Tests complex nested objects and arrays (Issue #332)",
    input_schema=Object(
        description="Complex order with nested objects and arrays to test form rendering (Issue #332)",
        fields={
            "customerName": String(description="Full customer name for the order"),
            "customerTaxId": String(description="Tax identification number (e.g., 123-45-6789)"),
            "customerEmail": String(format="email", description="Customer's email address for notifications"),
            "shippingAddress": _ADDRESS,
            "items": Array(
                items=_ORDER_ITEM,
                min_items=1,
                description="List of items in the order (at least one required)",
            ),
            "discounts": Array(items=_DISCOUNT, optional=True, description="Applied discount codes"),
            "total": Number(minimum=0, description="Total order amount in USD"),
            "notes": String(optional=True, description="Special instructions or notes"),
        },
    ),
)
def complex_order(customerName: str, items: list[dict[str, Any]], total: float, **_: Any) -> str:
    return (
        f"Complex order processed successfully for {customerName}. "
        f"Total: ${_num(total)}. Items: {len(items)}"
    )


@tool(
    "strictTypeValidation",
    description="Tests strict type validation and error handling (Issue #187)",
    input_schema=Object(
        description="Tool to test strict type validation and error handling (Issue #187)",
        fields={
            "stringField": String(min_length=1, description="Must be a string (test entering numbers like 123321)"),
            "numberField": Number(description="Must be a number (test entering text like 'abc')"),
            "integerField": Number(integer=True, description="Must be a whole number (test entering 3.14)"),
            "booleanField": Boolean(description="Must be true or false (test entering 'yes' or 1)"),
            "emailField": String(format="email", description="Must be a valid email format"),
            "urlField": String(format="url", description="Must be a valid URL format"),
            "enumField": Enum(
                values=("option1", "option2", "option3"),
                description="Must be one of the predefined options",
            ),
            "dateField": String(pattern=r"^\d{4}-\d{2}-\d{2}$", description="Must be a date in YYYY-MM-DD format"),
            "positiveNumber": Number(positive=True, description="Must be a positive number (test entering -5)"),
            "stringWithLength": String(
                min_length=5,
                max_length=20,
                description="String must be between 5 and 20 characters",
            ),
        },
    ),
)
def strict_type_validation(stringField: str, numberField: float, integerField: int, **_: Any) -> str:
    return (
        "All fields validated successfully. "
        f'String: "{stringField}", Number: {_num(numberField)}, Integer: {integerField}'
    )


@tool(
    "unionTypeTest",
    description="Tests union type support for optional parameters (PR #673)",
    input_schema=Object(
        description="Tool to test union type support for optional parameters (Issue #672)",
        fields={
            "optionalString": String(
                optional=True,
                description="Optional string parameter (like category: str | None = None)",
            ),
            "optionalNumber": Number(optional=True, description="Optional number parameter"),
            "optionalBoolean": Boolean(optional=True, description="Optional boolean parameter"),
            "requiredString": String(description="Required string parameter"),
        },
    ),
)
def union_type_test(
    requiredString: str,
    optionalString: str | None = None,
    optionalNumber: float | None = None,
    optionalBoolean: bool | None = None,
) -> str:
    provided = []
    if optionalString is not None:
        provided.append(f'optionalString: "{optionalString}"')
    if optionalNumber is not None:
        provided.append(f"optionalNumber: {_num(optionalNumber)}")
    if optionalBoolean is not None:
        provided.append(f"optionalBoolean: {'true' if optionalBoolean else 'false'}")

    if provided:
        summary = f"Optional parameters provided: {', '.join(provided)}"
    else:
        summary = "No optional parameters provided"
    return f'Union type test completed! Required: "{requiredString}". {summary}'


TOOLS = (
    echo,
    add,
    get_current_time,
    format_data,
    long_running_task,
    annotated_response,
    complex_order,
    strict_type_validation,
    union_type_test,
)


def register_tools(server: MCPServer) -> None:
    for fn in TOOLS:
        server.register_tool(fn)


def _num(value: float) -> str:
    """Render a number the way JSON clients print it (``5`` rather than ``5.0``)."""

    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _locale_string(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    return f"{moment.month}/{moment.day}/{moment.year}, {hour}:{moment:%M:%S} {moment:%p}"


__all__ = ["TOOLS", "register_tools"]
