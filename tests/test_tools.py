# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Behaviour of the toolkit's demo tools, called without a transport."""

from __future__ import annotations

from mcp import types
import pytest
import yaml

from maintainer_toolkit.server import MCPServer
from maintainer_toolkit.toolkit.formatting import as_table, render


def _text(result: types.CallToolResult) -> str:
    assert result.content, result
    block = result.content[0]
    assert isinstance(block, types.TextContent)
    return block.text


def _order(**overrides):
    order = {
        "customerName": "Ada Lovelace",
        "customerTaxId": "123-45-6789",
        "customerEmail": "ada@example.com",
        "shippingAddress": {"street": "1 Analytical Way", "city": "London", "state": "LDN", "zipCode": "N1"},
        "items": [
            {
                "productName": "Difference Engine",
                "productSku": "DE-1",
                "quantity": 1,
                "unitPrice": 1200,
                "category": "electronics",
            },
            {
                "productName": "Notes",
                "productSku": "BK-2",
                "quantity": 2,
                "unitPrice": 12.5,
                "category": "books",
                "metadata": {"weight": 0.5},
            },
        ],
        "total": 1225,
    }
    order.update(overrides)
    return order


def test_all_tools_listed(toolkit_server: MCPServer) -> None:
    assert toolkit_server.tool_names == [
        "echo",
        "add",
        "getCurrentTime",
        "formatData",
        "longRunningTask",
        "annotatedResponse",
        "complexOrder",
        "strictTypeValidation",
        "unionTypeTest",
    ]


@pytest.mark.anyio
async def test_echo(toolkit_server: MCPServer) -> None:
    result = await toolkit_server.invoke_tool("echo", message="hello")

    assert not result.isError
    assert _text(result) == "Echo: hello"


@pytest.mark.anyio
async def test_add_formats_integral_sums(toolkit_server: MCPServer) -> None:
    assert _text(await toolkit_server.invoke_tool("add", a=2, b=3)) == "The sum of 2 and 3 is 5."
    assert _text(await toolkit_server.invoke_tool("add", a=1.5, b=2)) == "The sum of 1.5 and 2 is 3.5."


@pytest.mark.anyio
async def test_add_rejects_non_numbers(toolkit_server: MCPServer) -> None:
    result = await toolkit_server.invoke_tool("add", a="x", b=3)

    assert result.isError
    assert _text(result).startswith("a: expected number")


@pytest.mark.anyio
async def test_get_current_time(toolkit_server: MCPServer) -> None:
    utc = _text(await toolkit_server.invoke_tool("getCurrentTime", timezone="UTC"))
    local = _text(await toolkit_server.invoke_tool("getCurrentTime"))

    assert utc.startswith("Current time: ")
    assert utc.endswith("(UTC)")
    assert local.endswith("(local timezone)")


@pytest.mark.anyio
async def test_get_current_time_invalid_zone(toolkit_server: MCPServer) -> None:
    result = await toolkit_server.invoke_tool("getCurrentTime", timezone="Mars/Olympus_Mons")

    assert result.isError
    assert "Invalid timezone: Mars/Olympus_Mons" in _text(result)


@pytest.mark.anyio
async def test_format_data_defaults_to_json(toolkit_server: MCPServer) -> None:
    text = _text(await toolkit_server.invoke_tool("formatData", data={"name": "Ada", "age": 36}))

    assert text == 'Data formatted as json:\n\n{\n  "name": "Ada",\n  "age": 36\n}'


@pytest.mark.anyio
async def test_format_data_yaml(toolkit_server: MCPServer) -> None:
    text = _text(await toolkit_server.invoke_tool("formatData", data={"tags": ["a", "b"]}, format="yaml"))

    header, _, body = text.partition("\n\n")
    assert header == "Data formatted as yaml:"
    assert yaml.safe_load(body) == {"tags": ["a", "b"]}


@pytest.mark.anyio
async def test_format_data_table(toolkit_server: MCPServer) -> None:
    rows = [{"name": "Ada", "active": True}, {"name": "Grace", "active": False}]

    text = _text(await toolkit_server.invoke_tool("formatData", data=rows, format="table"))

    assert text == (
        "Data formatted as table:\n\n"
        "name | active\n"
        "--- | ---\n"
        "Ada | true\n"
        "Grace | false\n"
    )


@pytest.mark.anyio
async def test_format_data_rejects_unknown_format(toolkit_server: MCPServer) -> None:
    result = await toolkit_server.invoke_tool("formatData", data=[], format="xml")

    assert result.isError
    assert _text(result).startswith("format: expected one of")


def test_table_edge_cases() -> None:
    assert as_table([]) == "Empty array"
    assert as_table({"a": 1, "b": None}) == "Key | Value\n--- | ---\na | 1\nb | \n"
    assert as_table([{"x": {"nested": 1}}]) == 'x\n---\n{"nested":1}\n'
    assert render("plain", "table") == "plain"


@pytest.mark.anyio
async def test_long_running_task_without_progress(toolkit_server: MCPServer) -> None:
    result = await toolkit_server.invoke_tool("longRunningTask", duration=0.02, steps=2, taskName="Indexing")

    assert _text(result) == "Indexing completed! Duration: 0.02 seconds, Steps: 2."


@pytest.mark.anyio
async def test_annotated_response(toolkit_server: MCPServer) -> None:
    result = await toolkit_server.invoke_tool("annotatedResponse", messageType="error")

    first, metadata = result.content
    assert isinstance(first, types.TextContent)
    assert first.text == "This is a error message demonstrating annotations."
    assert first.annotations is not None
    assert first.annotations.priority == 1.0
    assert first.annotations.audience == ["user", "assistant"]
    assert isinstance(metadata, types.TextContent)
    assert metadata.text.startswith("Metadata: Generated at ")
    assert metadata.annotations is not None
    assert metadata.annotations.priority == 0.2
    assert metadata.annotations.audience == ["assistant"]


@pytest.mark.anyio
async def test_annotated_response_without_metadata(toolkit_server: MCPServer) -> None:
    result = await toolkit_server.invoke_tool("annotatedResponse", messageType="success", includeMetadata=False)

    assert len(result.content) == 1
    assert result.content[0].annotations.audience == ["user"]


@pytest.mark.anyio
async def test_complex_order_accepts_nested_input(toolkit_server: MCPServer) -> None:
    result = await toolkit_server.invoke_tool("complexOrder", **_order())

    assert not result.isError
    assert _text(result) == "Complex order processed successfully for Ada Lovelace. Total: $1225. Items: 2"


@pytest.mark.anyio
async def test_complex_order_reports_nested_path(toolkit_server: MCPServer) -> None:
    order = _order()
    order["items"][1]["quantity"] = 0

    result = await toolkit_server.invoke_tool("complexOrder", **order)

    assert result.isError
    assert _text(result).startswith("items[1].quantity:")


@pytest.mark.anyio
async def test_complex_order_requires_items(toolkit_server: MCPServer) -> None:
    result = await toolkit_server.invoke_tool("complexOrder", **_order(items=[]))

    assert result.isError
    assert _text(result).startswith("items:")


@pytest.mark.anyio
async def test_strict_type_validation(toolkit_server: MCPServer) -> None:
    valid = {
        "stringField": "abc",
        "numberField": 1.5,
        "integerField": 3,
        "booleanField": True,
        "emailField": "qa@example.com",
        "urlField": "https://example.com",
        "enumField": "option2",
        "dateField": "2025-06-01",
        "positiveNumber": 4,
        "stringWithLength": "hello world",
    }

    ok = await toolkit_server.invoke_tool("strictTypeValidation", **valid)
    assert _text(ok) == 'All fields validated successfully. String: "abc", Number: 1.5, Integer: 3'

    bad = await toolkit_server.invoke_tool("strictTypeValidation", **{**valid, "integerField": 3.14})
    assert bad.isError
    assert _text(bad).startswith("integerField:")

    negative = await toolkit_server.invoke_tool("strictTypeValidation", **{**valid, "positiveNumber": -5})
    assert _text(negative).startswith("positiveNumber:")


@pytest.mark.anyio
async def test_union_type_test(toolkit_server: MCPServer) -> None:
    bare = await toolkit_server.invoke_tool("unionTypeTest", requiredString="x")
    assert _text(bare) == 'Union type test completed! Required: "x". No optional parameters provided'

    full = await toolkit_server.invoke_tool(
        "unionTypeTest", requiredString="x", optionalString="y", optionalNumber=2, optionalBoolean=False
    )
    assert _text(full) == (
        'Union type test completed! Required: "x". '
        'Optional parameters provided: optionalString: "y", optionalNumber: 2, optionalBoolean: false'
    )

    nulls = await toolkit_server.invoke_tool("unionTypeTest", requiredString="x", optionalString=None)
    assert not nulls.isError
