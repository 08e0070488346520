"""
Tests for JSON-RPC method dispatch and the convert_currency tool
"""

import asyncio
from unittest.mock import patch

import httpx
import pytest

from rpc.manager import CONVERT_TOOL, Manager


def call(manager, payload):
    return asyncio.run(manager.handle(payload))


def tool_call(amount, from_currency, to_currency, name=CONVERT_TOOL, request_id=7):
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": {"amount": amount, "from": from_currency, "to": to_currency}},
    }


@pytest.fixture
def manager(live_store):
    return Manager(live_store)


@pytest.fixture
def offline_manager(make_store):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    store, _ = make_store(refuse)
    return Manager(store)


@pytest.mark.parametrize("method", ["initialize", "ping", None])
def test_initialize_and_unknown_methods_return_metadata(manager, method):
    response = call(manager, {"jsonrpc": "2.0", "id": 1, "method": method})

    assert response == {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {
            "protocolVersion": "2024-11-05",
            "capabilities": {"tools": {}},
            "serverInfo": {"name": "live-forex-converter", "version": "1.0.0"},
        },
    }


def test_tools_list(manager):
    response = call(manager, {"jsonrpc": "2.0", "id": "abc", "method": "tools/list"})

    assert response["id"] == "abc"
    tools = response["result"]["tools"]
    assert [t["name"] for t in tools] == ["convert_currency"]
    schema = tools[0]["inputSchema"]
    assert schema["required"] == ["amount", "from", "to"]
    assert schema["properties"]["amount"]["type"] == "number"
    assert schema["properties"]["from"]["type"] == "string"
    assert schema["properties"]["to"]["type"] == "string"


def test_convert_success(manager):
    response = call(manager, tool_call(100, "USD", "EUR"))

    assert response["jsonrpc"] == "2.0"
    assert response["id"] == 7
    assert "error" not in response
    content = response["result"]["content"]
    assert len(content) == 1
    assert content[0]["type"] == "text"
    lines = content[0]["text"].split("\n")
    assert lines[0] == "💰 100 USD = 85.00 EUR"
    assert lines[1] == "📈 Live Rate: 1 USD = 0.8500 EUR"
    assert lines[2].startswith("🕐 ") and lines[2].endswith(" UTC")


def test_convert_cross_rate(manager):
    response = call(manager, tool_call(100, "EUR", "GBP"))
    assert response["result"]["content"][0]["text"].startswith("💰 100 EUR = 85.88 GBP")


def test_convert_same_currency_unknown_code(manager):
    response = call(manager, tool_call(5, "XYZ", "XYZ"))
    assert response["result"]["content"][0]["text"] == "💰 5 XYZ = 5 XYZ (same currency)"


def test_convert_uses_fallback_when_offline(offline_manager):
    response = call(offline_manager, tool_call(100, "USD", "SEK"))

    text = response["result"]["content"][0]["text"]
    assert text.startswith("💰 100 USD = 1085.00 SEK")
    assert "📈 Fallback Rate: 1 USD = 10.8500 SEK" in text


def test_unknown_tool(manager):
    response = call(manager, tool_call(1, "USD", "EUR", name="foo"))

    assert response == {
        "jsonrpc": "2.0",
        "id": 7,
        "error": {"code": -32601, "message": "Unknown tool: foo"},
    }


def test_unsupported_currency(manager):
    response = call(manager, tool_call(10, "XYZ", "USD"))

    assert response["id"] == 7
    assert response["error"] == {"code": -32602, "message": "Unsupported currency: XYZ or USD"}
    assert "result" not in response


@pytest.mark.parametrize(
    "arguments",
    [
        {"from": "USD", "to": "EUR"},
        {"amount": "lots", "from": "USD", "to": "EUR"},
        {"amount": float("inf"), "from": "USD", "to": "EUR"},
        {"amount": 1, "from": 840, "to": "EUR"},
        {"amount": 1, "from": "USD"},
    ],
)
def test_invalid_arguments(manager, arguments):
    payload = {"jsonrpc": "2.0", "id": 3, "method": "tools/call",
               "params": {"name": CONVERT_TOOL, "arguments": arguments}}

    response = call(manager, payload)

    assert response["error"]["code"] == -32602
    assert response["error"]["message"].startswith("Invalid argument")


def test_internal_conversion_failure(manager):
    with patch("rpc.manager.convert", side_effect=RuntimeError("boom")):
        response = call(manager, tool_call(1, "USD", "EUR"))

    assert response["error"] == {"code": -32603, "message": "Conversion failed: boom"}
    assert response["id"] == 7


def test_invalid_request_shapes(manager):
    response = call(manager, ["not", "an", "object"])
    assert response == {"jsonrpc": "2.0", "id": None, "error": {"code": -32600, "message": "Request must be a JSON object"}}

    response = call(manager, {"jsonrpc": "2.0", "id": 9, "method": "tools/list", "params": [1, 2]})
    assert response["id"] == 9
    assert response["error"]["code"] == -32600


def test_missing_id_is_echoed_as_null(manager):
    response = call(manager, {"jsonrpc": "2.0", "method": "tools/list"})
    assert response["id"] is None
    assert "tools" in response["result"]


def test_rates_fetched_once_across_calls(make_store, rates_payload):
    store, handler = make_store(lambda request: httpx.Response(200, json=rates_payload))
    manager = Manager(store)

    async def scenario():
        for target in ["EUR", "GBP", "JPY"]:
            await manager.handle(tool_call(1, "USD", target))

    asyncio.run(scenario())
    assert handler.calls == 1
