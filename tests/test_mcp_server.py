import unittest
from typing import Optional
from unittest.mock import AsyncMock

from pydantic import BaseModel, Field

from mcp_usecases.mcp.mcp_server import MCPServer
from mcp_usecases.mcp.protocol import INVALID_PARAMS, METHOD_NOT_FOUND, JsonRpcRequest, text_result


class EchoArgs(BaseModel):
    message: str = Field(..., min_length=1)
    times: int = Field(1, ge=1, le=3)


class Nested(BaseModel):
    name: str


class NestedArgs(BaseModel):
    item: Nested
    note: Optional[str] = None


class TestMCPServer(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.server = MCPServer(name="Test MCP", version="1.0.0")

        async def echo(message: str, times: int = 1) -> str:
            """Repeat a message."""
            return " ".join([message] * times)

        self.server.register_tool(echo, args_model=EchoArgs)

    def test_register_uses_function_name_and_docstring(self):
        tools = self.server.list_tools()
        self.assertEqual(len(tools), 1)
        self.assertEqual(tools[0]["name"], "echo")
        self.assertEqual(tools[0]["description"], "Repeat a message.")
        self.assertIn("message", tools[0]["inputSchema"]["properties"])
        self.assertEqual(tools[0]["inputSchema"]["required"], ["message"])

    def test_duplicate_registration_rejected(self):
        with self.assertRaises(ValueError):
            self.server.register_tool(lambda: "x", name="echo")

    def test_schema_from_signature(self):
        def add(a: int, b: float = 1.0, flag: bool = False):
            return a + b

        self.server.register_tool(add, description="Add numbers")
        schema = self.server.tool_definitions[-1]["inputSchema"]
        self.assertEqual(schema["properties"]["a"]["type"], "integer")
        self.assertEqual(schema["properties"]["b"]["type"], "number")
        self.assertEqual(schema["properties"]["flag"]["type"], "boolean")
        self.assertEqual(schema["required"], ["a"])

    async def test_call_tool_wraps_text(self):
        result = await self.server.call_tool("echo", {"message": "hi", "times": 2})
        self.assertFalse(result.isError)
        self.assertEqual(result.content, [{"type": "text", "text": "hi hi"}])

    async def test_invalid_arguments_never_reach_handler(self):
        handler = AsyncMock(return_value="should not run")
        self.server.register_tool(handler, name="guarded", description="Guarded", args_model=EchoArgs)

        result = await self.server.call_tool("guarded", {"message": "", "times": 9})

        self.assertTrue(result.isError)
        self.assertIn("Invalid arguments for tool guarded", result.text)
        self.assertIn("message", result.text)
        self.assertIn("times", result.text)
        handler.assert_not_awaited()

    async def test_nested_models_arrive_as_instances(self):
        seen = {}

        def capture(item, note=None):
            seen["item"] = item
            return "ok"

        self.server.register_tool(capture, description="Capture", args_model=NestedArgs)
        await self.server.call_tool("capture", {"item": {"name": "x"}})
        self.assertIsInstance(seen["item"], Nested)

    async def test_unknown_tool(self):
        result = await self.server.call_tool("missing", {})
        self.assertTrue(result.isError)
        self.assertEqual(result.text, "Tool not found: missing")

    async def test_handler_exception_becomes_error_result(self):
        def broken():
            raise RuntimeError("kaput")

        self.server.register_tool(broken, description="Broken")
        result = await self.server.call_tool("broken", None)
        self.assertTrue(result.isError)
        self.assertIn("kaput", result.text)

    async def test_call_tool_result_passes_through(self):
        self.server.register_tool(lambda: text_result("bad", is_error=True), name="failing", description="Fails")
        result = await self.server.call_tool("failing", {})
        self.assertTrue(result.isError)
        self.assertEqual(result.text, "bad")

    async def test_handle_initialize(self):
        response = await self.server.handle_request(JsonRpcRequest(method="initialize", id=1))
        self.assertEqual(response.id, 1)
        self.assertEqual(response.result["serverInfo"], {"name": "Test MCP", "version": "1.0.0"})
        self.assertIn("tools", response.result["capabilities"])

    async def test_handle_tools_list(self):
        response = await self.server.handle_request(JsonRpcRequest(method="tools/list", id=2))
        self.assertEqual([t["name"] for t in response.result["tools"]], ["echo"])

    async def test_handle_tools_call(self):
        request = JsonRpcRequest(method="tools/call", params={"name": "echo", "arguments": {"message": "yo"}}, id=3)
        response = await self.server.handle_request(request)
        self.assertIsNone(response.error)
        self.assertEqual(response.result["content"][0]["text"], "yo")
        self.assertFalse(response.result["isError"])

    async def test_handle_unknown_method(self):
        response = await self.server.handle_request(JsonRpcRequest(method="resources/list", id=4))
        self.assertEqual(response.error["code"], METHOD_NOT_FOUND)

    async def test_handle_bad_call_params(self):
        response = await self.server.handle_request(JsonRpcRequest(method="tools/call", params={}, id=5))
        self.assertEqual(response.error["code"], INVALID_PARAMS)


if __name__ == "__main__":
    unittest.main()
