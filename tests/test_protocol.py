import unittest
from mcp_usecases.mcp.protocol import (
    JsonRpcRequest,
    JsonRpcResponse,
    Tool,
    CallToolRequest,
    CallToolResult,
    create_tool_definition,
    text_result,
)
from pydantic import ValidationError

class TestProtocol(unittest.TestCase):
    def test_json_rpc_request_valid(self):
        req = JsonRpcRequest(method="tools/list", params={"a": 1}, id=1)
        self.assertEqual(req.jsonrpc, "2.0")
        self.assertEqual(req.method, "tools/list")

    def test_json_rpc_request_invalid_version(self):
        with self.assertRaises(ValidationError):
            JsonRpcRequest(method="tools/list", jsonrpc="1.0")

    def test_request_to_dict_drops_empty_fields(self):
        req = JsonRpcRequest(method="initialize")
        self.assertEqual(req.to_dict(), {"method": "initialize", "jsonrpc": "2.0"})

    def test_failure_response(self):
        res = JsonRpcResponse.failure(7, -32601, "Method not found: nope")
        self.assertEqual(res.to_dict(), {
            "error": {"code": -32601, "message": "Method not found: nope"},
            "id": 7,
            "jsonrpc": "2.0",
        })

    def test_tool_definition(self):
        tool = Tool(name="search_flights", description="desc", inputSchema={"type": "object"})
        self.assertEqual(tool.name, "search_flights")
        definition = create_tool_definition("search_flights", "desc", {"type": "object"})
        self.assertEqual(definition["inputSchema"], {"type": "object"})

    def test_call_tool_request_defaults_arguments(self):
        call = CallToolRequest(name="list_jira_projects")
        self.assertEqual(call.arguments, {})

    def test_call_tool_result(self):
        res = CallToolResult(content=[{"text": "ok"}])
        self.assertFalse(res.isError)
        self.assertEqual(res.to_dict()["content"][0]["text"], "ok")

    def test_text_result(self):
        res = text_result("boom", is_error=True)
        self.assertTrue(res.isError)
        self.assertEqual(res.content, [{"type": "text", "text": "boom"}])
        self.assertEqual(res.text, "boom")

if __name__ == "__main__":
    unittest.main()
