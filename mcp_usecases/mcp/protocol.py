from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field

# JSON-RPC 2.0 Constants
JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"

METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


class JsonRpcRequest(BaseModel):
    method: str
    params: Optional[Dict[str, Any]] = None
    id: Optional[Union[str, int]] = None
    jsonrpc: str = Field(default=JSONRPC_VERSION, pattern=r"^2\.0$")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class JsonRpcResponse(BaseModel):
    result: Any = None
    error: Optional[Dict[str, Any]] = None
    id: Optional[Union[str, int]] = None
    jsonrpc: str = Field(default=JSONRPC_VERSION, pattern=r"^2\.0$")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    @classmethod
    def failure(cls, request_id: Optional[Union[str, int]], code: int, message: str) -> "JsonRpcResponse":
        return cls(error={"code": code, "message": message}, id=request_id)

# MCP Specific Structures

class ServerInfo(BaseModel):
    name: str
    version: str


class Tool(BaseModel):
    name: str
    description: str
    inputSchema: Dict[str, Any]


class CallToolRequest(BaseModel):
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class CallToolResult(BaseModel):
    content: List[Dict[str, Any]]
    isError: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    @property
    def text(self) -> str:
        """Concatenated text of all text content blocks."""
        return "\n".join(block.get("text", "") for block in self.content if block.get("type") == "text")


# Helper to create a tool definition
def create_tool_definition(name: str, description: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
    tool = Tool(name=name, description=description, inputSchema=parameters)
    return tool.model_dump()


def text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[{"type": "text", "text": text}], isError=is_error)
