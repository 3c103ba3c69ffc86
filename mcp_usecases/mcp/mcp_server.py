import inspect
import logging
from typing import Callable, Dict, Any, List, Optional, Type

from pydantic import BaseModel, ValidationError

from .protocol import (
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    PROTOCOL_VERSION,
    CallToolRequest,
    CallToolResult,
    JsonRpcRequest,
    JsonRpcResponse,
    ServerInfo,
    create_tool_definition,
    text_result,
)

logger = logging.getLogger(__name__)


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one readable line."""
    parts = []
    for err in error.errors():
        location = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{location}: {err.get('msg')}")
    return "; ".join(parts)


class MCPServer:
    """A simple in-process MCP Server to host tools."""

    def __init__(self, name: str = "MCP Server", version: str = "1.0.0"):
        self.info = ServerInfo(name=name, version=version)
        self.tools: Dict[str, Callable] = {}
        self.tool_definitions: List[Dict[str, Any]] = []
        self.tool_models: Dict[str, Type[BaseModel]] = {}

    def register_tool(
        self,
        func: Callable,
        name: str = None,
        description: str = None,
        args_model: Optional[Type[BaseModel]] = None,
    ):
        """Register a python function as a tool.

        When ``args_model`` is given, its JSON schema becomes the tool's input
        schema and incoming arguments are validated against it before the
        function runs. Otherwise the schema is inferred from the signature.
        """
        if name is None:
            name = func.__name__
        if description is None:
            description = inspect.cleandoc(func.__doc__ or "")
        if name in self.tools:
            raise ValueError(f"Tool already registered: {name}")

        if args_model is not None:
            parameters = args_model.model_json_schema()
            self.tool_models[name] = args_model
        else:
            parameters = self._schema_from_signature(func)

        self.tools[name] = func
        self.tool_definitions.append(create_tool_definition(name, description, parameters))

    @staticmethod
    def _schema_from_signature(func: Callable) -> Dict[str, Any]:
        sig = inspect.signature(func)
        parameters = {
            "type": "object",
            "properties": {},
            "required": []
        }

        for param_name, param in sig.parameters.items():
            param_type = "string"  # Default to string
            if param.annotation == int:
                param_type = "integer"
            elif param.annotation == float:
                param_type = "number"
            elif param.annotation == bool:
                param_type = "boolean"
            elif param.annotation == list:
                param_type = "array"
            elif param.annotation == dict:
                param_type = "object"

            parameters["properties"][param_name] = {
                "type": param_type,
                "description": f"Parameter {param_name}"
            }
            if param.default == inspect.Parameter.empty:
                parameters["required"].append(param_name)
        return parameters

    def list_tools(self) -> List[Dict[str, Any]]:
        return self.tool_definitions

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> CallToolResult:
        if name not in self.tools:
            return text_result(f"Tool not found: {name}", is_error=True)

        arguments = arguments or {}
        model = self.tool_models.get(name)
        if model is not None:
            try:
                validated = model.model_validate(arguments)
            except ValidationError as e:
                logger.info(f"Rejected arguments for {name}", extra={"tool": name})
                return text_result(
                    f"Invalid arguments for tool {name}: {describe_validation_error(e)}",
                    is_error=True,
                )
            # Keep nested models as model instances rather than plain dicts
            kwargs = {field: getattr(validated, field) for field in model.model_fields}
        else:
            kwargs = arguments

        logger.info(f"Calling tool {name}", extra={"tool": name})
        try:
            func = self.tools[name]
            if inspect.iscoroutinefunction(func):
                result = await func(**kwargs)
            else:
                result = func(**kwargs)
        except Exception as e:
            logger.exception(f"Tool {name} raised", extra={"tool": name})
            return text_result(f"Error executing tool {name}: {str(e)}", is_error=True)

        if isinstance(result, CallToolResult):
            return result
        return text_result(str(result))

    async def handle_request(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Answer a JSON-RPC request addressed to this server."""
        if request.method == "initialize":
            return JsonRpcResponse(
                result={
                    "protocolVersion": PROTOCOL_VERSION,
                    "serverInfo": self.info.model_dump(),
                    "capabilities": {"tools": {}},
                },
                id=request.id,
            )

        if request.method == "tools/list":
            return JsonRpcResponse(result={"tools": self.list_tools()}, id=request.id)

        if request.method == "tools/call":
            try:
                call = CallToolRequest.model_validate(request.params or {})
            except ValidationError as e:
                return JsonRpcResponse.failure(request.id, INVALID_PARAMS, describe_validation_error(e))
            result = await self.call_tool(call.name, call.arguments)
            return JsonRpcResponse(result=result.to_dict(), id=request.id)

        return JsonRpcResponse.failure(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")
