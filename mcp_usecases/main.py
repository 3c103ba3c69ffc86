import argparse
import asyncio
import json
import logging
import sys
from itertools import count

from mcp_usecases.config import Config, setup_logging
from mcp_usecases.mcp.mcp_server import MCPServer
from mcp_usecases.mcp.protocol import JsonRpcRequest
from mcp_usecases.tools import register_meeting_tools, register_restaurant_tools, register_travel_tools

logger = logging.getLogger(__name__)

USE_CASES = {
    "travel-planner": ("Travel Planner MCP", register_travel_tools),
    "restaurant-reservation": ("Restaurant Reservation MCP", register_restaurant_tools),
    "meeting-summary": ("Meeting Summarizer MCP", register_meeting_tools),
}


def build_server(use_case: str) -> MCPServer:
    """Create the MCP server for a use case with all of its tools registered."""
    if use_case not in USE_CASES:
        raise ValueError(f"Unknown use case: {use_case}. Choose from {', '.join(USE_CASES)}")
    name, register = USE_CASES[use_case]
    server = MCPServer(name=name, version="1.0.0")
    register(server)
    logger.info(f"{name} ready with {len(server.tools)} tools")
    return server


def parse_command(line: str):
    """Split ``tool_name {json}`` into a name and an arguments dict."""
    name, _, raw_args = line.strip().partition(" ")
    raw_args = raw_args.strip()
    arguments = json.loads(raw_args) if raw_args else {}
    if not isinstance(arguments, dict):
        raise ValueError("Tool arguments must be a JSON object")
    return name, arguments


async def repl(server: MCPServer):
    ids = count(1)
    init = await server.handle_request(JsonRpcRequest(method="initialize", id=next(ids)))
    info = init.result["serverInfo"]
    print(f"{info['name']} v{info['version']}")

    listing = await server.handle_request(JsonRpcRequest(method="tools/list", id=next(ids)))
    for tool in listing.result["tools"]:
        print(f"  - {tool['name']}: {tool['description']}")
    print("Call a tool with: tool_name {\"arg\": \"value\"}. Type 'quit' to exit.")

    loop = asyncio.get_running_loop()
    while True:
        try:
            line = await loop.run_in_executor(None, input, "\n> ")
        except (EOFError, KeyboardInterrupt):
            break
        if line.strip().lower() in ["quit", "exit"]:
            break
        if not line.strip():
            continue

        try:
            name, arguments = parse_command(line)
        except ValueError as e:
            print(f"Could not parse command: {e}")
            continue

        request = JsonRpcRequest(
            method="tools/call", params={"name": name, "arguments": arguments}, id=next(ids)
        )
        response = await server.handle_request(request)
        if response.error:
            print(f"Error {response.error['code']}: {response.error['message']}")
            continue
        for block in response.result["content"]:
            print(block.get("text", ""))


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="mcp-usecases", description="Run an MCP use-case server in the terminal")
    parser.add_argument("use_case", choices=sorted(USE_CASES), help="Which tool set to serve")
    parser.add_argument("--log-level", default=Config.LOG_LEVEL, help="Logging level (default: %(default)s)")
    args = parser.parse_args(argv)

    setup_logging(args.log_level.upper())

    if not Config.validate(args.use_case):
        return 1

    try:
        server = build_server(args.use_case)
    except Exception as e:
        logger.error(f"Could not start {args.use_case}: {e}")
        return 1

    asyncio.run(repl(server))
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
