"""
MCP Server
----------
Exposes the dispatcher's bound tools over the Model Context Protocol.

The low-level ``mcp`` Server is used so argument validation stays in the
dispatcher: the protocol layer only lists tools and forwards calls.

Usage:
    server = create_server(dispatcher)
    anyio.run(run_stdio, server)
"""

from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from core.errors import ToolNotFoundError
from tools.dispatcher import Dispatcher, ToolResponse

from .config import SERVER_NAME, SERVER_VERSION
from .logging import get_logger

logger = get_logger("infra.server")


def to_call_tool_result(response: ToolResponse) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=item.text) for item in response.content],
        isError=response.is_error,
    )


def create_server(
    dispatcher: Dispatcher,
    name: str = SERVER_NAME,
    version: str = SERVER_VERSION,
) -> Server:
    """Build an MCP server backed by the dispatcher's bound table."""
    server = Server(name, version=version)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [
            types.Tool(
                name=descriptor.name,
                description=descriptor.description,
                inputSchema=descriptor.input_schema(),
            )
            for descriptor in dispatcher.list_bound()
        ]

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
        try:
            response = await dispatcher.invoke(name, arguments)
        except ToolNotFoundError:
            logger.warning(f"Call to unknown tool: {name}")
            response = ToolResponse.error(f"Unknown tool: {name}")
        return to_call_tool_result(response)

    return server


async def run_stdio(server: Server) -> None:
    """Serve over stdin/stdout until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        logger.info(f"{server.name} listening on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())
