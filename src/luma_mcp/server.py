"""Luma MCP Server - tool registration on the low-level MCP server"""

import json
import logging

from mcp.server import Server
from mcp.types import CallToolResult, TextContent, Tool

from . import SERVER_NAME, __version__
from .errors import LumaError
from .tools import ToolDispatcher, list_tools

logger = logging.getLogger(__name__)


def create_error_result(error: LumaError) -> CallToolResult:
    """Failed tool result carrying the error code, kind and details"""
    response = error.to_error_response()
    text = f"Error: {error.message}\n\nDetails: {json.dumps(response, default=str)}"
    return CallToolResult(content=[TextContent(type="text", text=text)], structuredContent=response, isError=True)


def register_tools(server: Server, dispatcher: ToolDispatcher):
    """Register the tool catalogue and route calls through the dispatcher"""

    @server.list_tools()
    async def handle_list_tools() -> list[Tool]:
        return list_tools()

    # Arguments are validated by the dispatcher so failures keep their error kind
    @server.call_tool(validate_input=False)
    async def handle_call_tool(name: str, arguments: dict | None) -> list[TextContent] | CallToolResult:
        try:
            text = await dispatcher.call(name, arguments)
        except LumaError as e:
            return create_error_result(e)
        return [TextContent(type="text", text=text)]


def create_server(dispatcher: ToolDispatcher) -> Server:
    server = Server(SERVER_NAME, version=__version__)
    register_tools(server, dispatcher)
    logger.debug(f"Registered tools for {SERVER_NAME} {__version__}")
    return server
