"""Stdio MCP server exposing the Codex tools."""

from __future__ import annotations

from typing import Any

from loguru import logger
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from mcp_codex_cli import __version__
from mcp_codex_cli.registry import ToolRegistry

SERVER_NAME = "mcp-codex-cli"


def create_server(registry: ToolRegistry) -> Server:
    """Create an MCP server whose tools are served from registry."""
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [Tool(**listing) for listing in registry.list_tools()]

    # Input validation happens in the registry.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
        envelope = await registry.call(name, arguments)
        return [TextContent(type="text", text=block.text) for block in envelope.content]

    return server


async def serve(registry: ToolRegistry) -> None:
    """Serve registry over stdin/stdout until the client disconnects."""
    server = create_server(registry)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("CodeX CLI MCP server started")
        await server.run(read_stream, write_stream, server.create_initialization_options())
    logger.info("server.stopped")
