"""MCP server exposing read-only Morpho API queries as tools.

Usage:
    python -m morpho_mcp.server

Then connect an MCP-compatible client via stdio using this command.
"""
from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from morpho_mcp.config import Settings
from morpho_mcp.morpho.gql_client import MorphoGraphQLClient
from morpho_mcp.tools.registry import call_tool, list_tools

SERVER_NAME = "morpho-api-server"

logger = logging.getLogger(__name__)


class ToolCallError(RuntimeError):
    """Carries a tool's error text; the MCP SDK reports it as ``isError: true``."""


def configure_logging(level: str = "INFO") -> None:
    """Send logs to stderr; stdout is the MCP message stream."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [MCP] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def create_server(settings: Settings, client: Optional[MorphoGraphQLClient] = None) -> Server:
    """Build the MCP server with its list-tools and call-tool handlers."""
    client = client or MorphoGraphQLClient(
        base_url=settings.morpho_graphql_url,
        timeout_seconds=settings.http_timeout_seconds,
    )
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def handle_list_tools() -> List[types.Tool]:
        return [
            types.Tool(name=spec.name, description=spec.description, inputSchema=spec.input_schema())
            for spec in list_tools()
        ]

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        result = await call_tool(name, arguments, client, settings)
        if result.is_error:
            raise ToolCallError(result.text)
        return [types.TextContent(type="text", text=result.text)]

    return server


async def serve(settings: Settings) -> None:
    """Run the server over stdio until the host closes the stream."""
    server = create_server(settings)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Morpho API MCP server running on stdio (%s)", settings.morpho_graphql_url)
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Load settings, configure logging and serve MCP over stdio."""
    settings = Settings.from_env()
    configure_logging(settings.log_level_name)
    try:
        asyncio.run(serve(settings))
    except Exception as exc:
        logger.exception("Fatal error in main()")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
