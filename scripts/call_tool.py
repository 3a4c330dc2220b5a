from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from morpho_mcp.config import Settings
from morpho_mcp.morpho.gql_client import MorphoGraphQLClient
from morpho_mcp.server import configure_logging
from morpho_mcp.tools.registry import call_tool, list_tools


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse ``<tool> [json-arguments]`` or ``--list``."""
    parser = argparse.ArgumentParser(description="Call one Morpho MCP tool without an MCP host.")
    parser.add_argument("tool", nargs="?", help="Tool name, e.g. get_markets")
    parser.add_argument("arguments", nargs="?", default="{}", help="Tool arguments as a JSON object")
    parser.add_argument("--list", action="store_true", help="Print the tool catalog and exit")
    args = parser.parse_args(argv)
    if not args.list and not args.tool:
        parser.error("a tool name is required unless --list is given")
    return args


def decode_arguments(raw: str) -> Dict[str, Any]:
    """Decode the JSON arguments object given on the command line."""
    arguments = json.loads(raw)
    if not isinstance(arguments, dict):
        raise ValueError("tool arguments must be a JSON object")
    return arguments


def print_catalog() -> None:
    """Print each tool with its description and required arguments."""
    for spec in list_tools():
        required = spec.input_schema().get("required", [])
        print(f"{spec.name}: {spec.description}")
        if required:
            print(f"    required: {', '.join(required)}")


def main(argv: Optional[List[str]] = None) -> int:
    """Run the requested tool against the configured endpoint and print its output."""
    args = parse_args(argv)
    if args.list:
        print_catalog()
        return 0

    settings = Settings.from_env()
    configure_logging(settings.log_level_name)
    client = MorphoGraphQLClient(base_url=settings.morpho_graphql_url, timeout_seconds=settings.http_timeout_seconds)

    result = asyncio.run(call_tool(args.tool, decode_arguments(args.arguments), client, settings))
    print(result.text)
    return 1 if result.is_error else 0


if __name__ == "__main__":
    sys.exit(main())
