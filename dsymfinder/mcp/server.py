"""MCP server implementation for dsymfinder."""

from __future__ import annotations

import asyncio
import json
import threading
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from dsymfinder.core.exceptions import DsymFinderError
from dsymfinder.core.locator import DwarfLocator
from dsymfinder.core.settings import load_settings

server = Server("dsymfinder")

_locator: DwarfLocator | None = None
_locator_lock = threading.Lock()


def _get_locator() -> DwarfLocator:
    """Get the process-wide locator, created from settings on first use."""
    global _locator
    if _locator is None:
        with _locator_lock:
            if _locator is None:
                _locator = DwarfLocator.from_settings(load_settings())
    return _locator


@server.list_tools()  # type: ignore[no-untyped-call, untyped-decorator]
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="dsym_lookup",
            description=(
                "Find the DWARF debug symbol file for an app or framework build. "
                "Accepts a binary name or bundle identifier plus version and build. "
                "Falls back to archives that recorded no build number."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "identity": {
                        "type": "string",
                        "description": "Binary name (e.g. MyApp) or bundle identifier",
                    },
                    "version": {
                        "type": "string",
                        "description": "Short version string (CFBundleShortVersionString)",
                    },
                    "build": {
                        "type": "string",
                        "description": "Build number (CFBundleVersion), optional",
                        "default": "",
                    },
                },
                "required": ["identity", "version"],
            },
        ),
        Tool(
            name="dsym_stats",
            description="Get statistics about the indexed archive folder.",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
    ]


@server.call_tool()  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "dsym_lookup":
            result = await asyncio.to_thread(
                _handle_lookup,
                arguments["identity"],
                arguments["version"],
                arguments.get("build", ""),
            )
        elif name == "dsym_stats":
            result = await asyncio.to_thread(_handle_stats)
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    except DsymFinderError as e:
        return [TextContent(type="text", text=json.dumps({"error": str(e)}))]
    except KeyError as e:
        return [TextContent(type="text", text=json.dumps({"error": f"Missing argument: {e}"}))]


def _handle_lookup(identity: str, version: str, build: str) -> dict[str, Any]:
    """Handle dsym_lookup tool."""
    path = _get_locator().lookup(identity, version, build)
    return {
        "identity": identity,
        "version": version,
        "build": build,
        "path": str(path) if path is not None else None,
    }


def _handle_stats() -> dict[str, Any]:
    """Handle dsym_stats tool."""
    locator = _get_locator()
    stats = locator.ensure_index()
    return {"root": str(locator.root), "state": locator.state.value, **stats.to_dict()}


async def serve() -> None:
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
