"""
MCP server for dsymfinder.

Exposes dSYM lookups to LLMs via the Model Context Protocol, so crash
reports can be symbolicated against local Xcode archives.

Tools:
    - dsym_lookup: Find the DWARF file for an identity, version and build
    - dsym_stats: Get archive scan statistics

Usage:
    Run: dsymfinder-mcp
    Configure the archive root with DSYMFINDER_ARCHIVES or the config file.
"""

import asyncio

from dsymfinder.mcp.server import serve as _serve


def serve() -> None:
    """Entry point for the MCP server."""
    asyncio.run(_serve())


__all__ = ["serve"]
