"""FastMCP server and tool definitions for the memory bank."""

from memory_bank_mcp.mcp.server import create_server

__all__ = ["create_server"]
