"""Click CLI commands for developer-facing memory bank management.

Provides the ``memory-bank`` CLI entry point with subcommands:
- ``memory-bank serve``  -- Run the MCP server on stdio.
- ``memory-bank status`` -- Show whether the memory bank exists and its documents.
- ``memory-bank init``   -- Create the memory bank and its standard documents.
- ``memory-bank list``   -- List documents.
- ``memory-bank read``   -- Print documents.
- ``memory-bank append`` -- Append a timestamped entry.
"""

from memory_bank_mcp.cli.main import append, cli, init, list_documents, read, serve, status

__all__ = ["append", "cli", "init", "list_documents", "read", "serve", "status"]
