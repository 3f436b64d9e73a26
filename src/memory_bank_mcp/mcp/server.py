"""FastMCP server bootstrap for Memory Bank MCP.

Sets up the FastMCP server instance, binds it to a single DocumentStore, and
registers the memory bank tools.

Typical usage as an MCP server entry point::

    # Via the registered entry point (pyproject.toml):
    # [project.entry-points."mcp.servers"]
    # memory-bank = "memory_bank_mcp.mcp:create_server"

    # Or programmatically:
    from memory_bank_mcp.mcp.server import create_server
    server = create_server()
    server.run(transport="stdio")

Every tool ensures the memory bank exists before touching it, except
``check_memory_bank_status`` which only reports what is on disk.  Failures
are returned as tagged results (``"error": true``) rather than raised.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastmcp import FastMCP

from memory_bank_mcp import __version__
from memory_bank_mcp.config import MemoryBankConfig
from memory_bank_mcp.errors import MemoryBankError
from memory_bank_mcp.services.appender import AppendService
from memory_bank_mcp.services.listing import ListingService
from memory_bank_mcp.services.reader import ReadService
from memory_bank_mcp.storage.store import DocumentStore

logger = logging.getLogger(__name__)

# Header under which initialize_memory_bank records a project brief.
PROJECT_BRIEF_HEADER = "## Project Brief"
PROJECT_BRIEF_FILE = "productContext.md"

# Module-level singletons.  Created on first call to create_server() or
# get_server() so that all tools share one DocumentStore.
_server_instance: Optional[FastMCP] = None
_store: Optional[DocumentStore] = None
_config: Optional[MemoryBankConfig] = None


def create_server(
    project_root: Optional[str] = None,
    config_path: Optional[str] = None,
    config: Optional[MemoryBankConfig] = None,
) -> FastMCP:
    """Create and configure the FastMCP server instance.

    Parameters
    ----------
    project_root:
        Explicit project root.  When None, ``VSCODE_CWD`` or the current
        directory is used.
    config_path:
        Explicit config file path.
    config:
        A ready-made configuration.  Takes precedence over the other two
        arguments.

    Returns
    -------
    FastMCP
        The configured server instance, ready to ``run()``.
    """
    global _server_instance, _store, _config

    if config is None:
        config = MemoryBankConfig.load(
            project_root=project_root,
            config_path=config_path,
        )
    _config = config
    _config.configure_logging()

    logger.info("Initializing Memory Bank MCP server v%s", __version__)
    logger.info("Project root: %s", _config.project_root)
    logger.info("Memory bank path: %s", _config.storage_path)

    _store = DocumentStore(
        storage_path=_config.storage_path,
        extension=_config.document_extension,
    )

    _server_instance = FastMCP(
        name="memory-bank",
        instructions=(
            "Memory Bank keeps the project's running context in markdown "
            "files (product context, active context, progress, decision log, "
            "system patterns). Use read_memory_bank to list or read them and "
            "append_memory_bank_entry to record timestamped updates, "
            "optionally under a specific '## Section' header."
        ),
        version=__version__,
    )

    _register_tools(_server_instance)

    logger.info("FastMCP server created successfully. Tools registered.")
    return _server_instance


def get_server() -> FastMCP:
    """Return the existing server instance, creating it if necessary."""
    if _server_instance is None:
        return create_server()
    return _server_instance


def get_store() -> DocumentStore:
    """Return the DocumentStore used by the server.

    Raises
    ------
    RuntimeError
        If the server has not been created yet.
    """
    if _store is None:
        raise RuntimeError(
            "Server has not been initialized. Call create_server() first."
        )
    return _store


def get_config() -> MemoryBankConfig:
    """Return the MemoryBankConfig used by the server.

    Raises
    ------
    RuntimeError
        If the server has not been created yet.
    """
    if _config is None:
        raise RuntimeError(
            "Server has not been initialized. Call create_server() first."
        )
    return _config


def reset_server() -> None:
    """Reset the server singleton (primarily for testing)."""
    global _server_instance, _store, _config
    _server_instance = None
    _store = None
    _config = None
    logger.debug("Server singleton reset.")


def _error(message: str) -> dict:
    return {"error": True, "status": "error", "message": message}


# ---------------------------------------------------------------------------
# Tool registration
# ---------------------------------------------------------------------------


def _register_tools(server: FastMCP) -> None:
    """Register all MCP tools on the server instance."""

    @server.tool()
    def health_check() -> dict:
        """Check the health and status of the Memory Bank MCP server.

        Returns:
            A dictionary with server_version, status ("healthy" or
            "degraded"), storage_path, storage_exists, project_root and an
            ISO 8601 timestamp.  The memory bank not existing yet is not a
            degraded state; it is created on first use.
        """
        store = get_store()
        cfg = get_config()
        storage_exists = store.exists()
        parent_ok = storage_exists or store.storage_root.parent.is_dir()

        return {
            "server_version": __version__,
            "status": "healthy" if parent_ok else "degraded",
            "storage_path": str(store.storage_root),
            "storage_exists": storage_exists,
            "project_root": cfg.project_root,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @server.tool()
    def initialize_memory_bank(project_brief_content: str | None = None) -> dict:
        """Create the memory-bank directory and standard .md files with initial templates.

        Args:
            project_brief_content: Optional project brief.  When given, it is
                recorded in productContext.md under a '## Project Brief'
                header.

        Returns:
            A dictionary with status, message, path, and the list of files
            created by this call (empty if the memory bank already existed).
        """
        store = get_store()
        try:
            created = store.ensure_initialized()
        except MemoryBankError as exc:
            logger.error("Failed to initialize memory bank", exc_info=True)
            return _error(f"Failed to initialize memory bank: {exc}")

        if project_brief_content:
            result = AppendService(store).append(
                PROJECT_BRIEF_FILE,
                project_brief_content,
                PROJECT_BRIEF_HEADER,
            )
            if not result.ok:
                return _error(result.message)

        if created:
            message = f"Memory bank initialized at {store.storage_root}"
        else:
            message = f"Memory bank already exists at {store.storage_root}"
        return {
            "error": False,
            "status": "success",
            "message": message,
            "path": str(store.storage_root),
            "created": created,
        }

    @server.tool()
    def check_memory_bank_status() -> dict:
        """Check if the memory-bank directory exists and list the .md files within it.

        This does not create the memory bank.

        Returns:
            A dictionary with exists, path and files.
        """
        store = get_store()
        if not store.exists():
            return {"exists": False, "path": str(store.storage_root), "files": []}
        try:
            files = store.list_names()
        except MemoryBankError as exc:
            logger.error("Error listing memory bank files", exc_info=True)
            return _error(str(exc))
        return {"exists": True, "path": str(store.storage_root), "files": files}

    @server.tool()
    def read_memory_bank(file_names: list[Any] | None = None) -> dict:
        """Read memory bank files, or list them when no names are given.

        Args:
            file_names: Optional list of memory bank file names (e.g.
                ['productContext.md', 'activeContext.md']).  If omitted or
                empty, all available .md files are listed.

        Returns:
            {"files": {name: content or null}} in read mode, where null marks
            a file that was not found; {"files": [names]} in list mode.
        """
        store = get_store()
        try:
            files = ReadService(store, ListingService(store)).read_documents(
                file_names
            )
        except MemoryBankError as exc:
            logger.error("Error reading memory bank: %s", exc)
            return _error(str(exc))
        return {"files": files}

    @server.tool()
    def append_memory_bank_entry(
        file_name: str,
        entry: str,
        section_header: str | None = None,
    ) -> dict:
        """Append a new, timestamped entry to a file, optionally under a markdown header.

        Args:
            file_name: The memory bank file to append to.
            entry: The content of the entry.
            section_header: Optional exact markdown header (e.g. '## Decision')
                to append under.  If the header is not in the file it is
                added at the end together with the entry.

        Returns:
            A dictionary with status ("success" or "error") and message.
        """
        result = AppendService(get_store()).append(file_name, entry, section_header)
        return {
            "error": not result.ok,
            "status": result.status.value,
            "message": result.message,
        }

    @server.tool()
    def append_memory_bank_entries(entries: list[Any]) -> dict:
        """Append several entries, each to its own file and optional section.

        Each target is processed independently: a malformed or failing target
        does not prevent the others from being written.

        Args:
            entries: List of objects with file_name, entry, and optional
                section_header.

        Returns:
            {"results": [{"file", "status", "message"}, ...]} in input order.
        """
        results = AppendService(get_store()).append_many(entries)
        return {"results": [r.to_json_dict() for r in results]}
