"""File-based storage for the memory bank directory and its markdown documents."""

from memory_bank_mcp.storage.store import DocumentStore
from memory_bank_mcp.storage.templates import BOOTSTRAP_CATALOG

__all__ = ["BOOTSTRAP_CATALOG", "DocumentStore"]
