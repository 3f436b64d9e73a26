"""Memory Bank MCP - Persistent markdown project context for MCP agents."""

__version__ = "0.1.0"

from memory_bank_mcp.config import MemoryBankConfig

__all__ = ["MemoryBankConfig", "__version__"]
