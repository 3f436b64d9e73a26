"""Listing, reading, and appending operations on top of the document store."""

from memory_bank_mcp.services.appender import AppendService
from memory_bank_mcp.services.listing import ListingService
from memory_bank_mcp.services.reader import ReadService

__all__ = ["AppendService", "ListingService", "ReadService"]
