"""Pydantic models for append requests and their per-target results."""

from memory_bank_mcp.models.entries import AppendRequest, AppendResult, AppendStatus

__all__ = ["AppendRequest", "AppendResult", "AppendStatus"]
