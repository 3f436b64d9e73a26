"""Request and result models for memory bank append operations."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AppendStatus(str, Enum):
    """Outcome of a single append target."""

    SUCCESS = "success"
    ERROR = "error"


class AppendRequest(BaseModel):
    """One append target: a document, the entry text, and an optional section.

    An empty ``section_header`` is treated the same as no header.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    file_name: str = Field(
        ...,
        min_length=1,
        description="Name of the memory bank document to append to.",
    )
    entry: str = Field(
        ...,
        min_length=1,
        description="Text of the entry to append.",
    )
    section_header: Optional[str] = Field(
        default=None,
        description="Exact markdown header (e.g. '## Decision') to append under.",
    )

    @field_validator("section_header")
    @classmethod
    def blank_header_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value == "":
            return None
        return value


class AppendResult(BaseModel):
    """Per-target result of an append."""

    file: Optional[str] = Field(
        default=None,
        description="Target document name, when one could be determined.",
    )
    status: AppendStatus
    message: str

    @property
    def ok(self) -> bool:
        return self.status is AppendStatus.SUCCESS

    def to_json_dict(self) -> dict:
        """Serialize to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")
