"""AppendService -- add timestamped entries to memory bank documents.

Two branches, depending on whether a section header is given:

- **No header**: the formatted entry is appended to the end of the file.  A
  missing file is created holding just the entry; no bootstrap template is
  applied.
- **Header**: the body is read (a missing file is seeded from the bootstrap
  template, if the name has one), the entry is spliced in at the end of the
  section, and the whole document is rewritten.  If the header does not
  occur, the header and the entry are appended at the end.

Every append produces an :class:`AppendResult`; failures are reported, never
raised.  Batch appends process each target independently.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from memory_bank_mcp.errors import MemoryBankError, ValidationError
from memory_bank_mcp.models.entries import AppendRequest, AppendResult, AppendStatus
from memory_bank_mcp.storage.sections import (
    find_section_end,
    format_entry,
    insert_under_section,
)
from memory_bank_mcp.storage.store import DocumentStore
from memory_bank_mcp.storage.templates import render_template

logger = logging.getLogger(__name__)


class AppendService:
    """Appends entries to documents in a :class:`DocumentStore`."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def append(
        self,
        file_name: Any,
        entry: Any,
        section_header: Any = None,
    ) -> AppendResult:
        """Append *entry* to *file_name*, optionally under *section_header*.

        Invalid input yields an ``error`` result without touching the disk.
        """
        try:
            request = self.build_request(
                {
                    "file_name": file_name,
                    "entry": entry,
                    "section_header": section_header,
                }
            )
        except ValidationError as exc:
            logger.warning("Rejected append request: %s", exc)
            return AppendResult(
                file=file_name if isinstance(file_name, str) else None,
                status=AppendStatus.ERROR,
                message=str(exc),
            )
        return self.apply(request)

    def append_many(self, targets: Iterable[Any]) -> list[AppendResult]:
        """Append each target independently and return one result per target.

        A target that is malformed or fails to write does not stop the others.
        """
        results: list[AppendResult] = []
        for target in targets:
            file_name = target.get("file_name") if isinstance(target, dict) else None
            try:
                request = self.build_request(target)
            except ValidationError as exc:
                logger.warning("Rejected append target %r: %s", file_name, exc)
                results.append(
                    AppendResult(
                        file=file_name if isinstance(file_name, str) else None,
                        status=AppendStatus.ERROR,
                        message=str(exc),
                    )
                )
                continue
            results.append(self.apply(request))
        return results

    def apply(self, request: AppendRequest) -> AppendResult:
        """Perform a validated append and report the outcome."""
        name = request.file_name
        try:
            self._store.document_path(name)
            self._store.ensure_initialized()

            timestamp = self._store.timestamp()
            formatted = format_entry(request.entry, timestamp)
            if request.section_header is None:
                self._store.append_document(name, formatted)
            else:
                self._append_under_section(
                    name, request.section_header, formatted, timestamp
                )
        except ValidationError as exc:
            logger.warning("Rejected append to %s: %s", name, exc)
            return AppendResult(file=name, status=AppendStatus.ERROR, message=str(exc))
        except MemoryBankError as exc:
            logger.error("Error appending to file %s", name, exc_info=True)
            return AppendResult(
                file=name,
                status=AppendStatus.ERROR,
                message=f"Failed to append to file {name}: {exc}",
            )

        logger.info("Appended entry to %s", name)
        return AppendResult(
            file=name,
            status=AppendStatus.SUCCESS,
            message=f"Appended entry to {name}",
        )

    @staticmethod
    def build_request(data: Any) -> AppendRequest:
        """Validate raw input into an :class:`AppendRequest`.

        Raises
        ------
        ValidationError
            With a message naming the offending field.
        """
        if not isinstance(data, dict):
            raise ValidationError("Append target must be an object.")
        try:
            return AppendRequest.model_validate(data)
        except PydanticValidationError as exc:
            field = _first_error_field(exc)
            if field is None:
                raise ValidationError(f"Invalid append target: {exc}") from exc
            raise ValidationError(
                f"Missing or invalid '{field}' parameter."
            ) from exc

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _append_under_section(
        self, name: str, header: str, formatted: str, timestamp: str
    ) -> None:
        """Splice *formatted* into *header*; a seeded template shares *timestamp*."""

        def splice(body: Optional[str]) -> str:
            if body is None:
                logger.warning("File %s not found, creating.", name)
                body = render_template(name, timestamp) or ""
            if find_section_end(body, header) is None:
                logger.warning(
                    "Header %r not found in %s. Appending header and entry "
                    "to the end.",
                    header,
                    name,
                )
            return insert_under_section(body, header, formatted)

        self._store.update_document(name, splice)


def _first_error_field(exc: PydanticValidationError) -> Optional[str]:
    for error in exc.errors():
        loc = error.get("loc") or ()
        if loc:
            return str(loc[0])
    return None
