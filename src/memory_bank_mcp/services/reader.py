"""ReadService -- fetch memory bank documents by name.

Reading is batch-oriented and partial success is normal: a document that is
missing or unreadable comes back as ``None`` instead of failing the batch.
Calling with no names switches to list mode and returns the available
document names instead of their contents.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from memory_bank_mcp.errors import MemoryBankError, ValidationError
from memory_bank_mcp.services.listing import ListingService
from memory_bank_mcp.storage.store import DocumentStore

logger = logging.getLogger(__name__)

ReadResult = Union[list[str], dict[str, Optional[str]]]


class ReadService:
    """Reads documents from a :class:`DocumentStore`."""

    def __init__(
        self,
        store: DocumentStore,
        listing: Optional[ListingService] = None,
    ) -> None:
        self._store = store
        self._listing = listing or ListingService(store)

    def read_documents(self, names: Optional[Sequence[str]] = None) -> ReadResult:
        """Read the named documents, or list all documents when *names* is empty.

        Parameters
        ----------
        names:
            Document names to read.  *None* or an empty sequence selects list
            mode.

        Returns
        -------
        list[str] or dict[str, str | None]
            In list mode, the sorted document names.  In read mode, a mapping
            of each requested name to its text, or *None* when the document
            is missing or unreadable.

        Raises
        ------
        ValidationError
            If *names* is not a sequence of valid document names.  Raised
            before any I/O.
        StorageIOError
            If the store cannot be initialized, or enumerated in list mode.
        """
        if not names:
            return self._listing.list_documents()

        self._validate(names)
        self._store.ensure_initialized()

        results: dict[str, Optional[str]] = {}
        for name in names:
            try:
                results[name] = self._store.read_document(name)
            except MemoryBankError as exc:
                logger.warning(
                    "File %s not found or could not be read. Returning null "
                    "for this file. (%s)",
                    name,
                    exc,
                )
                results[name] = None
        return results

    @staticmethod
    def _validate(names: object) -> None:
        if isinstance(names, (str, bytes)) or not isinstance(names, Sequence):
            raise ValidationError(
                "Invalid 'file_names' parameter. Must be an array of strings."
            )
        for name in names:
            if not isinstance(name, str):
                raise ValidationError(
                    "Invalid 'file_names' parameter. Must be an array of strings."
                )
            DocumentStore.validate_name(name)
