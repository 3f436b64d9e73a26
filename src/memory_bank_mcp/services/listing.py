"""ListingService -- enumerate the documents in the memory bank."""

from __future__ import annotations

import logging

from memory_bank_mcp.storage.store import DocumentStore

logger = logging.getLogger(__name__)


class ListingService:
    """Lists the documents available in a :class:`DocumentStore`."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def list_documents(self) -> list[str]:
        """Return the sorted document names, initializing the store first.

        Raises
        ------
        StorageIOError
            If the store cannot be initialized or enumerated.
        """
        self._store.ensure_initialized()
        names = self._store.list_names()
        logger.debug(
            "Listed %d %s documents in %s",
            len(names),
            self._store.extension,
            self._store.storage_root,
        )
        return names
