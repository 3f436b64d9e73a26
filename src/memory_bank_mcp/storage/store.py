"""DocumentStore -- file-based storage for memory bank documents.

Owns a single root directory of UTF-8 markdown documents.  The directory and
the bootstrap catalog are created lazily the first time an operation finds
the directory missing; after that the store never backfills catalog files.

Typical usage::

    store = DocumentStore()                        # uses memory-bank/ in cwd
    store = DocumentStore("/path/to/memory-bank")  # explicit root

    store.ensure_initialized()
    names = store.list_names()
    text = store.read_document("activeContext.md")
    store.append_document("progress.md", "\\n[...] - entry\\n")
    store.update_document("decisionLog.md", lambda body: (body or "") + "...")

All mutations of a given document are serialised through a per-name lock, so
concurrent appenders within one process never lose entries.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from memory_bank_mcp.errors import (
    DocumentNotFoundError,
    StorageIOError,
    ValidationError,
)
from memory_bank_mcp.storage.sections import current_timestamp
from memory_bank_mcp.storage.templates import BOOTSTRAP_CATALOG, render_template

logger = logging.getLogger(__name__)

# Default directory name for the memory bank, placed at the project root.
DEFAULT_STORAGE_DIR = "memory-bank"

# Only files with this extension are listed as documents.
DEFAULT_DOCUMENT_EXTENSION = ".md"


class DocumentStore:
    """File-based store for the memory bank documents.

    Parameters
    ----------
    storage_path:
        Absolute or relative path to the memory bank directory.  When *None*,
        defaults to ``<cwd>/memory-bank/``.
    extension:
        File extension of listed documents.
    clock:
        Callable returning the current ``datetime``.  Defaults to the local
        wall clock; tests inject a fixed clock.
    """

    def __init__(
        self,
        storage_path: Optional[str] = None,
        extension: str = DEFAULT_DOCUMENT_EXTENSION,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if storage_path is not None:
            self._root = Path(storage_path).resolve()
        else:
            self._root = Path.cwd() / DEFAULT_STORAGE_DIR

        self._extension = extension
        self._clock = clock

        # One lock per document name ever mutated; never evicted, so the map
        # is bounded by the number of distinct names written in this process.
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Public API -- Initialization
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        """Check whether the memory bank directory exists."""
        return self._root.is_dir()

    def ensure_initialized(self) -> list[str]:
        """Create the directory and bootstrap documents if the directory is missing.

        Existence is checked on every call.  If the directory is already there,
        nothing happens, even when some catalog documents are missing.

        Returns
        -------
        list[str]
            Names of the documents created by this call (empty if none).

        Raises
        ------
        StorageIOError
            If the directory or a template file cannot be created.
        """
        if self._root.is_dir():
            return []

        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageIOError(
                f"Failed to create memory bank directory {self._root}: {exc}"
            ) from exc
        logger.info("Created memory bank directory: %s", self._root)

        timestamp = self.timestamp()
        created: list[str] = []
        for file_name in BOOTSTRAP_CATALOG:
            content = render_template(file_name, timestamp)
            if self._create_exclusive(self._root / file_name, content):
                created.append(file_name)
                logger.info("Created file: %s", file_name)
        return created

    # ------------------------------------------------------------------
    # Public API -- Document access
    # ------------------------------------------------------------------

    def list_names(self) -> list[str]:
        """Return the sorted names of all documents in the store.

        Raises
        ------
        StorageIOError
            If the directory cannot be enumerated.
        """
        try:
            entries = list(self._root.iterdir())
        except OSError as exc:
            raise StorageIOError(f"Failed to list files: {exc}") from exc

        return sorted(
            entry.name
            for entry in entries
            if entry.name.endswith(self._extension) and entry.is_file()
        )

    def read_document(self, name: str) -> str:
        """Return the full text of document *name*.

        Raises
        ------
        DocumentNotFoundError
            If the document does not exist.
        StorageIOError
            If the document exists but cannot be read or decoded.
        """
        path = self.document_path(name)
        try:
            with open(path, "r", encoding="utf-8", newline="") as fp:
                return fp.read()
        except FileNotFoundError as exc:
            raise DocumentNotFoundError(f"Document {name} not found.") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageIOError(f"Could not read {name}: {exc}") from exc

    def append_document(self, name: str, text: str) -> Path:
        """Append *text* to the end of document *name*, creating it if missing."""
        path = self.document_path(name)
        with self.lock_for(name):
            try:
                with open(path, "a", encoding="utf-8", newline="") as fp:
                    fp.write(text)
            except OSError as exc:
                raise StorageIOError(str(exc)) from exc
        logger.debug("Appended %d characters to %s", len(text), path)
        return path

    def update_document(
        self,
        name: str,
        transform: Callable[[Optional[str]], str],
    ) -> Path:
        """Read-modify-write document *name* under its lock.

        *transform* receives the current body (or *None* if the document does
        not exist yet) and returns the new body, which replaces the file
        atomically.
        """
        path = self.document_path(name)
        with self.lock_for(name):
            try:
                current: Optional[str] = self.read_document(name)
            except DocumentNotFoundError:
                current = None
            new_body = transform(current)
            self._atomic_write(path, new_body)
        logger.debug("Rewrote %s (%d characters)", path, len(new_body))
        return path

    def document_path(self, name: str) -> Path:
        """Return the path for document *name* inside the store root.

        Raises
        ------
        ValidationError
            If *name* is not a bare relative filename.
        """
        self.validate_name(name)
        return self._root / name

    @staticmethod
    def validate_name(name: object) -> None:
        """Reject anything that is not a plain filename inside the root."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Document name must be a non-empty string.")
        if "/" in name or "\\" in name or name in (".", ".."):
            raise ValidationError(
                f"Document name must be a plain file name, got {name!r}."
            )
        if os.path.isabs(name) or "\x00" in name:
            raise ValidationError(f"Invalid document name {name!r}.")

    # ------------------------------------------------------------------
    # Public API -- Introspection
    # ------------------------------------------------------------------

    @property
    def storage_root(self) -> Path:
        """The resolved root directory of the memory bank."""
        return self._root

    @property
    def extension(self) -> str:
        """File extension used to recognise documents."""
        return self._extension

    def timestamp(self) -> str:
        """Current time rendered as ``YYYY-MM-DD HH:MM:SS``."""
        return current_timestamp(self._clock)

    def lock_for(self, name: str) -> threading.Lock:
        """Return the mutation lock for document *name*."""
        with self._locks_guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = threading.Lock()
                self._locks[name] = lock
            return lock

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _create_exclusive(path: Path, content: str) -> bool:
        """Create *path* with *content* unless it already exists.

        Returns *True* if the file was created by this call.
        """
        try:
            with open(path, "x", encoding="utf-8", newline="") as fp:
                fp.write(content)
        except FileExistsError:
            logger.debug("%s already exists, leaving it untouched.", path)
            return False
        except OSError as exc:
            raise StorageIOError(f"Failed to create {path.name}: {exc}") from exc
        return True

    def _atomic_write(self, target: Path, text: str) -> None:
        """Write *text* to *target* atomically.

        The text goes to a temporary file in the same directory, is flushed and
        fsynced, then renamed over *target*.  On failure the temp file is
        removed and *target* is left untouched.
        """
        fd = None
        tmp_path: Optional[str] = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=str(target.parent),
                prefix=".tmp_",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as fp:
                fd = None  # os.fdopen takes ownership of the fd
                fp.write(text)
                fp.flush()
                os.fsync(fp.fileno())

            os.replace(tmp_path, str(target))
            tmp_path = None
        except OSError as exc:
            raise StorageIOError(str(exc)) from exc
        finally:
            if fd is not None:
                os.close(fd)
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.debug("Could not remove temp file %s", tmp_path)
