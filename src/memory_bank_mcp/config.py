"""Configuration and settings module for Memory Bank MCP.

Provides the :class:`MemoryBankConfig` class which centralises all
configuration for the memory bank server.  Configuration is resolved in
priority order:

1. **Environment variables** (highest priority) -- ``MEMORY_BANK_*``
2. **Config file** -- ``<project_root>/.memory-bank.json``
3. **Defaults** (lowest priority)

The project root is the directory the memory bank lives in.  When it is not
given explicitly it comes from ``VSCODE_CWD`` (set by editor-hosted agents)
and otherwise from the current working directory.

Typical usage::

    config = MemoryBankConfig.load()                        # auto-detect project root
    config = MemoryBankConfig.load("/path/to/project")      # explicit project root
    config = MemoryBankConfig(storage_path="/custom/path")  # programmatic construction

    print(config.storage_path)   # resolved absolute path to memory-bank/
    print(config.log_level)      # "INFO"  (or overridden value)
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Default memory bank directory name, placed at the project root.
DEFAULT_STORAGE_DIR_NAME = "memory-bank"

# Config file name at the project root.  Kept outside the memory bank
# directory so that reading it never creates that directory.
CONFIG_FILE_NAME = ".memory-bank.json"

# Environment variable prefix, e.g. ``MEMORY_BANK_LOG_LEVEL=DEBUG``.
ENV_PREFIX = "MEMORY_BANK_"

# Editor-provided working directory used as the project root when present.
EDITOR_CWD_ENV = "VSCODE_CWD"

# Default log file used by ``memory-bank serve --log``.
DEFAULT_LOG_FILE = os.path.join("logs", "memory-bank.log")

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class MemoryBankConfig(BaseModel):
    """Centralised configuration for the memory bank server.

    Attributes
    ----------
    project_root:
        The project directory.  Used to derive ``storage_path`` when it is
        not set explicitly.
    storage_path:
        Absolute path to the memory bank directory.
    document_extension:
        Extension of the files listed as documents.
    log_level:
        Python logging level name.
    log_file:
        Optional file that receives a copy of all log records.
    """

    project_root: Optional[str] = Field(
        default=None,
        description="Project directory the memory bank belongs to.",
    )
    storage_path: Optional[str] = Field(
        default=None,
        description="Absolute path to the memory-bank/ directory.",
    )
    document_extension: str = Field(
        default=".md",
        min_length=1,
        description="File extension of memory bank documents.",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL.",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path of a log file.",
    )

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def resolve_paths(self) -> "MemoryBankConfig":
        """Resolve ``project_root`` and ``storage_path`` to absolute paths."""
        if self.project_root is not None:
            self.project_root = str(Path(self.project_root).resolve())
        else:
            self.project_root = str(_detect_project_root())

        if self.storage_path is not None:
            self.storage_path = str(Path(self.storage_path).resolve())
        else:
            self.storage_path = str(
                Path(self.project_root) / DEFAULT_STORAGE_DIR_NAME
            )

        if self.log_file is not None:
            self.log_file = str(Path(self.log_file).resolve())

        return self

    @model_validator(mode="after")
    def validate_log_level(self) -> "MemoryBankConfig":
        """Normalise and validate the log level string."""
        normalised = self.log_level.upper().strip()
        if normalised not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level '{self.log_level}'. "
                f"Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}."
            )
        self.log_level = normalised
        return self

    # ------------------------------------------------------------------
    # Factory: load from file + environment
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        project_root: Optional[str] = None,
        config_path: Optional[str] = None,
    ) -> "MemoryBankConfig":
        """Load configuration with full resolution: env > file > defaults.

        Parameters
        ----------
        project_root:
            Explicit project root.  When *None*, ``VSCODE_CWD`` or the current
            working directory is used.
        config_path:
            Explicit path to a JSON config file.  When *None*, the file is
            looked up at ``<project_root>/.memory-bank.json``.
        """
        if project_root is not None:
            resolved_root = str(Path(project_root).resolve())
        else:
            resolved_root = str(_detect_project_root())

        file_values = _load_config_file(resolved_root, config_path)
        env_values = _load_env_overrides()

        merged: dict = {}
        if file_values:
            merged.update(file_values)
        if env_values:
            merged.update(env_values)
        merged["project_root"] = resolved_root

        return cls.model_validate(merged)

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------

    def configure_logging(self) -> None:
        """Attach handlers for the configured level to the package logger.

        Records go to stderr (stdout carries the MCP stdio transport) and,
        when ``log_file`` is set, to that file as well.  Idempotent.
        """
        pkg_logger = logging.getLogger("memory_bank_mcp")
        pkg_logger.setLevel(self.log_level)

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        if not any(
            type(h) is logging.StreamHandler for h in pkg_logger.handlers
        ):
            handler = logging.StreamHandler()
            handler.setLevel(self.log_level)
            handler.setFormatter(formatter)
            pkg_logger.addHandler(handler)

        if self.log_file is not None:
            already = any(
                isinstance(h, logging.FileHandler)
                and h.baseFilename == self.log_file
                for h in pkg_logger.handlers
            )
            if not already:
                Path(self.log_file).parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(self.log_file, encoding="utf-8")
                file_handler.setLevel(self.log_level)
                file_handler.setFormatter(formatter)
                pkg_logger.addHandler(file_handler)

    def to_dict(self) -> dict:
        """Return all configuration values as a plain dictionary."""
        return self.model_dump()


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _detect_project_root() -> Path:
    """Return ``VSCODE_CWD`` if set, else the current working directory.

    Raises
    ------
    ValueError
        If ``VSCODE_CWD`` points at a filesystem root, which means the editor
        was not launched from the project directory.
    """
    editor_cwd = os.environ.get(EDITOR_CWD_ENV)
    if editor_cwd:
        resolved = Path(editor_cwd).resolve()
        if resolved == Path(resolved.anchor):
            raise ValueError(
                f"{EDITOR_CWD_ENV} is set to a root directory. Launch the "
                "editor from the project directory so that it points at the "
                "project."
            )
        return resolved
    return Path.cwd()


def _load_config_file(
    project_root: str,
    config_path: Optional[str] = None,
) -> dict:
    """Read the JSON config file and return its contents as a dict.

    Returns an empty dict if the file does not exist or is malformed.
    """
    if config_path is not None:
        path = Path(config_path).resolve()
    else:
        path = Path(project_root) / CONFIG_FILE_NAME

    if not path.is_file():
        logger.debug("No config file at %s. Using defaults.", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as fp:
            data = json.load(fp)
    except json.JSONDecodeError:
        logger.warning(
            "Config file %s contains invalid JSON. Ignoring.",
            path,
            exc_info=True,
        )
        return {}
    except OSError:
        logger.warning(
            "Could not read config file %s. Ignoring.",
            path,
            exc_info=True,
        )
        return {}

    if not isinstance(data, dict):
        logger.warning(
            "Config file %s does not contain a JSON object. Ignoring.",
            path,
        )
        return {}
    logger.info("Loaded configuration from %s", path)
    return data


def _load_env_overrides() -> dict:
    """Read ``MEMORY_BANK_*`` environment variables and return overrides.

    Supported variables:

    - ``MEMORY_BANK_STORAGE_PATH`` -- override storage_path
    - ``MEMORY_BANK_LOG_LEVEL`` -- override log_level
    - ``MEMORY_BANK_LOG_FILE`` -- override log_file
    - ``MEMORY_BANK_DOCUMENT_EXTENSION`` -- override document_extension
    """
    overrides: dict = {}
    for key in ("STORAGE_PATH", "LOG_LEVEL", "LOG_FILE", "DOCUMENT_EXTENSION"):
        value = os.environ.get(f"{ENV_PREFIX}{key}")
        if value is not None:
            overrides[key.lower()] = value

    if overrides:
        logger.info(
            "Environment overrides applied: %s",
            ", ".join(overrides.keys()),
        )
    return overrides
