"""Tests for MemoryBankConfig -- configuration and settings module.

All tests use real files in temporary directories, real environment variables,
and real config files.  No mocks, no stubs, no fakes.
"""

import json
import logging
import os
from pathlib import Path

import pytest

from memory_bank_mcp.config import (
    CONFIG_FILE_NAME,
    DEFAULT_STORAGE_DIR_NAME,
    EDITOR_CWD_ENV,
    ENV_PREFIX,
    MemoryBankConfig,
    _load_config_file,
    _load_env_overrides,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_env():
    """Remove MEMORY_BANK_* and VSCODE_CWD before and after each test."""
    keys = [k for k in os.environ if k.startswith(ENV_PREFIX) or k == EDITOR_CWD_ENV]
    saved = {k: os.environ.pop(k) for k in keys}
    yield
    for k in list(os.environ.keys()):
        if k.startswith(ENV_PREFIX) or k == EDITOR_CWD_ENV:
            del os.environ[k]
    os.environ.update(saved)


@pytest.fixture()
def clean_logger():
    """Detach any handlers added to the package logger during a test."""
    pkg_logger = logging.getLogger("memory_bank_mcp")
    before = list(pkg_logger.handlers)
    yield pkg_logger
    for handler in list(pkg_logger.handlers):
        if handler not in before:
            pkg_logger.removeHandler(handler)
            handler.close()


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / CONFIG_FILE_NAME
    path.write_text(
        json.dumps({"log_level": "DEBUG", "document_extension": ".markdown"}),
        encoding="utf-8",
    )
    return path


# ---------------------------------------------------------------------------
# Default construction
# ---------------------------------------------------------------------------


class TestDefaultConstruction:
    def test_default_log_level(self, tmp_path: Path) -> None:
        config = MemoryBankConfig(project_root=str(tmp_path))
        assert config.log_level == "INFO"

    def test_default_extension(self, tmp_path: Path) -> None:
        config = MemoryBankConfig(project_root=str(tmp_path))
        assert config.document_extension == ".md"

    def test_storage_path_derived_from_project_root(self, tmp_path: Path) -> None:
        config = MemoryBankConfig(project_root=str(tmp_path))
        assert config.storage_path == str(tmp_path.resolve() / DEFAULT_STORAGE_DIR_NAME)

    def test_no_log_file_by_default(self, tmp_path: Path) -> None:
        assert MemoryBankConfig(project_root=str(tmp_path)).log_file is None

    def test_project_root_defaults_to_cwd(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        config = MemoryBankConfig()
        assert config.project_root == str(Path.cwd())


# ---------------------------------------------------------------------------
# Project root detection
# ---------------------------------------------------------------------------


class TestProjectRoot:
    def test_editor_cwd_used(self, tmp_path: Path) -> None:
        os.environ[EDITOR_CWD_ENV] = str(tmp_path)
        config = MemoryBankConfig.load()
        assert config.project_root == str(tmp_path.resolve())
        assert config.storage_path == str(tmp_path.resolve() / DEFAULT_STORAGE_DIR_NAME)

    def test_editor_cwd_at_filesystem_root_rejected(self) -> None:
        os.environ[EDITOR_CWD_ENV] = "/"
        with pytest.raises(ValueError, match="root directory"):
            MemoryBankConfig.load()

    def test_explicit_root_beats_editor_cwd(self, tmp_path: Path) -> None:
        os.environ[EDITOR_CWD_ENV] = "/"
        config = MemoryBankConfig.load(project_root=str(tmp_path))
        assert config.project_root == str(tmp_path.resolve())


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_log_level_normalised(self, tmp_path: Path) -> None:
        config = MemoryBankConfig(project_root=str(tmp_path), log_level=" debug ")
        assert config.log_level == "DEBUG"

    def test_invalid_log_level(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            MemoryBankConfig(project_root=str(tmp_path), log_level="LOUD")

    def test_empty_extension_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            MemoryBankConfig(project_root=str(tmp_path), document_extension="")


# ---------------------------------------------------------------------------
# Loading from file and environment
# ---------------------------------------------------------------------------


class TestLoad:
    def test_config_file_values(self, tmp_path: Path, config_file: Path) -> None:
        config = MemoryBankConfig.load(project_root=str(tmp_path))
        assert config.log_level == "DEBUG"
        assert config.document_extension == ".markdown"

    def test_env_overrides_file(self, tmp_path: Path, config_file: Path) -> None:
        os.environ[f"{ENV_PREFIX}LOG_LEVEL"] = "ERROR"
        config = MemoryBankConfig.load(project_root=str(tmp_path))
        assert config.log_level == "ERROR"
        assert config.document_extension == ".markdown"

    def test_env_storage_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "elsewhere"
        os.environ[f"{ENV_PREFIX}STORAGE_PATH"] = str(custom)
        config = MemoryBankConfig.load(project_root=str(tmp_path))
        assert config.storage_path == str(custom.resolve())

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"log_level": "WARNING"}), encoding="utf-8")
        config = MemoryBankConfig.load(project_root=str(tmp_path), config_path=str(path))
        assert config.log_level == "WARNING"

    def test_file_cannot_override_project_root(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILE_NAME).write_text(
            json.dumps({"project_root": "/somewhere/else"}), encoding="utf-8"
        )
        config = MemoryBankConfig.load(project_root=str(tmp_path))
        assert config.project_root == str(tmp_path.resolve())

    def test_loading_does_not_create_memory_bank(self, tmp_path: Path) -> None:
        MemoryBankConfig.load(project_root=str(tmp_path))
        assert not (tmp_path / DEFAULT_STORAGE_DIR_NAME).exists()


class TestLoadConfigFile:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert _load_config_file(str(tmp_path)) == {}

    def test_invalid_json_ignored(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILE_NAME).write_text("{not json", encoding="utf-8")
        assert _load_config_file(str(tmp_path)) == {}

    def test_non_object_ignored(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILE_NAME).write_text("[1, 2]", encoding="utf-8")
        assert _load_config_file(str(tmp_path)) == {}


class TestEnvOverrides:
    def test_no_overrides(self) -> None:
        assert _load_env_overrides() == {}

    def test_all_supported_keys(self) -> None:
        os.environ[f"{ENV_PREFIX}STORAGE_PATH"] = "/x"
        os.environ[f"{ENV_PREFIX}LOG_LEVEL"] = "DEBUG"
        os.environ[f"{ENV_PREFIX}LOG_FILE"] = "/tmp/mb.log"
        os.environ[f"{ENV_PREFIX}DOCUMENT_EXTENSION"] = ".txt"
        assert _load_env_overrides() == {
            "storage_path": "/x",
            "log_level": "DEBUG",
            "log_file": "/tmp/mb.log",
            "document_extension": ".txt",
        }


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    def test_sets_level(self, tmp_path: Path, clean_logger) -> None:
        MemoryBankConfig(project_root=str(tmp_path), log_level="WARNING").configure_logging()
        assert clean_logger.level == logging.WARNING

    def test_idempotent(self, tmp_path: Path, clean_logger) -> None:
        config = MemoryBankConfig(project_root=str(tmp_path))
        config.configure_logging()
        count = len(clean_logger.handlers)
        config.configure_logging()
        assert len(clean_logger.handlers) == count

    def test_log_file_receives_records(self, tmp_path: Path, clean_logger) -> None:
        log_file = tmp_path / "logs" / "memory-bank.log"
        config = MemoryBankConfig(project_root=str(tmp_path), log_file=str(log_file))
        config.configure_logging()

        logging.getLogger("memory_bank_mcp.test").warning("hello from test")
        for handler in clean_logger.handlers:
            handler.flush()

        assert log_file.is_file()
        assert "hello from test" in log_file.read_text(encoding="utf-8")
