"""
Unit tests for configuration and errors.

Tests cover:
- ManagerConfig path validation and defaults
- Environment loading
- Error codes
"""

import pytest

from litesnap.config import (
    EngineBackend,
    EngineConfig,
    LitesnapConfig,
    ManagerConfig,
    ObservabilityConfig,
)
from litesnap.errors import (
    ConfigError,
    IntegrityError,
    LitesnapError,
    SnapshotIOError,
    UnknownStrategyError,
)


class TestManagerConfig:
    """Tests for ManagerConfig.create."""

    def test_default_backup_directory(self, database):
        config = ManagerConfig.create(database)

        assert config.database_path == database.resolve()
        assert config.backup_directory == database.resolve().parent / "backups"
        assert config.backup_directory.is_dir()

    def test_explicit_backup_directory(self, database, backup_dir):
        config = ManagerConfig.create(database, backup_directory=backup_dir)

        assert config.backup_directory == backup_dir.resolve()
        assert backup_dir.is_dir()

    def test_no_auto_create(self, database, backup_dir):
        config = ManagerConfig.create(
            database, backup_directory=backup_dir, auto_create_directory=False
        )

        assert config.auto_create_directory is False
        assert not backup_dir.exists()

    def test_relative_path_is_resolved(self, database, monkeypatch):
        monkeypatch.chdir(database.parent)

        config = ManagerConfig.create("app.db")

        assert config.database_path.is_absolute()
        assert config.database_path == database.resolve()

    def test_missing_database(self, tmp_path):
        with pytest.raises(ConfigError, match="Database file not found") as exc_info:
            ManagerConfig.create(tmp_path / "missing.db")

        assert exc_info.value.field_name == "database_path"
        assert not (tmp_path / "backups").exists()

    def test_empty_path(self):
        with pytest.raises(ConfigError, match="Database path is required"):
            ManagerConfig.create("")

    def test_directory_is_not_a_database(self, tmp_path):
        with pytest.raises(ConfigError):
            ManagerConfig.create(tmp_path)

    def test_from_env(self, database, backup_dir, monkeypatch):
        monkeypatch.setenv("LITESNAP_DATABASE_PATH", str(database))
        monkeypatch.setenv("LITESNAP_BACKUP_DIR", str(backup_dir))
        monkeypatch.setenv("LITESNAP_AUTO_CREATE_DIR", "false")

        config = ManagerConfig.from_env()

        assert config.backup_directory == backup_dir.resolve()
        assert not backup_dir.exists()


class TestEngineConfig:
    """Tests for EngineConfig and LitesnapConfig."""

    def test_defaults(self, monkeypatch):
        for name in ("LITESNAP_ENGINE", "LITESNAP_SQLITE_BINARY", "LITESNAP_CHECKSUM_COMMAND"):
            monkeypatch.delenv(name, raising=False)

        config = EngineConfig.from_env()

        assert config.backend == EngineBackend.NATIVE
        assert config.sqlite_binary == "sqlite3"
        assert config.checksum_command == ("shasum", "-a", "256")

    def test_command_backend_from_env(self, monkeypatch):
        monkeypatch.setenv("LITESNAP_ENGINE", "COMMAND")
        monkeypatch.setenv("LITESNAP_SQLITE_BINARY", "/usr/local/bin/sqlite3")
        monkeypatch.setenv("LITESNAP_CHECKSUM_COMMAND", "sha256sum")

        config = EngineConfig.from_env()

        assert config.backend == EngineBackend.COMMAND
        assert config.sqlite_binary == "/usr/local/bin/sqlite3"
        assert config.checksum_command == ("sha256sum",)

    def test_invalid_backend(self, monkeypatch):
        monkeypatch.setenv("LITESNAP_ENGINE", "postgres")

        with pytest.raises(ConfigError, match="Invalid LITESNAP_ENGINE"):
            EngineConfig.from_env()

    def test_observability_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_FORMAT", "json")

        config = LitesnapConfig.from_env()

        assert config.observability == ObservabilityConfig(log_level="DEBUG", log_format="json")


class TestErrors:
    """Tests for the error taxonomy."""

    @pytest.mark.parametrize(
        "error,code",
        [
            (ConfigError("bad"), "CONFIG_ERROR"),
            (UnknownStrategyError("rsync"), "CONFIG_ERROR"),
            (SnapshotIOError("disk full", path="/tmp/x.db"), "IO_ERROR"),
            (IntegrityError("corrupt"), "INTEGRITY_ERROR"),
        ],
    )
    def test_codes(self, error, code):
        assert isinstance(error, LitesnapError)
        assert error.code == code

    def test_io_error_details(self):
        error = SnapshotIOError("exit 1", path="/tmp/x.db", returncode=1)

        assert error.details == {"path": "/tmp/x.db", "returncode": 1}
        assert str(error) == "exit 1"
