"""
Unit tests for database engine tooling.

Tests cover:
- Native hot copy and compacting copy
- Fail-closed integrity checks
- Checksums
- Command engine behaviour when tools are missing
- Strategy parsing and engine factory
"""

import hashlib
import shutil
import sqlite3

import pytest

from litesnap.config import EngineBackend, EngineConfig
from litesnap.engine import CommandEngine, DatabaseEngine, NativeEngine, Strategy, create_engine
from litesnap.errors import SnapshotIOError, UnknownStrategyError
from tests.helpers import corrupt_header, count_rows, create_database


class TestNativeEngine:
    """Tests for NativeEngine."""

    @pytest.fixture
    def engine(self):
        return NativeEngine()

    def test_satisfies_protocol(self, engine):
        assert isinstance(engine, DatabaseEngine)
        assert engine.name == "native"

    @pytest.mark.asyncio
    async def test_hot_copy_preserves_rows(self, engine, database, tmp_path):
        """Hot copy produces a readable database with the same rows."""
        target = tmp_path / "copy.db"

        await engine.hot_copy(database, target)

        assert target.exists()
        assert count_rows(target) == 2
        assert await engine.integrity_check(target) is True

    @pytest.mark.asyncio
    async def test_hot_copy_while_source_is_open(self, engine, database, tmp_path):
        """Hot copy works while another connection holds the source open."""
        conn = sqlite3.connect(str(database))
        try:
            conn.execute("INSERT INTO items (name) VALUES ('open')")
            conn.commit()
            target = tmp_path / "copy.db"
            await engine.hot_copy(database, target)
        finally:
            conn.close()

        assert count_rows(target) == 3

    @pytest.mark.asyncio
    async def test_hot_copy_into_missing_directory_fails(self, engine, database, tmp_path):
        with pytest.raises(SnapshotIOError):
            await engine.hot_copy(database, tmp_path / "missing" / "dir" / "copy.db")

    @pytest.mark.asyncio
    async def test_copies_never_create_missing_source(self, engine, tmp_path):
        source = tmp_path / "missing.db"

        with pytest.raises(SnapshotIOError, match="Hot copy failed"):
            await engine.hot_copy(source, tmp_path / "hot.db")
        with pytest.raises(SnapshotIOError, match="Compact copy failed"):
            await engine.compact_copy(source, tmp_path / "compact.db")

        assert not source.exists()
        assert not (tmp_path / "hot.db").exists()

    @pytest.mark.asyncio
    async def test_compact_copy_reclaims_space(self, engine, tmp_path):
        """VACUUM INTO output is smaller after rows are deleted."""
        source = create_database(tmp_path / "big.db", rows=2000)
        conn = sqlite3.connect(str(source))
        try:
            conn.execute("DELETE FROM items WHERE id > 10")
            conn.commit()
        finally:
            conn.close()

        target = tmp_path / "compact.db"
        await engine.compact_copy(source, target)

        assert count_rows(target) == 10
        assert target.stat().st_size < source.stat().st_size

    @pytest.mark.asyncio
    async def test_compact_copy_overwrites_existing_target(self, engine, database, tmp_path):
        target = tmp_path / "compact.db"
        target.write_bytes(b"stale")

        await engine.compact_copy(database, target)

        assert count_rows(target) == 2

    @pytest.mark.asyncio
    async def test_integrity_check_missing_file(self, engine, tmp_path):
        missing = tmp_path / "nope.db"

        assert await engine.integrity_check(missing) is False
        assert not missing.exists()

    @pytest.mark.asyncio
    async def test_integrity_check_zero_byte_file(self, engine, tmp_path):
        empty = tmp_path / "empty.db"
        empty.touch()

        assert await engine.integrity_check(empty) is False

    @pytest.mark.asyncio
    async def test_integrity_check_corrupted_header(self, engine, database):
        corrupt_header(database)

        assert await engine.integrity_check(database) is False

    @pytest.mark.asyncio
    async def test_integrity_check_directory(self, engine, tmp_path):
        assert await engine.integrity_check(tmp_path) is False

    @pytest.mark.asyncio
    async def test_checksum_matches_sha256(self, engine, database):
        expected = hashlib.sha256(database.read_bytes()).hexdigest()

        assert await engine.checksum(database) == expected

    @pytest.mark.asyncio
    async def test_checksum_missing_file_is_none(self, engine, tmp_path):
        assert await engine.checksum(tmp_path / "nope.db") is None


class TestCommandEngine:
    """Tests for CommandEngine."""

    @pytest.fixture
    def missing_tools(self):
        return CommandEngine(
            sqlite_binary="/nonexistent/litesnap-sqlite3",
            checksum_command=("/nonexistent/litesnap-shasum",),
        )

    def test_satisfies_protocol(self, missing_tools):
        assert isinstance(missing_tools, DatabaseEngine)
        assert missing_tools.name == "command"

    @pytest.mark.asyncio
    async def test_missing_binary_fails_verification(self, missing_tools, database):
        assert await missing_tools.integrity_check(database) is False

    @pytest.mark.asyncio
    async def test_missing_binary_checksum_is_none(self, missing_tools, database):
        assert await missing_tools.checksum(database) is None

    @pytest.mark.asyncio
    async def test_missing_binary_hot_copy_raises(self, missing_tools, database, tmp_path):
        with pytest.raises(SnapshotIOError) as exc_info:
            await missing_tools.hot_copy(database, tmp_path / "copy.db")

        assert exc_info.value.code == "IO_ERROR"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["hot_copy", "compact_copy"])
    async def test_missing_source_is_rejected(self, operation, tmp_path):
        engine = CommandEngine()
        source = tmp_path / "missing.db"

        with pytest.raises(SnapshotIOError, match="Source database not found"):
            await getattr(engine, operation)(source, tmp_path / "copy.db")

        assert not source.exists()

    @pytest.mark.asyncio
    async def test_nonzero_exit_fails_checksum(self, database):
        """A digest command that exits non-zero yields None."""
        engine = CommandEngine(checksum_command=("false",))

        assert await engine.checksum(database) is None

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("sha256sum") is None, reason="sha256sum not installed")
    async def test_checksum_uses_first_field(self, database):
        engine = CommandEngine(checksum_command=("sha256sum",))

        digest = await engine.checksum(database)

        assert digest == hashlib.sha256(database.read_bytes()).hexdigest()

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("sqlite3") is None, reason="sqlite3 shell not installed")
    async def test_sqlite_shell_round_trip(self, database, tmp_path):
        engine = CommandEngine()
        target = tmp_path / "shell copy.db"

        await engine.hot_copy(database, target)

        assert count_rows(target) == 2
        assert await engine.integrity_check(target) is True


class TestStrategy:
    """Tests for Strategy parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("backup", Strategy.NATIVE_COPY),
            ("copy", Strategy.RAW_COPY),
            ("VACUUM", Strategy.COMPACT_COPY),
            (Strategy.RAW_COPY, Strategy.RAW_COPY),
        ],
    )
    def test_parse(self, value, expected):
        assert Strategy.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(UnknownStrategyError, match="Unknown backup method"):
            Strategy.parse("rsync")


class TestCreateEngine:
    """Tests for the engine factory."""

    def test_default_is_native(self):
        assert isinstance(create_engine(), NativeEngine)

    def test_command_backend(self):
        engine = create_engine(
            EngineConfig(backend=EngineBackend.COMMAND, sqlite_binary="/opt/sqlite3")
        )

        assert isinstance(engine, CommandEngine)
        assert engine.sqlite_binary == "/opt/sqlite3"
