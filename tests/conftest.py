"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from maillog.core.config import Config
from maillog.core.types import VERSION_OPTION
from maillog.migrations import MigrationRunner
from maillog.store import Database, OptionVersionStore, SQLSchemaExecutor
from tests.fakes import FakeSchemaExecutor, InMemoryVersionStore


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """Provide a temporary SQLite database URL."""
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def config(db_url: str) -> Config:
    """Provide a Config pointing at the temporary database."""
    cfg = Config()
    cfg.database.url = db_url
    cfg.migration.nonce_secret = "fixture-signing-key-0123456789abcdef"
    return cfg


@pytest.fixture
def db(config: Config) -> Database:
    """Provide a connected database with tables created."""
    database = Database(config.database.url, config.database.table_prefix)
    database.connect()
    database.create_tables()
    yield database
    database.close()


@pytest.fixture
def option_store(db: Database) -> OptionVersionStore:
    """Provide an OptionVersionStore instance."""
    return OptionVersionStore(db)


@pytest.fixture
def sql_executor(db: Database) -> SQLSchemaExecutor:
    """Provide a SQLSchemaExecutor instance."""
    return SQLSchemaExecutor(db)


@pytest.fixture
def version_store() -> InMemoryVersionStore:
    """Provide an in-memory version store at version 0."""
    return InMemoryVersionStore()


@pytest.fixture
def executor() -> FakeSchemaExecutor:
    """Provide a schema executor that succeeds."""
    return FakeSchemaExecutor()


@pytest.fixture
def runner(version_store: InMemoryVersionStore, executor: FakeSchemaExecutor) -> MigrationRunner:
    """Provide a runner over the in-memory fakes."""
    return MigrationRunner(version_store, executor, collation="utf8mb4_unicode_ci")


@pytest.fixture
def at_version(version_store: InMemoryVersionStore):
    """Set the stored schema version."""

    def _set(version: int) -> None:
        version_store.values[VERSION_OPTION] = version

    return _set
