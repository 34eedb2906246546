"""Shared pytest fixtures for all tests."""

import sqlite3
import pytest
from pathlib import Path

from config import Config, get_migrations_dir
from db.manager import apply_pending_migrations, register_functions
from services.base import Services


@pytest.fixture
def test_db():
    """Create an in-memory SQLite database for testing.

    Yields:
        sqlite3.Connection: Connection to in-memory database.
    """
    conn = sqlite3.connect(":memory:")
    conn.execute("PRAGMA foreign_keys = ON")
    register_functions(conn)
    yield conn
    conn.close()


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary database.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "bookcatalog",
        db_data_dir=tmp_path / "bookcatalog" / "db",
        db_filename="test.db",
        log_level="DEBUG",
        log_dir=tmp_path / "bookcatalog" / "logs",
    )


class _TestConnectionContext:
    """Context manager for test database connections."""

    def __init__(self, conn):
        self.conn = conn

    def __enter__(self):
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Don't close the connection - let the fixture handle it
        pass


class TestDatabaseManager:
    """Test database manager that uses an in-memory connection."""

    __test__ = False

    def __init__(self, conn):
        self.conn = conn

    def connect(self):
        """Return a context manager for the test connection."""
        return _TestConnectionContext(self.conn)

    def get_db_path(self):
        """Return a fake path for the test database."""
        return Path(":memory:")

    def get_migrations_dir(self):
        """Get the migrations directory path."""
        return get_migrations_dir()


@pytest.fixture
def db_manager_with_schema(test_db):
    """Create a database manager with all migrations already applied.

    Args:
        test_db: In-memory database connection fixture.

    Returns:
        TestDatabaseManager: Database manager with schema ready.
    """
    db_manager = TestDatabaseManager(test_db)
    apply_pending_migrations(db_manager)
    return db_manager


@pytest.fixture
def services(test_config, db_manager_with_schema):
    """Create a Services container with test database.

    Args:
        test_config: Test configuration fixture.
        db_manager_with_schema: Database manager with schema set up.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config, db_manager=db_manager_with_schema)


@pytest.fixture
def store(services):
    """The category store backing the services container."""
    return services.category_store
