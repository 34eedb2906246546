"""Database manager for SQLite connections, paths and schema migrations."""

import sqlite3
from contextlib import contextmanager
from typing import List, Set
from config import Config, get_migrations_dir
from logger import get_logger

logger = get_logger()


def _casefold(value):
    return value.casefold() if value is not None else None


def register_functions(conn: sqlite3.Connection) -> None:
    """Register the SQL functions the catalog queries rely on.

    SQLite's built-in lower() only folds ASCII, so searches use casefold().
    """
    conn.create_function("casefold", 1, _casefold, deterministic=True)


class DatabaseManager:
    """Manages database connections and paths.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config):
        """Initialize the database manager.

        Args:
            config: Config object containing database configuration.
        """
        self.config = config

    @contextmanager
    def connect(self):
        """Get a database connection with automatic cleanup.

        Yields:
            sqlite3.Connection: Database connection.
        """
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        register_functions(conn)
        try:
            yield conn
        finally:
            conn.close()

    def get_db_path(self):
        """Get the current database path.

        Returns:
            Path: Path to the database file.
        """
        return self.config.db_path

    def get_migrations_dir(self):
        """Get the migrations directory path.

        Returns:
            Path: Path to the migrations directory.
        """
        return get_migrations_dir()


def init_schema_migrations_table(conn: sqlite3.Connection) -> None:
    """Create the bookkeeping table for applied migrations if missing."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
            migration_file TEXT PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()


def get_applied_migrations(conn: sqlite3.Connection) -> Set[str]:
    """Return the file names of migrations already recorded as applied."""
    cursor = conn.execute(
        "SELECT migration_file FROM schema_migrations ORDER BY migration_file"
    )
    return {row[0] for row in cursor.fetchall()}


def get_available_migrations(db_manager) -> List[str]:
    """Return migration file names found on disk, in apply order."""
    migrations_dir = db_manager.get_migrations_dir()
    if not migrations_dir.exists():
        return []

    return sorted(path.name for path in migrations_dir.glob("*.sql"))


def get_pending_migrations(conn: sqlite3.Connection, db_manager) -> List[str]:
    """Return migrations present on disk but not yet applied."""
    init_schema_migrations_table(conn)
    applied = get_applied_migrations(conn)
    return [m for m in get_available_migrations(db_manager) if m not in applied]


def apply_migration(conn: sqlite3.Connection, migration_file: str, db_manager) -> None:
    """Apply a single migration file and record it.

    Raises:
        sqlite3.Error: If the migration SQL fails. The transaction is rolled back.
    """
    migration_path = db_manager.get_migrations_dir() / migration_file

    with open(migration_path, "r") as f:
        sql = f.read()

    try:
        conn.executescript(sql)
        conn.execute(
            "INSERT INTO schema_migrations (migration_file) VALUES (?)",
            (migration_file,),
        )
        conn.commit()
        logger.info(f"Applied migration: {migration_file}")
    except sqlite3.Error as e:
        conn.rollback()
        logger.error(f"Error applying migration {migration_file}: {e}")
        raise


def apply_pending_migrations(db_manager) -> List[str]:
    """Apply every pending migration in order.

    Returns:
        The list of migration file names that were applied.
    """
    with db_manager.connect() as conn:
        pending = get_pending_migrations(conn, db_manager)
        for migration in pending:
            apply_migration(conn, migration, db_manager)
        return pending
