"""SQLAlchemy connection manager for maillog."""

from contextlib import contextmanager
from typing import Iterator

from loguru import logger
from sqlalchemy import Connection, Engine, create_engine, text

from ..core.exceptions import DatabaseError
from .models import Tables, build_tables


class Database:
    """Database connection manager."""

    def __init__(self, url: str, table_prefix: str = "wp_", echo: bool = False):
        """Initialize database with a SQLAlchemy URL.

        Args:
            url: SQLAlchemy database URL (e.g. "mysql+pymysql://..." or "sqlite:///maillog.db").
            table_prefix: Prefix shared by all tables of the site.
            echo: Log every statement SQLAlchemy emits.
        """
        self.url = url
        self.echo = echo
        self.tables: Tables = build_tables(table_prefix)
        self._engine: Engine | None = None

    @property
    def engine(self) -> Engine:
        """The connected engine.

        Raises:
            DatabaseError: If the database is not connected.
        """
        if self._engine is None:
            raise DatabaseError("Database not connected")
        return self._engine

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def connect(self) -> None:
        """Create the engine and check the database is reachable."""
        try:
            self._engine = create_engine(self.url, echo=self.echo)
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except Exception as e:
            self._engine = None
            raise DatabaseError(f"Failed to connect to database: {e}") from e
        logger.debug(f"Connected to {self._engine.url.render_as_string(hide_password=True)}")

    def close(self) -> None:
        """Dispose of the engine and its connection pool."""
        if self._engine:
            try:
                self._engine.dispose()
            except Exception as e:
                raise DatabaseError(f"Failed to close database: {e}") from e
            finally:
                self._engine = None

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Context manager for database transactions.

        Yields:
            A connection inside a transaction that commits on exit.

        Raises:
            DatabaseError: If connection is not available or transaction fails.
        """
        engine = self.engine
        try:
            with engine.begin() as connection:
                yield connection
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(f"Transaction failed: {e}") from e

    def execute(self, sql: str, params: dict | None = None) -> int:
        """Execute a single statement in its own transaction.

        Args:
            sql: SQL statement to execute.
            params: Bound parameters for the statement.

        Returns:
            Number of rows affected.

        Raises:
            DatabaseError: If connection is not available or the statement fails.
        """
        with self.transaction() as connection:
            result = connection.execute(text(sql), params or {})
            return result.rowcount

    def create_tables(self) -> None:
        """Create the options and mail log tables if they do not exist."""
        try:
            self.tables.metadata.create_all(self.engine)
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to initialize schema: {e}") from e
