"""Schema-altering operations on the mail log table."""

import re

from loguru import logger

from ..core.exceptions import DatabaseError
from ..core.types import EncodingSpec
from .database import Database

_IDENTIFIER = re.compile(r"^[A-Za-z0-9_$]+$")
_SQL_TYPE = re.compile(r"^[A-Z]+(\(\d+\))?$")


def _quote_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid identifier: {name!r}")
    return f"`{name}`"


def _check_name(kind: str, name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid {kind}: {name!r}")
    return name


def render_alter(table_name: str, encoding: EncodingSpec) -> str:
    """Render the ALTER TABLE statement that re-encodes columns.

    Args:
        table_name: Table to alter.
        encoding: Character set, collation and columns to modify.

    Returns:
        A single ALTER TABLE statement modifying every column.

    Raises:
        ValueError: If a name or type is not a plain SQL identifier, or no columns are given.
    """
    if not encoding.columns:
        raise ValueError("No columns to alter")

    charset = _check_name("charset", encoding.charset)
    collation = _check_name("collation", encoding.collation)

    modifications = []
    for column in encoding.columns:
        if not _SQL_TYPE.match(column.sql_type):
            raise ValueError(f"Invalid column type: {column.sql_type!r}")
        modifications.append(
            f"MODIFY {_quote_identifier(column.name)} {column.sql_type} "
            f"CHARACTER SET {charset} COLLATE {collation}"
        )

    body = ",\n    ".join(modifications)
    return f"ALTER TABLE {_quote_identifier(table_name)}\n    {body};"


class SQLSchemaExecutor:
    """Runs schema changes against the database, reporting failures as data."""

    def __init__(self, db: Database):
        """Initialize with database connection.

        Args:
            db: Database instance to run statements on.
        """
        self.db = db

    def alter_columns(self, table_name: str, encoding: EncodingSpec) -> tuple[bool, str]:
        """Change the character set and collation of columns in one statement.

        Args:
            table_name: Table to alter.
            encoding: Character set, collation and columns to modify.

        Returns:
            (True, "") on success, otherwise (False, native error message).
        """
        try:
            statement = render_alter(table_name, encoding)
        except ValueError as e:
            return False, str(e)

        logger.debug(f"Altering {len(encoding.columns)} column(s) of {table_name}")
        try:
            self.db.execute(statement)
        except DatabaseError as e:
            native = _native_message(e)
            logger.error(f"ALTER TABLE {table_name} failed: {native}")
            return False, native
        return True, ""


def _native_message(error: DatabaseError) -> str:
    """Extract the driver's own error text from a wrapped database error."""
    cause = error.__cause__
    if cause is None:
        return str(error)
    # DBAPIError keeps the driver exception on .orig
    return str(getattr(cause, "orig", None) or cause)
