"""Option-backed storage for the schema version and redeemed tokens."""

import json
import time

from loguru import logger
from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from ..core.exceptions import DatabaseError
from .database import Database


def _to_int(value: str | None) -> int:
    """Interpret a stored option value as a non-negative integer.

    Absent, non-numeric and negative values read as 0.
    """
    if value is None:
        return 0
    try:
        return max(0, int(str(value).strip()))
    except ValueError:
        return 0


class OptionVersionStore:
    """Reads and writes integer settings in the options table."""

    def __init__(self, db: Database):
        """Initialize with database connection.

        Args:
            db: Database instance to use for operations.
        """
        self.db = db
        self.table = db.tables.options

    def get_int(self, key: str) -> int:
        """Get an integer option.

        Args:
            key: Option name.

        Returns:
            Stored value, or 0 if the option does not exist.
        """
        with self.db.transaction() as conn:
            value = conn.execute(
                select(self.table.c.option_value).where(self.table.c.option_name == key)
            ).scalar_one_or_none()
        return _to_int(value)

    def set_int(self, key: str, value: int, autoload: bool = False) -> None:
        """Create or replace an integer option.

        Args:
            key: Option name.
            value: New value.
            autoload: Whether the option is loaded on every request.
        """
        autoload_flag = "yes" if autoload else "no"
        with self.db.transaction() as conn:
            result = conn.execute(
                update(self.table)
                .where(self.table.c.option_name == key)
                .values(option_value=str(value), autoload=autoload_flag)
            )
            if result.rowcount == 0:
                conn.execute(
                    insert(self.table).values(
                        option_name=key, option_value=str(value), autoload=autoload_flag
                    )
                )
        logger.debug(f"Option {key} set to {value}")

    def compare_and_set(
        self, key: str, expected: int, value: int, autoload: bool = False
    ) -> bool:
        """Set an integer option only if it still holds the expected value.

        A missing option counts as 0.

        Args:
            key: Option name.
            expected: Value the option must currently hold.
            value: New value.
            autoload: Whether the option is loaded on every request.

        Returns:
            True if the option was updated, False if another writer got there first.
        """
        autoload_flag = "yes" if autoload else "no"
        try:
            with self.db.transaction() as conn:
                current = conn.execute(
                    select(self.table.c.option_value).where(self.table.c.option_name == key)
                ).scalar_one_or_none()

                if current is None:
                    if expected != 0:
                        return False
                    conn.execute(
                        insert(self.table).values(
                            option_name=key, option_value=str(value), autoload=autoload_flag
                        )
                    )
                    return True

                if _to_int(current) != expected:
                    return False

                result = conn.execute(
                    update(self.table)
                    .where(self.table.c.option_name == key)
                    .where(self.table.c.option_value == current)
                    .values(option_value=str(value), autoload=autoload_flag)
                )
                return result.rowcount == 1
        except DatabaseError as e:
            # Unique option_name: a concurrent insert won the race
            if isinstance(e.__cause__, IntegrityError):
                logger.warning(f"Option {key} was created concurrently")
                return False
            raise


class OptionTokenLedger:
    """Redeemed token ids kept in one option, shared by every request.

    The option holds a JSON object of token id to expiry timestamp;
    expired ids are dropped on every write.
    """

    def __init__(self, db: Database, key: str = "wp_mail_logging_used_nonces", retries: int = 3):
        """Initialize with database connection.

        Args:
            db: Database instance to use for operations.
            key: Option name holding the ledger.
            retries: Attempts when another request updates the ledger concurrently.
        """
        self.db = db
        self.table = db.tables.options
        self.key = key
        self.retries = retries

    def _load(self, raw: str | None) -> dict[str, float]:
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding unreadable token ledger {self.key}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: float(v) for k, v in data.items() if isinstance(v, (int, float))}

    def consume(self, jti: str, expires_at: float) -> bool:
        """Record a token id.

        Returns:
            True the first time an unexpired id is seen, False after that.

        Raises:
            DatabaseError: If the ledger cannot be updated.
        """
        for _ in range(self.retries):
            try:
                recorded = self._try_consume(jti, expires_at)
            except DatabaseError as e:
                # Unique option_name: another request created the ledger first
                if isinstance(e.__cause__, IntegrityError):
                    continue
                raise
            if recorded is not None:
                return recorded

        raise DatabaseError(f"Token ledger {self.key} changed concurrently, giving up")

    def _try_consume(self, jti: str, expires_at: float) -> bool | None:
        """One read-modify-write of the ledger; None if it changed underneath."""
        with self.db.transaction() as conn:
            raw = conn.execute(
                select(self.table.c.option_value).where(self.table.c.option_name == self.key)
            ).scalar_one_or_none()

            now = time.time()
            used = {k: exp for k, exp in self._load(raw).items() if exp > now}
            if jti in used:
                return False
            used[jti] = expires_at
            value = json.dumps(used)

            if raw is None:
                conn.execute(
                    insert(self.table).values(
                        option_name=self.key, option_value=value, autoload="no"
                    )
                )
                return True

            result = conn.execute(
                update(self.table)
                .where(self.table.c.option_name == self.key)
                .where(self.table.c.option_value == raw)
                .values(option_value=value)
            )
            return True if result.rowcount == 1 else None
