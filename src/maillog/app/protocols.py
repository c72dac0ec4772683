"""Protocol definitions for the collaborators of the migration runner.

The runner depends on these interfaces rather than on the SQL
implementations in maillog.store, so tests and other hosts can supply
their own.

Example:
    class MyStore:
        def get_int(self, key: str) -> int: ...
        def set_int(self, key: str, value: int, autoload: bool = False) -> None: ...
        def compare_and_set(self, key: str, expected: int, value: int, autoload: bool = False) -> bool: ...

    runner = MigrationRunner(MyStore(), executor)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..core.types import AuthorizedRequest, EncodingSpec, MigrationOutcome


@runtime_checkable
class VersionStore(Protocol):
    """Persists integer settings such as the schema version."""

    def get_int(self, key: str) -> int:
        """Return the stored value, 0 if absent."""
        ...

    def set_int(self, key: str, value: int, autoload: bool = False) -> None:
        """Store a value unconditionally."""
        ...

    def compare_and_set(
        self, key: str, expected: int, value: int, autoload: bool = False
    ) -> bool:
        """Store ``value`` only if the current value equals ``expected``."""
        ...


@runtime_checkable
class SchemaExecutor(Protocol):
    """Runs schema-altering statements against the mail log table."""

    def alter_columns(self, table_name: str, encoding: EncodingSpec) -> tuple[bool, str]:
        """Re-encode columns; returns (ok, native error message)."""
        ...


@runtime_checkable
class AuthorizationGate(Protocol):
    """Issues and redeems single-use action tokens tied to a session."""

    def issue(self, session_id: str, action: str) -> str:
        ...

    def authorize(
        self, token: str | None, session_id: str, action: str
    ) -> AuthorizedRequest | None:
        ...


@runtime_checkable
class NotificationSink(Protocol):
    """What the rendering layer reads from the runner."""

    def is_migration_due(self) -> bool:
        ...

    def get_outcome(self) -> MigrationOutcome | None:
        ...


@runtime_checkable
class TokenLedger(Protocol):
    """Remembers redeemed token ids until they expire."""

    def consume(self, jti: str, expires_at: float) -> bool:
        """Record ``jti``; False if it was already recorded."""
        ...
