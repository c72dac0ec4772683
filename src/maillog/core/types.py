"""Type definitions for maillog."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Version of the latest migration step.
TARGET_VERSION = 1

# Option key holding the applied schema version.
VERSION_OPTION = "wp_mail_logging_db_version"

# Action name authorization tokens are scoped to.
MIGRATION_ACTION = "wp_mail_logging_migration_nonce"


class MigrationState(Enum):
    """Migration state of a runner within one process."""

    NOT_CHECKED = "not_checked"
    CHECKED_UP_TO_DATE = "up_to_date"
    CHECKED_MIGRATION_DUE = "migration_due"
    MIGRATING = "migrating"
    MIGRATED_OK = "migrated"
    MIGRATION_FAILED = "failed"


class MigrationErrorKind(Enum):
    """Category of a failed migration."""

    CONFIGURATION = "configuration"
    EXTERNAL_OPERATION = "external_operation"
    CONCURRENT_UPDATE = "concurrent_update"


class StepResult(Enum):
    """What a migration step did."""

    APPLIED = "applied"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class MigrationOutcome:
    """Result of the last migration run.

    Attributes:
        success: Whether every step completed.
        version: New schema version on success, attempted version on failure.
        error: Human-readable error message, None on success.
        kind: Category of the failure, None on success.
    """

    success: bool
    version: int
    error: Optional[str] = None
    kind: Optional[MigrationErrorKind] = None

    @classmethod
    def succeeded(cls, version: int) -> "MigrationOutcome":
        return cls(success=True, version=version)

    @classmethod
    def failed(
        cls, version: int, error: str, kind: MigrationErrorKind
    ) -> "MigrationOutcome":
        return cls(success=False, version=version, error=error, kind=kind)


@dataclass(frozen=True)
class AuthorizedRequest:
    """Proof that an operator explicitly asked for an action.

    Only an authorization gate creates these, after verifying a token
    bound to the action and the operator's session.
    """

    action: str
    session_id: str
    token: str


@dataclass(frozen=True)
class ViewContext:
    """Administrative screen the current request is rendering."""

    screen_id: str
    tab: Optional[str] = None


@dataclass(frozen=True)
class ColumnSpec:
    """A text column whose encoding is changed."""

    name: str
    sql_type: str


@dataclass(frozen=True)
class EncodingSpec:
    """Target character set and collation for a set of columns."""

    charset: str
    collation: str
    columns: tuple[ColumnSpec, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Notice:
    """A message for the rendering layer."""

    level: str  # "warning" or "error"
    message: str
    link: Optional[dict[str, str]] = None
