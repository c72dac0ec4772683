"""Core types, configuration and errors for maillog."""

from .config import Config, DatabaseConfig, MigrationConfig
from .exceptions import (
    AuthorizationError,
    ConcurrentMigrationError,
    ConfigurationError,
    DatabaseError,
    ExternalOperationError,
    MaillogError,
    MigrationConfigurationError,
    MigrationError,
    MigrationOrderError,
)
from .types import (
    MIGRATION_ACTION,
    TARGET_VERSION,
    VERSION_OPTION,
    AuthorizedRequest,
    ColumnSpec,
    EncodingSpec,
    MigrationErrorKind,
    MigrationOutcome,
    MigrationState,
    Notice,
    StepResult,
    ViewContext,
)

__all__ = [
    "Config",
    "DatabaseConfig",
    "MigrationConfig",
    "MaillogError",
    "DatabaseError",
    "MigrationError",
    "MigrationConfigurationError",
    "MigrationOrderError",
    "ConfigurationError",
    "ExternalOperationError",
    "ConcurrentMigrationError",
    "AuthorizationError",
    "TARGET_VERSION",
    "VERSION_OPTION",
    "MIGRATION_ACTION",
    "MigrationState",
    "MigrationErrorKind",
    "MigrationOutcome",
    "StepResult",
    "AuthorizedRequest",
    "ViewContext",
    "ColumnSpec",
    "EncodingSpec",
    "Notice",
]
