"""Collaborator boundary for the migration runner.

- protocols: interfaces the runner depends on
- auth: single-use tokens proving an operator asked for a migration
- controller: screen detection, notices and the upgrade button
"""

from .auth import InMemoryTokenLedger, NonceGate
from .controller import BACKUP_WARNING, UPGRADE_AVAILABLE, MigrationController
from .protocols import AuthorizationGate, NotificationSink, SchemaExecutor, TokenLedger, VersionStore

__all__ = [
    "NonceGate",
    "InMemoryTokenLedger",
    "MigrationController",
    "UPGRADE_AVAILABLE",
    "BACKUP_WARNING",
    "AuthorizationGate",
    "NotificationSink",
    "SchemaExecutor",
    "VersionStore",
    "TokenLedger",
]
