"""Schema migrations for the mail log table.

The applied version is kept in the ``wp_mail_logging_db_version`` option
and compared with TARGET_VERSION.

Example:
    from maillog.migrations import MigrationRunner

    runner = MigrationRunner.from_config(config, db)
    if runner.is_migration_due():
        runner.request_migration(authorized_request)
"""

from .registry import MigrationStep, StepContext, StepRegistry, build_registry
from .runner import MigrationRunner

__all__ = [
    "MigrationRunner",
    "MigrationStep",
    "StepContext",
    "StepRegistry",
    "build_registry",
]
