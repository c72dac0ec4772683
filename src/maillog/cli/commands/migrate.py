"""Migration commands for maillog CLI."""

import os
import secrets

from loguru import logger

from ...app import BACKUP_WARNING, NonceGate
from ...core.config import Config
from ...migrations import MigrationRunner
from ...store import Database


def add_migrate_arguments(parser) -> None:
    """Add arguments for the migrate command.

    Args:
        parser: Argument parser to add arguments to.
    """
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Do not ask for confirmation",
    )


def _confirm() -> bool:
    print(BACKUP_WARNING)
    answer = input("Upgrade the database now? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def handle_migrate(args, config: Config) -> int:
    """Handle migrate command.

    The operator's confirmation stands in for the upgrade button: a token
    is issued for this session and redeemed immediately.

    Args:
        args: Parsed command arguments.
        config: Application configuration.

    Returns:
        Process exit code, 1 if the migration failed.
    """
    db = Database(config.database.url, config.database.table_prefix)
    db.connect()
    try:
        runner = MigrationRunner.from_config(config, db)
        if not runner.is_migration_due():
            print(f"Schema is up to date (version {runner.current_version}).")
            return 0

        if not args.yes and not _confirm():
            print("Aborted.")
            return 0

        # Tokens never leave this process, so a one-off key is enough
        secret = config.migration.nonce_secret or secrets.token_hex(32)
        gate = NonceGate(secret, ttl=config.migration.nonce_ttl)
        session_id = f"cli:{os.getpid()}"
        token = gate.issue(session_id, runner.action)
        runner.request_migration(gate.require(token, session_id, runner.action))

        outcome = runner.get_outcome()
        if outcome is None:
            print(f"Schema is up to date (version {runner.current_version}).")
            return 0
        if not outcome.success:
            print(f"Error: {outcome.error}")
            return 1

        print(f"Migrated to version {outcome.version}.")
        return 0
    finally:
        db.close()


def handle_init(args, config: Config) -> int:
    """Handle init command.

    Args:
        args: Parsed command arguments.
        config: Application configuration.

    Returns:
        Process exit code.
    """
    db = Database(config.database.url, config.database.table_prefix)
    db.connect()
    try:
        db.create_tables()
        logger.info(f"Created tables {db.tables.options.name} and {db.tables.mails.name}")
        print(f"Initialized {db.tables.mails.name}.")
    finally:
        db.close()
    return 0
