"""Status command for maillog CLI."""

from ...core.config import Config
from ...migrations import MigrationRunner
from ...store import Database


def handle_status(args, config: Config) -> int:
    """Handle status command.

    Args:
        args: Parsed command arguments.
        config: Application configuration.

    Returns:
        Process exit code.
    """
    db = Database(config.database.url, config.database.table_prefix)
    db.connect()
    try:
        runner = MigrationRunner.from_config(config, db)
        due = runner.is_migration_due()
        _print_status(runner, due)
    finally:
        db.close()
    return 0


def _print_status(runner: MigrationRunner, due: bool) -> None:
    print("Mail Log Schema Status")
    print("=" * 50)
    print(f"Table: {runner.table_name}")
    print(f"Collation: {runner.collation}")
    print(f"Current version: {runner.current_version}")
    print(f"Latest version: {runner.target_version}")
    print()

    if due:
        print("Pending migrations:")
        for version in runner.pending_versions():
            step = runner.registry.get(version)
            description = step.description if step else "missing"
            print(f"  {version}: {description}")
    else:
        print("Schema is up to date.")
