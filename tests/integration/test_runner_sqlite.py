"""Runner against the SQL option store and schema executor."""

from maillog.app import MigrationController
from maillog.core.types import (
    MIGRATION_ACTION,
    VERSION_OPTION,
    AuthorizedRequest,
    MigrationErrorKind,
    ViewContext,
)
from maillog.migrations import MigrationRunner
from maillog.store import OptionTokenLedger, OptionVersionStore


def _authorized() -> AuthorizedRequest:
    return AuthorizedRequest(action=MIGRATION_ACTION, session_id="s1", token="t")


def test_from_config_uses_database_tables(config, db):
    config.database.collation = "utf8mb4_general_ci"

    runner = MigrationRunner.from_config(config, db)

    assert runner.table_name == "wp_wpml_mails"
    assert runner.collation == "utf8mb4_general_ci"
    assert runner.option_name == VERSION_OPTION


def test_driver_failure_leaves_version(config, db, option_store):
    config.database.collation = "utf8mb4_unicode_ci"
    runner = MigrationRunner.from_config(config, db)

    runner.request_migration(_authorized())

    outcome = runner.get_outcome()
    assert outcome.success is False
    assert outcome.kind is MigrationErrorKind.EXTERNAL_OPERATION
    assert outcome.error.startswith("Unable to complete migration to version 1. Error: ")
    assert "syntax error" in outcome.error
    assert option_store.get_int(VERSION_OPTION) == 0


def test_skip_path_persists_version(config, db, option_store):
    config.database.collation = "latin1_swedish_ci"
    runner = MigrationRunner.from_config(config, db)

    runner.request_migration(_authorized())

    assert runner.get_outcome().success is True
    assert option_store.get_int(VERSION_OPTION) == 1
    assert MigrationRunner.from_config(config, db).is_migration_due() is False


def test_concurrent_runners_advance_once(config, db):
    config.database.collation = "latin1_swedish_ci"
    first = MigrationRunner.from_config(config, db)
    second = MigrationRunner.from_config(config, db)
    first.is_migration_due()
    second.is_migration_due()

    first.run(1)
    second.run(1)

    assert first.get_outcome().success is True
    assert second.get_outcome().kind is MigrationErrorKind.CONCURRENT_UPDATE
    assert OptionVersionStore(db).get_int(VERSION_OPTION) == 1


def test_request_cycle(config, db, option_store):
    """Check, render the button, click it, render again."""
    config.database.collation = "latin1_swedish_ci"
    view = ViewContext(screen_id=config.migration.screen_id, tab="settings")

    def request() -> MigrationController:
        return MigrationController.from_config(
            config, MigrationRunner.from_config(config, db), ledger=OptionTokenLedger(db)
        )

    first = request()
    first.handle(view, {}, "s1")
    params = first.upgrade_button(view, "s1")

    second = request()
    second.handle(view, params, "s1")

    assert option_store.get_int(VERSION_OPTION) == 1
    assert second.notices(view) == []

    third = request()
    third.handle(view, params, "s1")
    assert third.upgrade_button(view, "s1") is None
