"""Schema migration runner for the mail log table.

The applied schema version lives in an option. Pending steps are applied
in order, one version at a time, and only an explicitly authorized
request starts a run. Failures are recorded as a MigrationOutcome for the
rendering layer instead of being raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from ..core.exceptions import (
    ConcurrentMigrationError,
    ExternalOperationError,
    MigrationConfigurationError,
    MigrationError,
    MigrationOrderError,
)
from ..core.types import (
    MIGRATION_ACTION,
    TARGET_VERSION,
    VERSION_OPTION,
    AuthorizedRequest,
    MigrationErrorKind,
    MigrationOutcome,
    MigrationState,
    StepResult,
)
from .registry import StepContext, StepRegistry, build_registry

if TYPE_CHECKING:
    from ..app.protocols import SchemaExecutor, VersionStore
    from ..core.config import Config
    from ..store.database import Database

_ERROR_KINDS = (
    (MigrationConfigurationError, MigrationErrorKind.CONFIGURATION),
    (ConcurrentMigrationError, MigrationErrorKind.CONCURRENT_UPDATE),
    (ExternalOperationError, MigrationErrorKind.EXTERNAL_OPERATION),
)

# States a fresh check may move between; later states stick for the process
_CHECK_STATES = (
    MigrationState.NOT_CHECKED,
    MigrationState.CHECKED_UP_TO_DATE,
    MigrationState.CHECKED_MIGRATION_DUE,
)


class MigrationRunner:
    """Decides whether the mail log schema needs upgrading and upgrades it.

    Example:
        runner = MigrationRunner(OptionVersionStore(db), SQLSchemaExecutor(db))
        if runner.is_migration_due():
            runner.request_migration(gate.authorize(token, session_id))
        outcome = runner.get_outcome()
    """

    def __init__(
        self,
        store: VersionStore,
        executor: SchemaExecutor,
        registry: StepRegistry | None = None,
        *,
        target_version: int = TARGET_VERSION,
        option_name: str = VERSION_OPTION,
        action: str = MIGRATION_ACTION,
        table_name: str = "wp_wpml_mails",
        collation: str = "utf8mb4_unicode_520_ci",
    ):
        """Initialize the runner.

        Args:
            store: Where the applied schema version is persisted.
            executor: Runs schema changes for the steps.
            registry: Steps by version; the shipped steps if omitted.
            target_version: Latest version this program knows.
            option_name: Option key holding the schema version.
            action: Action an AuthorizedRequest must be scoped to.
            table_name: Mail log table the steps alter.
            collation: Default collation configured for the storage.
        """
        self.store = store
        self.executor = executor
        self.registry = registry if registry is not None else build_registry()
        self.target_version = target_version
        self.option_name = option_name
        self.action = action
        self.table_name = table_name
        self.collation = collation

        self._current_version: int | None = None
        self._is_migration_needed = False
        self._outcome: MigrationOutcome | None = None
        self._state = MigrationState.NOT_CHECKED

    @classmethod
    def from_config(cls, config: Config, db: Database) -> MigrationRunner:
        """Build a runner over the option table and mail table of a database."""
        from ..store.options import OptionVersionStore
        from ..store.schema import SQLSchemaExecutor

        return cls(
            OptionVersionStore(db),
            SQLSchemaExecutor(db),
            option_name=config.migration.option_name,
            action=config.migration.action,
            table_name=db.tables.mails.name,
            collation=config.database.collation,
        )

    @property
    def state(self) -> MigrationState:
        return self._state

    @property
    def is_migration_needed(self) -> bool:
        """Flag set by the last is_migration_due() check."""
        return self._is_migration_needed

    @property
    def current_version(self) -> int:
        """Applied schema version, read once and cached."""
        if self._current_version is None:
            self._current_version = self.store.get_int(self.option_name)
        return self._current_version

    def refresh_version(self) -> int:
        """Drop the cached version and read it again."""
        self._current_version = None
        return self.current_version

    def pending_versions(self) -> list[int]:
        """Versions still to be applied, in order."""
        return list(range(self.current_version + 1, self.target_version + 1))

    def is_migration_due(self) -> bool:
        """Check whether the applied version is behind the target version.

        Returns:
            True if at least one migration step is pending.
        """
        current = self.current_version
        due = current < self.target_version

        if current > self.target_version:
            logger.warning(
                f"Schema version {current} is newer than the latest known "
                f"version {self.target_version}"
            )

        self._is_migration_needed = due
        if self._state in _CHECK_STATES:
            self._state = (
                MigrationState.CHECKED_MIGRATION_DUE
                if due
                else MigrationState.CHECKED_UP_TO_DATE
            )
        return due

    def request_migration(self, request: AuthorizedRequest | None) -> None:
        """Run pending migrations for an operator's authorized request.

        Anything other than an AuthorizedRequest for the migration action
        is ignored without touching state or outcome.

        Args:
            request: Request produced by an authorization gate.
        """
        if not isinstance(request, AuthorizedRequest) or request.action != self.action:
            logger.warning("Ignoring migration request without valid authorization")
            return

        if self._state is MigrationState.MIGRATING:
            logger.warning("Migration already in progress, ignoring request")
            return

        # The version may have moved since the check that rendered the button
        self.refresh_version()
        if not self.is_migration_due():
            logger.info(f"Schema already at version {self.current_version}, nothing to do")
            return

        self.run(self.target_version)

    def run(self, target_version: int) -> None:
        """Apply every step from the applied version up to ``target_version``.

        The whole ladder is checked before any step runs; a missing step
        fails the run without changing the schema version. Execution stops
        at the first failing step.

        Args:
            target_version: Version to migrate to.
        """
        current = self.current_version
        self._outcome = None

        if target_version <= current:
            logger.debug(f"Schema at version {current}, no migrations to apply")
            return

        self._state = MigrationState.MIGRATING
        missing = self.registry.missing(current, target_version)
        if target_version > self.target_version:
            missing = missing or [target_version]
        if missing:
            self._fail(MigrationConfigurationError(missing[0]))
            return

        for version in range(current + 1, target_version + 1):
            if not self.migrate_step(version):
                return

        self._is_migration_needed = self.current_version < self.target_version
        self._outcome = MigrationOutcome.succeeded(self.current_version)
        self._state = MigrationState.MIGRATED_OK
        logger.info(f"Mail log schema now at version {self.current_version}")

    def migrate_step(self, version: int) -> bool:
        """Apply the step upgrading to ``version`` and persist the new version.

        The step only runs when the schema is at ``version - 1``. The new
        version is written with a compare-and-set from ``version - 1`` and
        only after the step succeeded. Any error raised by the step or the
        store is recorded as the outcome.

        Args:
            version: Version the step upgrades to.

        Returns:
            True on success; on failure the outcome holds the error.
        """
        step = self.registry.get(version)
        if step is None:
            self._fail(MigrationConfigurationError(version))
            return False

        if self.current_version != version - 1:
            self._fail(MigrationOrderError(self.current_version, version))
            return False

        self._state = MigrationState.MIGRATING
        logger.info(f"Applying migration {step.version}: {step.description}")

        context = StepContext(
            executor=self.executor,
            table_name=self.table_name,
            collation=self.collation,
        )
        try:
            result = step.up(context)
            if result is StepResult.SKIPPED:
                logger.warning(f"Migration {version} had nothing to do, marking it applied")

            if not self.store.compare_and_set(self.option_name, version - 1, version):
                raise ConcurrentMigrationError(version - 1, version)
        except MigrationError as e:
            self._fail(e)
            return False
        except Exception as e:
            self._fail(ExternalOperationError(str(e) or type(e).__name__, version))
            return False

        self._current_version = version
        logger.debug(f"Migration {version} applied successfully")
        return True

    def get_outcome(self) -> MigrationOutcome | None:
        """Outcome of the last run in this process, None if nothing ran."""
        return self._outcome

    def _fail(self, error: MigrationError) -> None:
        kind = next(
            (k for cls, k in _ERROR_KINDS if isinstance(error, cls)),
            MigrationErrorKind.EXTERNAL_OPERATION,
        )
        logger.error(f"Migration {error.version} failed: {error}")
        self._outcome = MigrationOutcome.failed(error.version, str(error), kind)
        self._state = MigrationState.MIGRATION_FAILED
