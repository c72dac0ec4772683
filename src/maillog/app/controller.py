"""Admin-screen glue between the request and the migration runner."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from loguru import logger

from ..core.types import Notice, ViewContext
from .auth import NonceGate

if TYPE_CHECKING:
    from ..core.config import Config
    from ..migrations.runner import MigrationRunner
    from .protocols import AuthorizationGate, TokenLedger

UPGRADE_AVAILABLE = "A database upgrade is available. Open the settings tab to start the upgrade."
BACKUP_WARNING = "Important! Please secure a backup of your database before performing the upgrade."


class MigrationController:
    """Drives the runner from the mail log admin screen.

    One controller handles one request: ``handle`` runs first, then the
    rendering layer asks for ``notices`` and ``upgrade_button``.
    """

    def __init__(
        self,
        runner: MigrationRunner,
        gate: AuthorizationGate,
        screen_id: str,
        settings_tab: str = "settings",
    ):
        self.runner = runner
        self.gate = gate
        self.screen_id = screen_id
        self.settings_tab = settings_tab

    @classmethod
    def from_config(
        cls,
        config: Config,
        runner: MigrationRunner,
        ledger: TokenLedger | None = None,
    ) -> MigrationController:
        """Build a controller whose tokens are signed with the configured secret.

        Pass a ledger shared by all requests, such as an OptionTokenLedger,
        to keep tokens single-use across requests.

        Raises:
            ConfigurationError: If no nonce secret is configured.
        """
        gate = NonceGate(
            config.migration.nonce_secret,
            ttl=config.migration.nonce_ttl,
            ledger=ledger,
        )
        return cls(
            runner,
            gate,
            screen_id=config.migration.screen_id,
            settings_tab=config.migration.settings_tab,
        )

    def handle(self, view: ViewContext, params: Mapping[str, str], session_id: str) -> None:
        """Check for a due migration and run it if the operator asked for it.

        Args:
            view: Screen being rendered.
            params: Query parameters of the request.
            session_id: Operator session the token must belong to.
        """
        if view.screen_id != self.screen_id:
            return

        if not self.runner.is_migration_due():
            return

        if not params.get("migration"):
            return

        request = self.gate.authorize(params.get("nonce"), session_id, self.runner.action)
        if request is None:
            logger.warning(f"Migration requested by session {session_id} without a valid token")
        self.runner.request_migration(request)

    def notices(self, view: ViewContext) -> list[Notice]:
        """Notices to render for this request.

        The upgrade warning is left out on the settings tab, which shows
        the upgrade button instead. Errors are always shown.
        """
        notices = []

        on_settings = view.screen_id == self.screen_id and view.tab == self.settings_tab
        if self.runner.is_migration_needed and not on_settings:
            notices.append(
                Notice(
                    level="warning",
                    message=UPGRADE_AVAILABLE,
                    link={"tab": self.settings_tab},
                )
            )

        outcome = self.runner.get_outcome()
        if outcome is not None and not outcome.success:
            notices.append(Notice(level="error", message=outcome.error or ""))

        return notices

    def upgrade_button(self, view: ViewContext, session_id: str) -> dict[str, str] | None:
        """Query parameters for the upgrade button, None when it is hidden."""
        if not self.runner.is_migration_needed or view.tab != self.settings_tab:
            return None

        return {
            "tab": self.settings_tab,
            "migration": "1",
            "nonce": self.gate.issue(session_id, self.runner.action),
        }
