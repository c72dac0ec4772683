"""Configuration management for maillog."""

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from .types import MIGRATION_ACTION, VERSION_OPTION


@dataclass
class DatabaseConfig:
    """Database connection and storage encoding."""

    url: str = "sqlite:///maillog.db"
    table_prefix: str = "wp_"
    # Default collation of the storage, as configured for the site (DB_COLLATE)
    collation: str = "utf8mb4_unicode_520_ci"
    echo: bool = False

    @property
    def mail_table(self) -> str:
        """Fully prefixed name of the mail log table."""
        return f"{self.table_prefix}wpml_mails"


@dataclass
class MigrationConfig:
    """Migration trigger and authorization settings."""

    option_name: str = VERSION_OPTION
    action: str = MIGRATION_ACTION
    # Admin screen that owns the mail log list
    screen_id: str = "tools_page_wpml_plugin_log"
    settings_tab: str = "settings"
    nonce_secret: str = ""
    nonce_ttl: int = 24 * 60 * 60


def _default_config_path() -> Path:
    """Get default config file path."""
    config_dir = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_dir / "maillog" / "maillog.toml"


def _apply_section(target: Any, values: dict[str, Any]) -> None:
    """Copy known keys from a TOML table onto a config dataclass."""
    known = {f.name for f in fields(target)}
    for key, value in values.items():
        if key in known:
            setattr(target, key, value)


@dataclass
class Config:
    """Main application configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    migration: MigrationConfig = field(default_factory=MigrationConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()
        config._apply_env()
        return config

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load configuration from a TOML file, then apply env overrides.

        Args:
            path: Path to the TOML file.

        Returns:
            Config with file values overridden by environment variables.
        """
        with open(path, "rb") as f:
            data = tomllib.load(f)

        config = cls()
        _apply_section(config.database, data.get("database", {}))
        _apply_section(config.migration, data.get("migration", {}))
        config._apply_env()
        return config

    @classmethod
    def from_env_or_file(cls, path: Path | None = None) -> "Config":
        """Load from an explicit path, MAILLOG_CONFIG, or the default location."""
        if path is None:
            if env_path := os.environ.get("MAILLOG_CONFIG"):
                path = Path(env_path)
            else:
                path = _default_config_path()
                if not path.exists():
                    return cls.from_env()
        return cls.from_file(path)

    def _apply_env(self) -> None:
        if url := os.environ.get("MAILLOG_DB_URL"):
            self.database.url = url
        if prefix := os.environ.get("MAILLOG_TABLE_PREFIX"):
            self.database.table_prefix = prefix
        if collation := os.environ.get("DB_COLLATE"):
            self.database.collation = collation

        if secret := os.environ.get("MAILLOG_NONCE_SECRET"):
            self.migration.nonce_secret = secret
        if screen := os.environ.get("MAILLOG_SCREEN_ID"):
            self.migration.screen_id = screen
