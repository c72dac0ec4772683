"""SQLAlchemy table definitions for maillog.

Table names carry the site's prefix, so tables are built per prefix
with SQLAlchemy Core rather than as declarative models.
"""

from dataclasses import dataclass

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)


@dataclass(frozen=True)
class Tables:
    """Tables belonging to one prefix."""

    metadata: MetaData
    options: Table
    mails: Table


def build_tables(prefix: str = "wp_") -> Tables:
    """Build the options and mail log tables for a table prefix.

    Args:
        prefix: Table prefix, e.g. "wp_".

    Returns:
        Tables sharing a fresh MetaData.
    """
    metadata = MetaData()

    # Key/value settings store, holds the schema version option
    options = Table(
        f"{prefix}options",
        metadata,
        Column("option_id", BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True),
        Column("option_name", String(191), nullable=False, unique=True),
        Column("option_value", Text, nullable=False, default=""),
        Column("autoload", String(20), nullable=False, default="yes"),
    )

    # Mail log, the table the migration ladder upgrades
    mails = Table(
        f"{prefix}wpml_mails",
        metadata,
        Column("mail_id", Integer, primary_key=True, autoincrement=True),
        Column("timestamp", DateTime, nullable=False, server_default=func.now()),
        Column("host", String(200), nullable=False, default="0"),
        Column("receiver", String(200), nullable=False, default="0"),
        Column("subject", String(200), nullable=False, default="0"),
        Column("message", Text),
        Column("headers", Text),
        Column("attachments", String(800), nullable=False, default="0"),
        Column("error", String(400), default=""),
        Column("plugin_version", String(200), nullable=False, default="0"),
    )

    return Tables(metadata=metadata, options=options, mails=mails)
