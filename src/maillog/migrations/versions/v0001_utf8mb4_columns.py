"""Convert the mail log text columns to utf8mb4.

Only runs when the storage's own collation is a utf8mb4 one; other
collations cannot store the converted columns.
"""

from loguru import logger

from ...core.exceptions import ExternalOperationError
from ...core.types import ColumnSpec, EncodingSpec, StepResult

VERSION = 1
DESCRIPTION = "Convert mail log columns charset to utf8mb4"

CHARSET = "utf8mb4"

COLUMNS = (
    ColumnSpec("host", "VARCHAR(200)"),
    ColumnSpec("receiver", "VARCHAR(200)"),
    ColumnSpec("subject", "VARCHAR(200)"),
    ColumnSpec("message", "TEXT"),
    ColumnSpec("headers", "TEXT"),
    ColumnSpec("attachments", "VARCHAR(800)"),
    ColumnSpec("error", "VARCHAR(400)"),
    ColumnSpec("plugin_version", "VARCHAR(200)"),
)


def up(context):
    """Apply migration: re-encode the columns with the storage collation."""
    if CHARSET not in context.collation:
        logger.warning(
            f"Storage collation {context.collation!r} is not {CHARSET}, "
            f"leaving {context.table_name} columns unchanged"
        )
        return StepResult.SKIPPED

    encoding = EncodingSpec(charset=CHARSET, collation=context.collation, columns=COLUMNS)
    ok, error = context.executor.alter_columns(context.table_name, encoding)
    if not ok:
        raise ExternalOperationError(error, VERSION)

    return StepResult.APPLIED
