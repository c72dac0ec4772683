"""Command implementations for maillog CLI."""

from .migrate import add_migrate_arguments, handle_init, handle_migrate
from .status import handle_status

__all__ = [
    "add_migrate_arguments",
    "handle_init",
    "handle_migrate",
    "handle_status",
]
