"""CLI entry point for maillog."""

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from .. import __version__
from ..core.config import Config
from . import commands


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="maillog",
        description="Mail log schema migrations",
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-c", "--config", type=Path, help="Path to a TOML config file")

    subparsers = parser.add_subparsers(dest="command", required=False)

    subparsers.add_parser("status", help="Show schema version and pending migrations")

    migrate_parser = subparsers.add_parser("migrate", help="Apply pending migrations")
    commands.add_migrate_arguments(migrate_parser)

    subparsers.add_parser("init", help="Create the options and mail log tables")

    return parser


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    config = Config.from_env_or_file(args.config)

    try:
        if args.command == "status":
            code = commands.handle_status(args, config)
        elif args.command == "migrate":
            code = commands.handle_migrate(args, config)
        elif args.command == "init":
            code = commands.handle_init(args, config)
        else:
            parser.print_help()
            code = 0

        sys.exit(code)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
