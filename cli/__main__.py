#!/usr/bin/env python3
"""
Book catalog CLI - command-line interface for the category hierarchy and books.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    categories   Browse and manage the category hierarchy
    books        Manage books and their category links
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli categories seed
    python -m cli categories tree
    python -m cli categories update 7 --parent-id 3
    python -m cli books link 12 7
"""

import sys
import argparse
from cli import books, categories, migrate
from config import load_config
from services.base import Services
from services.errors import CatalogError
from db.manager import DatabaseManager
from logger import setup_logging, get_logger


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Book catalog - category hierarchy management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    categories.setup_parser(subparsers)
    books.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config()
        setup_logging(config)

        # migrate works on the raw database; everything else goes through services
        if args.command == "migrate":
            args.func(args, DatabaseManager(config))
        else:
            args.func(args, Services(config))
    except CatalogError as e:
        get_logger().error(str(e))
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
