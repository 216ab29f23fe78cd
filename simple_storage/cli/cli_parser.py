"""Argument parser configuration for the SimpleStorage CLI"""

import argparse


## Argument Adding Utilities

def add_table_key_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the positional table and key arguments."""

    parser.add_argument("table", help="Table name")
    parser.add_argument("key", help="Key within the table")


## Command Setup Functions

def setup_record_commands(subparsers) -> None:
    """Setup get, set, has and remove commands."""

    get_parser = subparsers.add_parser(
        "get",
        help="Print the value stored under a key",
        description="Print the JSON value stored under KEY in TABLE"
    )
    add_table_key_arguments(get_parser)

    set_parser = subparsers.add_parser(
        "set",
        help="Store a value under a key",
        description="Store VALUE under KEY in TABLE. VALUE is parsed as JSON, "
                    "falling back to a plain string"
    )
    add_table_key_arguments(set_parser)
    set_parser.add_argument("value", help="Value to store (JSON or plain text)")
    set_parser.add_argument(
        "--raw",
        action="store_true",
        help="Store VALUE as a string without parsing it as JSON"
    )

    has_parser = subparsers.add_parser(
        "has",
        help="Check whether a key exists",
        description="Exit with status 0 if KEY exists in TABLE, 1 otherwise"
    )
    add_table_key_arguments(has_parser)

    remove_parser = subparsers.add_parser(
        "remove",
        help="Delete a key",
        description="Delete KEY from TABLE"
    )
    add_table_key_arguments(remove_parser)


def setup_info_command(subparsers) -> None:
    """Setup the info command."""

    subparsers.add_parser(
        "info",
        help="Show storage file details",
        description="Show the storage path, size, journal mode and tables"
    )


def setup_argument_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with all subcommands."""

    parser = argparse.ArgumentParser(
        prog="simple-storage",
        description="Inspect and edit a SimpleStorage key/value file",
    )
    parser.add_argument(
        "--data-dir",
        help="Directory holding simple_storage.sqlite (default: from config)"
    )
    parser.add_argument(
        "--config",
        help="Path to config.json (default: ~/.simple_storage/config.json)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console log level"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    setup_record_commands(subparsers)
    setup_info_command(subparsers)

    return parser
