"""Main CLI entry point."""

import asyncio
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from simple_storage.core.database import SimpleStorage, get_config
from simple_storage.utils.config_manager import ConfigManager
from simple_storage.utils.console import get_console, print_error
from simple_storage.utils.errors import StorageError, format_error_message
from simple_storage.utils.logging import get_logger, init_logging

from .cli_parser import setup_argument_parser
from .commands import CommandHandler

logger = get_logger(__name__)


def build_storage(args, config_manager: ConfigManager) -> SimpleStorage:
    """Create the SimpleStorage selected by arguments and config file."""
    settings = config_manager.config.storage
    data_dir = Path(args.data_dir) if args.data_dir else Path(settings.data_dir)
    config = replace(get_config(), filename=settings.filename)

    return SimpleStorage(data_dir=data_dir, config=config)


async def dispatch_command(args, storage: SimpleStorage, console: Console) -> int:
    """Run one command and close the store.

    Returns:
        Exit code (0 = success, 1 = failure or negative answer)
    """
    try:
        handler = CommandHandler(storage, console)
        success = await handler.execute(args.command, args)
        return 0 if success else 1

    except StorageError as e:
        logger.error(f"Command {args.command} failed: {e.message}", extra={"context": e.details})
        print_error(f"Error: {escape(format_error_message(e))}", console)
        return 1

    finally:
        await storage.close()


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    """Main CLI entry point.

    Returns:
        Process exit code
    """
    args = setup_argument_parser().parse_args(argv)
    console = console or get_console()

    try:
        config_manager = ConfigManager(Path(args.config) if args.config else None)
        log_settings = config_manager.config.logging
        init_logging().configure(
            args.log_level or log_settings.log_level,
            log_to_file=log_settings.log_to_file,
        )

        storage = build_storage(args, config_manager)

    except StorageError as e:
        print_error(f"Error: {escape(format_error_message(e))}", console)
        return 1

    return asyncio.run(dispatch_command(args, storage, console))


if __name__ == "__main__":
    sys.exit(main())
