"""Command handlers for the SimpleStorage CLI."""

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from simple_storage.core.database import SimpleStorage
from simple_storage.utils.console import print_error, print_success, print_warning
from simple_storage.utils.logging import async_log_call, get_logger

logger = get_logger(__name__)


def parse_value(text: str, raw: bool = False) -> Any:
    """Parse a command-line value as JSON, falling back to the plain string."""
    if raw:
        return text
    try:
        return json.loads(text)
    except ValueError:
        return text


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def _label(args) -> str:
    return escape(f"{args.table}[{args.key}]")


class CommandHandler:
    """Runs CLI commands against one SimpleStorage."""

    def __init__(self, storage: SimpleStorage, console: Console) -> None:
        self.storage = storage
        self.console = console

    async def execute(self, command: str, args) -> bool:
        """Route to the handler for command."""
        handler = getattr(self, f"_cmd_{command}", None)
        if handler is None:
            raise ValueError(f"Unknown command: {command}")
        return await handler(args)

    @async_log_call
    async def _cmd_get(self, args) -> bool:
        if not await self.storage.has(args.table, args.key):
            print_warning(f"{_label(args)} not found", self.console)
            return False

        value = await self.storage.get(args.table, args.key)
        self.console.print_json(_dump(value))
        return True

    @async_log_call
    async def _cmd_set(self, args) -> bool:
        value = parse_value(args.value, raw=args.raw)
        added = await self.storage.set(args.table, args.key, value)
        print_success(
            f"{'Added' if added else 'Updated'} {_label(args)}", self.console
        )
        return True

    @async_log_call
    async def _cmd_has(self, args) -> bool:
        exists = await self.storage.has(args.table, args.key)
        self.console.print("yes" if exists else "no")
        return exists

    @async_log_call
    async def _cmd_remove(self, args) -> bool:
        if await self.storage.remove(args.table, args.key):
            print_success(f"Removed {_label(args)}", self.console)
            return True

        print_error(f"{_label(args)} not found", self.console)
        return False

    @async_log_call
    async def _cmd_info(self, args) -> bool:
        engine_mgr = self.storage.engine_mgr
        if not engine_mgr.db_path.exists():
            print_warning(f"No store at {escape(str(engine_mgr.db_path))}", self.console)
            return False

        healthy = await engine_mgr.health_check()
        stats = await engine_mgr.get_stats()

        table = Table(title="SimpleStorage", show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value")
        table.add_row("Path", stats["database_path"])
        table.add_row("Size", f"{stats['database_size_bytes']} bytes")
        table.add_row("Journal mode", str(stats["journal_mode"]))
        table.add_row("Health", "OK" if healthy else "FAILED")
        table.add_row("Tables", ", ".join(stats["tables"]) or "(none)")

        self.console.print(table)
        return True
