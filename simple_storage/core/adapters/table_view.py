"""Table-bound awaitable access to SimpleStorage.

A caller writes its sequence of storage steps as an ``async def``; each
``await`` suspends until the operation finishes and resumes with its
result, and returning from the coroutine ends the sequence:

    async def remember_theme(prefs: TableView) -> bool:
        if await prefs.has("theme"):
            return False
        return await prefs.set("theme", "dark")

    await remember_theme(storage.table("prefs"))
"""

from typing import TYPE_CHECKING, Any

from simple_storage.core.database.schema import validate_table_name

if TYPE_CHECKING:
    from simple_storage.core.database.storage import SimpleStorage


class TableView:
    """SimpleStorage operations with the table name already applied."""

    def __init__(self, storage: "SimpleStorage", table_name: str) -> None:
        self.storage = storage
        self.table_name = validate_table_name(table_name)

    def __repr__(self) -> str:
        return f"TableView({self.table_name!r})"

    async def get(self, key: str) -> Any:
        return await self.storage.get(self.table_name, key)

    async def set(self, key: str, value: Any) -> bool:
        return await self.storage.set(self.table_name, key, value)

    async def has(self, key: str) -> bool:
        return await self.storage.has(self.table_name, key)

    async def remove(self, key: str) -> bool:
        return await self.storage.remove(self.table_name, key)
