"""Table schema and DDL for key/value tables."""

import re
from dataclasses import dataclass

from sqlalchemy.dialects import sqlite

from simple_storage.utils.errors import InvalidTableError

_preparer = sqlite.dialect().identifier_preparer

RESERVED_PREFIX = "sqlite_"

_PLAIN_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def validate_table_name(name) -> str:
    """Return the name unchanged, or raise InvalidTableError."""
    if not isinstance(name, str) or not name:
        raise InvalidTableError(
            "Table name must be a non-empty string",
            details={"table": repr(name)},
        )
    if name.lower().startswith(RESERVED_PREFIX):
        raise InvalidTableError(
            f"Table names starting with '{RESERVED_PREFIX}' are reserved by SQLite",
            details={"table": name},
        )
    if "\x00" in name:
        raise InvalidTableError("Table name contains a NUL character", details={"table": name})
    return name


@dataclass(frozen=True)
class TableSchema:
    """Schema definition for one key/value table."""

    name: str

    COLUMN_DEFS = "key TEXT PRIMARY KEY, value TEXT"

    @property
    def quoted_name(self) -> str:
        """Table identifier, quoted only where SQLite requires it.

        Mixed-case names stay bare; SQLite identifiers are case-insensitive.
        """
        if (
            _PLAIN_IDENTIFIER.fullmatch(self.name)
            and self.name.lower() not in _preparer.reserved_words
        ):
            return self.name
        return _preparer.quote_identifier(self.name)

    def create_table_sql(self) -> str:
        """Generate SQL for creating the table."""
        return f"CREATE TABLE {self.quoted_name} ({self.COLUMN_DEFS})"
