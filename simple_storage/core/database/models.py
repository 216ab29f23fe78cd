"""SQLAlchemy table definitions for key/value tables."""

from functools import lru_cache

from sqlalchemy import Column, MetaData, Table, Text

from .schema import validate_table_name

KEY_COLUMN = "key"
VALUE_COLUMN = "value"


@lru_cache(maxsize=256)
def get_table(name: str) -> Table:
    """Get the Table object for a key/value table.

    Tables are built on demand because their names are chosen by callers.
    Each one lives in its own MetaData so that unrelated names never collide.
    At most 256 are cached; evicted ones are rebuilt on the next call.

    Raises:
        InvalidTableError: If the name cannot be used as a table
    """
    validate_table_name(name)
    return Table(
        name,
        MetaData(),
        Column(KEY_COLUMN, Text, primary_key=True),
        Column(VALUE_COLUMN, Text),
    )
