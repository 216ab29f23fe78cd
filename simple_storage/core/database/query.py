"""Query builders using SQLAlchemy Core."""

from sqlalchemy import Delete, Insert, Select, Update, delete, insert, select, update
from sqlalchemy import Table

from .models import KEY_COLUMN, VALUE_COLUMN


class QueryBuilder:
    """Statement builders for one key/value table."""

    @staticmethod
    def select_value(table: Table, key: str) -> Select:
        """SELECT value FROM <table> WHERE key = :key"""
        return select(table.c[VALUE_COLUMN]).where(table.c[KEY_COLUMN] == key)

    @staticmethod
    def key_exists(table: Table, key: str) -> Select:
        """SELECT key FROM <table> WHERE key = :key LIMIT 1"""
        return select(table.c[KEY_COLUMN]).where(table.c[KEY_COLUMN] == key).limit(1)

    @staticmethod
    def insert_value(table: Table, key: str, raw_value: str) -> Insert:
        """INSERT INTO <table> (key, value) VALUES (:key, :value)"""
        return insert(table).values({KEY_COLUMN: key, VALUE_COLUMN: raw_value})

    @staticmethod
    def update_value(table: Table, key: str, raw_value: str) -> Update:
        """UPDATE <table> SET value = :value WHERE key = :key"""
        return (
            update(table)
            .where(table.c[KEY_COLUMN] == key)
            .values({VALUE_COLUMN: raw_value})
        )

    @staticmethod
    def delete_key(table: Table, key: str) -> Delete:
        """DELETE FROM <table> WHERE key = :key"""
        return delete(table).where(table.c[KEY_COLUMN] == key)
