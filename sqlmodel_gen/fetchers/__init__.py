"""Schema fetchers, one per supported database driver."""

from __future__ import annotations

from typing import Callable, Final

from sqlalchemy.engine import Connection

from ..shared import UnsupportedDriverError
from .base import FieldDescriptor, SchemaFetcher
from .mysql import MySQLSchemaFetcher
from .postgres import PostgresSchemaFetcher
from .sqlite import SQLiteSchemaFetcher

SCHEMA_FETCHERS: Final[dict[str, type[SchemaFetcher]]] = {
    "mysql": MySQLSchemaFetcher,
    "postgres": PostgresSchemaFetcher,
    "sqlite3": SQLiteSchemaFetcher,
}


def get_schema_fetcher_factory(driver_name: str) -> Callable[[Connection], SchemaFetcher]:
    """Return the fetcher class registered for ``driver_name``.

    Raises:
        UnsupportedDriverError: If no fetcher exists for the driver.
    """
    try:
        return SCHEMA_FETCHERS[driver_name]
    except KeyError:
        raise UnsupportedDriverError(driver_name) from None


__all__ = [
    "FieldDescriptor",
    "SchemaFetcher",
    "MySQLSchemaFetcher",
    "PostgresSchemaFetcher",
    "SQLiteSchemaFetcher",
    "SCHEMA_FETCHERS",
    "get_schema_fetcher_factory",
]
