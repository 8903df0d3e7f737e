"""SQLite schema introspection through pragmas."""

from __future__ import annotations

import re
from pathlib import PurePath

from .base import FieldDescriptor, SchemaFetcher

_TABLES_SQL = """
    SELECT name
    FROM sqlite_master
    WHERE type = 'table' AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\'
    ORDER BY name
"""

# e.g. "VARCHAR(255)", "INT UNSIGNED", "DECIMAL(10, 2)"
_DECLARED_TYPE_RE = re.compile(r"^\s*([a-z][a-z ]*?)\s*(?:\(\s*(\d+)[^)]*\))?\s*(unsigned)?\s*$")


def parse_declared_type(declared: str) -> tuple[str, int, bool]:
    """Split a SQLite declared type into base type, size and unsigned flag."""
    lowered = declared.lower()
    if not lowered.strip():
        # Columns declared without a type have BLOB affinity
        return "blob", 0, False
    unsigned = bool(re.search(r"\bunsigned\b", lowered))
    match = _DECLARED_TYPE_RE.match(lowered)
    if match is None:
        # Unparseable affinity names are passed through for the mapper to reject
        return lowered.strip(), 0, unsigned
    base, size, _ = match.groups()
    return base.strip(), int(size or 0), unsigned


class SQLiteSchemaFetcher(SchemaFetcher):
    dialect = "sqlite3"

    def get_database_name(self) -> str:
        for _, name, path in self._query("PRAGMA database_list"):
            if name != "main":
                continue
            # In-memory and temporary databases have no file
            return PurePath(path).stem if path else str(name)
        return ""

    def get_table_names(self) -> list[str]:
        return [str(row[0]) for row in self._query(_TABLES_SQL)]

    def get_field_descriptors(self, table_name: str) -> list[FieldDescriptor]:
        # Escape colons so they are not taken as bind parameters
        sql = f"PRAGMA table_info({self.quote_identifier(table_name)})".replace(":", "\\:")
        descriptors = []
        for _, name, declared, not_null, _, primary_key in self._query(sql, table_name=table_name):
            type_name, size, unsigned = parse_declared_type(str(declared or ""))
            descriptors.append(
                FieldDescriptor(
                    name=str(name),
                    type=type_name,
                    size=size,
                    unsigned=unsigned,
                    allow_null=not not_null and not primary_key,
                )
            )
        return descriptors
