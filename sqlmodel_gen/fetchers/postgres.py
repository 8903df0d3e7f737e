"""PostgreSQL schema introspection through information_schema."""

from __future__ import annotations

from typing import Final

from .base import FieldDescriptor, SchemaFetcher

_TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = current_schema() AND table_type = 'BASE TABLE'
    ORDER BY table_name
"""

_COLUMNS_SQL = """
    SELECT c.column_name, c.data_type,
           c.character_maximum_length, c.numeric_precision,
           c.is_nullable,
           pg_catalog.col_description(
               (quote_ident(c.table_schema) || '.' || quote_ident(c.table_name))::regclass::oid,
               c.ordinal_position
           )
    FROM information_schema.columns c
    WHERE c.table_schema = current_schema() AND c.table_name = :table_name
    ORDER BY c.ordinal_position
"""

# information_schema spells some types verbosely; map them onto the
# vocabulary the type mapper understands. The size replaces the reported
# one when not None.
POSTGRES_TYPE_ALIASES: Final[dict[str, tuple[str, int | None]]] = {
    "character": ("char", None),
    "double precision": ("double", None),
    "timestamp without time zone": ("timestamp", None),
    "timestamp with time zone": ("timestamp", None),
    "time without time zone": ("time", None),
    "time with time zone": ("time", None),
    "boolean": ("bit", 1),
    "bytea": ("blob", None),
    "jsonb": ("json", None),
    "uuid": ("char", 36),
    "user-defined": ("enum", None),
}


class PostgresSchemaFetcher(SchemaFetcher):
    dialect = "postgres"

    def get_database_name(self) -> str:
        rows = self._query("SELECT current_database()")
        if not rows or rows[0][0] is None:
            return ""
        return str(rows[0][0])

    def get_table_names(self) -> list[str]:
        return [str(row[0]) for row in self._query(_TABLES_SQL)]

    def get_field_descriptors(self, table_name: str) -> list[FieldDescriptor]:
        rows = self._query(_COLUMNS_SQL, {"table_name": table_name}, table_name)
        descriptors = []
        for name, data_type, char_length, precision, nullable, comment in rows:
            type_name = str(data_type).lower()
            size = char_length if char_length is not None else precision
            if type_name in POSTGRES_TYPE_ALIASES:
                type_name, fixed_size = POSTGRES_TYPE_ALIASES[type_name]
                if fixed_size is not None:
                    size = fixed_size
            descriptors.append(
                FieldDescriptor(
                    name=str(name),
                    type=type_name,
                    size=int(size or 0),
                    allow_null=str(nullable).upper() == "YES",
                    comment=str(comment or ""),
                )
            )
        return descriptors
