"""MySQL schema introspection through information_schema."""

from __future__ import annotations

from .base import FieldDescriptor, SchemaFetcher

_TABLES_SQL = """
    SELECT TABLE_NAME
    FROM information_schema.TABLES
    WHERE TABLE_SCHEMA = DATABASE()
    ORDER BY TABLE_NAME
"""

_COLUMNS_SQL = """
    SELECT COLUMN_NAME, DATA_TYPE, COLUMN_TYPE,
           CHARACTER_MAXIMUM_LENGTH, NUMERIC_PRECISION,
           IS_NULLABLE, COLUMN_COMMENT
    FROM information_schema.COLUMNS
    WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = :table_name
    ORDER BY ORDINAL_POSITION
"""


class MySQLSchemaFetcher(SchemaFetcher):
    dialect = "mysql"
    quote_char = "`"

    def get_database_name(self) -> str:
        rows = self._query("SELECT DATABASE()")
        if not rows or rows[0][0] is None:
            return ""
        return str(rows[0][0])

    def get_table_names(self) -> list[str]:
        return [str(row[0]) for row in self._query(_TABLES_SQL)]

    def get_field_descriptors(self, table_name: str) -> list[FieldDescriptor]:
        rows = self._query(_COLUMNS_SQL, {"table_name": table_name}, table_name)
        descriptors = []
        for name, data_type, column_type, char_length, precision, nullable, comment in rows:
            size = char_length if char_length is not None else precision
            descriptors.append(
                FieldDescriptor(
                    name=str(name),
                    type=str(data_type).lower(),
                    size=int(size or 0),
                    unsigned="unsigned" in str(column_type or "").lower(),
                    allow_null=str(nullable).upper() == "YES",
                    comment=str(comment or ""),
                )
            )
        return descriptors
