"""Common interface for per-engine schema introspection."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from ..shared import IntrospectionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Engine-agnostic description of one table column."""

    name: str
    type: str
    size: int = 0
    unsigned: bool = False
    allow_null: bool = False
    comment: str = ""


class SchemaFetcher(ABC):
    """Reads database, table and column metadata over an open connection."""

    dialect: ClassVar[str]
    quote_char: ClassVar[str] = '"'

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    @abstractmethod
    def get_database_name(self) -> str:
        """Return the current database name, or an empty string if none."""

    @abstractmethod
    def get_table_names(self) -> list[str]:
        """Return the names of all tables in the current database."""

    @abstractmethod
    def get_field_descriptors(self, table_name: str) -> list[FieldDescriptor]:
        """Return the columns of ``table_name`` in declared order."""

    def quote_identifier(self, identifier: str) -> str:
        q = self.quote_char
        return q + identifier.replace(q, q + q) + q

    def _query(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
        table_name: str | None = None,
    ) -> Sequence[Any]:
        """Run an introspection query and return all rows."""
        logger.debug("%s: %s %s", self.dialect, " ".join(sql.split()), params or "")
        try:
            return self.connection.execute(text(sql), dict(params or {})).fetchall()
        except SQLAlchemyError as e:
            raise IntrospectionError(
                f"introspection query failed: {e}", self.dialect, table_name
            ) from e
