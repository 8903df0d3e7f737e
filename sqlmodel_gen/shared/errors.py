"""Custom exceptions for the model generator."""

from __future__ import annotations


class GeneratorError(Exception):
    """Base exception for generation errors."""

    def __init__(self, message: str, location: str | None = None) -> None:
        self.location = location
        full_message = f"{message}" if not location else f"[{location}] {message}"
        super().__init__(full_message)


class ConfigError(GeneratorError):
    """Raised when a configuration file or option is invalid."""


class DialectError(GeneratorError):
    """Raised for driver-specific issues."""

    def __init__(
        self,
        message: str,
        dialect: str,
        location: str | None = None,
    ) -> None:
        self.dialect = dialect
        super().__init__(f"Dialect '{dialect}': {message}", location)


class UnsupportedDriverError(DialectError):
    """Raised when no schema fetcher exists for a driver name."""

    def __init__(self, dialect: str) -> None:
        super().__init__("unsupported driver", dialect)


class DatabaseConnectionError(DialectError):
    """Raised when the database connection cannot be opened."""


class IntrospectionError(DialectError):
    """Raised when a schema introspection query fails."""


class NoDatabaseSelectedError(GeneratorError):
    """Raised when the connection has no current database."""

    def __init__(self) -> None:
        super().__init__("no database selected")


class TableNotFoundError(GeneratorError):
    """Raised when a requested table does not exist or has no columns."""

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        super().__init__("table not found or has no columns", table_name)


class TypeMappingError(GeneratorError):
    """Raised when a column type has no Go type mapping."""

    def __init__(
        self,
        type_name: str,
        context: str,
        location: str | None = None,
    ) -> None:
        self.type_name = type_name
        super().__init__(f"Unsupported column type '{type_name}' ({context})", location)
