"""Shared utilities for the model generator."""

from .config import (
    Options,
    load_config,
    merge_settings,
    options_from_settings,
)
from .naming import (
    to_exported_identifier,
    to_package_name,
    split_list,
    GO_KEYWORDS,
)
from .errors import (
    GeneratorError,
    ConfigError,
    DialectError,
    UnsupportedDriverError,
    DatabaseConnectionError,
    IntrospectionError,
    NoDatabaseSelectedError,
    TableNotFoundError,
    TypeMappingError,
)

__all__ = [
    # Configuration
    "Options",
    "load_config",
    "merge_settings",
    "options_from_settings",
    # Naming utilities
    "to_exported_identifier",
    "to_package_name",
    "split_list",
    "GO_KEYWORDS",
    # Errors
    "GeneratorError",
    "ConfigError",
    "DialectError",
    "UnsupportedDriverError",
    "DatabaseConnectionError",
    "IntrospectionError",
    "NoDatabaseSelectedError",
    "TableNotFoundError",
    "TypeMappingError",
]
