"""Generate Go struct models from MySQL, PostgreSQL and SQLite schemas."""

__version__ = "0.1.0"
