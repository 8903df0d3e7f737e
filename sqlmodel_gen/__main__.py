#!/usr/bin/env python3
"""
Command-line entry point for the model generator.

Usage:
    python -m sqlmodel_gen <driver> -o outpath -dbc connection [options]

Drivers:
    mysql       MySQL / MariaDB
    postgres    PostgreSQL
    sqlite3     SQLite

Examples:
    python -m sqlmodel_gen mysql -o ./models -dbc "user:pass@tcp(localhost:3306)/shop"
    python -m sqlmodel_gen sqlite3 -o ./models -dbc ./app.db -t users,orders --tag gorm
    python -m sqlmodel_gen postgres -o ./models -dbc "dbname=shop" --forcecases ID,URL
"""

from sqlmodel_gen.codegen.main import main

if __name__ == "__main__":
    main()
