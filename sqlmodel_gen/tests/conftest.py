import sqlite3

import pytest


@pytest.fixture
def make_sqlite_db(tmp_path):
    """Create an on-disk SQLite database from DDL statements."""

    def _make(*statements: str, name: str = "shop.db"):
        path = tmp_path / name
        conn = sqlite3.connect(path)
        try:
            for statement in statements:
                conn.execute(statement)
            conn.commit()
        finally:
            conn.close()
        return path

    return _make


@pytest.fixture
def users_db(make_sqlite_db):
    return make_sqlite_db(
        "CREATE TABLE users (id INT NOT NULL, name VARCHAR(64) NULL, created_at DATETIME NOT NULL)"
    )
