from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError

from sqlmodel_gen.fetchers import (
    SCHEMA_FETCHERS,
    FieldDescriptor,
    MySQLSchemaFetcher,
    PostgresSchemaFetcher,
    SQLiteSchemaFetcher,
    get_schema_fetcher_factory,
)
from sqlmodel_gen.fetchers.sqlite import parse_declared_type
from sqlmodel_gen.shared.errors import IntrospectionError, UnsupportedDriverError


def _connection_returning(*results):
    """Mock connection whose successive queries return the given row lists."""
    connection = MagicMock()
    connection.execute.side_effect = [
        MagicMock(fetchall=MagicMock(return_value=rows)) for rows in results
    ]
    return connection


def _executed_sql(connection, call_index=0):
    clause = connection.execute.call_args_list[call_index].args[0]
    return str(clause)


class TestGetSchemaFetcherFactory:
    @pytest.mark.parametrize(
        "driver,expected",
        [
            ("mysql", MySQLSchemaFetcher),
            ("postgres", PostgresSchemaFetcher),
            ("sqlite3", SQLiteSchemaFetcher),
        ],
    )
    def test_known_drivers(self, driver, expected):
        assert get_schema_fetcher_factory(driver) is expected

    @pytest.mark.parametrize("driver", ["oracle", "sqlite", "MySQL", ""])
    def test_unsupported_driver(self, driver):
        with pytest.raises(UnsupportedDriverError) as exc_info:
            get_schema_fetcher_factory(driver)
        assert exc_info.value.dialect == driver

    def test_registry_keys(self):
        assert sorted(SCHEMA_FETCHERS) == ["mysql", "postgres", "sqlite3"]


class TestQuoteIdentifier:
    def test_mysql(self):
        fetcher = MySQLSchemaFetcher(MagicMock())
        assert fetcher.quote_identifier("users") == "`users`"
        assert fetcher.quote_identifier("we`ird") == "`we``ird`"

    @pytest.mark.parametrize("fetcher_cls", [PostgresSchemaFetcher, SQLiteSchemaFetcher])
    def test_double_quote(self, fetcher_cls):
        fetcher = fetcher_cls(MagicMock())
        assert fetcher.quote_identifier("users") == '"users"'
        assert fetcher.quote_identifier('we"ird') == '"we""ird"'


class TestMySQLSchemaFetcher:
    def test_get_database_name(self):
        connection = _connection_returning([("shop",)])
        assert MySQLSchemaFetcher(connection).get_database_name() == "shop"
        assert "DATABASE()" in _executed_sql(connection)

    def test_get_database_name_none_selected(self):
        connection = _connection_returning([(None,)])
        assert MySQLSchemaFetcher(connection).get_database_name() == ""

    def test_get_table_names(self):
        connection = _connection_returning([("orders",), ("users",)])
        assert MySQLSchemaFetcher(connection).get_table_names() == ["orders", "users"]
        assert "information_schema.TABLES" in _executed_sql(connection)

    def test_get_field_descriptors(self):
        connection = _connection_returning(
            [
                ("id", "int", "int(10) unsigned", None, 10, "NO", "primary key"),
                ("name", "varchar", "varchar(64)", 64, None, "YES", ""),
                ("flag", "bit", "bit(1)", None, 1, "NO", None),
                ("Balance", "DECIMAL", "decimal(10,2)", None, 10, "YES", "in cents\nrounded"),
            ]
        )

        descriptors = MySQLSchemaFetcher(connection).get_field_descriptors("users")

        assert descriptors == [
            FieldDescriptor("id", "int", 10, True, False, "primary key"),
            FieldDescriptor("name", "varchar", 64, False, True, ""),
            FieldDescriptor("flag", "bit", 1, False, False, ""),
            FieldDescriptor("Balance", "decimal", 10, False, True, "in cents\nrounded"),
        ]
        sql = _executed_sql(connection)
        assert "information_schema.COLUMNS" in sql
        assert "ORDER BY ORDINAL_POSITION" in sql
        params = connection.execute.call_args.args[1]
        assert params == {"table_name": "users"}

    def test_query_failure(self):
        connection = MagicMock()
        connection.execute.side_effect = OperationalError("SELECT", {}, Exception("gone away"))

        with pytest.raises(IntrospectionError) as exc_info:
            MySQLSchemaFetcher(connection).get_field_descriptors("users")

        assert exc_info.value.dialect == "mysql"
        assert exc_info.value.location == "users"
        assert isinstance(exc_info.value.__cause__, OperationalError)


class TestPostgresSchemaFetcher:
    def test_get_database_name(self):
        connection = _connection_returning([("shop",)])
        assert PostgresSchemaFetcher(connection).get_database_name() == "shop"
        assert "current_database()" in _executed_sql(connection)

    def test_get_table_names(self):
        connection = _connection_returning([("accounts",)])
        assert PostgresSchemaFetcher(connection).get_table_names() == ["accounts"]
        assert "BASE TABLE" in _executed_sql(connection)

    def test_get_field_descriptors_translates_types(self):
        connection = _connection_returning(
            [
                ("id", "bigint", None, 64, "NO", None),
                ("email", "character varying", 255, None, "NO", "login"),
                ("active", "boolean", None, None, "YES", None),
                ("created_at", "timestamp with time zone", None, None, "NO", None),
                ("score", "double precision", None, 53, "YES", None),
                ("payload", "jsonb", None, None, "YES", None),
                ("avatar", "bytea", None, None, "YES", None),
                ("external_id", "uuid", None, None, "NO", None),
                ("mood", "USER-DEFINED", None, None, "NO", None),
            ]
        )

        descriptors = PostgresSchemaFetcher(connection).get_field_descriptors("accounts")

        assert [(d.name, d.type, d.size, d.allow_null) for d in descriptors] == [
            ("id", "bigint", 64, False),
            ("email", "character varying", 255, False),
            ("active", "bit", 1, True),
            ("created_at", "timestamp", 0, False),
            ("score", "double", 53, True),
            ("payload", "json", 0, True),
            ("avatar", "blob", 0, True),
            ("external_id", "char", 36, False),
            ("mood", "enum", 0, False),
        ]
        assert descriptors[1].comment == "login"
        assert not any(d.unsigned for d in descriptors)
        assert "col_description" in _executed_sql(connection)


class TestParseDeclaredType:
    @pytest.mark.parametrize(
        "declared,expected",
        [
            ("INTEGER", ("integer", 0, False)),
            ("VARCHAR(255)", ("varchar", 255, False)),
            ("decimal(10, 2)", ("decimal", 10, False)),
            ("INT UNSIGNED", ("int", 0, True)),
            ("bigint(20) unsigned", ("bigint", 20, True)),
            ("character varying(20)", ("character varying", 20, False)),
            ("BIT(1)", ("bit", 1, False)),
            ("", ("blob", 0, False)),
            ("   ", ("blob", 0, False)),
        ],
    )
    def test_parse_declared_type(self, declared, expected):
        assert parse_declared_type(declared) == expected


class TestSQLiteSchemaFetcher:
    def test_against_real_database(self, make_sqlite_db):
        path = make_sqlite_db(
            "CREATE TABLE users ("
            " id INTEGER PRIMARY KEY,"
            " name VARCHAR(64),"
            " age INT UNSIGNED NOT NULL,"
            " avatar BLOB"
            ")",
            "CREATE TABLE orders (id INTEGER PRIMARY KEY AUTOINCREMENT, total REAL)",
            name="shop.sqlite3",
        )
        engine = create_engine(f"sqlite:///{path}")
        try:
            with engine.connect() as connection:
                fetcher = SQLiteSchemaFetcher(connection)

                assert fetcher.get_database_name() == "shop"
                # sqlite_sequence is created by AUTOINCREMENT and must be hidden
                assert fetcher.get_table_names() == ["orders", "users"]
                assert fetcher.get_field_descriptors("users") == [
                    FieldDescriptor("id", "integer", 0, False, False, ""),
                    FieldDescriptor("name", "varchar", 64, False, True, ""),
                    FieldDescriptor("age", "int", 0, True, False, ""),
                    FieldDescriptor("avatar", "blob", 0, False, True, ""),
                ]
                assert fetcher.get_field_descriptors("missing") == []
        finally:
            engine.dispose()

    def test_table_name_needing_quotes(self, make_sqlite_db):
        path = make_sqlite_db('CREATE TABLE "odd:name ""x""" (value TEXT NOT NULL)')
        engine = create_engine(f"sqlite:///{path}")
        try:
            with engine.connect() as connection:
                fetcher = SQLiteSchemaFetcher(connection)
                assert fetcher.get_table_names() == ['odd:name "x"']
                assert fetcher.get_field_descriptors('odd:name "x"') == [
                    FieldDescriptor("value", "text", 0, False, False, ""),
                ]
        finally:
            engine.dispose()

    def test_in_memory_database_name(self):
        engine = create_engine("sqlite://")
        try:
            with engine.connect() as connection:
                assert SQLiteSchemaFetcher(connection).get_database_name() == "main"
        finally:
            engine.dispose()


class TestSQLiteUntypedColumns:
    def test_untyped_column_has_blob_affinity(self, make_sqlite_db):
        path = make_sqlite_db("CREATE TABLE t (a, b TEXT)")
        engine = create_engine(f"sqlite:///{path}")
        try:
            with engine.connect() as connection:
                assert SQLiteSchemaFetcher(connection).get_field_descriptors("t") == [
                    FieldDescriptor("a", "blob", 0, False, True, ""),
                    FieldDescriptor("b", "text", 0, False, True, ""),
                ]
        finally:
            engine.dispose()
