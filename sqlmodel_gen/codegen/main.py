"""
Model Code Generator - Generates Go struct models from a live database schema.

One file is written per table, holding a struct that mirrors the table's
columns and a ``TableName()`` accessor. Tables are introspected and rendered
one at a time over a single connection; the first error aborts the run.
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Callable, Final, Iterator, Sequence
from urllib.parse import parse_qsl, urlencode

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, NoSuchModuleError, SQLAlchemyError

from ..fetchers import SCHEMA_FETCHERS, FieldDescriptor, SchemaFetcher, get_schema_fetcher_factory
from ..shared import (
    DatabaseConnectionError,
    GeneratorError,
    NoDatabaseSelectedError,
    Options,
    TableNotFoundError,
    TypeMappingError,
    UnsupportedDriverError,
    load_config,
    merge_settings,
    options_from_settings,
    to_exported_identifier,
    to_package_name,
)

logger = logging.getLogger(__name__)

# Type mappings from lower-cased column types to Go types
DEFAULT_GO_TYPES: Final[dict[str, str]] = {
    "tinyint": "int8",
    "smallint": "int16",
    "int": "int32",
    "mediumint": "int32",
    "bigint": "int64",
    "integer": "int64",
    "float": "float64",
    "double": "float64",
    "decimal": "float64",
    "real": "float64",
    "char": "string",
    "varchar": "string",
    "text": "string",
    "tinytext": "string",
    "mediumtext": "string",
    "longtext": "string",
    "enum": "string",
    "json": "string",
    "numeric": "string",
    "character varying": "string",
    "datetime": "time.Time",
    "date": "time.Time",
    "time": "time.Time",
    "timestamp": "time.Time",
    "bool": "bool",
    "boolean": "bool",
    "geometry": "sqlingo.WellKnownBinary",
    "point": "sqlingo.WellKnownBinary",
    "linestring": "sqlingo.WellKnownBinary",
    "polygon": "sqlingo.WellKnownBinary",
    "multipoint": "sqlingo.WellKnownBinary",
    "multilinestring": "sqlingo.WellKnownBinary",
    "multipolygon": "sqlingo.WellKnownBinary",
    "geometrycollection": "sqlingo.WellKnownBinary",
}

BINARY_TYPES: Final[frozenset[str]] = frozenset({
    "binary",
    "varbinary",
    "blob",
    "tinyblob",
    "mediumblob",
    "longblob",
})

# Go package qualifier -> import path
GO_TYPE_IMPORTS: Final[dict[str, str]] = {
    "time": "time",
    "sqlingo": "github.com/lqs/sqlingo",
}

GORM_TAG: Final[str] = "gorm"

# go-sql-driver DSN parameters PyMySQL also accepts; the rest (parseTime, loc, ...)
# only affect Go-side decoding
MYSQL_URL_PARAMS: Final[frozenset[str]] = frozenset({"charset"})

# Method emitted on every model; no field may share its name
TABLE_NAME_METHOD: Final[str] = "TableName"

EXAMPLE_DATA_SOURCES: Final[dict[str, str]] = {
    "mysql": "username:password@tcp(hostname:3306)/database",
    "postgres": "host=localhost port=5432 user=user password=pass dbname=db sslmode=disable",
    "sqlite3": "./testdb.sqlite3",
}

# Template configuration
TEMPLATE_DIR: Final[Path] = Path(__file__).parent / "templates"

OverwritePolicy = Callable[[Path], bool]


@dataclass(frozen=True, slots=True)
class GeneratedField:
    """A struct field derived from one column."""

    name: str
    go_type: str
    tag: str | None = None
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class GeneratedTable:
    """A struct derived from one table, ready to render."""

    struct_name: str
    table_name: str
    fields: tuple[GeneratedField, ...]

    @property
    def imports(self) -> list[str]:
        paths = {path for f in self.fields for path in required_imports(f.go_type)}
        return sorted(paths)


@dataclass
class GeneratorContext:
    """Context for code generation with cached resources."""

    template_env: Environment = field(init=False)

    def __post_init__(self) -> None:
        self.template_env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            auto_reload=False,
            enable_async=False,
        )
        self._model_template = self.template_env.get_template("model.go.j2")

    @property
    def model_template(self):
        return self._model_template


@lru_cache(maxsize=256)
def _quote(value: str) -> str:
    """Quote a string for Go literal embedding."""
    return json.dumps(value, ensure_ascii=False)


def map_type(descriptor: FieldDescriptor, binary_as_bytes: bool = False) -> str:
    """Resolve the Go type for a column.

    Args:
        descriptor: Column metadata from a schema fetcher.
        binary_as_bytes: Map binary and blob columns to ``[]byte``
            instead of ``string``.

    Returns:
        The Go type, widened to unsigned and wrapped as a pointer as the
        column requires.

    Raises:
        TypeMappingError: If the column type has no mapping.
    """
    type_name = descriptor.type.lower()

    if type_name == "bit":
        go_type = "bool" if descriptor.size == 1 else "string"
    elif type_name in BINARY_TYPES:
        go_type = "[]byte" if binary_as_bytes else "string"
    else:
        mapped = DEFAULT_GO_TYPES.get(type_name)
        if mapped is None:
            raise TypeMappingError(descriptor.type, f"column '{descriptor.name}'")
        go_type = mapped

    if descriptor.unsigned and go_type.startswith("int"):
        go_type = "u" + go_type
    if descriptor.allow_null:
        go_type = "*" + go_type
    return go_type


def required_imports(go_type: str) -> Iterator[str]:
    """Yield the import paths needed to reference ``go_type``."""
    qualifier, dot, _ = go_type.lstrip("*").partition(".")
    if dot and qualifier in GO_TYPE_IMPORTS:
        yield GO_TYPE_IMPORTS[qualifier]


def _field_tag(descriptor: FieldDescriptor, tag_style: str | None) -> str | None:
    if tag_style == GORM_TAG:
        return f'`gorm:"column:{descriptor.name}"`'
    return None


def _flatten_comment(comment: str) -> str | None:
    flattened = comment.replace("\r\n", " ").replace("\n", " ").replace("\r", " ").strip()
    return flattened or None


def build_table(
    fetcher: SchemaFetcher,
    table_name: str,
    options: Options,
) -> GeneratedTable:
    """Introspect a table and derive the struct to generate.

    Raises:
        TableNotFoundError: If the table does not exist.
        TypeMappingError: If any column type has no mapping.
        GeneratorError: If a column name clashes with the TableName method.
    """
    descriptors = fetcher.get_field_descriptors(table_name)
    if not descriptors:
        raise TableNotFoundError(table_name)

    fields: list[GeneratedField] = []
    for descriptor in descriptors:
        field_name = to_exported_identifier(descriptor.name, options.force_cases)
        if field_name == TABLE_NAME_METHOD:
            raise GeneratorError(
                f"column '{descriptor.name}' maps to field {field_name}, which clashes "
                f"with the generated {TABLE_NAME_METHOD}() method",
                table_name,
            )

        try:
            go_type = map_type(descriptor, options.binary_as_bytes)
        except TypeMappingError as e:
            raise TypeMappingError(e.type_name, f"column '{descriptor.name}'", table_name) from e

        fields.append(
            GeneratedField(
                name=field_name,
                go_type=go_type,
                tag=_field_tag(descriptor, options.tag),
                comment=_flatten_comment(descriptor.comment),
            )
        )

    return GeneratedTable(
        struct_name=to_exported_identifier(table_name, options.force_cases),
        table_name=table_name,
        fields=tuple(fields),
    )


def _field_declarations(fields: Sequence[GeneratedField]) -> list[str]:
    """Lay out field declarations in aligned columns, as gofmt does."""
    name_width = max((len(f.name) for f in fields), default=0)
    type_width = max((len(f.go_type) for f in fields if f.tag), default=0)

    lines = []
    for f in fields:
        if f.tag:
            lines.append(f"{f.name.ljust(name_width)} {f.go_type.ljust(type_width)} {f.tag}")
        else:
            lines.append(f"{f.name.ljust(name_width)} {f.go_type}")
    return lines


def render_table(
    fetcher: SchemaFetcher,
    db_name: str,
    table_name: str,
    options: Options,
    ctx: GeneratorContext,
) -> str:
    """Render the Go source for a single table."""
    table = build_table(fetcher, table_name, options)
    return ctx.model_template.render(
        package_name=to_package_name(db_name),
        imports=table.imports,
        table=table,
        declarations=_field_declarations(table.fields),
        table_name_literal=_quote(table.table_name),
    )


def prompt_overwrite(path: Path) -> bool:
    """Ask on the terminal whether an existing file may be overwritten."""
    try:
        answer = input(f"file ({path}) already exists, overwrite (Y/N)? ")
    except EOFError:
        return False
    return answer.strip() in ("Y", "y")


def write_output(
    content: str,
    output_path: Path,
    *,
    force: bool = False,
    should_overwrite: OverwritePolicy | None = None,
) -> bool:
    """Write generated code, consulting the overwrite policy for existing files.

    Returns:
        True if the file was written, False if it was skipped.
    """
    if output_path.exists() and not force:
        logger.warning("%s already exists", output_path)
        if should_overwrite is None or not should_overwrite(output_path):
            logger.info("Skipping %s", output_path)
            return False

    output_path.write_text(content, encoding="utf-8")
    return True


def _generate_table(
    fetcher: SchemaFetcher,
    db_name: str,
    table_name: str,
    options: Options,
    output_dir: Path,
    ctx: GeneratorContext,
    *,
    force: bool,
    should_overwrite: OverwritePolicy | None,
) -> Path | None:
    rendered = render_table(fetcher, db_name, table_name, options, ctx)
    output_path = output_dir / f"{table_name}.go"
    if write_output(rendered, output_path, force=force, should_overwrite=should_overwrite):
        return output_path
    return None


def _mysql_url(data_source: str) -> str:
    """Turn a go-sql-driver style DSN into a PyMySQL SQLAlchemy URL."""
    address, _, query = data_source.partition("?")
    address = re.sub(r"@tcp\(([^)]*)\)", r"@\1", address)

    params = parse_qsl(query, keep_blank_values=True)
    kept = [(key, value) for key, value in params if key in MYSQL_URL_PARAMS]
    dropped = sorted({key for key, _ in params} - MYSQL_URL_PARAMS)
    if dropped:
        logger.debug("Ignoring MySQL DSN parameter(s): %s", ", ".join(dropped))

    url = f"mysql+pymysql://{address}"
    return f"{url}?{urlencode(kept)}" if kept else url


def create_engine_for(driver_name: str, data_source: str) -> Engine:
    """Create a SQLAlchemy engine for a driver and connection string.

    SQLAlchemy URLs are used as given. Bare connection strings are read the
    way each driver's native tooling reads them: a file path for sqlite3, a
    libpq keyword string for postgres and ``user:password@tcp(host:port)/db``
    for mysql.
    """
    if driver_name not in SCHEMA_FETCHERS:
        raise UnsupportedDriverError(driver_name)

    try:
        if "://" in data_source:
            if data_source.startswith("postgres://"):
                data_source = "postgresql://" + data_source[len("postgres://"):]
            return create_engine(data_source)
        if driver_name == "sqlite3":
            return create_engine(f"sqlite:///{data_source}")
        if driver_name == "postgres":
            return create_engine("postgresql+psycopg2://", connect_args={"dsn": data_source})
        return create_engine(_mysql_url(data_source))
    except (ArgumentError, NoSuchModuleError, ImportError) as e:
        raise DatabaseConnectionError(f"invalid connection string: {e}", driver_name) from e


def generate(
    driver_name: str,
    options: Options,
    output_dir: Path,
    *,
    force: bool = False,
    should_overwrite: OverwritePolicy | None = None,
    engine: Engine | None = None,
) -> list[Path]:
    """Generate Go models for the tables of a database.

    Args:
        driver_name: One of ``mysql``, ``postgres`` or ``sqlite3``.
        options: Validated generation options.
        output_dir: Directory for generated files.
        force: Overwrite existing files without consulting the policy.
        should_overwrite: Decides whether an existing file is replaced.
            Existing files are skipped when neither this nor ``force`` is set.
        engine: Engine to use instead of one built from the connection string.

    Returns:
        Paths of the files written, in table order.
    """
    fetcher_factory = get_schema_fetcher_factory(driver_name)
    owns_engine = engine is None
    if engine is None:
        engine = create_engine_for(driver_name, options.data_source)

    ctx = GeneratorContext()
    written: list[Path] = []

    try:
        try:
            connection = engine.connect()
        except (SQLAlchemyError, TypeError) as e:
            # DBAPI drivers reject unknown connect arguments with TypeError
            raise DatabaseConnectionError(f"failed to connect: {e}", driver_name) from e

        with connection:
            fetcher = fetcher_factory(connection)

            db_name = fetcher.get_database_name()
            if not db_name:
                raise NoDatabaseSelectedError()

            table_names = list(options.table_names) or fetcher.get_table_names()
            output_dir.mkdir(parents=True, exist_ok=True)

            for table_name in table_names:
                logger.info("Generating %s", table_name)
                path = _generate_table(
                    fetcher,
                    db_name,
                    table_name,
                    options,
                    output_dir,
                    ctx,
                    force=force,
                    should_overwrite=should_overwrite,
                )
                if path is not None:
                    written.append(path)
    finally:
        if owns_engine:
            engine.dispose()

    return written


def build_parser(driver_name: str | None = None) -> argparse.ArgumentParser:
    """Build the command-line parser, optionally preset to one driver."""
    drivers = ", ".join(sorted(SCHEMA_FETCHERS))
    examples = [
        f"  %(prog)s {'' if driver_name else name + ' '}-o ./models -dbc \"{dsn}\""
        for name, dsn in EXAMPLE_DATA_SOURCES.items()
        if driver_name in (None, name)
    ]
    parser = argparse.ArgumentParser(
        description="Generate Go struct models from a database schema",
        epilog="Example:\n" + "\n".join(examples),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    if driver_name is None:
        parser.add_argument("driver", help=f"Database driver ({drivers})")
    parser.add_argument("-o", "--output", type=Path, help="Output directory for generated files")
    parser.add_argument("-dbc", "--dbc", dest="dsn", help="Database connection string")
    parser.add_argument("-t", "--tables", help="Comma-separated tables to generate (default: all)")
    parser.add_argument("-tag", "--tag", help="Struct tag style (gorm)")
    parser.add_argument(
        "-forcecases",
        "--forcecases",
        dest="force_cases",
        help="Comma-separated words whose casing is kept, e.g. ID,IDs,HTML",
    )
    parser.add_argument("--config", type=Path, help="YAML file providing default options")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing files without asking",
    )
    parser.add_argument(
        "--binary-bytes",
        dest="binary_as_bytes",
        action="store_true",
        help="Map binary and blob columns to []byte instead of string",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log introspection queries")
    return parser


def main(argv: list[str] | None = None, driver_name: str | None = None) -> None:
    """CLI entry point."""
    parser = build_parser(driver_name)
    args = parser.parse_args(argv)
    driver_name = driver_name or args.driver

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        file_settings = load_config(args.config) if args.config else {}
        settings = merge_settings(
            file_settings,
            {
                "output": args.output,
                "dsn": args.dsn,
                "tables": args.tables,
                "tag": args.tag,
                "force_cases": args.force_cases,
                "binary_as_bytes": args.binary_as_bytes,
            },
        )
        if not settings.get("output") or not settings.get("dsn"):
            parser.print_usage()
            raise SystemExit(1)

        options = options_from_settings(settings)
        output_dir = Path(settings["output"]).resolve()

        written = generate(
            driver_name,
            options,
            output_dir,
            force=args.force,
            should_overwrite=prompt_overwrite,
        )

        print(f"Generated {len(written)} model file(s) into {output_dir}")
    except UnsupportedDriverError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2) from e
    except (GeneratorError, OSError) as e:
        raise SystemExit(f"Error: {e}") from e


def main_mysql(argv: list[str] | None = None) -> None:
    main(argv, "mysql")


def main_postgres(argv: list[str] | None = None) -> None:
    main(argv, "postgres")


def main_sqlite3(argv: list[str] | None = None) -> None:
    main(argv, "sqlite3")


if __name__ == "__main__":
    main()
