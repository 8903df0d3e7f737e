"""Model Code Generator - Generates Go struct models from database schemas."""

from .main import (
    GeneratedField,
    GeneratedTable,
    GeneratorContext,
    build_table,
    create_engine_for,
    generate,
    main,
    map_type,
    prompt_overwrite,
    render_table,
    required_imports,
    write_output,
    DEFAULT_GO_TYPES,
)

__all__ = [
    "GeneratedField",
    "GeneratedTable",
    "GeneratorContext",
    "build_table",
    "create_engine_for",
    "generate",
    "main",
    "map_type",
    "prompt_overwrite",
    "render_table",
    "required_imports",
    "write_output",
    "DEFAULT_GO_TYPES",
]
