"""Query-string parsing — schema-driven limit, offset, sort, select and filters."""

from __future__ import annotations

from .adapter import IQueryAdapter, SQLAlchemyQueryAdapter
from .capabilities import Searcher, Wrapper
from .compiler import CompiledSchema, FilterField, SchemaCompiler, compile_schema
from .config import QueryConfig
from .exceptions import (
    ConfigurationError,
    ParseError,
    QueryStringError,
    UnsupportedFieldTypeError,
)
from .pagination import PaginationParser, PaginationResult
from .parser import QueryBuilder, normalise_params
from .query import DBQuery
from .schema import FieldKind, FieldSpec, Int64, ModelSchema, to_column_name
from .values import FilterValue

__all__ = [
    # Builder
    "QueryBuilder",
    "QueryConfig",
    "DBQuery",
    "normalise_params",
    # Schema
    "FieldKind",
    "FieldSpec",
    "Int64",
    "ModelSchema",
    "to_column_name",
    # Compiler
    "CompiledSchema",
    "FilterField",
    "SchemaCompiler",
    "compile_schema",
    # Capabilities
    "Searcher",
    "Wrapper",
    "FilterValue",
    # Pagination
    "PaginationParser",
    "PaginationResult",
    # Adapters
    "IQueryAdapter",
    "SQLAlchemyQueryAdapter",
    # Exceptions
    "QueryStringError",
    "ConfigurationError",
    "UnsupportedFieldTypeError",
    "ParseError",
]
