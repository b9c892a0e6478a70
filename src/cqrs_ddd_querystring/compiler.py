"""
Schema compiler — model definition -> static lookup tables.

The compiler walks the model once and produces a :class:`CompiledSchema`:

- the *sort fields*: columns accepted by the sort parameter,
- the *filter fields*: query-string key -> SQL template, value parser,
  wrap transform and comma-split flag,
- the *select fields*: ordered columns for explicit selection,
- the model's search hook, if any.

For a filterable ``age`` integer column the table holds ``age``,
``age_eq``, ``age_neq``, ``age_lt``, ``age_lte``, ``age_gt`` and ``age_gte``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from . import values
from .capabilities import nop_wrap
from .config import (
    DETAILED_TAG,
    FILTER_TAG,
    OP_EQUAL,
    OP_GREATER_THAN,
    OP_GREATER_THAN_OR_EQUAL,
    OP_LESS_THAN,
    OP_LESS_THAN_OR_EQUAL,
    OP_LIKE,
    OP_NOT_EQUAL,
    SORT_TAG,
    SPLIT_TAG,
    QueryConfig,
)
from .exceptions import ConfigurationError, UnsupportedFieldTypeError
from .schema import FieldKind, FieldSpec, ModelSchema, to_column_name

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from .capabilities import SearchFn, WrapFn
    from .values import ParseFn

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FilterField:
    """How one query-string key expands into SQL."""

    exp: str
    parse: ParseFn
    wrap: WrapFn = nop_wrap
    split_on_comma: bool = False


@dataclass(frozen=True, slots=True)
class CompiledSchema:
    """Immutable tables shared by every parse call."""

    sort_fields: frozenset[str] = frozenset()
    filter_fields: Mapping[str, FilterField] = field(
        default_factory=lambda: MappingProxyType({})
    )
    select_fields: tuple[str, ...] = ()
    searcher: SearchFn | None = None

    def is_sortable(self, column: str) -> bool:
        return column in self.sort_fields

    @property
    def filter_keys(self) -> frozenset[str]:
        return frozenset(self.filter_fields)


# Operator -> SQL comparison, per kind family.
_EQUALITY_OPS: tuple[tuple[str, str], ...] = (
    (OP_EQUAL, "="),
    (OP_NOT_EQUAL, "<>"),
)
_ORDERED_OPS: tuple[tuple[str, str], ...] = (
    *_EQUALITY_OPS,
    (OP_LESS_THAN, "<"),
    (OP_LESS_THAN_OR_EQUAL, "<="),
    (OP_GREATER_THAN, ">"),
    (OP_GREATER_THAN_OR_EQUAL, ">="),
)

_ORDERED_PARSERS: dict[FieldKind, ParseFn] = {
    FieldKind.INTEGER: values.parse_int,
    FieldKind.INT64: values.parse_int64,
    FieldKind.TIMESTAMP: values.parse_date,
}


class SchemaCompiler:
    """Builds a :class:`CompiledSchema`. Use once, then discard."""

    def __init__(self, config: QueryConfig) -> None:
        self._config = config
        self._sort_fields: set[str] = set()
        self._filter_fields: dict[str, FilterField] = {}
        self._select_fields: list[str] = []

    def compile(self, schema: ModelSchema) -> CompiledSchema:
        for spec in _leaf_fields(schema):
            self._add_field(spec)
        compiled = CompiledSchema(
            sort_fields=frozenset(self._sort_fields),
            filter_fields=MappingProxyType(dict(self._filter_fields)),
            select_fields=tuple(self._select_fields),
            searcher=schema.searcher,
        )
        logger.debug(
            "Compiled query schema for %s: %d sort fields, %d filter keys, "
            "%d select fields, search=%s",
            schema.name,
            len(compiled.sort_fields),
            len(compiled.filter_fields),
            len(compiled.select_fields),
            compiled.searcher is not None,
        )
        return compiled

    # -- per field -----------------------------------------------------------

    def _add_field(self, spec: FieldSpec) -> None:
        if spec.is_storage_ignored:
            return
        col = to_column_name(spec.name)

        if self._config.select_enabled and not (
            self._config.only_select_non_detailed_fields
            and spec.has_option(DETAILED_TAG)
        ):
            self._select_fields.append(col)

        if spec.has_option(SORT_TAG):
            self._sort_fields.add(col)

        if not spec.has_option(FILTER_TAG):
            return

        key = spec.param_name or col
        wrap = spec.wrap or nop_wrap
        split = spec.has_option(SPLIT_TAG)

        if spec.kind is FieldKind.STRING:
            self._add_string_field(key, col, wrap, split)
        elif spec.kind in _ORDERED_PARSERS:
            parse = _ORDERED_PARSERS[spec.kind]
            self._add_ops(key, col, _ORDERED_OPS, parse, wrap, split)
        elif spec.kind is FieldKind.BOOLEAN:
            self._add_ops(key, col, _EQUALITY_OPS, values.parse_bool, wrap, split)
        else:
            raise UnsupportedFieldTypeError(spec.name, spec.type_name or "unknown")

    def _add_string_field(
        self, key: str, col: str, wrap: WrapFn, split: bool
    ) -> None:
        self._add_ops(key, col, _EQUALITY_OPS, values.parse_string, wrap, split)
        self._add_filter_field(
            self._op_key(key, OP_LIKE),
            f"{col} LIKE ?",
            values.parse_like_string,
            wrap,
            split,
        )

    def _add_ops(
        self,
        key: str,
        col: str,
        ops: tuple[tuple[str, str], ...],
        parse: ParseFn,
        wrap: WrapFn,
        split: bool,
    ) -> None:
        # bare key is the implicit-equals form
        self._add_filter_field(key, f"{col} = ?", parse, wrap, split)
        for op, sql in ops:
            self._add_filter_field(
                self._op_key(key, op), f"{col} {sql} ?", parse, wrap, split
            )

    def _add_filter_field(
        self, name: str, exp: str, parse: ParseFn, wrap: WrapFn, split: bool
    ) -> None:
        self._filter_fields[name] = FilterField(
            exp=exp, parse=parse, wrap=wrap, split_on_comma=split
        )

    def _op_key(self, key: str, op: str) -> str:
        return f"{key}{self._config.separator}{op}"


def _leaf_fields(schema: ModelSchema) -> Iterator[FieldSpec]:
    """Yield leaf fields depth-first; embedded records are flattened."""
    for spec in schema.fields:
        if spec.embedded is not None:
            yield from _leaf_fields(spec.embedded)
            continue
        yield spec


def compile_schema(
    model: ModelSchema | type[BaseModel] | BaseModel | Any,
    config: QueryConfig | None = None,
) -> CompiledSchema:
    """Compile *model* into the static tables used by the request parser.

    Raises:
        ConfigurationError: the model is missing.
        UnsupportedFieldTypeError: a filterable field has an unknown type.
    """
    if model is None:
        raise ConfigurationError("query: 'model' is a required field")
    cfg = config or QueryConfig()
    if isinstance(model, ModelSchema):
        schema = model
    elif (isinstance(model, type) and issubclass(model, BaseModel)) or isinstance(
        model, BaseModel
    ):
        schema = ModelSchema.from_model(model, cfg)
    else:
        raise ConfigurationError(
            f"query: unsupported model definition {type(model).__name__}; "
            "expected a ModelSchema or a pydantic model"
        )
    return SchemaCompiler(cfg).compile(schema)
