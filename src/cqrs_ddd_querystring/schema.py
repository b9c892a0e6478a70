"""
Model definitions consumed by the schema compiler.

A model is described by a :class:`ModelSchema`: an ordered tuple of
:class:`FieldSpec` carrying the field name, its value kind and its
capability tags. Schemas are written by hand or derived once from a
pydantic model with :meth:`ModelSchema.from_model`::

    class Pet(BaseModel):
        name: str = Field(json_schema_extra={"query": "sort,filter"})
        age: int = Field(json_schema_extra={"query": "filter"})
        owner_id: int = Field(json_schema_extra={"db": "foreign_key"})
"""

from __future__ import annotations

import datetime
import enum
import re
import types
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Annotated, Any, Union, get_args, get_origin

from pydantic import BaseModel

from .capabilities import find_search, find_wrap
from .config import (
    PARAM_TAG,
    STORAGE_IGNORE_OPTIONS,
    QueryConfig,
)

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo

    from .capabilities import SearchFn, WrapFn


class FieldKind(str, enum.Enum):
    """Value kinds with known filter handling."""

    STRING = "string"
    INTEGER = "integer"
    INT64 = "int64"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"


class Int64:
    """``Annotated`` marker for 64-bit integer fields: ``Annotated[int, Int64]``."""


_ACRONYM_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_RE = re.compile(r"([a-z0-9])([A-Z])")


def to_column_name(name: str) -> str:
    """Snake-case a logical field name (``CreatedAt`` -> ``created_at``).

    Runs of capitals stay together: ``UserID`` -> ``user_id``,
    ``HTTPCode`` -> ``http_code``.
    """
    s = _ACRONYM_RE.sub(r"\1_\2", name)
    s = _CAMEL_RE.sub(r"\1_\2", s)
    return s.lower()


def split_options(tag: str) -> tuple[str, ...]:
    """Split a comma-separated tag into its trimmed, non-empty options."""
    return tuple(o.strip() for o in tag.split(",") if o.strip())


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One field of a model definition.

    Attributes:
        name: Logical field name; the column name is its snake-cased form.
        kind: Value kind, or ``None`` when the type has no known handling.
        tags: Capability options, e.g. ``"sort,filter,param=tag_name"``.
        db_tags: Storage-mapping options, e.g. ``"-"`` or ``"foreign_key"``.
        wrap: Optional wrap transform for every filter key of the field.
        embedded: Nested schema whose fields are flattened into the parent.
        type_name: Human-readable type, for error messages.
    """

    name: str
    kind: FieldKind | None = None
    tags: str = ""
    db_tags: str = ""
    wrap: WrapFn | None = None
    embedded: ModelSchema | None = None
    type_name: str = ""

    @property
    def options(self) -> tuple[str, ...]:
        return split_options(self.tags)

    def has_option(self, option: str) -> bool:
        return option in self.options

    @property
    def param_name(self) -> str | None:
        """Custom query-parameter name from ``param=<name>``, if declared."""
        prefix = PARAM_TAG + "="
        for option in self.options:
            if option.startswith(prefix):
                return option[len(prefix) :] or None
        return None

    @property
    def is_storage_ignored(self) -> bool:
        """True for fields that are not real columns (relations, keys, ``-``)."""
        for option in self.db_tags.replace(";", ",").split(","):
            key = option.split(":", 1)[0].strip()
            if key in STORAGE_IGNORE_OPTIONS:
                return True
        return False


@dataclass(frozen=True, slots=True)
class ModelSchema:
    """Explicit description of a model: its fields and optional search hook."""

    name: str
    fields: tuple[FieldSpec, ...] = ()
    searcher: SearchFn | None = field(default=None, compare=False)

    @classmethod
    def from_model(
        cls,
        model: type[BaseModel] | BaseModel,
        config: QueryConfig | None = None,
    ) -> ModelSchema:
        """Derive a schema from a pydantic model class or instance.

        Tags are read from ``json_schema_extra[config.tag_name]`` and
        storage options from ``json_schema_extra[config.db_tag_name]``.
        Fields typed with another ``BaseModel`` are embedded records.
        A ``search`` attribute on the model is its search hook; a plain
        method on a model class is bound to ``model_construct()``.
        """
        cfg = config or QueryConfig()
        model_cls = model if isinstance(model, type) else type(model)
        fields = tuple(
            _field_from_pydantic(name, info, cfg)
            for name, info in model_cls.model_fields.items()
        )
        return cls(
            name=model_cls.__name__, fields=fields, searcher=find_search(model)
        )


# ---------------------------------------------------------------------------
# pydantic derivation
# ---------------------------------------------------------------------------


def _field_from_pydantic(name: str, info: FieldInfo, config: QueryConfig) -> FieldSpec:
    extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
    annotation, metadata = _unwrap(info.annotation)
    metadata = [*metadata, *info.metadata]

    if (
        get_origin(annotation) is None
        and isinstance(annotation, type)
        and issubclass(annotation, BaseModel)
    ):
        return FieldSpec(
            name=name,
            embedded=ModelSchema.from_model(annotation, config),
            type_name=annotation.__name__,
        )

    return FieldSpec(
        name=name,
        kind=_kind_of(annotation, metadata),
        tags=str(extra.get(config.tag_name, "")),
        db_tags=str(extra.get(config.db_tag_name, "")),
        wrap=find_wrap(*metadata, annotation),
        type_name=_type_name(annotation),
    )


def _unwrap(annotation: Any) -> tuple[Any, list[Any]]:
    """Strip ``Annotated`` and ``Optional`` layers, collecting metadata."""
    metadata: list[Any] = []
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            args = get_args(annotation)
            annotation = args[0]
            metadata.extend(args[1:])
            continue
        if origin is Union or origin is types.UnionType:
            args = [a for a in get_args(annotation) if a is not type(None)]
            if len(args) == 1:
                annotation = args[0]
                continue
        return annotation, metadata


def _kind_of(annotation: Any, metadata: Sequence[Any]) -> FieldKind | None:
    if get_origin(annotation) is not None:
        return FieldKind.STRING if _is_string_like(annotation) else None
    # bool is a subclass of int: test it first
    if annotation is bool:
        return FieldKind.BOOLEAN
    if isinstance(annotation, type):
        if issubclass(annotation, int) and not issubclass(annotation, enum.Enum):
            if any(m is Int64 or isinstance(m, Int64) for m in metadata):
                return FieldKind.INT64
            return FieldKind.INTEGER
        if issubclass(annotation, datetime.datetime):
            return FieldKind.TIMESTAMP
    if _is_string_like(annotation):
        return FieldKind.STRING
    return None


def _is_string_like(annotation: Any) -> bool:
    origin = get_origin(annotation)
    if origin in (list, tuple, set, frozenset, Sequence):
        args = [a for a in get_args(annotation) if a is not Ellipsis]
        return bool(args) and all(_is_string_like(a) for a in args)
    if origin is not None or not isinstance(annotation, type):
        return False
    if issubclass(annotation, (str, enum.Enum)):
        return True
    # dates and times compare as values, never as text
    if issubclass(annotation, (datetime.date, datetime.time)):
        return False
    # the type renders itself as a string
    return annotation.__str__ is not object.__str__


def _type_name(annotation: Any) -> str:
    if isinstance(annotation, type) and get_origin(annotation) is None:
        return annotation.__name__
    return repr(annotation)
