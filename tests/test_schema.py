"""Tests for model definitions and pydantic derivation."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, time
from typing import Annotated, Optional

import pytest
from pydantic import BaseModel, Field

from cqrs_ddd_querystring import (
    ConfigurationError,
    FieldKind,
    FieldSpec,
    Int64,
    ModelSchema,
    QueryConfig,
)
from cqrs_ddd_querystring.schema import split_options, to_column_name


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("name", "name"),
        ("created_at", "created_at"),
        ("CreatedAt", "created_at"),
        ("UserID", "user_id"),
        ("HTTPCode", "http_code"),
        ("FlagPtr", "flag_ptr"),
        ("ID", "id"),
    ],
)
def test_to_column_name(name, expected):
    assert to_column_name(name) == expected


def test_split_options():
    assert split_options(" sort, filter ,,param=x") == ("sort", "filter", "param=x")
    assert split_options("") == ()


class TestFieldSpec:
    def test_options(self):
        spec = FieldSpec("tags", FieldKind.STRING, tags="filter,param=tag_name,split")
        assert spec.has_option("filter")
        assert spec.has_option("split")
        assert not spec.has_option("sort")
        assert spec.param_name == "tag_name"

    def test_options_match_exactly(self):
        spec = FieldSpec("name", FieldKind.STRING, tags="sorted,filters")
        assert not spec.has_option("sort")
        assert not spec.has_option("filter")

    def test_no_param_name(self):
        assert FieldSpec("name", tags="filter").param_name is None
        assert FieldSpec("name", tags="filter,param=").param_name is None

    @pytest.mark.parametrize(
        "db_tags",
        ["-", "foreign_key:owner_id", "association_foreign_key:uuid", "many_to_many:x"],
    )
    def test_storage_ignored(self, db_tags):
        assert FieldSpec("x", db_tags=db_tags).is_storage_ignored

    @pytest.mark.parametrize("db_tags", ["", "column:x", "type:varchar(100);index"])
    def test_storage_not_ignored(self, db_tags):
        assert not FieldSpec("x", db_tags=db_tags).is_storage_ignored


class _Mood(enum.Enum):
    HAPPY = "happy"


class _Audit(BaseModel):
    created_by: str = Field("", json_schema_extra={"query": "filter"})
    created_at: datetime | None = Field(None, json_schema_extra={"query": "sort"})


class _Record(BaseModel):
    title: str = Field("", json_schema_extra={"query": "sort,filter"})
    count: int = 0
    big: Annotated[int, Int64] = 0
    enabled: Optional[bool] = None
    mood: _Mood = _Mood.HAPPY
    ref: uuid.UUID | None = None
    labels: list[str] = Field(default_factory=list)
    ratio: float = 0.0
    extra: dict[str, int] = Field(default_factory=dict)
    born: date | None = None
    opens: time | None = None
    visits: list[date] = Field(default_factory=list)
    audit: _Audit = Field(default_factory=_Audit)


class TestFromModel:
    @pytest.fixture
    def schema(self) -> ModelSchema:
        return ModelSchema.from_model(_Record)

    def _field(self, schema: ModelSchema, name: str) -> FieldSpec:
        return next(f for f in schema.fields if f.name == name)

    @pytest.mark.parametrize(
        ("name", "kind"),
        [
            ("title", FieldKind.STRING),
            ("count", FieldKind.INTEGER),
            ("big", FieldKind.INT64),
            ("enabled", FieldKind.BOOLEAN),
            ("mood", FieldKind.STRING),
            ("ref", FieldKind.STRING),
            ("labels", FieldKind.STRING),
            ("ratio", None),
            ("extra", None),
            ("born", None),
            ("opens", None),
            ("visits", None),
        ],
    )
    def test_kinds(self, schema, name, kind):
        assert self._field(schema, name).kind is kind

    def test_tags_read_from_json_schema_extra(self, schema):
        assert self._field(schema, "title").tags == "sort,filter"
        assert self._field(schema, "count").tags == ""

    def test_custom_tag_name(self):
        class Other(BaseModel):
            title: str = Field(
                "", json_schema_extra={"query": "sort", "api": "filter"}
            )

        schema = ModelSchema.from_model(Other, QueryConfig(tag_name="api"))
        assert schema.fields[0].tags == "filter"

    def test_nested_model_is_embedded(self, schema):
        audit = self._field(schema, "audit")
        assert audit.kind is None
        assert audit.embedded is not None
        assert [f.name for f in audit.embedded.fields] == ["created_by", "created_at"]
        assert self._field(audit.embedded, "created_at").kind is FieldKind.TIMESTAMP

    def test_type_name_for_errors(self, schema):
        assert self._field(schema, "ratio").type_name == "float"

    def test_no_search_hook(self, schema):
        assert schema.searcher is None
        assert schema.name == "_Record"

    def test_search_hook_on_instance(self):
        class Searchable(BaseModel):
            prefix: str = "x"

            def search(self, term: str) -> tuple[str, list[str]]:
                return "name = ?", [self.prefix + term]

        schema = ModelSchema.from_model(Searchable(prefix="p-"))
        assert schema.searcher is not None
        assert schema.searcher("a") == ("name = ?", ["p-a"])

    def test_wrap_from_annotated_metadata(self):
        class Sub:
            @staticmethod
            def wrap(exp: str) -> str:
                return f"[{exp}]"

        class Wrapped(BaseModel):
            tags: Annotated[list[str], Sub] = Field(
                default_factory=list, json_schema_extra={"query": "filter"}
            )

        spec = ModelSchema.from_model(Wrapped).fields[0]
        assert spec.wrap is not None
        assert spec.wrap("x = ?") == "[x = ?]"

    def test_wrap_from_type(self):
        class Code(str):
            @classmethod
            def wrap(cls, exp: str) -> str:
                return f"lower({exp})"

        class Wrapped(BaseModel):
            model_config = {"arbitrary_types_allowed": True}

            code: Code = Field(Code(""), json_schema_extra={"query": "filter"})

        spec = ModelSchema.from_model(Wrapped).fields[0]
        assert spec.kind is FieldKind.STRING
        assert spec.wrap is not None
        assert spec.wrap("c") == "lower(c)"

    def test_wrap_instance_method_is_bound(self):
        class Sub:
            def wrap(self, exp: str) -> str:
                return f"<{exp}>"

        class Wrapped(BaseModel):
            tags: Annotated[str, Sub] = Field("", json_schema_extra={"query": "filter"})

        spec = ModelSchema.from_model(Wrapped).fields[0]
        assert spec.wrap is not None
        assert spec.wrap("x = ?") == "<x = ?>"

    def test_wrap_type_needing_arguments_is_rejected(self):
        class Sub:
            def __init__(self, table: str) -> None:
                self.table = table

            def wrap(self, exp: str) -> str:
                return exp

        class Wrapped(BaseModel):
            tags: Annotated[str, Sub] = Field("", json_schema_extra={"query": "filter"})

        with pytest.raises(ConfigurationError, match="cannot bind Sub.wrap"):
            ModelSchema.from_model(Wrapped)

    def test_search_method_on_class_is_bound(self):
        class Searchable(BaseModel):
            name: str = Field(json_schema_extra={"query": "filter"})

            def search(self, term: str) -> tuple[str, list[str]]:
                return "name = ?", [term]

        schema = ModelSchema.from_model(Searchable)
        assert schema.searcher is not None
        assert schema.searcher("a") == ("name = ?", ["a"])
