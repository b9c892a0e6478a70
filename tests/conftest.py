"""Shared models and fixtures for query-string tests."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Annotated

import pytest
from pydantic import BaseModel, Field

from cqrs_ddd_querystring import Int64, QueryBuilder, QueryConfig


class Color(str, enum.Enum):
    RED = "v1"
    BLUE = "v2"


class Tags:
    """Redirects tag filters into a sub-query on the join table."""

    @staticmethod
    def wrap(exp: str) -> str:
        return f"(id IN (SELECT pet_id FROM pet_tags WHERE {exp}))"


class Pet(BaseModel):
    name: str = Field("", json_schema_extra={"query": "sort,filter"})
    status: str = Field("", json_schema_extra={"query": "filter"})
    age: Annotated[int, Int64] = Field(0, json_schema_extra={"query": "filter"})
    year: int = Field(0, json_schema_extra={"query": "filter,detailed"})
    dummy: int = Field(0, json_schema_extra={"db": "-"})
    created_at: datetime | None = Field(None, json_schema_extra={"query": "sort,filter"})
    updated_at: datetime | None = Field(None, json_schema_extra={"query": "sort,filter"})
    tags: Annotated[list[str], Tags] = Field(
        default_factory=list,
        json_schema_extra={"query": "filter,param=tag_name,split"},
    )
    flag_ptr: bool | None = Field(None, json_schema_extra={"query": "filter,sort"})
    flag: bool = Field(False, json_schema_extra={"query": "filter,sort"})
    color_ptr: Color | None = Field(None, json_schema_extra={"query": "filter,sort"})
    color: Color = Field(Color.RED, json_schema_extra={"query": "filter,sort"})
    owner_id: bool = Field(
        False, json_schema_extra={"db": "foreign_key:external_owner_id"}
    )
    vet_id: bool = Field(
        False, json_schema_extra={"db": "association_foreign_key:uuid"}
    )
    friends: bool = Field(False, json_schema_extra={"db": "many_to_many:pet_friends"})

    @staticmethod
    def search(term: str) -> tuple[str, list[str]]:
        return "(name = ? OR status LIKE ?)", [term, f"%{term}%"]


@pytest.fixture
def pet_model() -> type[Pet]:
    return Pet


@pytest.fixture
def builder() -> QueryBuilder:
    """Builder over :class:`Pet` with the default configuration."""
    return QueryBuilder(Pet)


@pytest.fixture
def make_builder():
    """Factory building a :class:`Pet` builder from config keyword arguments."""

    def _make(**kwargs) -> QueryBuilder:
        return QueryBuilder(Pet, QueryConfig(**kwargs))

    return _make
