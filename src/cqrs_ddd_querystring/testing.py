"""Assertion helpers for tests of code built on :class:`QueryBuilder`."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .query import DBQuery


def filter_terms(exp: str) -> list[str]:
    """AND-terms of a filter expression, sorted; key order is not significant."""
    return sorted(t for t in exp.split(" AND ") if t) if exp else []


def assert_query_equal(got: DBQuery, want: DBQuery) -> None:
    """Assert two queries are equal up to the order of their AND-terms.

    Every wanted value must appear among the got values.
    """
    assert got.limit == want.limit, f"limit: {got.limit} != {want.limit}"
    assert got.offset == want.offset, f"offset: {got.offset} != {want.offset}"
    assert filter_terms(got.filter_exp) == filter_terms(want.filter_exp), (
        f"filter expression: {got.filter_exp!r} != {want.filter_exp!r}"
    )
    for value in want.filter_values:
        assert value in got.filter_values, f"filter value {value!r} missing"
