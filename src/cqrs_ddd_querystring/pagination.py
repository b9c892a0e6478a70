"""PaginationParser — bounded offset/limit from query params."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from .exceptions import ParseError
from .values import parse_int

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class PaginationResult(NamedTuple):
    limit: int
    offset: int


def parse_number(key: str, raw: str, minimum: int, maximum: int | None) -> int:
    """Parse *raw* as an integer within ``[minimum, maximum]``.

    ``maximum=None`` means unbounded above.
    """
    try:
        n = parse_int(raw)
    except ValueError as e:
        raise ParseError(f"invalid value('{raw}') for key '{key}'", key) from e
    if n < minimum:
        raise ParseError(
            f"value for key '{key}' must be greater than or equal to {minimum}", key
        )
    if maximum is not None and n > maximum:
        raise ParseError(
            f"value for key '{key}' must be less than or equal to {maximum}", key
        )
    return n


def first_value(params: Mapping[str, Sequence[str]], key: str) -> str:
    """First value supplied for *key*, or ``""`` when absent."""
    supplied = params.get(key)
    return supplied[0] if supplied else ""


class PaginationParser:
    """Parse and bound-check limit/offset; rejects rather than clamps."""

    def parse(
        self,
        params: Mapping[str, Sequence[str]],
        *,
        limit_key: str = "limit",
        offset_key: str = "offset",
        default_limit: int = 25,
        max_limit: int | None = 100,
    ) -> PaginationResult:
        limit = default_limit
        raw = first_value(params, limit_key)
        if raw != "":
            limit = parse_number(limit_key, raw, 0, max_limit)

        offset = 0
        raw = first_value(params, offset_key)
        if raw != "":
            offset = parse_number(offset_key, raw, 0, None)

        return PaginationResult(limit=limit, offset=offset)
