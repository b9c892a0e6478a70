"""QueryBuilder — query params -> validated DBQuery."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs

from .compiler import compile_schema
from .config import SEARCH_PARAM, SORT_DIRECTIONS, QueryConfig
from .exceptions import ParseError
from .pagination import PaginationParser
from .query import DBQuery

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from .capabilities import SearchFn
    from .compiler import CompiledSchema
    from .values import FilterValue

logger = logging.getLogger(__name__)

Params = dict[str, list[str]]


class QueryBuilder:
    """
    Translate query-string parameters into a :class:`DBQuery`.

    The model is compiled once, in the constructor; afterwards the builder
    only reads immutable tables, so one instance can serve any number of
    concurrent requests::

        builder = QueryBuilder(Pet, QueryConfig(default_sort="name"))
        query = builder.parse_query_string("age_gt=10&sort=-age")
    """

    def __init__(self, model: Any, config: QueryConfig | None = None) -> None:
        """
        Compile *model* for later parse calls.

        Args:
            model: A :class:`~.schema.ModelSchema` or a pydantic model
                class/instance.
            config: Builder configuration; defaults to ``QueryConfig()``.

        Raises:
            ConfigurationError: missing model, or an unsupported field type.
        """
        self.config = config or QueryConfig()
        self.schema: CompiledSchema = compile_schema(model, self.config)
        self._pagination = PaginationParser()
        self._select = ",".join(self.schema.select_fields)

    # -- entry points --------------------------------------------------------

    def parse(self, params: Mapping[str, Any] | Any) -> DBQuery:
        """Validate *params* and build a :class:`DBQuery`.

        Checks run in a fixed order (limit, offset, sort, filter, search);
        the first failure raises and nothing partial is returned.

        Raises:
            ParseError: a parameter failed validation.
        """
        values = normalise_params(params)
        try:
            return self._parse(values)
        except ParseError as e:
            logger.debug("Rejected query parameters: %s", e.message)
            raise

    def parse_query_string(self, query_string: str) -> DBQuery:
        """Parse a raw query string, e.g. ``"age_gt=10&sort=-age"``."""
        return self.parse(parse_qs(query_string, keep_blank_values=True))

    def parse_request(self, request: Any) -> DBQuery:
        """Parse the query string of a Starlette/FastAPI or Werkzeug request."""
        for attr in ("query_params", "args"):
            params = getattr(request, attr, None)
            if params is not None:
                return self.parse(params)
        return self.parse_query_string(str(request.url.query))

    # -- pipeline ------------------------------------------------------------

    def _parse(self, params: Params) -> DBQuery:
        cfg = self.config
        page = self._pagination.parse(
            params,
            limit_key=cfg.limit_param,
            offset_key=cfg.offset_param,
            default_limit=cfg.default_limit,
            max_limit=cfg.limit_max_value,
        )

        sort = cfg.default_sort
        if not cfg.ignore_sort and cfg.sort_param in params:
            sort = self._parse_sort(params[cfg.sort_param])

        exp, vals = self._parse_filter(params)
        query = DBQuery(
            limit=page.limit,
            offset=page.offset,
            sort=sort,
            select=self._select,
            filter_exp=exp,
            filter_values=tuple(vals),
        )

        terms = params.get(SEARCH_PARAM)
        searcher = self.schema.searcher
        if terms and searcher is not None:
            exp, vals = self._parse_search(searcher, terms)
            query = query.and_(exp, *vals)
        return query

    def _parse_sort(self, tokens: Sequence[str]) -> str:
        """Build the order clause; ``+col``/``col`` ascend, ``-col`` descends."""
        clauses: list[str] = []
        for token in tokens:
            if token == "":
                raise ParseError("missing sort parameter", self.config.sort_param)
            column, direction = token, ""
            if token[0] in SORT_DIRECTIONS:
                column, direction = token[1:], SORT_DIRECTIONS[token[0]]
            if not self.schema.is_sortable(column):
                raise ParseError(
                    f"invalid sort parameter '{column}'", self.config.sort_param
                )
            clauses.append(f"{column} {direction}" if direction else column)
        return ", ".join(clauses)

    def _parse_filter(self, params: Params) -> tuple[str, list[FilterValue]]:
        """
        Build the condition expression and its values.

        There are two expression formats per key:

        1. ``col = ?``                    - one value given.
        2. ``(col = ? OR col = ? ...)``   - several values given.

        Keys are AND-ed together; their order carries no meaning.
        """
        expressions: list[str] = []
        bound: list[FilterValue] = []
        for name, filter_field in self.schema.filter_fields.items():
            args = params.get(name)
            if args is None:
                continue
            if filter_field.split_on_comma and len(args) == 1 and "," in args[0]:
                args = args[0].split(",")
            parts: list[str] = []
            for arg in args:
                try:
                    bound.append(filter_field.parse(arg))
                except ValueError as e:
                    raise ParseError(
                        f"invalid parameter for key '{name}'", name
                    ) from e
                parts.append(filter_field.exp)
            if not parts:
                continue
            exp = " OR ".join(parts)
            if len(parts) > 1:
                exp = f"({exp})"
            expressions.append(filter_field.wrap(exp))
        return " AND ".join(expressions), bound

    def _parse_search(
        self, searcher: SearchFn, terms: Sequence[str]
    ) -> tuple[str, list[FilterValue]]:
        """Combine per-term search expressions with the search operator."""
        joiner = f" {self.config.search_operator.upper()} "
        expressions: list[str] = []
        bound: list[FilterValue] = []
        for term in terms:
            exp, vals = searcher(term)
            expressions.append(exp)
            bound.extend(vals)
        combined = joiner.join(expressions)
        if len(expressions) > 1:
            combined = f"({combined})"
        return combined, bound


def normalise_params(params: Mapping[str, Any] | Any) -> Params:
    """Coerce a parameter container into ``{key: [values, ...]}``.

    Accepts ``parse_qs`` output, plain mappings (a single string value
    counts as one value), and multi-dicts exposing ``getlist`` (Werkzeug,
    Starlette) or ``multi_items``.
    """
    if params is None:
        return {}
    out: Params = {}
    if hasattr(params, "multi_items"):
        for key, value in params.multi_items():
            out.setdefault(key, []).append(str(value))
        return out
    if hasattr(params, "getlist"):
        return {key: [str(v) for v in params.getlist(key)] for key in params}
    for key, value in params.items():
        if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
            out[key] = [_as_str(value)]
        else:
            out[key] = [_as_str(v) for v in value]
    return out


def _as_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)
