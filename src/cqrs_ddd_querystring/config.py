"""QueryConfig — builder configuration and query-string constants."""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ConfigurationError

# Options in the capability tag, e.g. ``"sort,filter,param=tag_name"``.
SORT_TAG = "sort"
FILTER_TAG = "filter"
PARAM_TAG = "param"
SPLIT_TAG = "split"
DETAILED_TAG = "detailed"

# Options in the storage tag that mean "not a real column".
STORAGE_IGNORE_OPTIONS: tuple[str, ...] = (
    "-",
    "foreign_key",
    "association_foreign_key",
    "many_to_many",
)

# Free-text search parameter in the query string.
SEARCH_PARAM = "search"

# Operators in the query string.
OP_EQUAL = "eq"
OP_NOT_EQUAL = "neq"
OP_LIKE = "like"
OP_LESS_THAN = "lt"
OP_GREATER_THAN = "gt"
OP_LESS_THAN_OR_EQUAL = "lte"
OP_GREATER_THAN_OR_EQUAL = "gte"

# A sort token may be prefixed with ``+`` (ascending) or ``-`` (descending).
# Ascending is the database default, so it adds no suffix.
SORT_DIRECTIONS: dict[str, str] = {"+": "", "-": "desc"}

_SEARCH_OPERATORS = frozenset({"AND", "OR"})


@dataclass(frozen=True, slots=True)
class QueryConfig:
    """Configuration for :class:`~cqrs_ddd_querystring.parser.QueryBuilder`.

    Attributes:
        tag_name: Key in a field's ``json_schema_extra`` holding its options.
        db_tag_name: Key holding storage-mapping options (``"-"`` etc.).
        separator: Joiner between the filter key and the operator.
        ignore_sort: Skip the sort parameter entirely.
        sort_param: Name of the sort parameter.
        default_sort: Sort clause used when the request carries none.
        limit_param: Name of the limit parameter.
        default_limit: Limit used when the request carries none.
        limit_max_value: Inclusive upper bound for limit; ``None`` for none.
        offset_param: Name of the offset parameter.
        search_operator: Combines multiple search terms (``AND``/``OR``).
        explicit_select: Emit the compiled column list as ``select``.
        only_select_non_detailed_fields: Leave ``detailed`` fields out of
            ``select``. Implies ``explicit_select``.
    """

    tag_name: str = "query"
    db_tag_name: str = "db"
    separator: str = "_"
    ignore_sort: bool = False
    sort_param: str = "sort"
    default_sort: str = ""
    limit_param: str = "limit"
    default_limit: int = 25
    limit_max_value: int | None = 100
    offset_param: str = "offset"
    search_operator: str = "AND"
    explicit_select: bool = False
    only_select_non_detailed_fields: bool = False

    def __post_init__(self) -> None:
        for name in ("tag_name", "db_tag_name", "separator"):
            if not getattr(self, name):
                raise ConfigurationError(f"query: '{name}' must not be empty")
        for name in ("sort_param", "limit_param", "offset_param"):
            if not getattr(self, name):
                raise ConfigurationError(f"query: '{name}' must not be empty")
        if self.default_limit < 0:
            raise ConfigurationError("query: 'default_limit' must be >= 0")
        if self.limit_max_value is not None and (
            self.default_limit > self.limit_max_value
        ):
            raise ConfigurationError(
                "query: 'default_limit' must be less than or equal to "
                f"'limit_max_value' ({self.limit_max_value})"
            )
        if self.search_operator.upper() not in _SEARCH_OPERATORS:
            raise ConfigurationError(
                f"query: unknown search operator {self.search_operator!r}; "
                "expected AND or OR"
            )

    @property
    def select_enabled(self) -> bool:
        """Whether the compiled select list is emitted."""
        return self.explicit_select or self.only_select_non_detailed_fields
