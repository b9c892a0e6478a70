"""
DBQuery — the parsed, validated query descriptor.

``DBQuery`` carries *what* the database layer should do; applying it to a
statement is the job of an adapter (see :mod:`.adapter`).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .values import FilterValue


@dataclass(frozen=True, slots=True)
class DBQuery:
    """
    Immutable result of :meth:`QueryBuilder.parse`.

    Attributes:
        limit: Number of rows to return.
        offset: Rows to skip; used for pagination.
        sort: Order clause, e.g. ``"age desc, name"``.
        select: Comma-separated columns; empty means all columns.
        filter_exp: Boolean expression with positional ``?`` placeholders,
            e.g. ``"name = ? AND age >= ?"``.
        filter_values: Values bound to the placeholders, in order.
    """

    limit: int = 0
    offset: int = 0
    sort: str = ""
    select: str = ""
    filter_exp: str = ""
    filter_values: tuple[FilterValue, ...] = ()

    def and_(self, exp: str, *values: FilterValue) -> DBQuery:
        """Return a copy with *exp* AND-ed onto the filter expression."""
        if not exp:
            return self
        combined = f"{self.filter_exp} AND {exp}" if self.filter_exp else exp
        return replace(
            self,
            filter_exp=combined,
            filter_values=(*self.filter_values, *values),
        )

    @property
    def placeholders(self) -> int:
        return self.filter_exp.count("?")

    @property
    def select_fields(self) -> list[str]:
        return [c for c in self.select.split(",") if c]

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary."""
        return {
            "limit": self.limit,
            "offset": self.offset,
            "sort": self.sort,
            "select": self.select,
            "filter_exp": self.filter_exp,
            "filter_values": [
                v.isoformat() if hasattr(v, "isoformat") else v
                for v in self.filter_values
            ],
        }
