"""
Adapters applying a :class:`DBQuery` to a backend statement.

Adapters compose statements; executing them stays with the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import column, text

if TYPE_CHECKING:
    from sqlalchemy import Select

    from .query import DBQuery


@runtime_checkable
class IQueryAdapter(Protocol):
    """Apply a parsed query to a backend-native statement."""

    def apply(self, query: DBQuery | None, stmt: Any) -> Any:
        """Return *stmt* narrowed by *query*."""
        ...


class SQLAlchemyQueryAdapter:
    """
    Apply a :class:`DBQuery` to a SQLAlchemy ``Select``.

    Positional ``?`` placeholders are rewritten to named bind parameters
    (``:qs_0``, ``:qs_1``, ...) so values are always bound, never inlined::

        stmt = SQLAlchemyQueryAdapter().apply(query, select(PetRecord))
        rows = (await session.execute(stmt)).scalars().all()
    """

    def __init__(self, bind_prefix: str = "qs_") -> None:
        self._bind_prefix = bind_prefix

    def apply(self, query: DBQuery | None, stmt: Select[Any]) -> Select[Any]:
        if query is None:
            return stmt
        if query.offset:
            stmt = stmt.offset(query.offset)
        if query.limit:
            stmt = stmt.limit(query.limit)
        if query.select:
            stmt = stmt.with_only_columns(
                *(column(name) for name in query.select_fields),
                maintain_column_froms=True,
            )
        if query.sort:
            stmt = stmt.order_by(text(query.sort))
        if query.filter_exp:
            sql, params = self.to_named(query.filter_exp, query.filter_values)
            stmt = stmt.where(text(sql).bindparams(**params))
        return stmt

    def to_named(self, exp: str, values: tuple[Any, ...]) -> tuple[str, dict[str, Any]]:
        """Rewrite ``?`` placeholders in *exp* to named parameters.

        Colons already in *exp* (``::text`` casts, ``':x'`` literals) are
        escaped so ``text()`` does not read them as bind parameters.

        Raises:
            ValueError: placeholder and value counts differ.
        """
        pieces = [piece.replace(":", "\\:") for piece in exp.split("?")]
        if len(pieces) - 1 != len(values):
            raise ValueError(
                f"expression has {len(pieces) - 1} placeholders "
                f"but {len(values)} values were given"
            )
        names = [f"{self._bind_prefix}{i}" for i in range(len(values))]
        sql = pieces[0] + "".join(
            f":{name}{piece}" for name, piece in zip(names, pieces[1:])
        )
        return sql, dict(zip(names, values))
