"""Optional model-side capabilities: wrap transforms and search hooks."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Protocol, get_origin, runtime_checkable

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .values import FilterValue

    WrapFn = Callable[[str], str]
    SearchFn = Callable[[str], "tuple[str, Sequence[FilterValue]]"]


@runtime_checkable
class Wrapper(Protocol):
    """Rewrite a composed filter expression into another expression.

    Used for example to redirect a filter on a collection field into a
    correlated sub-query::

        class Tags:
            @staticmethod
            def wrap(exp: str) -> str:
                return f"(name IN (SELECT DISTINCT tag_name FROM tags WHERE {exp}))"
    """

    def wrap(self, exp: str) -> str:
        ...


@runtime_checkable
class Searcher(Protocol):
    """Models that support the ``search`` parameter implement this.

    The hook returns an expression with ``?`` placeholders for one term,
    and the values bound to them.
    """

    def search(self, term: str) -> tuple[str, Sequence[FilterValue]]:
        ...


def nop_wrap(exp: str) -> str:
    """Identity wrap used by fields without their own transform."""
    return exp


def find_wrap(*candidates: Any) -> WrapFn | None:
    """Return the first callable ``wrap`` exposed by *candidates*.

    A candidate type whose ``wrap`` is a plain method is instantiated once
    and the bound method is returned.

    Raises:
        ConfigurationError: the type cannot be instantiated without arguments.
    """
    for candidate in candidates:
        wrap = _resolve_hook(candidate, "wrap")
        if wrap is not None:
            return wrap
    return None


def find_search(model: Any) -> SearchFn | None:
    """Return the model's ``search`` hook, if it has one.

    For a model class with an instance ``search`` method the hook is bound
    to an instance built once with ``model_construct()`` (pydantic) or a
    no-argument constructor.
    """
    return _resolve_hook(model, "search")


def _resolve_hook(owner: Any, name: str) -> Any:
    if get_origin(owner) is not None:
        return None
    if not isinstance(owner, type):
        hook = getattr(owner, name, None)
        return hook if callable(hook) else None

    raw = inspect.getattr_static(owner, name, None)
    if raw is None:
        return None
    if isinstance(raw, (staticmethod, classmethod)) or not inspect.isfunction(raw):
        hook = getattr(owner, name)
        return hook if callable(hook) else None
    # plain function on a class: bind it to an instance
    return getattr(_instantiate(owner, name), name)


def _instantiate(cls: type, hook: str) -> Any:
    factory = getattr(cls, "model_construct", None) or cls
    try:
        return factory()
    except TypeError as e:
        raise ConfigurationError(
            f"query: cannot bind {cls.__name__}.{hook}; make it a staticmethod "
            "or classmethod, or give the type a no-argument constructor"
        ) from e
