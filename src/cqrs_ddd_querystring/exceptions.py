"""
Query-string exception hierarchy.

All exceptions inherit from ``QueryStringError`` and provide
``to_dict()`` for API-friendly error responses.
"""

from __future__ import annotations

from typing import Any


class QueryStringError(Exception):
    """Base exception for all query-string errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class ConfigurationError(QueryStringError):
    """Raised when a builder cannot be constructed (missing model, bad config)."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "CONFIGURATION_ERROR",
            "message": str(self),
        }


class UnsupportedFieldTypeError(ConfigurationError):
    """A filterable field has a value type with no known filter handling."""

    def __init__(self, field: str, type_name: str) -> None:
        self.field = field
        self.type_name = type_name
        super().__init__(
            f"Could not use field {field} ({type_name}) with query filter"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_FIELD_TYPE",
            "field": self.field,
            "type": self.type_name,
        }


class ParseError(QueryStringError):
    """
    Request parameters failed validation.

    ``param`` names the offending query-string key when there is one.
    """

    def __init__(self, message: str, param: str | None = None) -> None:
        self.message = message
        self.param = param
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "PARSE_ERROR",
            "message": self.message,
            "param": self.param,
        }
