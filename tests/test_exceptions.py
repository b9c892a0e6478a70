"""Tests for configuration validation and the exception hierarchy."""

from __future__ import annotations

import pytest

from cqrs_ddd_querystring import (
    ConfigurationError,
    ParseError,
    QueryConfig,
    QueryStringError,
    UnsupportedFieldTypeError,
)


class TestQueryConfig:
    def test_defaults(self):
        config = QueryConfig()
        assert config.tag_name == "query"
        assert config.default_limit == 25
        assert config.limit_max_value == 100
        assert config.search_operator == "AND"
        assert not config.select_enabled

    def test_select_enabled(self):
        assert QueryConfig(explicit_select=True).select_enabled
        assert QueryConfig(only_select_non_detailed_fields=True).select_enabled

    def test_unbounded_limit(self):
        assert QueryConfig(default_limit=500, limit_max_value=None).default_limit == 500

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"tag_name": ""},
            {"separator": ""},
            {"sort_param": ""},
            {"default_limit": -1},
            {"default_limit": 101},
            {"search_operator": "XOR"},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            QueryConfig(**kwargs)

    def test_lowercase_operator_is_accepted(self):
        assert QueryConfig(search_operator="or").search_operator == "or"


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(ConfigurationError, QueryStringError)
        assert issubclass(UnsupportedFieldTypeError, ConfigurationError)
        assert issubclass(ParseError, QueryStringError)

    def test_base_to_dict(self):
        assert QueryStringError("boom").to_dict() == {
            "error": "QueryStringError",
            "message": "boom",
        }

    def test_configuration_to_dict(self):
        assert ConfigurationError("bad").to_dict() == {
            "error": "CONFIGURATION_ERROR",
            "message": "bad",
        }

    def test_unsupported_to_dict(self):
        err = UnsupportedFieldTypeError("ratio", "float")
        assert err.to_dict() == {
            "error": "UNSUPPORTED_FIELD_TYPE",
            "field": "ratio",
            "type": "float",
        }

    def test_parse_to_dict(self):
        err = ParseError("field \"x\" is not sortable", param="sort")
        assert err.to_dict() == {
            "error": "PARSE_ERROR",
            "message": 'field "x" is not sortable',
            "param": "sort",
        }
