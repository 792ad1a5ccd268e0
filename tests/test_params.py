"""Argument extraction and pagination normalization."""

from __future__ import annotations

import pytest
from github_mcp_server.errors import MISSING_PARAMETER, TYPE_MISMATCH, SafeError
from github_mcp_server.params import (
    PaginationParams,
    optional_comma_separated_list,
    optional_int,
    optional_int_with_default,
    optional_pagination_params,
    optional_param,
    optional_param_ok,
    optional_param_with_default,
    optional_string_array,
    parse_comma_separated_list,
    required_int,
    required_param,
)


def test_required_param_returns_typed_values() -> None:
    args = {"owner": "octo", "draft": True}
    assert required_param(args, "owner", str) == "octo"
    assert required_param(args, "draft", bool) is True


@pytest.mark.parametrize("args", [{}, {"owner": None}, {"owner": ""}])
def test_required_param_missing(args: dict) -> None:
    with pytest.raises(SafeError) as exc:
        required_param(args, "owner", str)
    assert exc.value.code == MISSING_PARAMETER
    assert exc.value.message == "missing required parameter: owner"


def test_required_param_wrong_type() -> None:
    with pytest.raises(SafeError) as exc:
        required_param({"owner": 42}, "owner", str)
    assert exc.value.code == TYPE_MISMATCH
    assert "owner" in exc.value.message


def test_required_int_truncates_toward_zero() -> None:
    assert required_int({"n": 3.0}, "n") == 3
    assert required_int({"n": 3.9}, "n") == 3
    assert required_int({"n": -3.9}, "n") == -3
    assert required_int({"n": 7}, "n") == 7


@pytest.mark.parametrize("value", [True, "3", [3]])
def test_required_int_rejects_non_numbers(value: object) -> None:
    with pytest.raises(SafeError) as exc:
        required_int({"n": value}, "n")
    assert exc.value.code == TYPE_MISMATCH


def test_required_bool_rejects_numbers() -> None:
    with pytest.raises(SafeError) as exc:
        required_param({"flag": 1}, "flag", bool)
    assert exc.value.code == TYPE_MISMATCH


def test_optional_params_default_to_zero_values() -> None:
    assert optional_param({}, "state", str) == ""
    assert optional_int({}, "milestone") == 0
    assert optional_param({}, "draft", bool) is False
    assert optional_param({"state": "open"}, "state", str) == "open"


def test_optional_param_still_checks_type() -> None:
    with pytest.raises(SafeError) as exc:
        optional_param({"state": 1}, "state", str)
    assert exc.value.code == TYPE_MISMATCH


def test_optional_param_ok_tells_explicit_zero_from_absence() -> None:
    assert optional_param_ok({"body": ""}, "body", str) == ("", True)
    assert optional_param_ok({}, "body", str) == ("", False)
    assert optional_param_ok({"milestone": 0}, "milestone", int) == (0, True)


def test_optional_param_with_default_replaces_zero_values() -> None:
    assert optional_param_with_default({}, "all", bool, True) is True
    assert optional_param_with_default({"all": False}, "all", bool, True) is True
    assert optional_int_with_default({"perPage": 0}, "perPage", 30) == 30
    assert optional_int_with_default({"perPage": 50}, "perPage", 30) == 50


def test_parse_comma_separated_list() -> None:
    assert parse_comma_separated_list("") is None
    assert parse_comma_separated_list("a, b ,,c") == ["a", "b", "c"]
    assert parse_comma_separated_list("x,x") == ["x", "x"]
    assert parse_comma_separated_list(" , ") == []


def test_optional_comma_separated_list_is_always_a_list() -> None:
    assert optional_comma_separated_list({}, "secret_type") == []
    assert optional_comma_separated_list({"secret_type": ""}, "secret_type") == []
    assert optional_comma_separated_list({"secret_type": " , "}, "secret_type") == []
    assert optional_comma_separated_list({"secret_type": "a,b"}, "secret_type") == ["a", "b"]


def test_optional_string_array() -> None:
    assert optional_string_array({}, "labels") == []
    assert optional_string_array({"labels": ["bug", "ui"]}, "labels") == ["bug", "ui"]

    with pytest.raises(SafeError) as exc:
        optional_string_array({"labels": "bug"}, "labels")
    assert exc.value.code == TYPE_MISMATCH

    with pytest.raises(SafeError) as exc:
        optional_string_array({"labels": ["bug", 1]}, "labels")
    assert exc.value.code == TYPE_MISMATCH


def test_pagination_defaults() -> None:
    assert optional_pagination_params({}) == PaginationParams(page=1, per_page=30)


def test_pagination_explicit_values() -> None:
    params = optional_pagination_params({"page": 2, "perPage": 50})
    assert params == PaginationParams(page=2, per_page=50)
    assert params.to_query() == {"page": "2", "per_page": "50"}


def test_pagination_non_positive_values_fall_back() -> None:
    assert optional_pagination_params({"page": 0, "perPage": -5}) == PaginationParams(page=1, per_page=30)


def test_pagination_is_not_clamped_locally() -> None:
    assert optional_pagination_params({"perPage": 500}).per_page == 500


def test_pagination_rejects_wrong_types() -> None:
    with pytest.raises(SafeError) as exc:
        optional_pagination_params({"page": "2"})
    assert exc.value.code == TYPE_MISMATCH
