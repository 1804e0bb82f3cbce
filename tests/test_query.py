from __future__ import annotations

import pytest

from synapsefi.utils.query import PLATFORM_QUERY_PARAMS, USER_QUERY_PARAMS, build_query


def test_no_options_leaves_path() -> None:
    assert build_query("/users", PLATFORM_QUERY_PARAMS) == "/users"


def test_allowed_options_in_whitelist_order() -> None:
    path = build_query("/users", PLATFORM_QUERY_PARAMS, per_page=20, page=2, query="jo", idempotency_key="x")
    assert path == "/users?query=jo&page=2&per_page=20"


def test_boolean_flags_render_yes_no() -> None:
    path = build_query("/users/u1/nodes/n1", USER_QUERY_PARAMS, full_dehydrate=True, force_refresh=False)
    assert path == "/users/u1/nodes/n1?full_dehydrate=yes&force_refresh=no"


def test_existing_query_string_is_extended() -> None:
    assert build_query("/nodes/n1?ship=YES", USER_QUERY_PARAMS, page=1) == "/nodes/n1?ship=YES&page=1"


@pytest.mark.parametrize("value", [0, -1, "2", 1.5, True])
def test_invalid_pagination_rejected(value) -> None:
    with pytest.raises(ValueError):
        build_query("/users", PLATFORM_QUERY_PARAMS, page=value)
