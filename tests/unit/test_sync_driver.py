"""Tests for the host-style paging loop."""
from unittest.mock import MagicMock

import pytest

from avalara_connector.core.avalara import (
    AvalaraClient,
    PaginationOptions,
    SecurityRoleModel,
    SecurityRoleResponse,
    SyncError,
    UserModel,
    UserResponse,
)
from avalara_connector.core.connector import AvalaraConnector, run_sync
from avalara_connector.core.connector.sync import collect_pages


def test_collect_pages_follows_tokens_until_empty():
    pages = {None: ([1, 2], "t1"), "t1": ([3], "t2"), "t2": ([], "")}
    calls = []

    def fetch(token):
        calls.append(token)
        return pages[token]

    assert collect_pages(fetch, "user") == [1, 2, 3]
    assert calls == [None, "t1", "t2"]


def test_collect_pages_follows_a_trailing_link_to_an_empty_page():
    pages = {None: (["only"], "t1"), "t1": ([], "")}
    assert collect_pages(lambda token: pages[token], "role") == ["only"]


def test_collect_pages_rejects_repeated_token():
    with pytest.raises(SyncError, match="repeated"):
        collect_pages(lambda token: ([1], "same"), "permission")


def _users(next_link=""):
    users = [UserModel(id=1, user_name="bob", security_role_id="AccountUser", is_active=True),
             UserModel(id=2, user_name="alice", security_role_id="AccountAdmin", is_active=True)]
    return UserResponse(value=users, next_link=next_link), PaginationOptions(next_link=next_link)


def test_run_sync_collects_graph():
    api = MagicMock(spec=AvalaraClient)
    api.get_users.side_effect = lambda options: _users()
    api.get_user_roles.return_value = (
        SecurityRoleResponse(value=[SecurityRoleModel(1, "AccountAdmin"), SecurityRoleModel(2, "AccountUser")]),
        PaginationOptions(),
    )

    result = run_sync(AvalaraConnector(api))

    assert result.summary() == {"resources": 4, "entitlements": 2, "grants": 2}
    edges = {(g.entitlement.resource.display_name, g.principal.resource) for g in result.grants}
    assert edges == {("AccountAdmin", "2"), ("AccountUser", "1")}
    # one listing for users, then one per role for grant derivation
    assert api.get_users.call_count == 3

    data = result.to_dict()
    assert data["grants"][0]["entitlement"].endswith(":member")
    assert {r["id"]["resource_type"] for r in data["resources"]} == {"user", "role"}
