from __future__ import annotations

import pytest

from taskboard.core.exceptions import (
    AccountDeactivatedError,
    AuthError,
    BackendUnavailableError,
    DataFetchError,
    PermissionDeniedError,
    QueryError,
)
from taskboard.models.user import UserRole
from taskboard.services.session_manager import (
    RouteSet,
    SessionManager,
    SessionState,
    route_for_role,
)

from conftest import FakeAuth, FakeTables, user_row


def make_manager(*users, token=None):
    auth = FakeAuth({f"{u['id']}@example.com": ("pw", u["id"]) for u in users})
    tables = FakeTables({"users": list(users)})
    return SessionManager(auth, tables, token=token), auth, tables


@pytest.mark.parametrize("role, expected", [
    (UserRole.ADMIN, RouteSet.ADMIN),
    (UserRole.MANAGER, RouteSet.STANDARD),
    (UserRole.USER, RouteSet.STANDARD),
])
def test_route_is_total_over_roles(role, expected):
    assert route_for_role(role) == expected
    assert route_for_role(role.value.lower()) == expected


def test_admin_sign_in_routes_to_admin():
    manager, auth, _ = make_manager(user_row("alice", role="ADMIN"))

    route = manager.sign_in("alice@example.com", "pw")

    assert route == RouteSet.ADMIN
    assert manager.state == SessionState.AUTHENTICATED
    assert manager.is_admin and not manager.is_manager
    assert manager.identity.id == "alice"
    assert manager.token in auth.sessions


def test_manager_sign_in_routes_to_standard():
    manager, _, _ = make_manager(user_row("mia", role="MANAGER"))

    assert manager.sign_in("mia@example.com", "pw") == RouteSet.STANDARD
    assert manager.is_manager and not manager.is_admin


def test_bad_credentials_raise_auth_error():
    manager, auth, tables = make_manager(user_row("bob"))

    with pytest.raises(AuthError):
        manager.sign_in("bob@example.com", "wrong")

    assert manager.state == SessionState.UNAUTHENTICATED
    assert manager.identity is None
    assert tables.calls == []
    assert auth.sessions == {}


def test_deactivated_sign_in_revokes_session_before_raising():
    manager, auth, _ = make_manager(user_row("dora", is_active=False))

    with pytest.raises(AccountDeactivatedError):
        manager.sign_in("dora@example.com", "pw")

    assert auth.live_sessions_for("dora") == []
    assert [c[0] for c in auth.calls] == ["sign_in", "sign_out"]
    assert manager.state == SessionState.UNAUTHENTICATED
    assert manager.token is None


def test_unreadable_profile_raises_data_fetch_error_and_revokes():
    manager, auth, tables = make_manager(user_row("carl"))
    tables.fail[("select_one", "users")] = QueryError("boom")

    with pytest.raises(DataFetchError):
        manager.sign_in("carl@example.com", "pw")

    assert auth.live_sessions_for("carl") == []
    assert manager.state == SessionState.UNAUTHENTICATED


def test_missing_profile_row_raises_data_fetch_error():
    auth = FakeAuth({"ghost@example.com": ("pw", "ghost")})
    manager = SessionManager(auth, FakeTables())

    with pytest.raises(DataFetchError):
        manager.sign_in("ghost@example.com", "pw")
    assert auth.sessions == {}


def test_backend_outage_leaves_authenticated_state_untouched():
    manager, auth, _ = make_manager(user_row("alice"), user_row("bob"))
    manager.sign_in("alice@example.com", "pw")
    before = (manager.state, manager.identity, manager.token)

    auth.fail["sign_in"] = BackendUnavailableError()
    with pytest.raises(BackendUnavailableError):
        manager.sign_in("bob@example.com", "pw")

    assert (manager.state, manager.identity, manager.token) == before


def test_bootstrap_without_stored_session_is_unauthenticated():
    manager, _, tables = make_manager(user_row("alice"))

    assert manager.bootstrap() == RouteSet.AUTH
    assert manager.state == SessionState.UNAUTHENTICATED
    assert tables.calls == []


def test_bootstrap_resumes_active_session():
    manager, auth, tables = make_manager(user_row("alice", role="ADMIN"))
    manager.sign_in("alice@example.com", "pw")
    token = manager.token

    resumed = SessionManager(auth, tables, token=token)
    assert resumed.bootstrap() == RouteSet.ADMIN
    assert resumed.identity.id == "alice"


def test_bootstrap_with_deactivated_identity_signs_out():
    manager, auth, tables = make_manager(user_row("dora"))
    manager.sign_in("dora@example.com", "pw")
    token = manager.token
    tables.rows["users"]["dora"]["is_active"] = False

    resumed = SessionManager(auth, tables, token=token)
    assert resumed.bootstrap() == RouteSet.AUTH

    assert resumed.state == SessionState.UNAUTHENTICATED
    assert token not in auth.sessions
    assert resumed.token is None


def test_bootstrap_fetch_failure_is_not_logged_in():
    manager, auth, tables = make_manager(user_row("alice"))
    manager.sign_in("alice@example.com", "pw")
    token = manager.token
    tables.fail[("select_one", "users")] = QueryError("boom")

    resumed = SessionManager(auth, tables, token=token)
    assert resumed.bootstrap() == RouteSet.AUTH
    assert resumed.state == SessionState.UNAUTHENTICATED
    # one attempt only
    assert tables.calls.count(("select_one", "users")) == 2


def test_sign_out_is_idempotent():
    manager, auth, _ = make_manager(user_row("alice"))

    assert manager.sign_out() == RouteSet.AUTH
    assert auth.calls == []

    manager.sign_in("alice@example.com", "pw")
    manager.sign_out()
    manager.sign_out()

    assert manager.state == SessionState.UNAUTHENTICATED
    assert manager.identity is None
    assert [c[0] for c in auth.calls] == ["sign_in", "sign_out"]
    assert auth.sessions == {}


def test_require_role():
    manager, _, _ = make_manager(user_row("uma"))
    with pytest.raises(PermissionDeniedError):
        manager.require_role(UserRole.USER)

    manager.sign_in("uma@example.com", "pw")
    assert manager.require_role(UserRole.USER, UserRole.ADMIN).id == "uma"
    with pytest.raises(PermissionDeniedError):
        manager.require_role(UserRole.ADMIN)


def test_closed_manager_refuses_work():
    manager, _, _ = make_manager(user_row("alice"))
    with manager:
        manager.sign_in("alice@example.com", "pw")

    assert manager.state == SessionState.UNAUTHENTICATED
    with pytest.raises(RuntimeError):
        manager.bootstrap()


def test_signing_in_again_revokes_the_replaced_session():
    manager, auth, _ = make_manager(user_row("alice"), user_row("bob"))
    manager.sign_in("alice@example.com", "pw")
    first = manager.token

    assert manager.sign_in("bob@example.com", "pw") == RouteSet.STANDARD

    assert first not in auth.sessions
    assert list(auth.sessions) == [manager.token]
    assert manager.identity.id == "bob"


def test_sign_in_revokes_stored_token_of_unbootstrapped_handle():
    manager, auth, tables = make_manager(user_row("alice"))
    manager.sign_in("alice@example.com", "pw")
    stale = manager.token

    fresh = SessionManager(auth, tables, token=stale)
    fresh.sign_in("alice@example.com", "pw")

    assert len(auth.live_sessions_for("alice")) == 1
    assert stale not in auth.sessions


def test_bootstrap_outage_keeps_the_session():
    manager, auth, tables = make_manager(user_row("alice"))
    manager.sign_in("alice@example.com", "pw")
    token = manager.token
    tables.fail[("select_one", "users")] = BackendUnavailableError()

    resumed = SessionManager(auth, tables, token=token)
    with pytest.raises(BackendUnavailableError):
        resumed.bootstrap()

    assert token in auth.sessions
    assert resumed.state == SessionState.UNAUTHENTICATED
    assert resumed.token == token
    assert [c[0] for c in auth.calls].count("sign_out") == 0
