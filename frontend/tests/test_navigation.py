from __future__ import annotations

import pytest

from usermgmt.navigation import (
    HistoryNavigator,
    dashboard_page_redirect,
    dashboard_page_shows_loading,
    landing_page_offers_dashboard,
    landing_page_shows_loading,
    login_page_redirect,
    login_page_shows_loading,
    route_gate,
)
from usermgmt.schemas.session import SessionSnapshot, SessionStatus
from usermgmt.schemas.user import UserRecord

USER = UserRecord.model_validate({"_id": "1", "username": "asha"})


def _snap(**kw) -> SessionSnapshot:
    return SessionSnapshot(**kw)


def test_login_page_waits_for_settle_before_redirect() -> None:
    authed_loading = _snap(status=SessionStatus.AUTHENTICATED, user=USER, is_authenticated=True, loading=True)
    authed = _snap(status=SessionStatus.AUTHENTICATED, user=USER, is_authenticated=True, loading=False)
    anon = _snap(loading=False)

    assert login_page_redirect(authed_loading) is None
    assert login_page_shows_loading(authed_loading) is True
    assert login_page_redirect(authed) == "/dashboard"
    assert login_page_shows_loading(authed) is True
    assert login_page_redirect(anon) is None
    assert login_page_shows_loading(anon) is False


def test_dashboard_redirects_only_after_check_finished() -> None:
    checking = _snap(loading=True)
    anon = _snap(loading=False)
    authed_no_user = _snap(status=SessionStatus.AUTHENTICATED, is_authenticated=True, loading=False)
    authed = _snap(status=SessionStatus.AUTHENTICATED, user=USER, is_authenticated=True, loading=False)

    assert dashboard_page_redirect(checking) is None
    assert dashboard_page_shows_loading(checking) is True
    assert dashboard_page_redirect(anon) == "/login"
    assert dashboard_page_shows_loading(authed_no_user) is True
    assert dashboard_page_redirect(authed) is None
    assert dashboard_page_shows_loading(authed) is False


def test_failed_update_does_not_bounce_dashboard() -> None:
    errored = _snap(status=SessionStatus.ERROR, user=USER, is_authenticated=True, loading=False, error="x")
    assert dashboard_page_redirect(errored) is None


def test_landing_page() -> None:
    assert landing_page_shows_loading(_snap(loading=True)) is True
    assert landing_page_offers_dashboard(_snap(loading=False)) is False
    assert landing_page_offers_dashboard(_snap(user=USER, is_authenticated=True, loading=False)) is True


@pytest.mark.parametrize(
    "path, has_credential, expected",
    [
        ("/", False, None),
        ("/login", False, None),
        ("/signup", False, None),
        ("/dashboard", False, "/login"),
        ("/profile", False, "/login"),
        ("/", True, "/dashboard"),
        ("/login", True, None),
        ("/dashboard", True, None),
        ("/assets/logo.png", False, None),
    ],
)
def test_route_gate(path: str, has_credential: bool, expected) -> None:
    assert route_gate(path, has_credential) == expected


def test_history_navigator_records_pushes() -> None:
    nav = HistoryNavigator()
    assert nav.current is None
    nav.push("/login")
    nav.push("/dashboard")
    assert nav.history == ["/login", "/dashboard"]
    assert nav.current == "/dashboard"
