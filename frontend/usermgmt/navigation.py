# usermgmt/navigation.py
"""
Redirect coordination between the session controller and the views.

The controller pushes paths through a Navigator after login/logout/registration.
Pages decide what to render (or where to go) from a SessionSnapshot using the
pure helpers below; the route gate only looks at credential presence.
"""
from __future__ import annotations
from typing import List, Optional, Protocol

from usermgmt.schemas.session import SessionSnapshot

LANDING_PATH = "/"
LOGIN_PATH = "/login"
SIGNUP_PATH = "/signup"
DASHBOARD_PATH = "/dashboard"
PROFILE_PATH = "/profile"

PUBLIC_PATHS = (LANDING_PATH, LOGIN_PATH, SIGNUP_PATH)
GATED_PATHS = (LANDING_PATH, LOGIN_PATH, SIGNUP_PATH, DASHBOARD_PATH, PROFILE_PATH)


class Navigator(Protocol):
    def push(self, path: str) -> None: ...


class HistoryNavigator:
    """In-process navigator that records every push (used by scripts and tests)."""

    def __init__(self) -> None:
        self.history: List[str] = []

    def push(self, path: str) -> None:
        self.history.append(path)

    @property
    def current(self) -> Optional[str]:
        return self.history[-1] if self.history else None


# ---- page decisions ----
def login_page_redirect(snap: SessionSnapshot) -> Optional[str]:
    """Already signed in and settled -> go to the dashboard."""
    if snap.is_authenticated and not snap.loading:
        return DASHBOARD_PATH
    return None


def login_page_shows_loading(snap: SessionSnapshot) -> bool:
    # Authenticated-but-still-on-login means a redirect is in flight; hide the form
    return snap.loading or snap.is_authenticated


def dashboard_page_redirect(snap: SessionSnapshot) -> Optional[str]:
    if not snap.is_authenticated and not snap.loading:
        return LOGIN_PATH
    return None


def dashboard_page_shows_loading(snap: SessionSnapshot) -> bool:
    if snap.loading:
        return True
    if not snap.is_authenticated:
        return True  # redirect pending
    return snap.user is None


def landing_page_shows_loading(snap: SessionSnapshot) -> bool:
    return snap.loading


def landing_page_offers_dashboard(snap: SessionSnapshot) -> bool:
    return snap.user is not None


# ---- route gate ----
def route_gate(path: str, has_credential: bool) -> Optional[str]:
    """
    Stateless per-request gate. Returns the redirect target, or None to pass.

    Only credential presence is consulted, never the verification result.
    """
    if path not in GATED_PATHS:
        return None
    if not has_credential and path not in PUBLIC_PATHS:
        return LOGIN_PATH
    if has_credential and path == LANDING_PATH:
        return DASHBOARD_PATH
    return None
