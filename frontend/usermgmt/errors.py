# usermgmt/errors.py
"""
Failure taxonomy shared by the API client and the session controller.

Every failure carries a safe, user-facing message (public_detail) and an
optional detail that only goes to the logs (log_detail).
"""
from __future__ import annotations
from dataclasses import dataclass


@dataclass
class SessionError(Exception):
    code: str                 # "NETWORK" | "AUTH" | "VALIDATION" | "SERVER"
    public_detail: str        # safe message for the UI
    log_detail: str = ""      # extra info for logs

    def __str__(self) -> str:
        return self.public_detail


class NetworkFailure(SessionError):
    """Transport problem: DNS, refused connection, timeout."""

    def __init__(self, public_detail: str = "Unable to reach the server. Please check your connection.", log_detail: str = ""):
        super().__init__("NETWORK", public_detail, log_detail)


class AuthFailure(SessionError):
    """Rejected credentials or an invalid/expired token."""

    def __init__(self, public_detail: str = "Authentication failed", log_detail: str = ""):
        super().__init__("AUTH", public_detail, log_detail)


class ValidationFailure(SessionError):
    """Request rejected before (or because of) a malformed body."""

    def __init__(self, public_detail: str, log_detail: str = ""):
        super().__init__("VALIDATION", public_detail, log_detail)


class ServerFailure(SessionError):
    """5xx responses or a payload that does not have the expected shape."""

    def __init__(self, public_detail: str = "The server returned an unexpected response.", log_detail: str = ""):
        super().__init__("SERVER", public_detail, log_detail)
