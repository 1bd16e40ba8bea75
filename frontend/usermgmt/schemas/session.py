"""
Pydantic schemas for the session snapshot handed to views.
"""

from enum import Enum
from typing import Optional
from pydantic import Field

from .base import RecordSchema
from .user import UserRecord


class SessionStatus(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    ERROR = "error"


class SessionSnapshot(RecordSchema):
    """
    Read-only view of the session controller at one instant.

    When status is ERROR, `user` and `is_authenticated` still describe the last
    known state: a failed profile update does not log the user out.
    """
    status: SessionStatus = SessionStatus.UNAUTHENTICATED
    user: Optional[UserRecord] = None
    is_authenticated: bool = False
    loading: bool = True

    # Error surfaced alongside the last known state
    error: Optional[str] = Field(None, description="User-facing message")
    error_code: Optional[str] = Field(None, description="NETWORK | AUTH | VALIDATION | SERVER")
    error_source: Optional[str] = Field(None, description="Operation that failed, e.g. 'login'")

    # One-shot UI flags
    register_success: bool = False
    update_success: bool = False
