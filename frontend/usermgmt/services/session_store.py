# usermgmt/services/session_store.py
"""
Session state machine: the single source of truth views read from.

States:
    Unauthenticated -> Authenticating -> Authenticated(user)
    Authenticating  -> Unauthenticated          (no/invalid credential)
    Authenticated   -> Unauthenticated          (logout, account deletion)
    any             -> Error(reason)            (failed operation)

Error wraps the last known non-error state instead of replacing it, so a failed
profile update leaves the user signed in.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union
import logging

from usermgmt.errors import SessionError
from usermgmt.schemas.session import SessionSnapshot, SessionStatus
from usermgmt.schemas.user import UserRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unauthenticated:
    status = SessionStatus.UNAUTHENTICATED


@dataclass(frozen=True)
class Authenticating:
    status = SessionStatus.AUTHENTICATING


@dataclass(frozen=True)
class Authenticated:
    user: UserRecord
    status = SessionStatus.AUTHENTICATED


@dataclass(frozen=True)
class Error:
    reason: str
    code: str = "SERVER"
    source: str = ""
    last_known: Union[Unauthenticated, Authenticating, Authenticated] = field(default_factory=Unauthenticated)
    status = SessionStatus.ERROR


SessionState = Union[Unauthenticated, Authenticating, Authenticated, Error]
Listener = Callable[[SessionSnapshot], None]

# Legal targets per (non-error) source state; Error is always reachable
_ALLOWED = {
    Unauthenticated: (Unauthenticated, Authenticating),
    Authenticating: (Authenticating, Authenticated, Unauthenticated),
    Authenticated: (Authenticated, Authenticating, Unauthenticated),
}


class IllegalTransition(RuntimeError):
    pass


def _base(state: SessionState) -> Union[Unauthenticated, Authenticating, Authenticated]:
    return state.last_known if isinstance(state, Error) else state


class SessionStore:
    def __init__(self) -> None:
        self._state: SessionState = Unauthenticated()
        # Startup verification has not run yet
        self._loading = True
        self._register_success = False
        self._update_success = False
        self._listeners: List[Listener] = []

    # ---- reads ----
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Optional[UserRecord]:
        base = _base(self._state)
        return base.user if isinstance(base, Authenticated) else None

    @property
    def is_authenticated(self) -> bool:
        return isinstance(_base(self._state), Authenticated)

    @property
    def loading(self) -> bool:
        return self._loading

    def snapshot(self) -> SessionSnapshot:
        err = self._state if isinstance(self._state, Error) else None
        return SessionSnapshot(
            status=self._state.status,
            user=self.user,
            is_authenticated=self.is_authenticated,
            loading=self._loading,
            error=err.reason if err else None,
            error_code=err.code if err else None,
            error_source=err.source if err else None,
            register_success=self._register_success,
            update_success=self._update_success,
        )

    # ---- writes ----
    def transition(self, new_state: SessionState) -> None:
        if isinstance(new_state, Error):
            raise IllegalTransition("use fail() to enter the error state")
        current = _base(self._state)
        if not isinstance(new_state, _ALLOWED[type(current)]):
            raise IllegalTransition(f"{type(current).__name__} -> {type(new_state).__name__}")
        logger.debug({"step": "transition", "from": self._state.status.value, "to": new_state.status.value})
        self._state = new_state
        self._notify()

    def fail(self, error: SessionError, source: str) -> None:
        """Surface an error next to the last known state."""
        self._state = Error(
            reason=error.public_detail,
            code=error.code,
            source=source,
            last_known=_base(self._state),
        )
        logger.debug({"step": "transition", "to": "error", "source": source, "code": error.code})
        self._notify()

    def clear_error(self) -> None:
        if isinstance(self._state, Error):
            self._state = self._state.last_known
            self._notify()

    def set_loading(self, value: bool) -> None:
        if self._loading != value:
            self._loading = value
            self._notify()

    def set_register_success(self, value: bool) -> None:
        self._register_success = value
        self._notify()

    def set_update_success(self, value: bool) -> None:
        self._update_success = value
        self._notify()

    def consume_register_success(self) -> bool:
        """One-shot read: the login page shows the banner once."""
        was = self._register_success
        if was:
            self.set_register_success(False)
        return was

    def consume_update_success(self) -> bool:
        was = self._update_success
        if was:
            self.set_update_success(False)
        return was

    # ---- observers ----
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("Session listener raised")
