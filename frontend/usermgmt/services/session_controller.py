# usermgmt/services/session_controller.py
"""
Session controller: owns authentication status, the persisted credential and
the redirects that follow login, registration and logout.

Ordering rules:
- Every verification run (startup, login, refresh) takes a new attempt number.
  A result whose attempt is no longer current is discarded, so a stale
  "unauthenticated" can never overwrite a newer "authenticated".
- logout() also takes a new attempt number; a verification that resolves after
  an explicit logout has no effect.
- `loading` goes false only when the current attempt reaches a terminal state.
  The settle delay is a UI debounce applied after that point.
"""
from __future__ import annotations
from typing import Callable, List, Optional, Sequence, Tuple
import asyncio
import logging

from usermgmt.clients.api_client import UserApiClient
from usermgmt.config import settings
from usermgmt.errors import AuthFailure, NetworkFailure, ServerFailure, SessionError, ValidationFailure
from usermgmt.navigation import DASHBOARD_PATH, LOGIN_PATH, HistoryNavigator, Navigator
from usermgmt.schemas.session import SessionSnapshot
from usermgmt.schemas.user import ImageUpload, UserCreate, UserRecord, UserUpdate, canonical_education
from usermgmt.services.credential_store import CredentialStore, redact_token
from usermgmt.services.identity_verifier import IdentityVerifier
from usermgmt.services.session_store import (
    Authenticated,
    Authenticating,
    SessionStore,
    Unauthenticated,
)
from usermgmt.services.validation import validate_image_set

logger = logging.getLogger(__name__)


class SessionController:
    def __init__(
        self,
        *,
        api: Optional[UserApiClient] = None,
        credentials: Optional[CredentialStore] = None,
        verifier: Optional[IdentityVerifier] = None,
        navigator: Optional[Navigator] = None,
        session: Optional[SessionStore] = None,
        settle_delay: Optional[float] = None,
    ):
        self.api = api or UserApiClient()
        self.credentials = credentials or CredentialStore()
        self.verifier = verifier or IdentityVerifier(self.api)
        self.navigator = navigator or HistoryNavigator()
        self.session = session or SessionStore()
        self.settle_delay = settle_delay if settle_delay is not None else settings.SETTLE_DELAY_SECONDS

        self._attempt = 0
        # Why the last verification de-authenticated us (network vs rejected token)
        self.last_verification_failure: Optional[SessionError] = None

    # ---- attempt tracking ----
    def _begin_attempt(self) -> int:
        self._attempt += 1
        return self._attempt

    def _is_current(self, attempt: int) -> bool:
        return attempt == self._attempt

    def _discard(self, attempt: int, step: str) -> None:
        logger.debug({"step": "stale_result_discarded", "op": step,
                      "attempt": attempt, "current": self._attempt})

    async def _settle(self, attempt: int) -> None:
        if self.settle_delay > 0:
            await asyncio.sleep(self.settle_delay)
        if self._is_current(attempt):
            self.session.set_loading(False)

    def _deauthenticate(self, error: SessionError) -> None:
        """Fail closed: drop the credential and go back to Unauthenticated."""
        self.last_verification_failure = error
        self.credentials.clear()
        self.session.transition(Unauthenticated())
        self.session.set_loading(False)

    # ---- reads for views ----
    @property
    def user(self) -> Optional[UserRecord]:
        return self.session.user

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def loading(self) -> bool:
        return self.session.loading

    def snapshot(self) -> SessionSnapshot:
        return self.session.snapshot()

    def subscribe(self, listener: Callable[[SessionSnapshot], None]) -> Callable[[], None]:
        return self.session.subscribe(listener)

    # ---- startup ----
    async def initialize(self) -> None:
        """Read the persisted credential and, if present, verify it."""
        attempt = self._begin_attempt()
        token = self.credentials.load()
        if not token:
            logger.info({"step": "startup_no_credential"})
            self.session.transition(Unauthenticated())
            self.session.set_loading(False)
            return

        self.session.set_loading(True)
        self.session.transition(Authenticating())
        try:
            user = await self.verifier.verify(token)
        except (AuthFailure, NetworkFailure) as e:
            if not self._is_current(attempt):
                return self._discard(attempt, "startup")
            logger.info({"step": "startup_verify_failed", "code": e.code})
            self._deauthenticate(e)
            return

        if not self._is_current(attempt):
            return self._discard(attempt, "startup")
        self.last_verification_failure = None
        self.session.transition(Authenticated(user))
        logger.info({"step": "startup_authenticated", "user_id": user.id})
        await self._settle(attempt)

    # ---- login / logout ----
    async def login(self, email: str, password: str) -> None:
        """
        Exchange credentials for a token, persist it, then verify it.
        Returns only after the post-login verification completed or failed.
        """
        attempt = self._begin_attempt()
        self.session.clear_error()
        if isinstance(self.session.state, Authenticating):
            # The verification we are superseding will never land
            self.session.transition(Unauthenticated())
        self.session.set_loading(True)

        try:
            token = await self.api.login(email, password)
        except SessionError as e:
            if not self._is_current(attempt):
                return self._discard(attempt, "login")
            logger.warning({"step": "login_failed", "code": e.code, "detail": e.log_detail})
            self.session.fail(e, "login")
            self.session.set_loading(False)
            return

        # A logout (or newer login) while the request was in flight wins
        if not self._is_current(attempt):
            return self._discard(attempt, "login")

        if not self.credentials.save(token):
            self.session.fail(ServerFailure("We couldn't save your session. Please try again."), "login")
            self.session.set_loading(False)
            return

        self.session.transition(Authenticating())
        try:
            user = await self.verifier.verify(token)
        except (AuthFailure, NetworkFailure) as e:
            if not self._is_current(attempt):
                return self._discard(attempt, "login_verify")
            self._deauthenticate(e)
            self.session.fail(e, "login")
            return

        if not self._is_current(attempt):
            return self._discard(attempt, "login_verify")
        self.last_verification_failure = None
        self.session.transition(Authenticated(user))
        logger.info({"step": "login_success", "user_id": user.id, "token": redact_token(token)})
        self.navigator.push(DASHBOARD_PATH)
        await self._settle(attempt)

    def logout(self) -> None:
        """Synchronous; cancels the effect of any in-flight verification."""
        self._begin_attempt()
        self.credentials.clear()
        self.session.transition(Unauthenticated())
        self.session.set_loading(False)
        logger.info({"step": "logout"})
        self.navigator.push(LOGIN_PATH)

    # ---- registration ----
    async def register(self, form: UserCreate, images: Sequence[ImageUpload]) -> bool:
        """
        Create the account. Does not sign the caller in: on success the
        one-shot register_success flag is set and the user is sent to /login.
        """
        self.session.clear_error()
        self.session.set_register_success(False)
        try:
            images = validate_image_set(images)
            await self.api.register(form, images)
        except SessionError as e:
            logger.warning({"step": "register_failed", "code": e.code, "detail": e.log_detail})
            self.session.fail(e, "register")
            return False

        logger.info({"step": "register_success", "email": str(form.email)})
        self.session.set_register_success(True)
        self.navigator.push(LOGIN_PATH)
        return True

    # ---- identity refresh ----
    async def refresh_identity(self) -> Optional[UserRecord]:
        """
        Re-run verification against the stored credential and replace the
        user record. Only a failed verification changes the auth axis.

        Outside an authenticated session this is a no-op: startup and login
        own their own verification and are not superseded by a refresh.
        """
        if not self.session.is_authenticated:
            logger.debug({"step": "refresh_skipped", "status": self.session.state.status.value})
            return None

        token = self.credentials.load()
        if not token:
            self._begin_attempt()
            self._deauthenticate(AuthFailure("Your session has expired. Please log in again."))
            return None

        attempt = self._begin_attempt()
        try:
            user = await self.verifier.verify(token)
        except (AuthFailure, NetworkFailure) as e:
            if not self._is_current(attempt):
                self._discard(attempt, "refresh")
                return None
            self._deauthenticate(e)
            return None

        if not self._is_current(attempt):
            self._discard(attempt, "refresh")
            return None
        self.session.transition(Authenticated(user))
        # This attempt superseded any pending settle
        self.session.set_loading(False)
        return user

    # ---- authenticated mutations ----
    def _require_session(self, source: str) -> Optional[Tuple[str, UserRecord]]:
        token = self.credentials.load()
        if not token:
            self.session.fail(AuthFailure("Authentication token not found. Please log in again."), source)
            return None
        user = self.session.user
        if user is None:
            self.session.fail(AuthFailure("You need to be logged in to do that."), source)
            return None
        return token, user

    async def update_profile(
        self,
        changes: UserUpdate,
        images: Optional[Sequence[ImageUpload]] = None,
    ) -> bool:
        """
        Send changed fields (and optionally a new 4-image set), then pull the
        canonical record back with refresh_identity(). No local patching.
        """
        self.session.clear_error()
        self.session.set_update_success(False)
        if images:
            try:
                images = validate_image_set(images)
            except ValidationFailure as e:
                self.session.fail(e, "update")
                return False

        required = self._require_session("update")
        if required is None:
            return False
        token, user = required

        try:
            await self.api.update_user(token, user.id, changes, images or None)
        except SessionError as e:
            logger.warning({"step": "update_failed", "user_id": user.id, "code": e.code, "detail": e.log_detail})
            self.session.fail(e, "update")
            return False

        logger.info({"step": "update_success", "user_id": user.id})
        self.session.set_update_success(True)
        await self.refresh_identity()
        return True

    async def delete_account(self) -> bool:
        """Delete the account; on success this is exactly logout()."""
        self.session.clear_error()
        required = self._require_session("delete")
        if required is None:
            return False
        token, user = required

        try:
            await self.api.delete_user(token, user.id)
        except SessionError as e:
            logger.warning({"step": "delete_failed", "user_id": user.id, "code": e.code, "detail": e.log_detail})
            self.session.fail(e, "delete")
            return False

        logger.info({"step": "delete_success", "user_id": user.id})
        self.logout()
        return True

    # ---- profile menus ----
    async def load_profile_options(self) -> Tuple[List[str], List[str]]:
        """(cities, education options) for the selection menus."""
        cities = await self.api.get_cities()
        education = await self.api.get_education_options()
        return cities, education

    def education_for_editor(self, options: Sequence[str]) -> Optional[str]:
        """Current user's education in the menu's canonical casing."""
        user = self.session.user
        return canonical_education(user.education, options) if user else None
