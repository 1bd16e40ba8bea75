# usermgmt/clients/api_client.py
"""
Async HTTP client for the user-management REST API.
Maps transport and HTTP failures onto the NetworkFailure / AuthFailure /
ValidationFailure / ServerFailure taxonomy so callers never see httpx errors.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Type
import logging
import time

import httpx
from pydantic import ValidationError

from usermgmt.config import settings
from usermgmt.errors import (
    AuthFailure,
    NetworkFailure,
    ServerFailure,
    SessionError,
    ValidationFailure,
)
from usermgmt.schemas.base import ApiEnvelope
from usermgmt.schemas.user import ImageUpload, UserCreate, UserLogin, UserRecord, UserUpdate

logger = logging.getLogger(__name__)


class UserApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        uploads_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.uploads_url = (uploads_url or settings.UPLOADS_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS
        self.client = http_client or httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "UserApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ---- transport ----
    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        default_error: str,
        rejected: Type[SessionError] = ValidationFailure,
        **kwargs: Any,
    ) -> ApiEnvelope:
        """
        Perform one request and return the parsed `{success, ...}` envelope.

        `rejected` is the failure raised for a 4xx or a `success: false` body;
        401/403 always raise AuthFailure.
        """
        headers = kwargs.pop("headers", {}) or {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        started = time.time()
        try:
            resp = await self.client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkFailure("The server took too long to respond. Please try again.", log_detail=repr(e))
        except httpx.RequestError as e:
            raise NetworkFailure(log_detail=repr(e))

        latency_ms = (time.time() - started) * 1000.0
        logger.debug({"step": "api_request", "method": method, "path": path,
                      "status": resp.status_code, "latency_ms": round(latency_ms, 1)})

        try:
            body = resp.json()
        except ValueError:
            body = None
        error_msg = body.get("error") if isinstance(body, dict) else None

        if resp.status_code >= 500:
            raise ServerFailure(error_msg or default_error, log_detail=f"HTTP {resp.status_code} {method} {path}")
        if resp.status_code in (401, 403):
            raise AuthFailure(error_msg or default_error, log_detail=f"HTTP {resp.status_code} {method} {path}")
        if resp.status_code >= 400:
            raise rejected(error_msg or default_error, log_detail=f"HTTP {resp.status_code} {method} {path}")
        if not isinstance(body, dict):
            raise ServerFailure(default_error, log_detail=f"non-object body from {method} {path}")

        try:
            envelope = ApiEnvelope.model_validate(body)
        except ValidationError as e:
            raise ServerFailure(default_error, log_detail=f"malformed envelope from {method} {path}: {e}")
        if not envelope.success:
            raise rejected(envelope.error or default_error, log_detail=f"success=false from {method} {path}")
        return envelope

    # ---- auth ----
    async def register(self, form: UserCreate, images: Sequence[ImageUpload]) -> ApiEnvelope:
        """POST /auth/register (multipart). No token is consumed from the reply."""
        return await self._request(
            "POST",
            "/auth/register",
            data=form.to_form_fields(),
            files=[img.as_multipart() for img in images],
            default_error="Registration failed",
        )

    async def login(self, email: str, password: str) -> str:
        """POST /auth/login and return the bearer token."""
        body = UserLogin(email=email, password=password)
        envelope = await self._request(
            "POST",
            "/auth/login",
            json=body.model_dump(),
            default_error="Login failed",
            rejected=AuthFailure,
        )
        if not envelope.token:
            raise ServerFailure("Login failed", log_detail="login envelope without token")
        return envelope.token

    async def me(self, token: str) -> UserRecord:
        """GET /auth/me: exchange a token for the current user record."""
        envelope = await self._request(
            "GET",
            "/auth/me",
            token=token,
            default_error="Authentication failed",
            rejected=AuthFailure,
        )
        if not isinstance(envelope.data, dict):
            raise ServerFailure("Authentication failed", log_detail="me envelope without data")
        try:
            return UserRecord.model_validate(envelope.data)
        except ValueError as e:
            raise ServerFailure("Authentication failed", log_detail=f"bad user record: {e}")

    # ---- users ----
    async def update_user(
        self,
        token: str,
        user_id: str,
        changes: UserUpdate,
        images: Optional[Sequence[ImageUpload]] = None,
    ) -> ApiEnvelope:
        """PUT /users/{id} (multipart): changed fields plus optional image set."""
        # Text fields travel as filename-less parts so the body is multipart even without images
        parts = [(key, (None, value)) for key, value in changes.to_form_fields().items()]
        parts.extend(img.as_multipart() for img in images or ())
        return await self._request(
            "PUT",
            f"/users/{user_id}",
            token=token,
            files=parts,
            default_error="Failed to update profile",
        )

    async def delete_user(self, token: str, user_id: str) -> None:
        await self._request(
            "DELETE",
            f"/users/{user_id}",
            token=token,
            default_error="Failed to delete account",
        )

    # ---- options ----
    async def _get_options(self, path: str, label: str) -> List[str]:
        # Menus degrade to empty instead of failing the page
        try:
            resp = await self.client.get(path)
            resp.raise_for_status()
            data = resp.json().get("data")
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"Error fetching {label}: {e!r}")
            return []
        return [str(x) for x in data] if isinstance(data, list) else []

    async def get_cities(self) -> List[str]:
        return await self._get_options("/options/cities", "cities")

    async def get_education_options(self) -> List[str]:
        return await self._get_options("/options/education", "education options")

    # ---- uploads ----
    def image_url(self, image_path: Optional[str]) -> str:
        """Map a stored `/uploads/...` path onto the configured uploads base."""
        if not image_path:
            return ""
        return f"{self.uploads_url}{image_path.replace('/uploads', '', 1)}"
