from __future__ import annotations

import httpx
import pytest

from usermgmt.clients.api_client import UserApiClient
from usermgmt.errors import AuthFailure, NetworkFailure, ServerFailure, ValidationFailure
from usermgmt.schemas.user import UserUpdate

BASE = "http://api.local/api"


def _client(handler) -> UserApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE)
    return UserApiClient(BASE, uploads_url="http://api.local/uploads", http_client=http)


@pytest.mark.asyncio
async def test_login_posts_json_and_returns_token() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.content
        return httpx.Response(200, json={"success": True, "token": "T"})

    async with _client(handler) as api:
        assert await api.login("a@b.com", "secret") == "T"
    assert seen["url"] == "http://api.local/api/auth/login"
    assert b'"email":"a@b.com"' in seen["body"].replace(b" ", b"")


@pytest.mark.asyncio
async def test_me_sends_bearer_header() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer T"
        return httpx.Response(200, json={"success": True, "data": {"_id": "1", "username": "a"}})

    async with _client(handler) as api:
        user = await api.me("T")
    assert user.id == "1"


@pytest.mark.asyncio
async def test_transport_error_is_network_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as api:
        with pytest.raises(NetworkFailure) as exc:
            await api.login("a@b.com", "secret")
    assert exc.value.code == "NETWORK"


@pytest.mark.asyncio
async def test_timeout_is_network_failure_with_its_own_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    async with _client(handler) as api:
        with pytest.raises(NetworkFailure) as exc:
            await api.me("T")
    assert "too long" in exc.value.public_detail


@pytest.mark.asyncio
async def test_rejected_login_is_auth_failure_with_backend_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"success": False, "error": "Invalid credentials"})

    async with _client(handler) as api:
        with pytest.raises(AuthFailure) as exc:
            await api.login("a@b.com", "nope")
    assert str(exc.value) == "Invalid credentials"


@pytest.mark.asyncio
async def test_server_error_is_server_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    async with _client(handler) as api:
        with pytest.raises(ServerFailure) as exc:
            await api.delete_user("T", "1")
    assert exc.value.public_detail == "Failed to delete account"


@pytest.mark.asyncio
async def test_non_json_success_is_server_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="ok")

    async with _client(handler) as api:
        with pytest.raises(ServerFailure):
            await api.me("T")


@pytest.mark.asyncio
async def test_login_without_token_is_server_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True})

    async with _client(handler) as api:
        with pytest.raises(ServerFailure):
            await api.login("a@b.com", "secret")


@pytest.mark.asyncio
async def test_update_rejection_is_validation_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PUT"
        assert request.url.path == "/api/users/42"
        return httpx.Response(400, json={"success": False, "error": "Email already in use"})

    async with _client(handler) as api:
        with pytest.raises(ValidationFailure) as exc:
            await api.update_user("T", "42", UserUpdate(email="x@b.com"))
    assert str(exc.value) == "Email already in use"


@pytest.mark.asyncio
async def test_options_degrade_to_empty_list() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/cities"):
            return httpx.Response(500)
        return httpx.Response(200, json={"data": ["PhD"]})

    async with _client(handler) as api:
        assert await api.get_cities() == []
        assert await api.get_education_options() == ["PhD"]


def test_image_url_maps_upload_paths() -> None:
    api = UserApiClient(BASE, uploads_url="http://api.local/uploads/")
    assert api.image_url("/uploads/u1_0.jpg") == "http://api.local/uploads/u1_0.jpg"
    assert api.image_url("") == ""
    assert api.image_url(None) == ""


@pytest.mark.asyncio
async def test_update_without_images_is_still_multipart() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["content_type"] = request.headers["Content-Type"]
        seen["body"] = request.content
        return httpx.Response(200, json={"success": True, "data": {"_id": "1"}})

    async with _client(handler) as api:
        await api.update_user("T", "1", UserUpdate(city="Mumbai"))
    assert seen["content_type"].startswith("multipart/form-data")
    assert b'name="city"' in seen["body"]
    assert b"Mumbai" in seen["body"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"success": True, "token": {"nested": 1}},
        {"success": "perhaps"},
    ],
)
async def test_malformed_envelope_is_server_failure(payload) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    async with _client(handler) as api:
        with pytest.raises(ServerFailure):
            await api.login("a@b.com", "secret")
        with pytest.raises(ServerFailure):
            await api.me("T")
