"""
Pytest config.

Pins the `frontend/` directory on sys.path so `import usermgmt` works without an
editable install, and provides the fake API plus a wired session controller.
"""

from __future__ import annotations

import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio


def _ensure_frontend_on_syspath() -> None:
    frontend_root = Path(__file__).resolve().parents[1]
    for p in (frontend_root, frontend_root / "tests"):
        if str(p) not in sys.path:
            sys.path.insert(0, str(p))


_ensure_frontend_on_syspath()

from fake_backend import FakeBackend, build_app  # noqa: E402
from usermgmt.clients.api_client import UserApiClient  # noqa: E402
from usermgmt.navigation import HistoryNavigator  # noqa: E402
from usermgmt.services.credential_store import CredentialStore  # noqa: E402
from usermgmt.services.session_controller import SessionController  # noqa: E402

BASE_URL = "http://testserver/api"


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def api(backend: FakeBackend):
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=build_app(backend)), base_url=BASE_URL)
    client = UserApiClient(BASE_URL, uploads_url="http://testserver/uploads", http_client=http)
    yield client
    await client.aclose()


@pytest.fixture
def credentials(tmp_path: Path) -> CredentialStore:
    return CredentialStore(tmp_path / "auth_data.json")


@pytest.fixture
def navigator() -> HistoryNavigator:
    return HistoryNavigator()


@pytest.fixture
def controller(api: UserApiClient, credentials: CredentialStore, navigator: HistoryNavigator) -> SessionController:
    return SessionController(api=api, credentials=credentials, navigator=navigator, settle_delay=0)
