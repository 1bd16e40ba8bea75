#!/usr/bin/env python3
"""
Smoke test for the session layer:
- Startup without a credential
- Register (4 images), then login
- Profile update + identity refresh
- Logout

Set USE_FAKES=1 (default) to run against the in-process fake API.
With USE_FAKES=0 the configured API_URL is used; the account created is deleted at the end.
"""

import asyncio
import os
import sys
import tempfile
import uuid
from pathlib import Path

# Make "usermgmt" and the test fake importable
frontend_dir = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(frontend_dir))
sys.path.insert(0, str(frontend_dir / "tests"))

import httpx

from usermgmt.clients.api_client import UserApiClient
from usermgmt.main import configure_logging
from usermgmt.navigation import HistoryNavigator
from usermgmt.schemas.user import ImageUpload, UserCreate, UserUpdate
from usermgmt.services.credential_store import CredentialStore
from usermgmt.services.session_controller import SessionController


USE_FAKES = os.getenv("USE_FAKES", "1") == "1"


# ---------- Wiring helpers ----------
def make_api() -> UserApiClient:
    if USE_FAKES:
        from fake_backend import FakeBackend, build_app

        base_url = "http://testserver/api"
        http = httpx.AsyncClient(transport=httpx.ASGITransport(app=build_app(FakeBackend())), base_url=base_url)
        return UserApiClient(base_url, uploads_url="http://testserver/uploads", http_client=http)
    return UserApiClient()


def make_images():
    return [ImageUpload(filename=f"smoke_{i}.jpg", content=b"\xff\xd8\xff\xe0smoke") for i in range(4)]


# ---------- Steps ----------
async def run(api: UserApiClient, workdir: Path):
    nav = HistoryNavigator()
    creds = CredentialStore(workdir / "auth_data.json")
    controller = SessionController(api=api, credentials=creds, navigator=nav, settle_delay=0)

    print("🔑 Startup")
    await controller.initialize()
    snap = controller.snapshot()
    print(f"  status={snap.status.value} loading={snap.loading}")
    assert not snap.is_authenticated and not snap.loading
    print("✅ Startup OK\n")

    print("📝 Register")
    email = f"smoke_{uuid.uuid4().hex[:8]}@example.com"
    form = UserCreate(
        username="smoke",
        email=email,
        password="smoke-pass-1",
        phoneNumber="5550100",
        gender="other",
        city="Pune",
        education="Bachelor's Degree",
    )
    ok = await controller.register(form, make_images())
    print(f"  email={email} ok={ok} nav={nav.current}")
    assert ok, controller.snapshot().error
    assert controller.session.consume_register_success()
    print("✅ Register OK\n")

    print("🔓 Login")
    await controller.login(email, "smoke-pass-1")
    snap = controller.snapshot()
    print(f"  status={snap.status.value} user={snap.user.username if snap.user else None} nav={nav.current}")
    assert snap.is_authenticated, snap.error
    print("✅ Login OK\n")

    print("👤 Profile update")
    cities, education = await controller.load_profile_options()
    target = next((c for c in cities if c != controller.user.city), controller.user.city)
    ok = await controller.update_profile(UserUpdate(city=target))
    print(f"  city -> {controller.user.city} (menu: {len(cities)} cities, {len(education)} education)")
    assert ok and controller.user.city == target, controller.snapshot().error
    print(f"  editor education: {controller.education_for_editor(education)!r}")
    print("✅ Update OK\n")

    if USE_FAKES:
        print("🚪 Logout")
        controller.logout()
    else:
        print("🗑️  Delete account")
        assert await controller.delete_account(), controller.snapshot().error
    snap = controller.snapshot()
    print(f"  status={snap.status.value} nav={nav.current} credential={creds.has_credential()}")
    assert not snap.is_authenticated and not creds.has_credential()
    print("✅ Teardown OK\n")


async def main():
    configure_logging()
    print("🚀 Smoke testing session layer (USE_FAKES=%s)" % ("1" if USE_FAKES else "0"))
    print("=" * 52)
    with tempfile.TemporaryDirectory() as tmp:
        async with make_api() as api:
            await run(api, Path(tmp))
    print("🎉 All session-layer smoke tests passed!")

if __name__ == "__main__":
    asyncio.run(main())
