from __future__ import annotations

import logging

import pytest

from usermgmt.main import configure_logging, create_controller
from usermgmt.schemas.session import SessionStatus


@pytest.mark.asyncio
async def test_create_controller_runs_startup_check(api, credentials, navigator, backend) -> None:
    controller = await create_controller(navigator=navigator, api=api, credentials=credentials)

    snap = controller.snapshot()
    assert snap.status == SessionStatus.UNAUTHENTICATED
    assert snap.loading is False
    assert controller.navigator is navigator
    assert backend.count("me") == 0


def test_configure_logging_accepts_lowercase_level(monkeypatch) -> None:
    seen = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: seen.update(kw))
    configure_logging("debug")
    assert seen["level"] == "DEBUG"
