# usermgmt/main.py
"""
Front-end entry point.
Configures logging and wires the session controller with its collaborators.
"""

from __future__ import annotations

import logging
from typing import Optional

from usermgmt.clients.api_client import UserApiClient
from usermgmt.config import settings
from usermgmt.navigation import Navigator
from usermgmt.services.credential_store import CredentialStore
from usermgmt.services.session_controller import SessionController

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging level from the environment (LOG_LEVEL)."""
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper())


async def create_controller(
    *,
    navigator: Optional[Navigator] = None,
    api: Optional[UserApiClient] = None,
    credentials: Optional[CredentialStore] = None,
) -> SessionController:
    """
    Build a controller and run startup verification before handing it out,
    so no view reads a session that has not checked its credential yet.
    """
    controller = SessionController(
        api=api or UserApiClient(),
        credentials=credentials or CredentialStore(),
        navigator=navigator,
    )
    logger.info({"step": "controller_start", "api_url": controller.api.base_url,
                 "credential_path": str(controller.credentials.path)})
    await controller.initialize()
    return controller
