# usermgmt/services/identity_verifier.py
from __future__ import annotations
from typing import Optional
import logging

from usermgmt.clients.api_client import UserApiClient
from usermgmt.errors import AuthFailure, NetworkFailure, ServerFailure
from usermgmt.schemas.user import UserRecord
from usermgmt.services.credential_store import redact_token

logger = logging.getLogger(__name__)


class IdentityVerifier:
    """
    Exchanges a bearer token for the canonical user record (GET /auth/me).

    Every non-success outcome raises AuthFailure, except transport problems
    which raise NetworkFailure so the UI can say "you are offline" instead of
    "your session expired". Callers de-authenticate on either.
    """

    def __init__(self, api: Optional[UserApiClient] = None):
        self.api = api or UserApiClient()

    async def verify(self, token: str) -> UserRecord:
        if not token:
            raise AuthFailure("Authentication failed", log_detail="empty token")
        try:
            user = await self.api.me(token)
        except NetworkFailure as e:
            logger.warning({"step": "verify_network_failure", "token": redact_token(token),
                            "detail": e.log_detail})
            raise
        except ServerFailure as e:
            logger.warning({"step": "verify_failed", "reason": "server", "token": redact_token(token),
                            "detail": e.log_detail})
            raise AuthFailure("We couldn't verify your session. Please log in again.", log_detail=e.log_detail)
        except AuthFailure as e:
            logger.warning({"step": "verify_failed", "reason": "rejected", "token": redact_token(token),
                            "detail": e.log_detail})
            raise AuthFailure("Your session has expired. Please log in again.", log_detail=e.log_detail)

        logger.info({"step": "verify_success", "user_id": user.id})
        return user
