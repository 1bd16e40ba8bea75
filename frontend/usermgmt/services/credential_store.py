# usermgmt/services/credential_store.py
"""
Durable storage for the bearer credential.

One JSON file (mode 0o600) holds the `token` entry and its expiry. It survives
process restarts; the session controller is the only writer.
"""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional
import json
import logging

from usermgmt.config import settings

logger = logging.getLogger(__name__)

# Keys in the credential file
_KEY_TOKEN = "token"
_KEY_EXPIRES_AT = "expires_at"


def redact_token(token: Optional[str]) -> str:
    """Short fingerprint that is safe to log."""
    if not token:
        return "<none>"
    return f"{token[:4]}…({len(token)})"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialStore:
    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        ttl_days: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.path = Path(path or settings.CREDENTIAL_PATH).expanduser()
        self.ttl = timedelta(days=ttl_days if ttl_days is not None else settings.CREDENTIAL_TTL_DAYS)
        self._clock = clock

    # ---- file helpers ----
    def _read(self) -> Dict[str, Any]:
        """Read the credential file; empty dict if missing or invalid."""
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
        except (ValueError, OSError) as e:  # bad JSON or bad encoding
            logger.warning(f"CredentialStore: could not read {self.path}: {e}")
            return {}

    def _write(self, data: Dict[str, Any]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data), encoding="utf-8")
            self.path.chmod(0o600)
            return True
        except OSError as e:
            logger.error(f"CredentialStore: could not write {self.path}: {e}")
            return False

    # ---- public API ----
    def save(self, token: str, ttl: Optional[timedelta] = None) -> bool:
        """Persist the token with a fixed expiry (default: 30 days from now)."""
        expires_at = self._clock() + (ttl if ttl is not None else self.ttl)
        data = self._read()
        data[_KEY_TOKEN] = token
        data[_KEY_EXPIRES_AT] = expires_at.isoformat()
        if not self._write(data):
            return False
        logger.info({"step": "credential_saved", "token": redact_token(token),
                     "expires_at": data[_KEY_EXPIRES_AT]})
        return True

    def load(self) -> Optional[str]:
        """Return the stored token, or None when absent or expired."""
        data = self._read()
        token = data.get(_KEY_TOKEN)
        if not token:
            return None
        raw_exp = data.get(_KEY_EXPIRES_AT)
        try:
            expires_at = datetime.fromisoformat(raw_exp) if raw_exp else None
        except (TypeError, ValueError):
            expires_at = None
        if expires_at is not None and expires_at.tzinfo is None:
            # Written without an offset: not ours, treat as corrupt
            expires_at = None
        if expires_at is None or self._clock() >= expires_at:
            logger.info({"step": "credential_expired", "token": redact_token(token)})
            self.clear()
            return None
        return str(token)

    def clear(self) -> bool:
        data = self._read()
        if _KEY_TOKEN not in data and _KEY_EXPIRES_AT not in data:
            return True
        data.pop(_KEY_TOKEN, None)
        data.pop(_KEY_EXPIRES_AT, None)
        ok = self._write(data)
        if ok:
            logger.info({"step": "credential_cleared"})
        return ok

    def has_credential(self) -> bool:
        return self.load() is not None
