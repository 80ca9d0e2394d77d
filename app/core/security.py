from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol

from app.core.errors import AuthError

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized"
DEFAULT_SESSION_TTL_S = 5 * 24 * 3600


@dataclass(frozen=True)
class SessionUser:
    user_id: str
    email: str = ""
    display_name: str = ""
    photo_url: str = ""


class IdentityProvider(Protocol):
    def verify(self, token: str | None) -> SessionUser:
        ...


def b64url_encode(value: bytes) -> str:
    return base64.urlsafe_b64encode(value).decode("utf-8").rstrip("=")


def b64url_decode(value: str) -> bytes:
    padding = "=" * ((4 - (len(value) % 4)) % 4)
    return base64.urlsafe_b64decode(value + padding)


class SignedSessionVerifier:
    """Verifies ``<payload_b64>.<signature_b64>`` session cookies signed with HMAC-SHA256.

    Cookies are issued by the sign-in flow that owns ``SESSION_SECRET``;
    ``issue`` exists for that flow and for tests. Without a secret every
    session is rejected.
    """

    def __init__(self, secret: str | None, *, ttl_s: int = DEFAULT_SESSION_TTL_S):
        self._secret = (secret or "").encode("utf-8")
        self._ttl_s = ttl_s
        if not self._secret:
            logger.warning("session_secret_missing sessions_disabled=true")

    def _sign(self, payload_b64: str) -> bytes:
        return hmac.new(self._secret, payload_b64.encode("utf-8"), hashlib.sha256).digest()

    def issue(self, user: SessionUser, *, now: float | None = None) -> str:
        if not self._secret:
            raise RuntimeError("SESSION_SECRET is not configured.")
        issued_at = int(now if now is not None else time.time())
        payload = {
            "uid": user.user_id,
            "email": user.email,
            "name": user.display_name,
            "picture": user.photo_url,
            "exp": issued_at + max(1, self._ttl_s),
        }
        payload_b64 = b64url_encode(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))
        return f"{payload_b64}.{b64url_encode(self._sign(payload_b64))}"

    def verify(self, token: str | None) -> SessionUser:
        if not token or not self._secret:
            raise AuthError(UNAUTHORIZED_MESSAGE)

        parts = token.split(".")
        if len(parts) != 2:
            raise AuthError(UNAUTHORIZED_MESSAGE)
        payload_b64, signature_b64 = parts

        try:
            provided = b64url_decode(signature_b64)
        except (binascii.Error, ValueError) as exc:
            raise AuthError(UNAUTHORIZED_MESSAGE) from exc
        if not hmac.compare_digest(self._sign(payload_b64), provided):
            logger.info("session_rejected reason=bad_signature")
            raise AuthError(UNAUTHORIZED_MESSAGE)

        try:
            payload: Any = json.loads(b64url_decode(payload_b64).decode("utf-8"))
        except (binascii.Error, ValueError, UnicodeDecodeError) as exc:
            raise AuthError(UNAUTHORIZED_MESSAGE) from exc
        if not isinstance(payload, dict):
            raise AuthError(UNAUTHORIZED_MESSAGE)

        try:
            expires_at = int(payload.get("exp", 0))
        except (TypeError, ValueError) as exc:
            raise AuthError(UNAUTHORIZED_MESSAGE) from exc
        if expires_at < int(time.time()):
            logger.info("session_rejected reason=expired")
            raise AuthError(UNAUTHORIZED_MESSAGE)

        user_id = str(payload.get("uid") or "").strip()
        if not user_id:
            raise AuthError(UNAUTHORIZED_MESSAGE)
        return SessionUser(
            user_id=user_id,
            email=str(payload.get("email") or ""),
            display_name=str(payload.get("name") or ""),
            photo_url=str(payload.get("picture") or ""),
        )
