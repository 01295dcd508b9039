"""Access token verification.

Tokens are verified with the configured shared secret and algorithms.
Issuer and audience are checked only when configured.
"""

from __future__ import annotations

import time
from typing import Any, Dict

import jwt
from jwt import InvalidTokenError

from accountdesk.settings import settings


def encode_access(payload: dict[str, object], *, ttl_seconds: int = 3600) -> str:
    """Encode an access token; used by local tooling and tests."""
    now = int(time.time())
    body: Dict[str, Any] = {"iat": now, "exp": now + ttl_seconds}
    if settings.jwt_issuer:
        body["iss"] = settings.jwt_issuer
    if settings.jwt_audience:
        body["aud"] = settings.jwt_audience
    body.update(payload)
    return jwt.encode(body, settings.jwt_secret, algorithm=settings.jwt_algorithms[0])


def decode_access(token: str) -> dict[str, object]:
    """Decode and validate an access token.

    Raises jwt.InvalidTokenError subclasses on failure.
    """
    required = ["exp", "sub"]
    if settings.jwt_issuer:
        required.append("iss")
    if settings.jwt_audience:
        required.append("aud")
    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=list(settings.jwt_algorithms),
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        leeway=settings.jwt_leeway_seconds,
        options={"require": required, "verify_aud": bool(settings.jwt_audience)},
    )
    if not str(payload.get("sub") or "").strip():
        raise InvalidTokenError("missing_claim:sub")
    return payload  # type: ignore[return-value]
