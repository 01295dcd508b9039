"""Authentication helpers for FastAPI endpoints.

- Bearer JWTs are verified against the configured secret.
- The X-User-Id header fallback is only honoured in development.
- Operator endpoints use a static admin token, not per-user roles.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from accountdesk.infra import jwt as jwt_helper
from accountdesk.obs import logging as obs_logging
from accountdesk.settings import settings

MISSING_HEADER_MESSAGE = "Missing or invalid authorization header"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"

logger = obs_logging.get_logger(__name__)


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	email: Optional[str] = None
	nickname: Optional[str] = None

	def to_payload(self) -> dict[str, Optional[str]]:
		return {"userId": self.id, "email": self.email, "nickname": self.nickname}


_bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(message: str) -> HTTPException:
	return HTTPException(
		status_code=status.HTTP_401_UNAUTHORIZED,
		detail=message,
		headers={"WWW-Authenticate": "Bearer"},
	)


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode an access JWT and map its claims onto an AuthenticatedUser."""
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		# Normalise all decode failures for the API surface
		logger.warning("token_rejected", exc_info=True)
		raise _unauthorized(INVALID_TOKEN_MESSAGE)

	email = payload.get("email")
	nickname = payload.get("preferred_username") or payload.get("nickname")
	return AuthenticatedUser(
		id=str(payload["sub"]).strip(),
		email=str(email) if email is not None else None,
		nickname=str(nickname) if nickname is not None else None,
	)


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the authenticated caller or fail with 401."""
	if credentials and credentials.scheme.lower() == "bearer":
		user = verify_access_jwt(credentials.credentials)
		obs_logging.bind_context(user_id=user.id)
		return user

	# In dev only, allow the X-User-Id fallback for local tools
	if settings.is_dev() and x_user_id:
		obs_logging.bind_context(user_id=x_user_id)
		return AuthenticatedUser(id=x_user_id)

	raise _unauthorized(MISSING_HEADER_MESSAGE)


async def require_admin(
	x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
) -> None:
	token = settings.obs_admin_token
	if not token:
		# Fail closed: if no token is configured, no admin access is allowed.
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="admin_token_not_configured")
	if not x_admin_token or not secrets.compare_digest(x_admin_token, token):
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="forbidden")
