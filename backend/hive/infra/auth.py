"""Authentication helpers shared by FastAPI endpoints and the socket relay.

Bearer JWTs are the only accepted credential outside development; in dev the
X-User-Id / X-Username headers are honoured for local tools and tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hive.domain.exceptions import AuthenticationError
from hive.infra import jwt as jwt_helper
from hive.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	username: str


_bearer_scheme = HTTPBearer(auto_error=False)


def verify_access_jwt(token: str | None) -> AuthenticatedUser:
	"""Decode an access JWT into an AuthenticatedUser.

	Every failure is normalised to AuthenticationError("invalid_token").
	"""
	token = (token or "").strip()
	if not token:
		raise AuthenticationError("authentication_required")
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		raise AuthenticationError("invalid_token") from None
	sub = str(payload.get("sub") or "").strip()
	username = str(payload.get("username") or "").strip()
	if not sub or not username:
		raise AuthenticationError("invalid_token")
	return AuthenticatedUser(id=sub, username=username)


def bearer_from_header(value: Optional[str]) -> Optional[str]:
	if value and value.lower().startswith("bearer "):
		return value.split(" ", 1)[1].strip()
	return None


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	x_username: Optional[str] = Header(default=None, alias="X-Username"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the authenticated user for a REST request."""
	if credentials and credentials.scheme.lower() == "bearer":
		try:
			return verify_access_jwt(credentials.credentials)
		except AuthenticationError as exc:
			raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.reason) from None

	if settings.is_dev() and x_user_id:
		return AuthenticatedUser(id=x_user_id, username=x_username or x_user_id)

	raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_not_provided")
