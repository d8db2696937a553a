import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Header, Request

from eventbook.config import Settings
from eventbook.errors import AdminRequired

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def check_credentials(settings: Settings, username: str, password: str) -> bool:
    if not settings.login_enabled:
        return False
    return _same(username, settings.admin_username) and _same(password, settings.admin_password)


def issue_token(settings: Settings, username: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "username": username,
        "role": ADMIN_ROLE,
        "iat": now,
        "exp": now + timedelta(hours=settings.jwt_ttl_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(settings: Settings, token: str) -> Optional[dict]:
    """Claims of a valid token, or None when the token is bad, expired, or JWT is not configured."""
    if not settings.jwt_secret or not token:
        return None
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        logger.debug("rejected token: %s", exc)
        return None


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_admin(request: Request, authorization: Optional[str] = Header(None),
                  x_admin_key: Optional[str] = Header(None)) -> dict:
    """
    Admin gate: a Bearer JWT with role=admin, or X-Admin-Key matching ADMIN_KEY.
    Nothing configured means nobody gets in.
    """
    settings: Settings = request.app.state.settings

    claims = decode_token(settings, bearer_token(authorization))
    if claims and claims.get("role") == ADMIN_ROLE:
        return claims

    if settings.admin_key and x_admin_key and _same(x_admin_key, settings.admin_key):
        return {"username": "admin-key", "role": ADMIN_ROLE}

    raise AdminRequired("Authentication required")
