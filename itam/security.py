"""
Access tokens and request identity.

Tokens are HS256 JWTs carrying sub, username and role. Issuing
them after a password check belongs to the login flow; this
module only signs and verifies.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from itam.config import get_settings
from itam.errors import Unauthenticated
from itam.models.enums import Role


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as read from the access token."""
    user_id: str
    username: str
    role: Role


@dataclass(frozen=True)
class AuditContext:
    """Where a request came from, copied into every audit entry."""
    ip: str = ""
    user_agent: str = ""


def create_access_token(identity: Identity, minutes: int | None = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=minutes or settings.ACCESS_TOKEN_MINUTES)
    payload = {
        "sub": identity.user_id,
        "username": identity.username,
        "role": identity.role.value,
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(
        payload, settings.JWT_ACCESS_SECRET, algorithm=settings.JWT_ALGORITHM
    )


def decode_access_token(token: str) -> Identity:
    """Verify a token and return its identity, or raise Unauthenticated."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_ACCESS_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.PyJWTError:
        raise Unauthenticated("Invalid or expired token")

    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise Unauthenticated("Token carries no valid role")

    return Identity(
        user_id=str(payload.get("sub", "")),
        username=str(payload.get("username", "")),
        role=role,
    )


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthenticated("Unauthorized")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise Unauthenticated("Unauthorized")
    return token


def client_ip(forwarded_for: str | None, peer: str | None) -> str:
    """First hop of X-Forwarded-For, else the socket peer."""
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return peer or ""
