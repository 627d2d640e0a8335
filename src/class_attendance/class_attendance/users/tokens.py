from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import Actor

ALGORITHM = "HS256"


class JwtCodec:
    """Signs and verifies HS256 access tokens."""

    def __init__(self, secret: str, expires_minutes: int = 60):
        self._secret = secret
        self._expires = timedelta(minutes=int(expires_minutes))

    def encode(self, actor: Actor, *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(actor.user_id),
            "role": actor.role.value,
            "email": actor.email,
            "name": actor.name,
            "is_admin": actor.is_admin,
            "iat": now,
            "exp": now + self._expires,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> Actor:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token")

        try:
            role = Role(payload.get("role"))
        except ValueError:
            raise AuthenticationError("Invalid token")

        return Actor(
            user_id=str(payload["sub"]),
            role=role,
            email=payload.get("email"),
            name=payload.get("name"),
        )
