from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from ..core.exceptions import AuthenticationError

ALGORITHM = "HS256"


class TokenIssuer:
    """Issues and verifies the HS256 bearer tokens handed out at login."""

    def __init__(self, secret: str, *, expire_minutes: int):
        self._secret = secret
        self._expire_minutes = int(expire_minutes)

    def issue(self, user_id: int, *, now: datetime | None = None) -> str:
        issued = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": int(issued.timestamp()),
            "exp": int((issued + timedelta(minutes=self._expire_minutes)).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> int:
        """Return the user id carried by ``token``."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token has expired") from exc
        except jwt.PyJWTError as exc:
            raise AuthenticationError("Could not validate credentials") from exc

        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthenticationError("Could not validate credentials") from exc
