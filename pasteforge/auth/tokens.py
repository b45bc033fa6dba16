"""
Signed, time-limited session tokens.

Tokens are HS256 JWTs whose payload is exactly ``{userId, username}`` plus
the ``exp`` claim. Nothing is stored server-side, so a token stays valid
until it expires.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..models.user import Identity
from ..utils.config import AuthSettings
from ..utils.exceptions import ConfigError


class TokenCodec:
    """Issues and verifies session tokens with a process-wide secret"""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(days=7)):
        if not secret:
            raise ConfigError("A JWT signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> "TokenCodec":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(days=settings.session_days),
        )

    def issue(self, user_id: str, username: str) -> str:
        expire = datetime.now(timezone.utc) + self.ttl
        payload = {"userId": user_id, "username": username, "exp": expire}
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Optional[Identity]:
        """
        Return the identity carried by ``token``, or None.

        Expired, tampered, malformed and absent tokens all come back as None;
        no exception crosses this boundary.
        """
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.PyJWTError:
            return None

        user_id = payload.get("userId")
        username = payload.get("username")
        if not isinstance(user_id, str) or not isinstance(username, str):
            return None
        return Identity(user_id=user_id, username=username)
