"""Resolve the caller's identity from the session cookie"""

from typing import Any, Mapping, Optional

from ..models.user import Identity
from .tokens import TokenCodec


SESSION_COOKIE_NAME = "auth-token"


class SessionResolver:
    """Reads the session cookie from a request and verifies it"""

    def __init__(self, codec: TokenCodec, cookie_name: str = SESSION_COOKIE_NAME):
        self.codec = codec
        self.cookie_name = cookie_name

    def token_from_cookies(self, cookies: Mapping[str, str]) -> Optional[str]:
        return cookies.get(self.cookie_name) or None

    def resolve(self, request: Any) -> Optional[Identity]:
        """Return the request's identity, or None. Has no side effects."""
        token = self.token_from_cookies(getattr(request, "cookies", None) or {})
        if token is None:
            return None
        return self.codec.verify(token)
