"""
Signed identity tokens.

Tokens are itsdangerous URL-safe timed signatures over {"id": <user id>}.
They carry their own issue timestamp and are rejected once older than the
configured TTL. Verification is stateless; there is no revocation list.
"""

from typing import Any, Optional

from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

from ..utils.exceptions import ConfigError, InvalidTokenError

TOKEN_SALT = "taskboard-auth-token"
DEFAULT_TTL_SECONDS = 30 * 24 * 60 * 60


class TokenService:
    """Issue and verify bearer tokens with a process-wide secret"""

    def __init__(self, secret_key: str, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        if not secret_key:
            raise ConfigError("Token secret key must not be empty")
        self.ttl_seconds = ttl_seconds
        self._serializer = URLSafeTimedSerializer(secret_key=secret_key, salt=TOKEN_SALT)

    def issue(self, user_id: str) -> str:
        return self._serializer.dumps({"id": user_id})

    def verify(self, token: Optional[str]) -> str:
        """Return the user id bound to the token.

        Raises:
            InvalidTokenError: expired, tampered or malformed token.
        """
        if not token:
            raise InvalidTokenError("Missing token")
        try:
            data: Any = self._serializer.loads(token, max_age=self.ttl_seconds)
        except SignatureExpired:
            raise InvalidTokenError("Token expired")
        except BadData:
            raise InvalidTokenError("Invalid token signature")
        if not isinstance(data, dict) or not isinstance(data.get("id"), str) or not data["id"]:
            raise InvalidTokenError("Invalid token payload")
        return data["id"]
