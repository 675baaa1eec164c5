"""Authentication: password hashing, tokens and the auth service"""

from .passwords import hash_password, verify_password
from .service import AuthService, extract_bearer_token
from .tokens import TokenService

__all__ = [
    "AuthService",
    "TokenService",
    "extract_bearer_token",
    "hash_password",
    "verify_password",
]
