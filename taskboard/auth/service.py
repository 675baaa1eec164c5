"""
Authentication service layer.

- Email/password users with bcrypt hashes, stored by UserStore
- Stateless signed bearer tokens from TokenService
- Registration, login, token authentication and profile updates
"""

from typing import Any, Dict, Optional

from ..models.requests import LoginInput, ProfileUpdateInput, RegisterInput, parse_input
from ..models.user import AuthResult, User
from ..services.user_store import UserStore
from ..utils.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    UnauthenticatedError,
)
from ..utils.logger import get_logger
from .passwords import hash_password, verify_password
from .tokens import TokenService

logger = get_logger(__name__)

BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an `Authorization: Bearer <token>` header value."""
    if not authorization:
        return None
    if not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class AuthService:
    """Registration, login and identity resolution"""

    def __init__(self, user_store: UserStore, tokens: TokenService, bcrypt_rounds: int = 12):
        self.user_store = user_store
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds

    def _result(self, user: User) -> AuthResult:
        return AuthResult(_id=user.id, name=user.name, email=user.email, token=self.tokens.issue(user.id))

    def register(self, name: Any, email: Any, password: Any) -> AuthResult:
        """
        Register a new user and issue a token.

        Raises:
            ValidationError: name shorter than 2, bad email syntax or password
                shorter than 6 (first violation reported).
            DuplicateEmailError: email already registered.
        """
        data = parse_input(RegisterInput, {"name": name, "email": email, "password": password})

        # the unique index still guards against a concurrent registration
        if self.user_store.find_by_email(data.email) is not None:
            logger.info("Registration rejected, email taken")
            raise DuplicateEmailError()

        user = self.user_store.create(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password, rounds=self.bcrypt_rounds),
        )
        logger.info("User registered", user_id=user.id)
        return self._result(user)

    def login(self, email: Any, password: Any) -> AuthResult:
        """
        Authenticate with email and password.

        Raises:
            ValidationError: bad email syntax or empty password.
            InvalidCredentialsError: unknown email or wrong password; the two
                cases are indistinguishable to the caller.
        """
        data = parse_input(LoginInput, {"email": email, "password": password})
        user = self.user_store.find_by_email(data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Login failed")
            raise InvalidCredentialsError()
        logger.info("User logged in", user_id=user.id)
        return self._result(user)

    def authenticate(self, token: Optional[str]) -> User:
        """
        Resolve a bearer token to the current user record.

        Raises:
            UnauthenticatedError: no token, a token that fails verification, or
                a token for a user that no longer exists.
        """
        if not token:
            raise UnauthenticatedError("Not authorized, no token")
        try:
            user_id = self.tokens.verify(token)
        except InvalidTokenError as e:
            logger.debug("Token rejected", reason=e.message)
            raise UnauthenticatedError("Not authorized, token failed")
        user = self.user_store.find_by_id(user_id)
        if user is None:
            raise UnauthenticatedError("Not authorized, user not found")
        return user

    def authenticate_header(self, authorization: Optional[str]) -> User:
        return self.authenticate(extract_bearer_token(authorization))

    def update_profile(self, user_id: str, fields: Dict[str, Any]) -> AuthResult:
        """
        Change name and/or email, then reissue a token.

        Raises:
            ValidationError: a provided field fails its check.
            NotFoundError: the user no longer exists.
            DuplicateEmailError: the new email belongs to someone else.
        """
        data = parse_input(ProfileUpdateInput, fields)
        if self.user_store.find_by_id(user_id) is None:
            raise NotFoundError("User not found")
        user = self.user_store.update(user_id, name=data.name, email=data.email)
        logger.info("Profile updated", user_id=user.id)
        return self._result(user)
