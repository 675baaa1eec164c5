"""Custom exceptions for the task management service"""

from typing import Optional


class TaskboardError(Exception):
    """Base exception for Taskboard.

    Every subclass carries the HTTP status and the client-safe message
    returned by the web layer.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskboardError):
    """Malformed or missing input. Carries the first offending field's message."""

    status_code = 400
    default_message = "Invalid input"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class DuplicateEmailError(TaskboardError):
    """Email already registered"""

    status_code = 400
    default_message = "User already exists"


class InvalidCredentialsError(TaskboardError):
    """Login failed. Deliberately does not say which part was wrong."""

    status_code = 401
    default_message = "Invalid credentials"


class UnauthenticatedError(TaskboardError):
    """Missing, invalid or expired bearer token"""

    status_code = 401
    default_message = "Not authorized, no token"


class NotFoundError(TaskboardError):
    """Referenced entity does not exist"""

    status_code = 404
    default_message = "Not found"


class ForbiddenError(TaskboardError):
    """Caller is authenticated but does not own the resource.

    Reported as 401 to stay compatible with existing clients.
    """

    status_code = 401
    default_message = "User not authorized"


class InvalidTokenError(TaskboardError):
    """Token failed signature, structure or expiry checks"""

    status_code = 401
    default_message = "Invalid token"


class StorageError(TaskboardError):
    """Document store failure"""

    status_code = 500


class DuplicateKeyError(StorageError):
    """Unique constraint violated in a collection"""

    def __init__(self, field: str, value: object = None):
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value for unique field '{field}'")


class ConfigError(TaskboardError):
    """Configuration error"""

    pass
