"""
Input validation for the auth and task operations.

Each operation has a pydantic model. `parse_input` turns a raw mapping into
the model or raises ValidationError carrying the message of the first
offending field, in field declaration order.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

import email_validator
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from ..utils.exceptions import ValidationError
from .task import TaskStatus

NAME_MIN_LENGTH = 2
PASSWORD_MIN_LENGTH = 6

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

# emails are checked for syntax only, so reserved names such as .local and
# .test are accepted; a dotted domain is still required
email_validator.SPECIAL_USE_DOMAIN_NAMES[:] = []

FIELD_LABELS = {
    "name": "Name",
    "email": "Email",
    "password": "Password",
    "title": "Title",
    "description": "Description",
    "status": "Status",
    "body": "Request body",
}

ModelT = TypeVar("ModelT", bound=BaseModel)


def _label(field: Optional[str]) -> str:
    if not field:
        return "Input"
    return FIELD_LABELS.get(field, field.capitalize())


def _require_text(value: Any, field: str, min_length: int, message: str) -> str:
    if not isinstance(value, str):
        raise PydanticCustomError("string_type", "{label} must be a string", {"label": _label(field)})
    value = value.strip()
    if len(value) < min_length:
        raise PydanticCustomError("string_too_short", message)
    return value


def _check_name(value: Any) -> str:
    return _require_text(
        value, "name", NAME_MIN_LENGTH, f"Name must be at least {NAME_MIN_LENGTH} characters"
    )


def _check_email(value: Any) -> str:
    if not isinstance(value, str):
        raise PydanticCustomError("string_type", "Email must be a string")
    try:
        result = validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("email", "Invalid email")
    return result.normalized.lower()


def _check_status(value: Any) -> str:
    if value not in TaskStatus.values():
        raise PydanticCustomError(
            "enum",
            "Status must be one of: {expected}",
            {"expected": ", ".join(TaskStatus.values())},
        )
    return value


class _Input(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RegisterInput(_Input):
    name: str
    email: str
    password: str

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return _check_name(v)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v):
        return _check_email(v)

    @field_validator("password", mode="before")
    @classmethod
    def _password(cls, v):
        if not isinstance(v, str):
            raise PydanticCustomError("string_type", "Password must be a string")
        if len(v) < PASSWORD_MIN_LENGTH:
            raise PydanticCustomError(
                "string_too_short", f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
            )
        return v


class LoginInput(_Input):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v):
        return _check_email(v)

    @field_validator("password", mode="before")
    @classmethod
    def _password(cls, v):
        if not isinstance(v, str):
            raise PydanticCustomError("string_type", "Password must be a string")
        if not v:
            raise PydanticCustomError("string_too_short", "Password is required")
        return v


class ProfileUpdateInput(_Input):
    name: Optional[str] = None
    email: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return None if v is None else _check_name(v)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v):
        return None if v is None else _check_email(v)


class TaskCreateInput(_Input):
    title: str
    description: str
    status: TaskStatus = TaskStatus.PENDING

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v):
        return _require_text(v, "title", 1, "Title is required")

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        return _require_text(v, "description", 1, "Description is required")

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return TaskStatus.PENDING.value if v is None else _check_status(v)


class TaskUpdateInput(_Input):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v):
        return None if v is None else _require_text(v, "title", 1, "Title is required")

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        return None if v is None else _require_text(v, "description", 1, "Description is required")

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return None if v is None else _check_status(v)


def first_error(errors: List[Dict[str, Any]]) -> ValidationError:
    """Build a ValidationError from the first entry of a pydantic error list."""
    if not errors:
        return ValidationError()
    error = errors[0]
    names = [p for p in error.get("loc", ()) if isinstance(p, str) and p != "body"]
    field = names[-1] if names else None
    error_type = error.get("type")
    if error_type == "missing":
        message = f"{_label(field or 'body')} is required"
    elif error_type == "json_invalid":
        message = "Malformed JSON in request body"
    elif error_type in ("model_attributes_type", "dict_type", "model_type"):
        message = "Request body must be a JSON object"
    elif field and error.get("type") not in (
        "string_type",
        "string_too_short",
        "email",
        "enum",
    ):
        message = f"{_label(field)}: {error.get('msg')}"
    else:
        message = str(error.get("msg"))
    return ValidationError(message, field=field)


def parse_input(model_cls: Type[ModelT], data: Any) -> ModelT:
    """Validate a raw mapping against model_cls.

    Raises:
        ValidationError: with the first violated field's message.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    # null is treated as an absent field
    data = {k: v for k, v in data.items() if v is not None}
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        raise first_error(e.errors())


def parse_positive_int(value: Any, default: int) -> int:
    """Lenient query-string integer: anything non-numeric or below 1 becomes default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        return default
    return number if number > 0 else default
