"""
User storage service (credential store).

Persists user records in the "users" collection. Email is unique and
enforced by the collection at write time, so two concurrent registrations
with the same address cannot both succeed.
"""

from typing import Any, Dict, Optional

from ..models.user import User, utcnow
from ..storage.base import Database, new_object_id
from ..utils.exceptions import DuplicateEmailError, DuplicateKeyError, NotFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)

USERS_COLLECTION = "users"

UPDATABLE_FIELDS = ("name", "email")


class UserStore:
    """CRUD over user records"""

    def __init__(self, database: Database):
        self.users = database.collection(USERS_COLLECTION, unique=("email",))

    @staticmethod
    def _to_user(document: Optional[Dict[str, Any]]) -> Optional[User]:
        if document is None:
            return None
        return User.model_validate(document)

    def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email (case-insensitive; emails are stored lower-cased)"""
        return self._to_user(self.users.find_one({"email": email.strip().lower()}))

    def find_by_id(self, user_id: str) -> Optional[User]:
        """Find user by ID"""
        return self._to_user(self.users.find_one({"_id": user_id}))

    def create(self, name: str, email: str, password_hash: str) -> User:
        """Create a new user.

        Raises:
            DuplicateEmailError: the email is already registered.
        """
        now = utcnow()
        user = User(
            _id=new_object_id(),
            name=name,
            email=email.strip().lower(),
            password=password_hash,
            createdAt=now,
            updatedAt=now,
        )
        try:
            self.users.insert_one(user.to_document())
        except DuplicateKeyError:
            raise DuplicateEmailError()
        logger.info("User created", user_id=user.id)
        return user

    def update(self, user_id: str, **fields: Any) -> User:
        """Update name and/or email.

        Raises:
            NotFoundError: no user with this id.
            DuplicateEmailError: the new email belongs to another user.
        """
        updates = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
        if "email" in updates:
            updates["email"] = updates["email"].strip().lower()
        updates["updatedAt"] = utcnow()
        try:
            document = self.users.update_one(user_id, updates)
        except DuplicateKeyError:
            raise DuplicateEmailError()
        if document is None:
            raise NotFoundError("User not found")
        return User.model_validate(document)
