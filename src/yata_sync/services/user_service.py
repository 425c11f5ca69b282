"""User service - registers the users that own synchronised data."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from yata_sync.adapters.sqlite.utils import generate_uuid
from yata_sync.errors import NotFoundError, ValidationError
from yata_sync.models import User, UserCreate
from yata_sync.repositories import EntityStore
from yata_sync.utils.logger import get_logger

logger = get_logger("users")


class UserService:
    """Service for user registration and lookup."""

    def __init__(self, store: EntityStore):
        self.store = store

    def create_user(self, email: str, user_id: str | None = None) -> User:
        """Register a user.

        Args:
            email: Unique email address
            user_id: ID issued by the authentication layer; generated if None

        Returns:
            Created User object

        Raises:
            ValidationError: If the email is malformed
            ConflictError: If the ID or email is already registered
        """
        try:
            data = UserCreate(id=user_id or generate_uuid(), email=email)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid user: {email}") from e

        with self.store.transaction() as session:
            row = session.create_user(data.id, str(data.email))
        logger.info("registered user %s", data.id)
        return User.model_validate(row)

    def get_user(self, user_id: str) -> User:
        """Get a user by ID.

        Raises:
            NotFoundError: If no such user exists
        """
        with self.store.transaction() as session:
            row = session.get_user(user_id)
        if row is None:
            raise NotFoundError("User", user_id)
        return User.model_validate(row)


def get_user_service() -> UserService:
    """Factory function to get a UserService instance."""
    from yata_sync.services.config_service import get_entity_store

    return UserService(get_entity_store())
