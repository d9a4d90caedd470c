"""User domain service."""

from typing import Optional
from cardrecon.database.base import Database
from cardrecon.domain.entities import User as UserEntity
from cardrecon.domain.errors import ConflictError, ValidationError, duplicate_user_name


class UserService:
    """Service for managing transaction owners."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_user(self, name: str) -> int:
        """Create a new user.

        Args:
            name: Unique user name

        Returns:
            User ID

        Raises:
            ValidationError: If name is empty
            ConflictError: If user name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("User name must not be empty")

        for user in self.db.list_users():
            if user.name == name:
                raise ConflictError(duplicate_user_name(name))

        return self.db.create_user(name=name)

    def get_user(self, user_id: int) -> Optional[UserEntity]:
        """Get user by ID."""
        return self.db.get_user(user_id)

    def list_users(self) -> list[UserEntity]:
        """List all users."""
        return self.db.list_users()

