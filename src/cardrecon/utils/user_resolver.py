"""Utility for resolving user names to IDs."""

from cardrecon.domain.errors import NotFoundError, user_not_found
from cardrecon.domain.user import UserService


def resolve_user(user_service: UserService, user: str | int) -> int:
    """Resolve user name or ID to user ID.

    Args:
        user_service: UserService instance
        user: User name (str) or ID (int or string representation of int)

    Returns:
        User ID

    Raises:
        NotFoundError: If user is not found
    """
    # If it's already an integer, use it as ID
    if isinstance(user, int):
        if user_service.get_user(user) is None:
            raise NotFoundError(user_not_found(user))
        return user

    # Try to parse as integer (handles string IDs like "1")
    try:
        user_id = int(user)
    except (ValueError, TypeError):
        user_id = None

    if user_id is not None:
        if user_service.get_user(user_id) is None:
            raise NotFoundError(user_not_found(user_id))
        return user_id

    # Try to find by name
    for candidate in user_service.list_users():
        if candidate.name == user:
            return candidate.id

    raise NotFoundError(f"User '{user}' not found")
