"""Utility for resolving user aliases to IDs."""

from foragetrack.domain.users import UserService


def resolve_user(user_service: UserService, user: str | int) -> int:
    """Resolve user alias or ID to user ID.

    Args:
        user_service: UserService instance
        user: User alias (str) or ID (int or string representation of int)

    Returns:
        User ID

    Raises:
        ValueError: If user is not found
    """
    # If it's already an integer, use it as ID
    if isinstance(user, int):
        if user_service.get_user(user) is None:
            raise ValueError(f"User ID {user} not found")
        return user

    # Try to parse as integer (handles string IDs like "1")
    try:
        user_id = int(user)
    except (ValueError, TypeError):
        user_id = None

    if user_id is not None:
        if user_service.get_user(user_id) is None:
            raise ValueError(f"User ID {user_id} not found")
        return user_id

    # Try to find by alias
    found = user_service.find_by_alias(user)
    if found is None:
        raise ValueError(f"User '{user}' not found")
    return found.id
