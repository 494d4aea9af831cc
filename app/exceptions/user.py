"""User-related exceptions."""

from .base import NotFoundError


class UserNotFoundError(NotFoundError):
    """Raised when a user is not found."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message=message, error_code="USER_NOT_FOUND")
