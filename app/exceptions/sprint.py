"""Sprint-related exceptions."""

from .base import ConflictError, NotFoundError


class SprintNotFoundError(NotFoundError):
    """Raised when a sprint is not found."""

    def __init__(self, message: str = "Sprint not found"):
        super().__init__(message=message, error_code="SPRINT_NOT_FOUND")


class SprintAlreadyActiveError(ConflictError):
    """Raised when a project already has an active sprint."""

    def __init__(
        self,
        message: str = "There is already an active sprint. End it before creating a new one.",
    ):
        super().__init__(message=message, error_code="SPRINT_ALREADY_ACTIVE")


class SprintAlreadyCompletedError(ConflictError):
    """Raised when ending or scheduling into a sprint that has already been completed."""

    def __init__(self, message: str = "Sprint is already completed"):
        super().__init__(message=message, error_code="SPRINT_ALREADY_COMPLETED")
