"""Project, membership and label exceptions."""

from .base import AppPermissionError, ConflictError, NotFoundError


class ProjectNotFoundError(NotFoundError):
    """Raised when a project is missing or deleted."""

    def __init__(self, message: str = "Project not found"):
        super().__init__(message=message, error_code="PROJECT_NOT_FOUND")


class ProjectAccessDeniedError(AppPermissionError):
    """Raised when the user is not a member (or not a manager) of the project."""

    def __init__(self, message: str = "You don't have access to this project"):
        super().__init__(message=message)


class MemberAlreadyExistsError(ConflictError):
    """Raised when adding a user who is already a project member."""

    def __init__(self, message: str = "User is already a member of this project"):
        super().__init__(message=message, error_code="MEMBER_ALREADY_EXISTS")


class LabelNotFoundError(NotFoundError):
    """Raised when a label is not found."""

    def __init__(self, message: str = "Label not found"):
        super().__init__(message=message, error_code="LABEL_NOT_FOUND")


class DuplicateLabelError(ConflictError):
    """Raised when a label name is already used in the project."""

    def __init__(self, message: str = "Label with this name already exists"):
        super().__init__(message=message, error_code="DUPLICATE_LABEL")
