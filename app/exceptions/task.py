"""Task-related exceptions."""

from .base import NotFoundError


class TaskNotFoundError(NotFoundError):
    """Raised when a task is missing or hidden by a soft delete."""

    def __init__(self, message: str = "Task not found"):
        super().__init__(message=message, error_code="TASK_NOT_FOUND")


class CommentNotFoundError(NotFoundError):
    """Raised when a comment is missing or already deleted."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message=message, error_code="COMMENT_NOT_FOUND")


class AttachmentNotFoundError(NotFoundError):
    """Raised when an attachment record does not exist."""

    def __init__(self, message: str = "Attachment not found"):
        super().__init__(message=message, error_code="ATTACHMENT_NOT_FOUND")
