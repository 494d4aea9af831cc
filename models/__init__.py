"""
Models package initialization.
"""

from .attachment import Attachment
from .base import Base, BaseModel
from .comment import Comment
from .label import Label
from .notification import Notification
from .project import Project, ProjectMember
from .sprint import Sprint
from .task import Task, TaskAssignee, TaskLabel
from .user import User

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Project",
    "ProjectMember",
    "Sprint",
    "Task",
    "TaskAssignee",
    "TaskLabel",
    "Label",
    "Comment",
    "Attachment",
    "Notification",
]
