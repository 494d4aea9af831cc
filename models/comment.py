"""
Comment model for task discussions.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Comment(BaseModel):
    """
    A comment on a task. Replies point at their parent comment; deletion is a
    soft delete through ``deleted_at``.
    """

    __tablename__ = "comments"

    task_id = Column(UUID(), ForeignKey("tasks.id"), nullable=False, index=True)
    author_id = Column(UUID(), ForeignKey("users.id"))
    parent_id = Column(UUID(), ForeignKey("comments.id"))
    content = Column(Text, nullable=False)
    is_edited = Column(Boolean, default=False)
    deleted_at = Column(DateTime(timezone=True))

    author = relationship("User")
