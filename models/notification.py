"""
Notification model for in-app user notifications.
"""

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Notification(BaseModel):
    """
    A message addressed to one user, e.g. a task assignment.

    :ivar type: Notification type (``task_assigned``, ``task_completed``, ...).
    :ivar data: Free-form JSON payload with the ids the client needs to link
        the notification to its entity.
    """

    __tablename__ = "notifications"
    __table_args__ = (Index("idx_notifications_user_unread", "user_id", "is_read"),)

    user_id = Column(UUID(), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text)
    data = Column(JSON)
    is_read = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="notifications")
