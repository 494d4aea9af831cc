"""
Attachment metadata model.

The blob itself lives in external object storage; this row only keeps the
reference and its metadata.
"""

from sqlalchemy import BigInteger, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Attachment(BaseModel):
    __tablename__ = "attachments"

    task_id = Column(UUID(), ForeignKey("tasks.id"), index=True)
    comment_id = Column(UUID(), ForeignKey("comments.id"))
    name = Column(String(255), nullable=False)
    url = Column(String(2048), nullable=False)
    type = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=False, default=0)
    uploaded_by = Column(UUID(), ForeignKey("users.id"))

    task = relationship("Task", back_populates="attachments")
