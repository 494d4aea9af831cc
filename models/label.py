"""
Label model for tagging tasks within a project.
"""

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Label(BaseModel):
    """
    A coloured tag scoped to one project. Names are unique per project,
    compared case-insensitively by the label service.
    """

    __tablename__ = "labels"

    project_id = Column(UUID(), ForeignKey("projects.id"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    color = Column(String(7), nullable=False)  # #RRGGBB

    project = relationship("Project", back_populates="labels")
