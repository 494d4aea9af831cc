"""
Provides the User model for the application's database schema.

Users are provisioned from the identity provider: the primary key equals the
``sub`` claim of the access token, so no separate external-id column exists.

Attributes
----------
email : sqlalchemy.Column
    The email address of the user, which must be unique.
name : sqlalchemy.Column
    Display name shown on boards and comments.
avatar_url : sqlalchemy.Column
    Optional avatar image URL.
role : sqlalchemy.Column
    Global role, ``user`` or ``admin``. Admins bypass project membership checks.
is_active : sqlalchemy.Column
    A boolean indicating if the user is active. Defaults to `True`.
"""

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class User(BaseModel):
    """
    Represents a user entity in the application.

    :ivar email: Email address of the user. It must be unique.
    :type email: str
    :ivar name: Display name of the user.
    :type name: str
    :ivar role: Global role (``user`` or ``admin``).
    :type role: str
    :ivar is_active: Indicates whether the user account is active.
    :type is_active: bool
    """

    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False, default="")
    avatar_url = Column(String(1024))
    role = Column(String(20), nullable=False, default="user")
    is_active = Column(Boolean, default=True)

    memberships = relationship("ProjectMember", back_populates="user")
    notifications = relationship("Notification", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
