# ruff: noqa: F403, F401
"""Schemas package initialization."""

# Import all schemas to ensure they're registered
from .admin import *
from .attachment import *
from .base import *
from .label import *
from .notification import *
from .project import *
from .sprint import *
from .task import *
from .user import *
