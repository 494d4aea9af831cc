"""
Test data factories for generating test objects.

Factories build unsaved model instances with realistic defaults; ``persist``
adds one to the async session and commits it.
"""

import uuid
from datetime import datetime, timedelta, timezone

import factory

from models import Label, Sprint, Task, User


async def persist(db, instance):
    """Add ``instance`` to the session, commit and return it."""
    db.add(instance)
    await db.commit()
    return instance


class UserFactory(factory.Factory):
    """Factory for creating User test instances."""

    class Meta:
        model = User

    id = factory.LazyFunction(uuid.uuid4)
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = factory.Faker("name")
    role = "user"
    is_active = True


class SprintFactory(factory.Factory):
    """Factory for creating Sprint test instances."""

    class Meta:
        model = Sprint

    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Sprint {n}")
    goal = factory.Faker("sentence", nb_words=6)
    start_date = factory.LazyFunction(lambda: datetime.now(timezone.utc))
    end_date = factory.LazyFunction(lambda: datetime.now(timezone.utc) + timedelta(days=14))
    status = "active"
    # project_id will be passed when creating the sprint


class TaskFactory(factory.Factory):
    """Factory for creating Task test instances."""

    class Meta:
        model = Task

    id = factory.LazyFunction(uuid.uuid4)
    task_number = factory.Sequence(lambda n: n + 1)
    title = factory.Faker("sentence", nb_words=4, variable_nb_words=True)
    description = factory.Faker("text", max_nb_chars=200)
    type = "task"
    status = "backlog"
    priority = "medium"
    story_points = None
    # project_id, reporter_id, sprint_id, parent_id will be passed when creating


class LabelFactory(factory.Factory):
    """Factory for creating Label test instances."""

    class Meta:
        model = Label

    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"label-{n}")
    color = "#3366FF"
