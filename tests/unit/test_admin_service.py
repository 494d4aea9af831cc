"""
Unit tests for AdminService.

Covers the user directory filters, role and status changes, account removal
with reference cleanup, platform statistics and project force deletion.
"""

import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from app.domains.admin.service import AdminService
from app.exceptions.base import ValidationError
from app.exceptions.project import ProjectNotFoundError
from app.exceptions.user import UserNotFoundError
from app.schemas.admin import UserRole, UserStatus
from app.shared.pagination import PaginationParams
from factories import LabelFactory, UserFactory, persist
from models import (
    Attachment,
    Comment,
    Label,
    Notification,
    Project,
    ProjectMember,
    Sprint,
    Task,
    TaskAssignee,
    TaskLabel,
    User,
)


async def count_rows(db, model, *criteria):
    result = await db.execute(select(func.count()).select_from(model).where(*criteria))
    return result.scalar()


class TestUserManagement:
    """Test cases for the user directory and account changes."""

    @pytest.mark.asyncio
    async def test_list_users_filters(self, db_session, admin_user, member_user):
        suspended = await persist(
            db_session, UserFactory.build(name="Sam Suspended", is_active=False)
        )
        service = AdminService(db_session)

        admins = await service.list_users(role=UserRole.ADMIN)
        inactive = await service.list_users(status=UserStatus.SUSPENDED)
        by_name = await service.list_users(search="milo")

        assert [u.id for u in admins["items"]] == [admin_user.id]
        assert [u.id for u in inactive["items"]] == [suspended.id]
        assert [u.id for u in by_name["items"]] == [member_user.id]

    @pytest.mark.asyncio
    async def test_list_users_paginates(self, db_session, admin_user, member_user, outsider_user):
        page = await AdminService(db_session).list_users(
            pagination=PaginationParams(page=1, size=2)
        )

        assert page["total"] == 3
        assert len(page["items"]) == 2
        assert page["has_next"] is True

    @pytest.mark.asyncio
    async def test_suspend_and_reactivate(self, db_session, admin_user, member_user):
        service = AdminService(db_session)

        suspended = await service.update_user_status(
            member_user.id, UserStatus.SUSPENDED, admin_user.id
        )
        assert suspended.is_active is False

        reactivated = await service.update_user_status(
            member_user.id, UserStatus.ACTIVE, admin_user.id
        )
        assert reactivated.is_active is True

    @pytest.mark.asyncio
    async def test_promote_to_admin(self, db_session, admin_user, member_user):
        user = await AdminService(db_session).update_user_role(
            member_user.id, UserRole.ADMIN, admin_user.id
        )

        assert user.role == "admin"
        assert user.is_admin

    @pytest.mark.asyncio
    async def test_admin_cannot_change_own_account(self, db_session, admin_user):
        service = AdminService(db_session)

        with pytest.raises(ValidationError):
            await service.update_user_role(admin_user.id, UserRole.USER, admin_user.id)
        with pytest.raises(ValidationError):
            await service.update_user_status(admin_user.id, UserStatus.SUSPENDED, admin_user.id)
        with pytest.raises(ValidationError):
            await service.delete_user(admin_user.id, admin_user.id)

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session, admin_user):
        with pytest.raises(UserNotFoundError):
            await AdminService(db_session).update_user_role(
                uuid.uuid4(), UserRole.ADMIN, admin_user.id
            )

    @pytest.mark.asyncio
    async def test_delete_user_clears_references(
        self, db_session, admin_user, member_user, manager_user, test_project, make_task
    ):
        task = await make_task(reporter_id=member_user.id)
        comment = Comment(task_id=task.id, author_id=member_user.id, content="done")
        db_session.add_all(
            [
                comment,
                TaskAssignee(task_id=task.id, user_id=member_user.id, assigned_by=manager_user.id),
                Attachment(
                    task_id=task.id,
                    name="log.txt",
                    url="https://files.example.com/log.txt",
                    type="text/plain",
                    file_size=10,
                    uploaded_by=member_user.id,
                ),
                Notification(user_id=member_user.id, type="task_assigned", title="Assigned"),
            ]
        )
        await db_session.commit()

        gone = member_user.id

        await AdminService(db_session).delete_user(gone, admin_user.id)

        assert await count_rows(db_session, User, User.id == gone) == 0
        assert await count_rows(db_session, ProjectMember, ProjectMember.user_id == gone) == 0
        assert await count_rows(db_session, TaskAssignee, TaskAssignee.user_id == gone) == 0
        assert await count_rows(db_session, Notification, Notification.user_id == gone) == 0
        reporter = await db_session.execute(select(Task.reporter_id).where(Task.id == task.id))
        author = await db_session.execute(select(Comment.author_id).where(Comment.id == comment.id))
        assert reporter.scalar_one() is None
        assert author.scalar_one() is None
        assert await count_rows(db_session, Attachment, Attachment.uploaded_by.is_(None)) == 1


class TestPlatformOverview:
    """Test cases for statistics and the activity feed."""

    @pytest.mark.asyncio
    async def test_system_stats(self, db_session, admin_user, test_project, make_task):
        await persist(db_session, UserFactory.build(is_active=False))
        await make_task(status="done")
        await make_task(status="todo")
        await make_task(status="done", deleted_at=datetime.now(timezone.utc))

        stats = await AdminService(db_session).get_system_stats()

        assert stats == {
            "total_users": 4,
            "active_users": 3,
            "total_projects": 1,
            "total_tasks": 2,
            "completed_tasks": 1,
        }

    @pytest.mark.asyncio
    async def test_recent_activity(self, db_session, test_project, make_task, make_sprint):
        task = await make_task(title="Wire up login")
        await make_sprint(name="Sprint 1")
        db_session.add(Comment(task_id=task.id, content="x" * 200))
        await db_session.commit()

        entries = await AdminService(db_session).get_recent_activity()

        assert sorted(e["type"] for e in entries) == ["comment", "project", "sprint", "task"]
        comment_entry = next(e for e in entries if e["type"] == "comment")
        assert len(comment_entry["title"]) == 120
        assert all(e["project_id"] == test_project.id for e in entries)

    @pytest.mark.asyncio
    async def test_recent_activity_limit(self, db_session, test_project, make_task):
        for _ in range(3):
            await make_task()

        entries = await AdminService(db_session).get_recent_activity(limit=2)

        assert len(entries) == 2


class TestProjectAdministration:
    """Test cases for the project directory and force deletion."""

    @pytest.mark.asyncio
    async def test_list_projects(self, db_session, test_project, other_project):
        other_project.deleted_at = datetime.now(timezone.utc)
        await db_session.commit()
        service = AdminService(db_session)

        live = await service.list_projects()
        everything = await service.list_projects(include_deleted=True)
        by_name = await service.list_projects(search="board", include_deleted=True)

        assert [p.id for p in live["items"]] == [test_project.id]
        assert everything["total"] == 2
        assert [p.id for p in by_name["items"]] == [other_project.id]

    @pytest.mark.asyncio
    async def test_force_delete_project(
        self,
        db_session,
        admin_user,
        manager_user,
        test_project,
        other_project,
        make_task,
        make_sprint,
    ):
        sprint = await make_sprint()
        parent = await make_task(sprint_id=sprint.id)
        child = await make_task(parent_id=parent.id, deleted_at=datetime.now(timezone.utc))
        label = await persist(db_session, LabelFactory.build(project_id=test_project.id))
        comment = Comment(task_id=parent.id, author_id=manager_user.id, content="hi")
        db_session.add_all(
            [
                comment,
                TaskLabel(task_id=parent.id, label_id=label.id),
                TaskAssignee(task_id=child.id, user_id=manager_user.id),
            ]
        )
        await db_session.flush()
        db_session.add(
            Attachment(
                comment_id=comment.id,
                name="a.png",
                url="https://files.example.com/a.png",
                type="image/png",
                file_size=1,
            )
        )
        await db_session.commit()

        await AdminService(db_session).force_delete_project(test_project.id, admin_user.id)

        assert await count_rows(db_session, Project, Project.id == test_project.id) == 0
        assert await count_rows(db_session, Task) == 0
        for model in (Comment, Attachment, TaskLabel, TaskAssignee, Label, Sprint):
            assert await count_rows(db_session, model) == 0
        assert await count_rows(db_session, ProjectMember) == 1
        assert await count_rows(db_session, Project, Project.id == other_project.id) == 1

    @pytest.mark.asyncio
    async def test_force_delete_missing_project(self, db_session, admin_user):
        with pytest.raises(ProjectNotFoundError):
            await AdminService(db_session).force_delete_project(uuid.uuid4(), admin_user.id)
