"""
Unit tests for Pagination utilities.
"""

import pytest
from sqlalchemy import select

from app.shared.pagination import PaginationParams, paginate
from models import Task


class TestPaginationParams:
    """Test cases for PaginationParams."""

    def test_default_values(self):
        params = PaginationParams()

        assert params.page == 1
        assert params.size == 20
        assert params.offset == 0

    def test_offset(self):
        assert PaginationParams(page=3, size=25).offset == 50

    @pytest.mark.parametrize("kwargs", [{"page": 0}, {"size": 0}, {"size": 101}])
    def test_out_of_range_values(self, kwargs):
        with pytest.raises(ValueError):
            PaginationParams(**kwargs)


class TestPaginate:
    """Test cases for paginate()."""

    @pytest.mark.asyncio
    async def test_pages_through_query(self, db_session, test_project, make_task):
        for _ in range(5):
            await make_task()
        query = select(Task).where(Task.project_id == test_project.id).order_by(Task.task_number)

        first = await paginate(db_session, query, PaginationParams(page=1, size=2))
        last = await paginate(db_session, query, PaginationParams(page=3, size=2))

        assert first["total"] == 5
        assert first["total_pages"] == 3
        assert len(first["items"]) == 2
        assert first["has_next"] is True
        assert first["has_prev"] is False
        assert len(last["items"]) == 1
        assert last["has_next"] is False
        assert last["has_prev"] is True

    @pytest.mark.asyncio
    async def test_empty_result(self, db_session, test_project):
        query = select(Task).where(Task.project_id == test_project.id)

        result = await paginate(db_session, query, PaginationParams())

        assert result["items"] == []
        assert result["total"] == 0
        assert result["total_pages"] == 0
        assert result["has_next"] is False
