"""Pagination utilities."""

from typing import Any, Dict

from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from app.core.config import settings


class PaginationParams(BaseModel):
    """Pagination parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    size: int = Field(
        default=settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Page size",
    )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


async def paginate(db: AsyncSession, query: Select, pagination: PaginationParams) -> Dict[str, Any]:
    """
    Paginate a SQLAlchemy query.

    Args:
        db: Database session
        query: SQLAlchemy select query, already filtered and ordered
        pagination: Pagination parameters

    Returns:
        Dictionary with the page items and the pagination info
    """

    # Count over the unpaginated query
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    total_pages = (total + pagination.size - 1) // pagination.size

    result = await db.execute(query.offset(pagination.offset).limit(pagination.size))
    items = result.scalars().all()

    return {
        "items": items,
        "total": total,
        "page": pagination.page,
        "size": pagination.size,
        "has_next": pagination.page < total_pages,
        "has_prev": pagination.page > 1,
        "total_pages": total_pages,
    }
