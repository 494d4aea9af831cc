"""
Unit tests for sprint request schemas.
"""

from datetime import timezone

import pytest
from pydantic import ValidationError

from app.schemas.sprint import SprintCreate, SprintUpdate


class TestSprintDates:
    """Date handling in SprintCreate and SprintUpdate."""

    def test_naive_and_aware_dates_compare(self):
        sprint = SprintCreate(
            name="Sprint 1", start_date="2026-01-01T00:00:00", end_date="2026-01-10T00:00:00Z"
        )

        assert sprint.start_date.tzinfo == timezone.utc
        assert sprint.end_date > sprint.start_date

    def test_mixed_dates_out_of_order_rejected(self):
        with pytest.raises(ValidationError):
            SprintCreate(
                name="Sprint 1",
                start_date="2026-01-10T00:00:00Z",
                end_date="2026-01-01T00:00:00",
            )

    def test_update_with_mixed_dates(self):
        update = SprintUpdate(start_date="2026-03-01T09:00:00+02:00", end_date="2026-03-14T00:00:00")

        assert update.end_date.tzinfo == timezone.utc
        assert update.end_date > update.start_date

    def test_update_mixed_dates_out_of_order_rejected(self):
        with pytest.raises(ValidationError):
            SprintUpdate(start_date="2026-03-14T00:00:00", end_date="2026-03-01T00:00:00+00:00")
