"""Cleaning schedule model."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from stayops.models.base import Record


class CleaningStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class CleaningSchedule(Record):
    id: UUID
    property_id: UUID
    reservation_id: UUID | None = None
    cleaner_id: UUID
    scheduled_start: datetime
    scheduled_end: datetime | None = None
    status: CleaningStatus
    completed_at: datetime | None = None

    def __repr__(self) -> str:
        return f"<CleaningSchedule id={self.id} start={self.scheduled_start} status={self.status.value!r}>"
