"""Checklist model."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import Field

from stayops.models.base import Record


class ChecklistType(str, Enum):
    INSPECTION = "inspection"
    CLEANING = "cleaning"
    SUPPLIES = "supplies"
    MAINTENANCE = "maintenance"

    @property
    def display_name(self) -> str:
        return self.value.title()


# Types owned by property managers; cleaning belongs to cleaning staff
MANAGER_CHECKLIST_TYPES = (ChecklistType.INSPECTION, ChecklistType.SUPPLIES, ChecklistType.MAINTENANCE)


class ChecklistPropertyStatus(str, Enum):
    READY = "ready"
    ISSUES_FOUND = "issues_found"

    @property
    def display_name(self) -> str:
        if self is ChecklistPropertyStatus.READY:
            return "Ready for Use"
        return "Issues Found"


class Checklist(Record):
    id: UUID
    property_id: UUID
    reservation_id: UUID | None = None
    manager_id: UUID
    items: dict[str, Any] = Field(default_factory=dict)
    completed_at: datetime | None = None
    property_status: ChecklistPropertyStatus | None = None
    checklist_type: ChecklistType | None = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __repr__(self) -> str:
        kind = self.checklist_type.value if self.checklist_type else None
        return f"<Checklist id={self.id} type={kind!r} completed={self.is_completed}>"
