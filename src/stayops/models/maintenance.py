"""Maintenance reports and recurring maintenance tasks."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import field_validator

from stayops.models.base import Record
from stayops.timeutils import format_date_short


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def priority_rank(self) -> int:
        """Sort key, urgent first."""
        return {Severity.URGENT: 0, Severity.HIGH: 1, Severity.MEDIUM: 2, Severity.LOW: 3}[self]


class ReportStatus(str, Enum):
    REPORTED = "reported"
    RESOLVED = "resolved"


class ReportType(str, Enum):
    MAINTENANCE = "maintenance"
    DAMAGE = "damage"


class MaintenanceReport(Record):
    id: UUID
    property_id: UUID
    reporter_id: UUID
    title: str
    description: str
    severity: Severity
    status: ReportStatus
    photos: list[str] | None = None
    created_at: datetime | None = None
    report_type: ReportType | None = None
    location: str | None = None
    resolved_at: datetime | None = None

    def __repr__(self) -> str:
        return f"<MaintenanceReport id={self.id} title={self.title!r} status={self.status.value!r}>"


class RecurrencePattern(str, Enum):
    ONE_TIME = "one_time"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RecurringTask(Record):
    id: UUID
    property_id: UUID
    title: str
    description: str | None = None
    due_date: date | None = None
    recurrence_pattern: str | None = None
    next_due_date: date | None = None
    completed_at: datetime | None = None

    @field_validator("due_date", "next_due_date", mode="before")
    @classmethod
    def _parse_day(cls, value):
        # Stored as YYYY-MM-DD text; anything unparseable is treated as undated
        if value is None or isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            return None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def display_name(self) -> str:
        """``Change filters (3/1/26) (Monthly)``"""
        parts = [self.title]
        if self.due_date:
            parts.append(f"({format_date_short(self.due_date)})")
        if self.recurrence_pattern and self.recurrence_pattern != RecurrencePattern.ONE_TIME.value:
            parts.append(f"({self.recurrence_pattern.replace('_', ' ').title()})")
        return " ".join(parts)
