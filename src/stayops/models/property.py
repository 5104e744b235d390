"""Property model."""

from __future__ import annotations

from enum import Enum
from uuid import UUID

from stayops.models.base import Record


class PropertyStatus(str, Enum):
    OCCUPIED = "occupied"
    NEEDS_CLEANING = "needs_cleaning"
    VACANT_READY = "vacant_ready"
    NEEDS_MAINTENANCE = "needs_maintenance"

    @property
    def display_name(self) -> str:
        return {
            PropertyStatus.OCCUPIED: "Occupied",
            PropertyStatus.NEEDS_CLEANING: "Needs Cleaning",
            PropertyStatus.VACANT_READY: "Vacant - Ready",
            PropertyStatus.NEEDS_MAINTENANCE: "Needs Maintenance",
        }[self]


class Property(Record):
    id: UUID
    name: str
    short_name: str | None = None
    address: str
    airbnb_listing_id: str | None = None
    ical_url: str | None = None
    status: PropertyStatus

    @property
    def display_name(self) -> str:
        trimmed = (self.short_name or "").strip()
        return trimmed or self.name

    def __repr__(self) -> str:
        return f"<Property id={self.id} name={self.name!r}>"
