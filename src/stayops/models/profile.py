"""User profile model."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from stayops.models.base import Record


class UserRole(str, Enum):
    OWNER = "owner"
    PROPERTY_MANAGER = "property_manager"
    CLEANING_STAFF = "cleaning_staff"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class UserProfile(Record):
    id: UUID
    first_name: str
    last_name: str
    role: UserRole | None = None
    is_verified: bool = False
    verified_at: datetime | None = None
    requested_role: UserRole | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<UserProfile id={self.id} name={self.full_name!r} verified={self.is_verified}>"
