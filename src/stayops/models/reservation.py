"""Reservation model."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from stayops.models.base import Record
from stayops.timeutils import utcnow


class ReservationStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Reservation(Record):
    id: UUID
    property_id: UUID
    airbnb_reservation_id: str | None = None
    guest_name: str
    guest_count: int
    check_in: datetime
    check_out: datetime
    status: ReservationStatus

    def __repr__(self) -> str:
        return (
            f"<Reservation id={self.id} property_id={self.property_id} "
            f"guest={self.guest_name!r} {self.check_in:%Y-%m-%d}..{self.check_out:%Y-%m-%d}>"
        )

    @property
    def nights(self) -> int:
        return (self.check_out.date() - self.check_in.date()).days

    def is_active(self, now: datetime | None = None) -> bool:
        """Confirmed and the guest is currently in the house."""
        now = now or utcnow()
        return self.status == ReservationStatus.CONFIRMED and self.check_in <= now <= self.check_out
