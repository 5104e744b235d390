"""Active and upcoming reservations across all properties."""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from stayops.backend import Backend
from stayops.events import EventBus
from stayops.exceptions import BackendError
from stayops.models.cleaning import CleaningSchedule
from stayops.models.property import Property
from stayops.models.reservation import Reservation, ReservationStatus
from stayops.modules.base import ScreenManager
from stayops.timeutils import utcnow

logger = logging.getLogger(__name__)


def active_reservations(reservations: list[Reservation], now: datetime | None = None) -> list[Reservation]:
    now = now or utcnow()
    return sorted((r for r in reservations if r.is_active(now)), key=lambda r: r.check_in)


def upcoming_reservations(reservations: list[Reservation], now: datetime | None = None) -> list[Reservation]:
    """Confirmed stays that have not ended yet, by arrival."""
    now = now or utcnow()
    return sorted(
        (r for r in reservations if r.status == ReservationStatus.CONFIRMED and r.check_out > now),
        key=lambda r: r.check_in,
    )


class ReservationsManager(ScreenManager):
    def __init__(self, backend: Backend, events: EventBus | None = None) -> None:
        super().__init__(backend, events)
        self.properties: list[Property] = []
        self.reservations: list[Reservation] = []

    def load_data(self) -> None:
        self.is_loading = True
        try:
            try:
                self.properties = self._fetch_properties(use_display_name=False)
            except BackendError:
                logger.exception("Error loading properties")
            try:
                rows = self.backend.fetch(
                    self.backend.table("reservations")
                    .select("*")
                    .eq("status", ReservationStatus.CONFIRMED.value)
                )
                self.reservations = Reservation.from_rows(rows)
            except BackendError:
                logger.exception("Error loading reservations")
        finally:
            self.is_loading = False

    @property
    def active_reservations(self) -> list[Reservation]:
        return active_reservations(self.reservations)

    @property
    def upcoming_reservations(self) -> list[Reservation]:
        return upcoming_reservations(self.reservations)

    def load_cleaning_schedules(self, property_id: UUID, reservation_id: UUID) -> list[CleaningSchedule]:
        """Cleanings booked for one stay, or for its property if that lookup fails."""
        base = self.backend.table("cleaning_schedules").select("*").eq("property_id", str(property_id))
        try:
            rows = self.backend.fetch(base.eq("reservation_id", str(reservation_id)))
        except BackendError:
            logger.warning("Error loading cleanings for reservation %s, trying property", reservation_id)
            try:
                rows = self.backend.fetch(
                    self.backend.table("cleaning_schedules").select("*").eq("property_id", str(property_id))
                )
            except BackendError:
                logger.exception("Error loading cleaning schedules for property %s", property_id)
                return []
        return CleaningSchedule.from_rows(rows)
