"""Property list and the per-property detail screen."""

from __future__ import annotations

import logging
from uuid import UUID

from stayops.backend import Backend
from stayops.events import EventBus
from stayops.exceptions import BackendError
from stayops.models.cleaning import CleaningSchedule
from stayops.models.maintenance import MaintenanceReport
from stayops.models.property import Property
from stayops.models.reservation import Reservation, ReservationStatus
from stayops.modules.base import ScreenManager
from stayops.timeutils import utcnow

logger = logging.getLogger(__name__)


class PropertiesManager(ScreenManager):
    def __init__(self, backend: Backend, events: EventBus | None = None) -> None:
        super().__init__(backend, events)
        self.properties: list[Property] = []

    def load_properties(self) -> list[Property]:
        self.is_loading = True
        try:
            self.properties = self._fetch_properties()
            logger.info("Loaded %d properties", len(self.properties))
        except BackendError:
            logger.exception("Error loading properties")
        finally:
            self.is_loading = False
        return self.properties


class PropertyDetail(ScreenManager):
    """Current stay, upcoming stays, cleanings and reports for one property."""

    def __init__(self, backend: Backend, events: EventBus | None = None) -> None:
        super().__init__(backend, events)
        self.current_reservation: Reservation | None = None
        self.upcoming_reservations: list[Reservation] = []
        self.cleaning_schedules: list[CleaningSchedule] = []
        self.maintenance_reports: list[MaintenanceReport] = []

    def load_data(self, property_id: UUID) -> None:
        self.is_loading = True
        try:
            self._load_reporter_names()
            self._load_reservations(property_id)
            self._load_cleaning_schedules(property_id)
            self._load_maintenance_reports(property_id)
        finally:
            self.is_loading = False

    def _load_reservations(self, property_id: UUID) -> None:
        now = utcnow()
        try:
            rows = self.backend.fetch(
                self.backend.table("reservations")
                .select("*")
                .eq("property_id", str(property_id))
                .eq("status", ReservationStatus.CONFIRMED.value)
            )
        except BackendError:
            logger.exception("Error loading reservations")
            return
        reservations = Reservation.from_rows(rows)
        self.current_reservation = next((r for r in reservations if r.is_active(now)), None)
        self.upcoming_reservations = sorted(
            (r for r in reservations if r.check_in > now), key=lambda r: r.check_in
        )

    def _load_cleaning_schedules(self, property_id: UUID) -> None:
        try:
            rows = self.backend.fetch(
                self.backend.table("cleaning_schedules")
                .select("*")
                .eq("property_id", str(property_id))
                .order("scheduled_start", desc=True)
            )
        except BackendError:
            logger.exception("Error loading cleaning schedules")
            return
        self.cleaning_schedules = CleaningSchedule.from_rows(rows)

    def _load_maintenance_reports(self, property_id: UUID) -> None:
        try:
            rows = self.backend.fetch(
                self.backend.table("maintenance_reports")
                .select("*")
                .eq("property_id", str(property_id))
                .order("created_at", desc=True)
            )
        except BackendError:
            logger.exception("Error loading maintenance reports")
            return
        self.maintenance_reports = MaintenanceReport.from_rows(rows)
