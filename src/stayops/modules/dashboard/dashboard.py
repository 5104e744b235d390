"""Role-specific home screen: counts, upcoming turnovers and recent activity."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from stayops.backend import Backend
from stayops.config import get_setting
from stayops.events import EventBus
from stayops.exceptions import BackendError
from stayops.models.checklist import MANAGER_CHECKLIST_TYPES, Checklist, ChecklistType
from stayops.models.cleaning import CleaningSchedule
from stayops.models.maintenance import MaintenanceReport, ReportStatus
from stayops.models.notification import AppNotification
from stayops.models.profile import UserRole
from stayops.models.property import Property
from stayops.models.reservation import Reservation, ReservationStatus
from stayops.modules.base import ScreenManager
from stayops.modules.checklists.checklists import checked_out_checklists
from stayops.modules.cleaning.schedules import reservations_needing_cleaning
from stayops.modules.maintenance.reports import sort_by_severity
from stayops.timeutils import start_of_day, utcnow

logger = logging.getLogger(__name__)


class DashboardManager(ScreenManager):
    def __init__(self, backend: Backend, events: EventBus | None = None) -> None:
        super().__init__(backend, events)
        self.properties: list[Property] = []
        self.reservations: list[Reservation] = []
        self.cleaning_schedules: list[CleaningSchedule] = []
        self.checklists: list[Checklist] = []
        self.maintenance_reports: list[MaintenanceReport] = []
        self.notifications: list[AppNotification] = []

    # --- Loading ---

    def load_data(self) -> None:
        """Load every section; one failing table leaves the others intact."""
        self.is_loading = True
        try:
            self._load("properties", self._load_properties)
            self._load_reporter_names()
            self._load("reservations", self._load_reservations)
            self._load("cleaning schedules", self._load_cleaning_schedules)
            self._load("checklists", self._load_checklists)
            self._load("maintenance reports", self._load_maintenance_reports)
            self._load("notifications", self._load_notifications)
        finally:
            self.is_loading = False

    refresh = load_data

    def _load(self, what: str, loader) -> None:
        try:
            loader()
        except BackendError:
            logger.exception("Error loading %s", what)

    def _load_properties(self) -> None:
        self.properties = self._fetch_properties(use_display_name=False)

    def _load_reservations(self) -> None:
        rows = self.backend.fetch(
            self.backend.table("reservations").select("*").eq("status", ReservationStatus.CONFIRMED.value)
        )
        self.reservations = Reservation.from_rows(rows)

    def _load_cleaning_schedules(self) -> None:
        rows = self.backend.fetch(self.backend.table("cleaning_schedules").select("*"))
        self.cleaning_schedules = CleaningSchedule.from_rows(rows)

    def _load_checklists(self) -> None:
        rows = self.backend.fetch(self.backend.table("checklists").select("*"))
        self.checklists = Checklist.from_rows(rows)

    def _load_maintenance_reports(self) -> None:
        rows = self.backend.fetch(self.backend.table("maintenance_reports").select("*"))
        self.maintenance_reports = MaintenanceReport.from_rows(rows)

    def _load_notifications(self) -> None:
        rows = self.backend.fetch(
            self.backend.table("notifications")
            .select("*")
            .eq("user_id", self.backend.current_user_id())
            .order("sent_at", desc=True)
            .limit(get_setting("notifications", "dashboard_limit", 20))
        )
        self.notifications = AppNotification.from_rows(rows)

    # --- Derived ---

    def _horizon(self, now: datetime) -> datetime:
        return now + timedelta(days=get_setting("dashboard", "lookahead_days", 7))

    @property
    def properties_count(self) -> int:
        return len(self.properties)

    @property
    def active_reservations_count(self) -> int:
        now = utcnow()
        return sum(1 for r in self.reservations if r.is_active(now))

    @property
    def open_maintenance_reports(self) -> list[MaintenanceReport]:
        return sort_by_severity([r for r in self.maintenance_reports if r.status == ReportStatus.REPORTED])

    @property
    def pending_maintenance_count(self) -> int:
        return len(self.open_maintenance_reports)

    @property
    def unread_notifications_count(self) -> int:
        return sum(1 for n in self.notifications if not n.is_read)

    def upcoming_checkouts(self, now: datetime | None = None) -> list[Reservation]:
        now = now or utcnow()
        horizon = self._horizon(now)
        return sorted(
            (r for r in self.reservations
             if r.status == ReservationStatus.CONFIRMED and now <= r.check_out <= horizon),
            key=lambda r: r.check_out,
        )

    def upcoming_checkins(self, now: datetime | None = None) -> list[Reservation]:
        now = now or utcnow()
        horizon = self._horizon(now)
        return sorted(
            (r for r in self.reservations
             if r.status == ReservationStatus.CONFIRMED and now <= r.check_in <= horizon),
            key=lambda r: r.check_in,
        )

    @property
    def pending_checklists(self) -> list[Checklist]:
        return [c for c in self.checklists if not c.is_completed]

    @property
    def pending_checklists_count(self) -> int:
        return sum(1 for c in self.pending_checklists if c.checklist_type in MANAGER_CHECKLIST_TYPES)

    def pending_cleaning_checklists_count(self, now: datetime | None = None) -> int:
        cleaning = [c for c in self.pending_checklists if c.checklist_type == ChecklistType.CLEANING]
        return len(checked_out_checklists(cleaning, {r.id: r for r in self.reservations}, now))

    def todays_cleanings(self, now: datetime | None = None) -> list[CleaningSchedule]:
        today = start_of_day(now or utcnow())
        tomorrow = today + timedelta(days=1)
        return sorted(
            (s for s in self.cleaning_schedules if today <= s.scheduled_start < tomorrow),
            key=lambda s: s.scheduled_start,
        )

    def upcoming_cleanings(self, now: datetime | None = None) -> list[CleaningSchedule]:
        now = now or utcnow()
        horizon = self._horizon(now)
        return sorted(
            (s for s in self.cleaning_schedules if now <= s.scheduled_start <= horizon),
            key=lambda s: s.scheduled_start,
        )

    @property
    def recent_notifications(self) -> list[AppNotification]:
        return sorted(self.notifications, key=lambda n: n.sent_at, reverse=True)

    def reservations_needing_cleaning(self, now: datetime | None = None) -> list[Reservation]:
        return reservations_needing_cleaning(self.reservations, self.cleaning_schedules, now=now)

    # --- Payloads ---

    def summary_for(self, role: UserRole | None, now: datetime | None = None) -> dict[str, Any]:
        """Dashboard payload for the owner, manager or cleaner home screen."""
        now = now or utcnow()
        if role == UserRole.CLEANING_STAFF:
            return {
                "role": role.value,
                "todays_cleanings": self.todays_cleanings(now),
                "upcoming_cleanings": self.upcoming_cleanings(now),
                "reservations_needing_cleaning": self.reservations_needing_cleaning(now),
                "pending_cleaning_checklists_count": self.pending_cleaning_checklists_count(now),
                "recent_notifications": self.recent_notifications,
            }
        summary: dict[str, Any] = {
            "role": role.value if role else None,
            "properties_count": self.properties_count,
            "active_reservations_count": self.active_reservations_count,
            "pending_maintenance_count": self.pending_maintenance_count,
            "unread_notifications_count": self.unread_notifications_count,
            "upcoming_checkouts": self.upcoming_checkouts(now),
            "upcoming_checkins": self.upcoming_checkins(now),
            "open_maintenance_reports": self.open_maintenance_reports,
            "recent_notifications": self.recent_notifications,
        }
        if role == UserRole.PROPERTY_MANAGER:
            summary["pending_checklists_count"] = self.pending_checklists_count
            summary["todays_cleanings"] = self.todays_cleanings(now)
        return summary
