"""Cleaning schedules: role-scoped loading, scheduling and status updates."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from uuid import UUID

from stayops.backend import Backend
from stayops.config import get_setting
from stayops.events import Event, EventBus, EventType
from stayops.exceptions import BackendError, CleaningWindowError, NetworkError
from stayops.models.cleaning import CleaningSchedule, CleaningStatus
from stayops.models.profile import UserRole
from stayops.models.property import Property
from stayops.models.reservation import Reservation, ReservationStatus
from stayops.modules.base import ScreenManager
from stayops.modules.cleaning.windows import CleaningWindow, validate_times
from stayops.timeutils import to_iso, utcnow

logger = logging.getLogger(__name__)

SCHEDULE_FUNCTION = "schedule-cleaning"
UPDATE_FUNCTION = "update-cleaning-schedule"


def order_for_display(schedules: list[CleaningSchedule], now: datetime | None = None) -> list[CleaningSchedule]:
    """Past cleanings (most recent first) followed by future ones (soonest first)."""
    now = now or utcnow()
    past = sorted((s for s in schedules if s.scheduled_start < now), key=lambda s: s.scheduled_start, reverse=True)
    future = sorted((s for s in schedules if s.scheduled_start >= now), key=lambda s: s.scheduled_start)
    return past + future


def reservations_needing_cleaning(
    reservations: list[Reservation],
    schedules: list[CleaningSchedule],
    property_id: UUID | None = None,
    now: datetime | None = None,
) -> list[Reservation]:
    """Confirmed future stays that no cleaning schedule references yet."""
    now = now or utcnow()
    scheduled = {s.reservation_id for s in schedules if s.reservation_id is not None}
    pending = [
        r for r in reservations
        if r.status == ReservationStatus.CONFIRMED
        and r.check_in >= now
        and r.id not in scheduled
        and (property_id is None or r.property_id == property_id)
    ]
    return sorted(pending, key=lambda r: r.check_in)


def upcoming_cleanings(schedules: list[CleaningSchedule], now: datetime | None = None) -> list[CleaningSchedule]:
    now = now or utcnow()
    return sorted(
        (s for s in schedules if s.status == CleaningStatus.SCHEDULED and s.scheduled_start >= now),
        key=lambda s: s.scheduled_start,
    )


def active_cleanings(
    schedules: list[CleaningSchedule],
    now: datetime | None = None,
    grace: timedelta | None = None,
) -> list[CleaningSchedule]:
    """Cleanings under way, or finished within the grace period."""
    now = now or utcnow()
    if grace is None:
        grace = timedelta(minutes=get_setting("cleaning", "active_grace_minutes", 15))
    cutoff = now - grace
    active = []
    for s in schedules:
        if s.status not in (CleaningStatus.IN_PROGRESS, CleaningStatus.COMPLETED):
            continue
        if s.scheduled_start > now:
            continue
        if (s.scheduled_end or s.scheduled_start) >= cutoff:
            active.append(s)
    return sorted(active, key=lambda s: s.scheduled_start)


class CleaningManager(ScreenManager):
    """Backs the Cleaning screen."""

    def __init__(self, backend: Backend, events: EventBus | None = None) -> None:
        super().__init__(backend, events)
        self.cleaning_schedules: list[CleaningSchedule] = []
        self.properties: list[Property] = []
        self.available_reservations: list[Reservation] = []

    # --- Loading ---

    def load_cleaning_schedules(self) -> list[CleaningSchedule]:
        token = self._begin()
        self.is_loading = True
        self.error_message = None
        try:
            role = self.current_role()
            query = self.backend.table("cleaning_schedules").select("*")
            if role not in (UserRole.OWNER, UserRole.PROPERTY_MANAGER):
                query = query.eq("cleaner_id", self.backend.current_user_id())
            rows = self.backend.fetch(query.order("scheduled_start"))
        except BackendError as exc:
            logger.exception("Error loading cleaning schedules")
            if self._is_current(token):
                self.error_message = f"Failed to load cleaning schedules: {exc}"
            return self.cleaning_schedules
        finally:
            self.is_loading = False

        if self._is_current(token):
            self.cleaning_schedules = order_for_display(CleaningSchedule.from_rows(rows))
        return self.cleaning_schedules

    def load_properties(self) -> list[Property]:
        try:
            self.properties = self._fetch_properties()
        except BackendError:
            logger.exception("Error loading properties")
        return self.properties

    def load_available_reservations(self) -> list[Reservation]:
        """Confirmed reservations that have not started yet."""
        query = (
            self.backend.table("reservations")
            .select("*")
            .eq("status", ReservationStatus.CONFIRMED.value)
            .gte("check_in", to_iso(utcnow()))
            .order("check_in")
        )
        try:
            self.available_reservations = Reservation.from_rows(self.backend.fetch(query))
        except BackendError:
            logger.exception("Error loading reservations")
        return self.available_reservations

    def refresh_schedule(self, schedule_id: UUID) -> CleaningSchedule | None:
        """Re-read one schedule and replace the cached copy."""
        try:
            row = self.backend.fetch_one(
                self.backend.table("cleaning_schedules").select("*").eq("id", str(schedule_id))
            )
        except BackendError:
            logger.exception("Error refreshing cleaning schedule %s", schedule_id)
            return None
        if row is None:
            return None
        refreshed = CleaningSchedule.from_row(row)
        self.cleaning_schedules = [
            refreshed if s.id == refreshed.id else s for s in self.cleaning_schedules
        ]
        return refreshed

    # --- Mutations ---

    def schedule_cleaning(self, reservation: Reservation, start: datetime, end: datetime) -> bool:
        """Assign the signed-in cleaner to clean ahead of ``reservation``."""
        self.error_message = None
        try:
            validate_times(start, end)
        except CleaningWindowError as exc:
            self.error_message = str(exc)
            return False

        self.is_loading = True
        try:
            cleaner_id = self.backend.current_user_id()
            self.backend.invoke(SCHEDULE_FUNCTION, {
                "reservation_id": str(reservation.id),
                "cleaner_id": cleaner_id,
                "scheduled_start": to_iso(start),
                "scheduled_end": to_iso(end),
            })
        except NetworkError as exc:
            logger.warning("Network error scheduling cleaning: %s", exc)
            self.error_message = f"Network error: {exc}"
            return False
        except BackendError as exc:
            logger.exception("Error scheduling cleaning for reservation %s", reservation.id)
            self.error_message = f"Failed to schedule cleaning: {exc}"
            return False
        finally:
            self.is_loading = False

        logger.info("Scheduled cleaning for reservation %s", reservation.id)
        self.events.publish(Event(
            event_type=EventType.CLEANING_SCHEDULED,
            data={
                "reservation_id": str(reservation.id),
                "property_id": str(reservation.property_id),
                "cleaner_id": cleaner_id,
            },
        ))
        self.load_cleaning_schedules()
        return True

    def update_schedule_times(
        self,
        schedule: CleaningSchedule,
        start: datetime,
        end: datetime,
        window: CleaningWindow | None = None,
    ) -> bool:
        """Move a cleaning; ``window`` bounds the new times when given."""
        self.error_message = None
        try:
            validate_times(start, end, window)
        except CleaningWindowError as exc:
            self.error_message = str(exc)
            return False
        return self._update(schedule, {
            "cleaning_schedule_id": str(schedule.id),
            "scheduled_start": to_iso(start),
            "scheduled_end": to_iso(end),
        })

    def update_status(self, schedule: CleaningSchedule, status: CleaningStatus) -> bool:
        self.error_message = None
        return self._update(schedule, {
            "cleaning_schedule_id": str(schedule.id),
            "status": CleaningStatus(status).value,
        })

    def _update(self, schedule: CleaningSchedule, body: dict) -> bool:
        self.is_loading = True
        try:
            self.backend.invoke(UPDATE_FUNCTION, body)
        except NetworkError as exc:
            logger.warning("Network error updating cleaning %s: %s", schedule.id, exc)
            self.error_message = f"Network error: {exc}"
            return False
        except BackendError as exc:
            logger.exception("Error updating cleaning %s", schedule.id)
            self.error_message = f"Failed to update cleaning: {exc}"
            return False
        finally:
            self.is_loading = False

        self.events.publish(Event(
            event_type=EventType.CLEANING_UPDATED,
            data={"cleaning_schedule_id": str(schedule.id), **{k: v for k, v in body.items() if k != "cleaning_schedule_id"}},
        ))
        self.refresh_schedule(schedule.id)
        return True

    # --- Derived lists ---

    def reservations_needing_cleaning(self, property_id: UUID | None = None) -> list[Reservation]:
        return reservations_needing_cleaning(self.available_reservations, self.cleaning_schedules, property_id)

    @property
    def upcoming_cleanings(self) -> list[CleaningSchedule]:
        return upcoming_cleanings(self.cleaning_schedules)

    @property
    def active_cleanings(self) -> list[CleaningSchedule]:
        return active_cleanings(self.cleaning_schedules)
