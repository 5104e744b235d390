"""Month view of stays and cleanings, iCalendar export and listing feed import."""

from __future__ import annotations

import calendar as _monthcal
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

import httpx
from icalendar import Calendar, Event as IcsEvent

from stayops.backend import Backend
from stayops.events import EventBus
from stayops.exceptions import BackendError
from stayops.models.cleaning import CleaningSchedule
from stayops.models.property import Property
from stayops.models.reservation import Reservation, ReservationStatus
from stayops.modules.base import ScreenManager
from stayops.timeutils import local, utcnow

logger = logging.getLogger(__name__)


def _local_date(dt: datetime) -> date:
    return local(dt).date()


def _as_date(value) -> date:
    """icalendar values may be dates, datetimes or vDDD wrappers."""
    dt = getattr(value, "dt", value)
    if isinstance(dt, datetime):
        return dt.date()
    return dt


@dataclass
class CalendarDay:
    day: date
    check_ins: list[Reservation] = field(default_factory=list)
    check_outs: list[Reservation] = field(default_factory=list)
    stays: list[Reservation] = field(default_factory=list)
    cleanings: list[CleaningSchedule] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.check_ins or self.check_outs or self.stays or self.cleanings)


def month_grid(
    year: int,
    month: int,
    reservations: list[Reservation],
    cleanings: list[CleaningSchedule],
) -> list[CalendarDay]:
    """One entry per day of the month, in display-timezone dates.

    A guest "stays" on every night from check-in up to, but not including,
    the checkout day.
    """
    days = {
        date(year, month, d): CalendarDay(date(year, month, d))
        for d in range(1, _monthcal.monthrange(year, month)[1] + 1)
    }
    for reservation in reservations:
        arrive, leave = _local_date(reservation.check_in), _local_date(reservation.check_out)
        if arrive in days:
            days[arrive].check_ins.append(reservation)
        if leave in days:
            days[leave].check_outs.append(reservation)
        for day, entry in days.items():
            if arrive <= day < leave:
                entry.stays.append(reservation)
    for schedule in cleanings:
        day = _local_date(schedule.scheduled_start)
        if day in days:
            days[day].cleanings.append(schedule)
    return list(days.values())


def parse_listing_feed(ical_text: str) -> list[dict]:
    """Blocked ranges from a listing's iCal feed."""
    cal = Calendar.from_ical(ical_text)
    events = []
    for component in cal.walk():
        if component.name != "VEVENT":
            continue
        uid = str(component.get("uid", ""))
        dtstart = component.get("dtstart")
        dtend = component.get("dtend")
        if not uid or not dtstart or not dtend:
            continue
        events.append({
            "uid": uid,
            "start": _as_date(dtstart),
            "end": _as_date(dtend),
            "summary": str(component.get("summary", "")),
        })
    return events


class CalendarManager(ScreenManager):
    """Backs the Calendar screen."""

    def __init__(self, backend: Backend, events: EventBus | None = None, http: httpx.Client | None = None) -> None:
        super().__init__(backend, events)
        self.properties: list[Property] = []
        self.reservations: list[Reservation] = []
        self.cleaning_schedules: list[CleaningSchedule] = []
        self.selected_property_id: UUID | None = None
        today = local(utcnow()).date()
        self.year, self.month = today.year, today.month
        self._http = http

    def load_data(self) -> None:
        self.is_loading = True
        try:
            self.load_properties()
            self.load_reservations()
            self.load_cleaning_schedules()
        finally:
            self.is_loading = False

    def load_properties(self) -> None:
        try:
            self.properties = self._fetch_properties(use_display_name=False)
        except BackendError:
            logger.exception("Error loading properties")

    def load_reservations(self) -> None:
        try:
            rows = self.backend.fetch(
                self.backend.table("reservations").select("*").eq("status", ReservationStatus.CONFIRMED.value)
            )
        except BackendError:
            logger.exception("Error loading reservations")
            return
        self.reservations = Reservation.from_rows(rows)
        logger.info("Loaded %d reservations", len(self.reservations))

    def load_cleaning_schedules(self) -> None:
        try:
            rows = self.backend.fetch(self.backend.table("cleaning_schedules").select("*"))
        except BackendError:
            logger.exception("Error loading cleaning schedules")
            return
        self.cleaning_schedules = CleaningSchedule.from_rows(rows)

    def property_name_for(self, reservation: Reservation) -> str | None:
        return self.property_name(reservation.property_id)

    # --- Filtering and navigation ---

    def select_property(self, property_id: UUID | None) -> None:
        self.selected_property_id = property_id

    @property
    def filtered_reservations(self) -> list[Reservation]:
        if self.selected_property_id is None:
            return list(self.reservations)
        return [r for r in self.reservations if r.property_id == self.selected_property_id]

    @property
    def filtered_cleanings(self) -> list[CleaningSchedule]:
        if self.selected_property_id is None:
            return list(self.cleaning_schedules)
        return [s for s in self.cleaning_schedules if s.property_id == self.selected_property_id]

    def change_month(self, delta: int) -> tuple[int, int]:
        index = self.year * 12 + (self.month - 1) + delta
        self.year, self.month = divmod(index, 12)
        self.month += 1
        return self.year, self.month

    def month_grid(self, year: int | None = None, month: int | None = None) -> list[CalendarDay]:
        return month_grid(
            year or self.year,
            month or self.month,
            self.filtered_reservations,
            self.filtered_cleanings,
        )

    # --- iCalendar ---

    def export_ics(self) -> bytes:
        """Stays and cleanings in the current filter as an iCalendar document."""
        cal = Calendar()
        cal.add("prodid", "-//StayOps//Operations Calendar//EN")
        cal.add("version", "2.0")
        for reservation in self.filtered_reservations:
            event = IcsEvent()
            event.add("uid", f"reservation-{reservation.id}@stayops")
            event.add("summary", f"{reservation.guest_name} ({reservation.guest_count} guests)")
            event.add("dtstart", reservation.check_in)
            event.add("dtend", reservation.check_out)
            name = self.property_name(reservation.property_id)
            if name:
                event.add("location", name)
            cal.add_component(event)
        for schedule in self.filtered_cleanings:
            event = IcsEvent()
            event.add("uid", f"cleaning-{schedule.id}@stayops")
            event.add("summary", f"Cleaning ({schedule.status.display_name})")
            event.add("dtstart", schedule.scheduled_start)
            event.add("dtend", schedule.scheduled_end or schedule.scheduled_start)
            name = self.property_name(schedule.property_id)
            if name:
                event.add("location", name)
            cal.add_component(event)
        return cal.to_ical()

    def fetch_listing_events(self, prop: Property) -> list[dict]:
        """Read the listing's own iCal feed; empty when it has none or it fails."""
        if not prop.ical_url:
            return []
        client = self._http or httpx.Client(timeout=30, follow_redirects=True)
        try:
            resp = client.get(prop.ical_url)
            resp.raise_for_status()
        except httpx.HTTPError:
            logger.exception("Failed to fetch iCal from %s", prop.ical_url)
            return []
        finally:
            if self._http is None:
                client.close()
        return parse_listing_feed(resp.text)
