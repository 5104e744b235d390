"""Allowed cleaning times between one guest's checkout and the next check-in."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from stayops.exceptions import CleaningWindowError
from stayops.models.reservation import Reservation
from stayops.timeutils import format_short, utcnow


@dataclass(frozen=True)
class CleaningWindow:
    start: datetime
    end: datetime | None = None

    @property
    def message(self) -> str:
        if self.end is not None:
            return f"Must be between {format_short(self.start)} and {format_short(self.end)}"
        return f"Must be after {format_short(self.start)}"


def _same_property(reservation: Reservation, others: Iterable[Reservation]) -> list[Reservation]:
    return [
        r for r in others
        if r.property_id == reservation.property_id and r.id != reservation.id
    ]


def next_check_in(reservation: Reservation, reservations: Iterable[Reservation]) -> datetime | None:
    """Earliest check-in at the same property after this reservation checks out."""
    later = [
        r.check_in for r in _same_property(reservation, reservations)
        if r.check_in > reservation.check_out
    ]
    return min(later) if later else None


def previous_checkout(
    reservation: Reservation,
    reservations: Iterable[Reservation],
    now: datetime | None = None,
) -> datetime | None:
    """Latest past checkout at the same property before this reservation arrives."""
    now = now or utcnow()
    earlier = [
        r.check_out for r in _same_property(reservation, reservations)
        if r.check_out < reservation.check_in and r.check_out < now
    ]
    return max(earlier) if earlier else None


def cleaning_window(reservation: Reservation, reservations: Iterable[Reservation]) -> CleaningWindow:
    return CleaningWindow(
        start=reservation.check_out,
        end=next_check_in(reservation, reservations),
    )


def default_proposal(
    reservation: Reservation,
    reservations: Iterable[Reservation],
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Pre-filled start/end for scheduling a cleaning ahead of ``reservation``."""
    start = previous_checkout(reservation, reservations, now) or reservation.check_in
    return start, reservation.check_in


def validate_times(start: datetime, end: datetime, window: CleaningWindow | None = None) -> None:
    """Raise :class:`CleaningWindowError` for the first rule the times break.

    Without a window only the ordering of ``start`` and ``end`` is checked.
    """
    if start >= end:
        raise CleaningWindowError("Start time must be before end time")
    if window is None:
        return
    if start < window.start:
        raise CleaningWindowError("Start time must be after checkout time")
    if window.end is not None:
        if start >= window.end:
            raise CleaningWindowError("Start time must be before next check-in")
        if end > window.end:
            raise CleaningWindowError("End time must be before next check-in")


def validation_error(start: datetime, end: datetime, window: CleaningWindow | None = None) -> str | None:
    """Same rules as :func:`validate_times`, returned as text instead of raised."""
    try:
        validate_times(start, end, window)
    except CleaningWindowError as exc:
        return str(exc)
    return None
