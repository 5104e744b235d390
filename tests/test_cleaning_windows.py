"""Tests for the allowed cleaning window between stays."""

from datetime import datetime, timedelta, timezone

import pytest

from stayops.exceptions import CleaningWindowError
from stayops.models.reservation import Reservation
from stayops.modules.cleaning import (
    CleaningWindow,
    cleaning_window,
    default_proposal,
    next_check_in,
    previous_checkout,
    validate_times,
    validation_error,
)
from tests.fixtures.fake_supabase import new_id, reservation_row

BASE = datetime(2026, 7, 1, 15, tzinfo=timezone.utc)
PROPERTY = new_id()


def _stay(start_days: float, nights: float, property_id: str = PROPERTY) -> Reservation:
    check_in = BASE + timedelta(days=start_days)
    return Reservation.from_row(reservation_row(property_id, check_in, check_in + timedelta(days=nights, hours=-4)))


@pytest.fixture
def stays():
    first = _stay(0, 3)    # Jul 1 15:00 -> Jul 4 11:00
    second = _stay(5, 2)   # Jul 6 15:00 -> Jul 8 11:00
    third = _stay(10, 2)   # Jul 11 15:00 -> Jul 13 11:00
    elsewhere = _stay(4, 1, property_id=new_id())
    return first, second, third, elsewhere


def test_next_check_in_is_earliest_later_arrival_at_same_property(stays):
    first, second, third, elsewhere = stays
    assert next_check_in(first, [third, elsewhere, second, first]) == second.check_in


def test_next_check_in_none_for_last_stay(stays):
    first, second, third, _ = stays
    assert next_check_in(third, [first, second, third]) is None


def test_previous_checkout_only_counts_past_departures(stays):
    first, second, third, _ = stays
    now = BASE + timedelta(days=6)
    # first checked out before now; second has not checked out yet
    assert previous_checkout(third, [first, second, third], now=now) == first.check_out
    later = BASE + timedelta(days=9)
    assert previous_checkout(third, [first, second, third], now=later) == second.check_out


def test_previous_checkout_ignores_other_properties(stays):
    first, second, _, elsewhere = stays
    assert previous_checkout(second, [elsewhere], now=BASE + timedelta(days=30)) is None


def test_cleaning_window_spans_checkout_to_next_check_in(stays):
    first, second, third, _ = stays
    window = cleaning_window(first, [first, second, third])
    assert window.start == first.check_out
    assert window.end == second.check_in


def test_default_proposal_starts_at_previous_checkout(stays):
    first, second, _, _ = stays
    start, end = default_proposal(second, [first, second], now=BASE + timedelta(days=5))
    assert start == first.check_out
    assert end == second.check_in


def test_default_proposal_without_previous_checkout_uses_check_in(stays):
    first, _, _, _ = stays
    assert default_proposal(first, [first], now=BASE) == (first.check_in, first.check_in)


@pytest.mark.parametrize(
    "start_h, end_h, message",
    [
        (3, 2, "Start time must be before end time"),
        (-1, 2, "Start time must be after checkout time"),
        (30, 31, "Start time must be before next check-in"),
        (1, 30, "End time must be before next check-in"),
    ],
)
def test_validation_messages_in_order(start_h, end_h, message):
    window = CleaningWindow(start=BASE, end=BASE + timedelta(hours=24))
    with pytest.raises(CleaningWindowError, match=message):
        validate_times(BASE + timedelta(hours=start_h), BASE + timedelta(hours=end_h), window)


def test_open_ended_window_only_checks_start():
    window = CleaningWindow(start=BASE)
    assert validation_error(BASE + timedelta(days=9), BASE + timedelta(days=10), window) is None


def test_without_window_only_order_is_checked():
    assert validation_error(BASE - timedelta(days=3), BASE) is None
    assert validation_error(BASE, BASE) == "Start time must be before end time"


def test_window_messages():
    closed = CleaningWindow(start=BASE, end=BASE + timedelta(hours=28))
    # BASE is 11:00 AM Eastern (EDT)
    assert closed.message == "Must be between 7/1/26, 11:00 AM and 7/2/26, 3:00 PM"
    assert CleaningWindow(start=BASE).message == "Must be after 7/1/26, 11:00 AM"
