"""Tests for record decoding and derived properties."""

from datetime import date, datetime, timedelta, timezone

from stayops.models import (
    AppNotification,
    Checklist,
    ChecklistPropertyStatus,
    CleaningStatus,
    MaintenanceReport,
    Property,
    PropertyStatus,
    RecurringTask,
    Reservation,
    Severity,
    UserProfile,
    UserRole,
)
from tests.fixtures.fake_supabase import (
    checklist_row,
    new_id,
    notification_row,
    profile_row,
    property_row,
    report_row,
    reservation_row,
)


def test_property_display_name_prefers_trimmed_short_name():
    prop = Property.from_row(property_row(name="Three Suns Beach House", short_name="  Suns  "))
    assert prop.display_name == "Suns"


def test_property_display_name_falls_back_to_name():
    assert Property.from_row(property_row(short_name="   ")).display_name == "Three Suns Beach House"
    assert Property.from_row(property_row(short_name=None)).display_name == "Three Suns Beach House"


def test_property_status_display_names():
    assert PropertyStatus.VACANT_READY.display_name == "Vacant - Ready"
    assert PropertyStatus.NEEDS_CLEANING.display_name == "Needs Cleaning"


def test_unknown_columns_are_ignored():
    prop = Property.from_row(property_row(bedrooms=3, created_at="2026-01-01T00:00:00+00:00"))
    assert not hasattr(prop, "bedrooms")


def test_reservation_is_active_only_while_confirmed_and_in_house():
    now = datetime(2026, 3, 10, 12, tzinfo=timezone.utc)
    row = reservation_row(new_id(), now - timedelta(days=1), now + timedelta(days=1))
    assert Reservation.from_row(row).is_active(now)
    assert not Reservation.from_row({**row, "status": "cancelled"}).is_active(now)
    assert not Reservation.from_row(row).is_active(now + timedelta(days=2))


def test_reservation_nights():
    start = datetime(2026, 3, 10, 16, tzinfo=timezone.utc)
    res = Reservation.from_row(reservation_row(new_id(), start, start + timedelta(days=3, hours=-6)))
    assert res.nights == 3


def test_cleaning_status_display_name():
    assert CleaningStatus.IN_PROGRESS.display_name == "In Progress"


def test_checklist_items_and_completion():
    checklist = Checklist.from_row(checklist_row(new_id(), "cleaning", items={"Kitchen": True}))
    assert checklist.items == {"Kitchen": True}
    assert not checklist.is_completed
    done = Checklist.from_row(checklist_row(new_id(), completed_at="2026-03-10T12:00:00+00:00"))
    assert done.is_completed
    assert ChecklistPropertyStatus.READY.display_name == "Ready for Use"


def test_severity_priority_rank_orders_urgent_first():
    ranked = sorted(Severity, key=lambda s: s.priority_rank)
    assert ranked == [Severity.URGENT, Severity.HIGH, Severity.MEDIUM, Severity.LOW]


def test_maintenance_report_optional_fields():
    report = MaintenanceReport.from_row(report_row(new_id(), photos=None, report_type=None))
    assert report.photos is None
    assert report.report_type is None


def test_profile_full_name_and_role():
    profile = UserProfile.from_row(profile_row(role="cleaning_staff", first_name="Ana", last_name="Lopez"))
    assert profile.full_name == "Ana Lopez"
    assert profile.role is UserRole.CLEANING_STAFF
    assert UserRole.PROPERTY_MANAGER.display_name == "Property Manager"


def test_profile_without_verification_flag_is_unverified():
    row = profile_row()
    del row["is_verified"]
    assert UserProfile.from_row(row).is_verified is False


def test_notification_null_flags_default_to_false():
    row = notification_row(datetime.now(timezone.utc), is_read=None, is_important=None)
    notification = AppNotification.from_row(row)
    assert notification.is_read is False
    assert notification.is_important is False
    assert notification.with_read(True).is_read is True
    assert notification.is_read is False


def test_recurring_task_due_date_parsing():
    task = RecurringTask.from_row({
        "id": new_id(), "property_id": new_id(), "title": "Change HVAC Filters",
        "due_date": "2026-03-01", "recurrence_pattern": "monthly",
    })
    assert task.due_date == date(2026, 3, 1)
    assert task.display_name == "Change HVAC Filters (3/1/26) (Monthly)"


def test_recurring_task_unparseable_due_date_is_undated():
    task = RecurringTask.from_row({
        "id": new_id(), "property_id": new_id(), "title": "Check welcome book",
        "due_date": "someday", "recurrence_pattern": "one_time",
    })
    assert task.due_date is None
    assert task.display_name == "Check welcome book"


def test_to_row_serializes_wire_values():
    prop = Property.from_row(property_row(status="needs_maintenance"))
    row = prop.to_row()
    assert row["status"] == "needs_maintenance"
    assert isinstance(row["id"], str)
