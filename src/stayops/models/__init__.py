"""Records mirroring the remote tables."""

from stayops.models.checklist import (
    MANAGER_CHECKLIST_TYPES,
    Checklist,
    ChecklistPropertyStatus,
    ChecklistType,
)
from stayops.models.cleaning import CleaningSchedule, CleaningStatus
from stayops.models.maintenance import (
    MaintenanceReport,
    RecurrencePattern,
    RecurringTask,
    ReportStatus,
    ReportType,
    Severity,
)
from stayops.models.notification import AppNotification, Device
from stayops.models.profile import UserProfile, UserRole
from stayops.models.property import Property, PropertyStatus
from stayops.models.reservation import Reservation, ReservationStatus

__all__ = [
    "MANAGER_CHECKLIST_TYPES",
    "AppNotification",
    "Checklist",
    "ChecklistPropertyStatus",
    "ChecklistType",
    "CleaningSchedule",
    "CleaningStatus",
    "Device",
    "MaintenanceReport",
    "Property",
    "PropertyStatus",
    "RecurrencePattern",
    "RecurringTask",
    "ReportStatus",
    "ReportType",
    "Reservation",
    "ReservationStatus",
    "Severity",
    "UserProfile",
    "UserRole",
]
