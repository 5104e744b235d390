"""Maintenance and damage reports: listing, photo upload, creation, resolution."""

from __future__ import annotations

import logging
import uuid
from uuid import UUID

from stayops.backend import Backend
from stayops.config import get_setting
from stayops.events import Event, EventBus, EventType
from stayops.exceptions import BackendError, ValidationError
from stayops.models.maintenance import MaintenanceReport, ReportStatus, ReportType, Severity
from stayops.models.profile import UserProfile, UserRole
from stayops.models.property import Property
from stayops.modules.base import ScreenManager
from stayops.timeutils import to_iso, utcnow

logger = logging.getLogger(__name__)


def photo_bucket() -> str:
    return get_setting("backend", "photo_bucket", "maintenance-photos")


def sort_by_severity(reports: list[MaintenanceReport]) -> list[MaintenanceReport]:
    """Urgent first; ties keep their incoming order."""
    return sorted(reports, key=lambda r: r.severity.priority_rank)


def can_update_status(role: UserRole | None) -> bool:
    """Owners and property managers may resolve reports."""
    return role in (UserRole.OWNER, UserRole.PROPERTY_MANAGER)


class MaintenanceManager(ScreenManager):
    """Backs the Maintenance list, detail and create screens."""

    def __init__(self, backend: Backend, events: EventBus | None = None) -> None:
        super().__init__(backend, events)
        self.reports: list[MaintenanceReport] = []
        self.properties: list[Property] = []
        self.profiles: list[UserProfile] = []

    def load_data(self) -> None:
        self.is_loading = True
        try:
            self.load_properties()
            self.profiles = self._load_reporter_names()
            self.load_reports()
        finally:
            self.is_loading = False

    def load_properties(self) -> list[Property]:
        try:
            self.properties = self._fetch_properties()
        except BackendError:
            logger.exception("Error loading properties")
        return self.properties

    def load_reports(self) -> list[MaintenanceReport]:
        token = self._begin()
        try:
            rows = self.backend.fetch(
                self.backend.table("maintenance_reports").select("*").order("created_at", desc=True)
            )
        except BackendError:
            logger.exception("Error loading reports")
            return self.reports
        if self._is_current(token):
            self.reports = MaintenanceReport.from_rows(rows)
        return self.reports

    def get_report(self, report_id: UUID) -> MaintenanceReport | None:
        return next((r for r in self.reports if r.id == report_id), None)

    @property
    def open_reports(self) -> list[MaintenanceReport]:
        return sort_by_severity([r for r in self.reports if r.status == ReportStatus.REPORTED])

    # --- Mutations ---

    def upload_photos(self, user_id: str, photos: list[bytes]) -> list[str]:
        """Store each JPEG under the reporter's folder and return public URLs."""
        bucket = photo_bucket()
        urls = []
        for data in photos:
            path = f"{user_id}/{str(uuid.uuid4()).upper()}.jpg"
            self.backend.upload(bucket, path, data, content_type="image/jpeg")
            urls.append(self.backend.public_url(bucket, path))
        return urls

    def create_report(
        self,
        property_id: UUID,
        title: str,
        description: str,
        severity: Severity,
        report_type: ReportType = ReportType.MAINTENANCE,
        location: str = "",
        photos: list[bytes] | None = None,
    ) -> MaintenanceReport | None:
        self.error_message = None
        if not title.strip():
            raise ValidationError("Title is required")

        self.is_loading = True
        try:
            user_id = self.backend.current_user_id()
            photo_urls = self.upload_photos(user_id, photos or [])
            data = {
                "property_id": str(property_id),
                "reporter_id": user_id,
                "title": title,
                "description": description,
                "severity": Severity(severity).value,
                "status": ReportStatus.REPORTED.value,
                "photos": photo_urls,
                "report_type": ReportType(report_type).value,
            }
            if location:
                data["location"] = location
            rows = self.backend.fetch(self.backend.table("maintenance_reports").insert(data))
        except BackendError as exc:
            logger.exception("Error creating maintenance report")
            self.error_message = f"Failed to submit report: {exc}"
            return None
        finally:
            self.is_loading = False

        report = MaintenanceReport.from_row(rows[0]) if rows else None
        logger.info("Created %s report %r for property %s", data["report_type"], title, property_id)
        self.events.publish(Event(
            event_type=EventType.MAINTENANCE_REPORTED,
            data={
                "report_id": str(report.id) if report else None,
                "property_id": str(property_id),
                "severity": data["severity"],
            },
        ))
        if report is not None:
            self.reports = [report] + [r for r in self.reports if r.id != report.id]
        return report

    def resolve_report(self, report_id: UUID) -> MaintenanceReport | None:
        """Mark a report resolved and return the reloaded copy."""
        self.error_message = None
        self.is_loading = True
        try:
            self.backend.fetch(
                self.backend.table("maintenance_reports")
                .update({"status": ReportStatus.RESOLVED.value, "resolved_at": to_iso(utcnow())})
                .eq("id", str(report_id))
            )
        except BackendError as exc:
            logger.exception("Error updating status of report %s", report_id)
            self.error_message = f"Failed to update report: {exc}"
            return None
        finally:
            self.is_loading = False

        self.events.publish(Event(
            event_type=EventType.MAINTENANCE_RESOLVED,
            data={"report_id": str(report_id)},
        ))
        self.load_reports()
        return self.get_report(report_id)
