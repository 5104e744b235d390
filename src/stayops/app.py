"""FastAPI application exposing each screen's operations as JSON routes."""

from __future__ import annotations

import base64
import binascii
import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from uuid import UUID

from apscheduler.schedulers.base import BaseScheduler
from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from stayops.backend import Backend, create_backend
from stayops.config import get_setting
from stayops.exceptions import (
    AuthenticationError,
    BackendError,
    NotAuthenticatedError,
    ValidationError,
)
from stayops.models.checklist import Checklist, ChecklistPropertyStatus, ChecklistType
from stayops.models.cleaning import CleaningSchedule, CleaningStatus
from stayops.models.maintenance import RecurrencePattern, RecurringTask, ReportType, Severity
from stayops.models.profile import UserRole
from stayops.models.reservation import Reservation, ReservationStatus
from stayops.modules.auth import AuthManager
from stayops.modules.calendar import CalendarManager
from stayops.modules.checklists import ChecklistManager, template_for
from stayops.modules.cleaning import CleaningManager, cleaning_window, validate_times
from stayops.modules.dashboard import DashboardManager
from stayops.modules.maintenance import MaintenanceManager, RecurringTaskManager, can_update_status
from stayops.modules.notifications import DeviceRegistrar, NotificationFilter, NotificationManager
from stayops.modules.properties import PropertiesManager, PropertyDetail
from stayops.modules.reservations import ReservationsManager
from stayops.scheduler import create_scheduler, watch_for_approval

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting StayOps...")
    scheduler = create_scheduler()
    scheduler.start()
    app.state.scheduler = scheduler
    logger.info("Scheduler started.")

    yield

    scheduler.shutdown()
    logger.info("StayOps shut down.")


app = FastAPI(title="StayOps", lifespan=lifespan)


# --- Error mapping ---

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    logger.error("Backend error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


def _check(ok, manager) -> None:
    """Turn a manager's failed action into a 502 carrying its error message."""
    if not ok:
        raise HTTPException(status_code=502, detail=manager.error_message or "Request failed")


# --- Dependencies ---

def get_anonymous_backend() -> Backend:
    return create_backend()


security = HTTPBearer(auto_error=False)


def get_backend(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    x_refresh_token: str = Header(default=""),
) -> Backend:
    """Backend bound to the caller's session (``Authorization: Bearer <jwt>``)."""
    if credentials is None or not credentials.credentials:
        raise NotAuthenticatedError("Missing bearer token")
    return Backend.with_session(credentials.credentials, x_refresh_token)


def get_scheduler(request: Request) -> BaseScheduler:
    return request.app.state.scheduler


# --- Request bodies ---

class SignInRequest(BaseModel):
    email: str
    password: str


class SignUpRequest(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str
    requested_role: UserRole


class ScheduleCleaningRequest(BaseModel):
    reservation_id: UUID
    scheduled_start: datetime
    scheduled_end: datetime


class CleaningTimesRequest(BaseModel):
    scheduled_start: datetime
    scheduled_end: datetime


class CleaningStatusRequest(BaseModel):
    status: CleaningStatus


class ChecklistItemsRequest(BaseModel):
    items: dict[str, bool]
    cleaning_schedule_id: UUID | None = None
    property_status: ChecklistPropertyStatus = ChecklistPropertyStatus.READY


class AdHocCleaningRequest(BaseModel):
    property_id: UUID
    items: dict[str, bool]


class MaintenanceReportRequest(BaseModel):
    property_id: UUID
    title: str
    description: str
    severity: Severity
    report_type: ReportType = ReportType.MAINTENANCE
    location: str = ""
    photos: list[str] = Field(default_factory=list, description="Base64-encoded JPEG images")


class RecurringTaskRequest(BaseModel):
    title: str
    due_date: date
    recurrence_pattern: RecurrencePattern = RecurrencePattern.ONE_TIME


class CompletedRequest(BaseModel):
    completed: bool


class ReadStatusRequest(BaseModel):
    is_read: bool


class DeviceRequest(BaseModel):
    push_token: str = Field(description="Hex-encoded device token")
    platform: str = "ios"
    device_name: str | None = None
    os_version: str | None = None


# --- Auth ---

def _auth_payload(auth: AuthManager) -> dict:
    return {
        "access_state": auth.access_state.value,
        "profile": auth.user_profile,
    }


@app.post("/auth/sign-in")
def sign_in(body: SignInRequest, backend: Backend = Depends(get_anonymous_backend)):
    auth = AuthManager(backend)
    if not auth.sign_in(body.email, body.password):
        raise HTTPException(status_code=401, detail=auth.error_message)
    session = backend.session()
    payload = _auth_payload(auth)
    if session is not None:
        payload["access_token"] = session.access_token
        payload["refresh_token"] = session.refresh_token
    return payload


@app.post("/auth/sign-up", status_code=201)
def sign_up(body: SignUpRequest, backend: Backend = Depends(get_anonymous_backend)):
    auth = AuthManager(backend)
    _check(
        auth.sign_up(body.email, body.password, body.first_name, body.last_name, body.requested_role),
        auth,
    )
    return {"access_state": auth.access_state.value}


@app.post("/auth/sign-out")
def sign_out(backend: Backend = Depends(get_backend)):
    auth = AuthManager(backend)
    _check(auth.sign_out(), auth)
    return {"access_state": auth.access_state.value}


@app.get("/auth/me")
def me(backend: Backend = Depends(get_backend)):
    auth = AuthManager(backend)
    auth.check_auth_status()
    return _auth_payload(auth)


@app.post("/auth/approval-watch")
def watch_approval(
    backend: Backend = Depends(get_backend),
    scheduler: BaseScheduler = Depends(get_scheduler),
):
    """Start polling until an admin approves the caller's profile."""
    auth = AuthManager(backend)
    auth.check_auth_status()
    watcher = watch_for_approval(auth, scheduler, backend.current_user_id())
    return {"access_state": auth.access_state.value, "watching": watcher.is_running}


# --- Dashboard ---

@app.get("/dashboard")
def dashboard(backend: Backend = Depends(get_backend)):
    manager = DashboardManager(backend)
    role = manager.current_role()
    manager.load_data()
    return manager.summary_for(role)


# --- Properties & reservations ---

@app.get("/properties")
def list_properties(backend: Backend = Depends(get_backend)):
    manager = PropertiesManager(backend)
    return manager.load_properties()


@app.get("/properties/{property_id}")
def property_detail(property_id: UUID, backend: Backend = Depends(get_backend)):
    detail = PropertyDetail(backend)
    detail.load_data(property_id)
    return {
        "current_reservation": detail.current_reservation,
        "upcoming_reservations": detail.upcoming_reservations,
        "cleaning_schedules": detail.cleaning_schedules,
        "maintenance_reports": [
            {"report": r, "reporter_name": detail.reporter_name(r.reporter_id)}
            for r in detail.maintenance_reports
        ],
    }


@app.get("/reservations")
def reservations(backend: Backend = Depends(get_backend)):
    manager = ReservationsManager(backend)
    manager.load_data()
    return {
        "active": manager.active_reservations,
        "upcoming": manager.upcoming_reservations,
        "property_names": {str(k): v for k, v in manager.property_names.items()},
    }


@app.get("/reservations/{reservation_id}/cleanings")
def reservation_cleanings(reservation_id: UUID, property_id: UUID, backend: Backend = Depends(get_backend)):
    return ReservationsManager(backend).load_cleaning_schedules(property_id, reservation_id)


# --- Calendar ---

def _calendar(backend: Backend, property_id: UUID | None) -> CalendarManager:
    manager = CalendarManager(backend)
    manager.load_data()
    manager.select_property(property_id)
    return manager


@app.get("/calendar")
def calendar_month(
    year: int | None = None,
    month: int | None = None,
    property_id: UUID | None = None,
    backend: Backend = Depends(get_backend),
):
    manager = _calendar(backend, property_id)
    if month is not None and not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    return {
        "year": year or manager.year,
        "month": month or manager.month,
        "days": manager.month_grid(year, month),
    }


@app.get("/calendar.ics")
def calendar_ics(property_id: UUID | None = None, backend: Backend = Depends(get_backend)):
    manager = _calendar(backend, property_id)
    return Response(content=manager.export_ics(), media_type="text/calendar")


# --- Cleaning ---

@app.get("/cleaning")
def cleaning(backend: Backend = Depends(get_backend)):
    manager = CleaningManager(backend)
    manager.load_cleaning_schedules()
    if manager.error_message:
        raise HTTPException(status_code=502, detail=manager.error_message)
    return {
        "schedules": manager.cleaning_schedules,
        "upcoming": manager.upcoming_cleanings,
        "active": manager.active_cleanings,
    }


@app.get("/cleaning/needing-schedule")
def cleanings_needing_schedule(property_id: UUID | None = None, backend: Backend = Depends(get_backend)):
    manager = CleaningManager(backend)
    manager.load_cleaning_schedules()
    manager.load_available_reservations()
    return manager.reservations_needing_cleaning(property_id)


def _reservation(backend: Backend, reservation_id: UUID) -> Reservation:
    row = backend.fetch_one(backend.table("reservations").select("*").eq("id", str(reservation_id)))
    if row is None:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return Reservation.from_row(row)


def _schedule(backend: Backend, schedule_id: UUID) -> CleaningSchedule:
    row = backend.fetch_one(backend.table("cleaning_schedules").select("*").eq("id", str(schedule_id)))
    if row is None:
        raise HTTPException(status_code=404, detail="Cleaning schedule not found")
    return CleaningSchedule.from_row(row)


@app.post("/cleaning", status_code=201)
def schedule_cleaning(body: ScheduleCleaningRequest, backend: Backend = Depends(get_backend)):
    validate_times(body.scheduled_start, body.scheduled_end)
    manager = CleaningManager(backend)
    reservation = _reservation(backend, body.reservation_id)
    _check(manager.schedule_cleaning(reservation, body.scheduled_start, body.scheduled_end), manager)
    return manager.cleaning_schedules


@app.patch("/cleaning/{schedule_id}/times")
def update_cleaning_times(schedule_id: UUID, body: CleaningTimesRequest, backend: Backend = Depends(get_backend)):
    manager = CleaningManager(backend)
    schedule = _schedule(backend, schedule_id)
    window = None
    if schedule.reservation_id is not None:
        reservation = _reservation(backend, schedule.reservation_id)
        same_property = Reservation.from_rows(backend.fetch(
            backend.table("reservations")
            .select("*")
            .eq("property_id", str(reservation.property_id))
            .eq("status", ReservationStatus.CONFIRMED.value)
        ))
        window = cleaning_window(reservation, same_property)
    validate_times(body.scheduled_start, body.scheduled_end, window)
    _check(manager.update_schedule_times(schedule, body.scheduled_start, body.scheduled_end, window), manager)
    return manager.refresh_schedule(schedule_id)


@app.patch("/cleaning/{schedule_id}/status")
def update_cleaning_status(schedule_id: UUID, body: CleaningStatusRequest, backend: Backend = Depends(get_backend)):
    manager = CleaningManager(backend)
    schedule = _schedule(backend, schedule_id)
    _check(manager.update_status(schedule, body.status), manager)
    return manager.refresh_schedule(schedule_id)


# --- Checklists ---

def _checklist(backend: Backend, checklist_id: UUID) -> Checklist:
    row = backend.fetch_one(backend.table("checklists").select("*").eq("id", str(checklist_id)))
    if row is None:
        raise HTTPException(status_code=404, detail="Checklist not found")
    return Checklist.from_row(row)


@app.get("/checklists")
def checklists(backend: Backend = Depends(get_backend)):
    return ChecklistManager(backend).load_checklists()


@app.get("/checklists/after-checkout")
def after_checkout_checklists(backend: Backend = Depends(get_backend)):
    return ChecklistManager(backend).load_after_checkout_cleaning_checklists()


@app.get("/checklists/templates/{checklist_type}")
def checklist_template(checklist_type: ChecklistType):
    return [{"title": title, "items": items} for title, items in template_for(checklist_type)]


@app.get("/properties/{property_id}/manager-checklists")
def property_manager_checklists(property_id: UUID, backend: Backend = Depends(get_backend)):
    found = ChecklistManager(backend).manager_checklists_for_property(property_id)
    return {kind.value: checklist for kind, checklist in found.items()}


@app.post("/checklists/{checklist_id}/complete")
def complete_checklist(checklist_id: UUID, body: ChecklistItemsRequest, backend: Backend = Depends(get_backend)):
    manager = ChecklistManager(backend)
    checklist = _checklist(backend, checklist_id)
    if checklist.checklist_type == ChecklistType.CLEANING:
        ok = manager.complete_cleaning(checklist, body.items, body.cleaning_schedule_id)
    elif checklist.checklist_type == ChecklistType.SUPPLIES:
        ok = manager.complete_supplies(checklist, body.items)
    else:
        ok = manager.complete_manager(checklist, body.items, body.property_status)
    _check(ok, manager)
    return {"checklist_id": str(checklist_id), "completed": True}


@app.post("/checklists/ad-hoc-cleaning", status_code=201)
def ad_hoc_cleaning(body: AdHocCleaningRequest, backend: Backend = Depends(get_backend)):
    manager = ChecklistManager(backend)
    _check(manager.submit_ad_hoc_cleaning(body.property_id, body.items), manager)
    return {"property_id": str(body.property_id), "completed": True}


# --- Maintenance ---

@app.get("/maintenance")
def maintenance(backend: Backend = Depends(get_backend)):
    manager = MaintenanceManager(backend)
    manager.load_data()
    return [
        {
            "report": r,
            "property_name": manager.property_name(r.property_id),
            "reporter_name": manager.reporter_name(r.reporter_id),
        }
        for r in manager.reports
    ]


@app.post("/maintenance", status_code=201)
def create_maintenance_report(body: MaintenanceReportRequest, backend: Backend = Depends(get_backend)):
    try:
        photos = [base64.b64decode(p, validate=True) for p in body.photos]
    except binascii.Error as exc:
        raise ValidationError(f"Invalid photo encoding: {exc}") from exc
    manager = MaintenanceManager(backend)
    report = manager.create_report(
        body.property_id,
        body.title,
        body.description,
        body.severity,
        report_type=body.report_type,
        location=body.location,
        photos=photos,
    )
    _check(report is not None, manager)
    return report


@app.post("/maintenance/{report_id}/resolve")
def resolve_maintenance_report(report_id: UUID, backend: Backend = Depends(get_backend)):
    manager = MaintenanceManager(backend)
    if not can_update_status(manager.current_role()):
        raise HTTPException(status_code=403, detail="Only owners and property managers can resolve reports")
    report = manager.resolve_report(report_id)
    if report is None and manager.error_message:
        raise HTTPException(status_code=502, detail=manager.error_message)
    return report


@app.get("/properties/{property_id}/tasks")
def recurring_tasks(property_id: UUID, backend: Backend = Depends(get_backend)):
    manager = RecurringTaskManager(backend)
    manager.load_tasks(property_id)
    return {"now_due": manager.now_due, "upcoming": manager.upcoming}


@app.post("/properties/{property_id}/tasks", status_code=201)
def create_recurring_task(property_id: UUID, body: RecurringTaskRequest, backend: Backend = Depends(get_backend)):
    manager = RecurringTaskManager(backend)
    _check(manager.create_task(property_id, body.title, body.due_date, body.recurrence_pattern), manager)
    return {"created": True}


@app.post("/tasks/{task_id}/completed")
def set_task_completed(task_id: UUID, body: CompletedRequest, backend: Backend = Depends(get_backend)):
    row = backend.fetch_one(backend.table("recurring_tasks").select("*").eq("id", str(task_id)))
    if row is None:
        raise HTTPException(status_code=404, detail="Task not found")
    manager = RecurringTaskManager(backend)
    if not manager.set_completed(RecurringTask.from_row(row), body.completed):
        raise HTTPException(status_code=502, detail="Failed to update task")
    return {"task_id": str(task_id), "completed": body.completed}


# --- Notifications ---

@app.get("/notifications")
def notifications(
    kind: NotificationFilter = Query(default=NotificationFilter.ALL, alias="filter"),
    backend: Backend = Depends(get_backend),
):
    manager = NotificationManager(backend)
    manager.load_notifications()
    manager.selected_filter = kind
    return {"unread_count": manager.unread_count, "groups": manager.grouped()}


@app.patch("/notifications/{notification_id}")
def set_notification_read(notification_id: UUID, body: ReadStatusRequest, backend: Backend = Depends(get_backend)):
    manager = NotificationManager(backend)
    manager.load_notifications()
    manager.set_read_status(notification_id, body.is_read)
    return {"unread_count": manager.unread_count}


@app.delete("/notifications/{notification_id}")
def delete_notification(notification_id: UUID, backend: Backend = Depends(get_backend)):
    manager = NotificationManager(backend)
    manager.load_notifications()
    manager.delete_notification(notification_id)
    return {"unread_count": manager.unread_count}


@app.post("/devices")
def register_device(body: DeviceRequest, backend: Backend = Depends(get_backend)):
    try:
        token = bytes.fromhex(body.push_token)
    except ValueError as exc:
        raise ValidationError("push_token must be hex-encoded") from exc
    device = DeviceRegistrar(backend).register(
        token,
        platform_name=body.platform,
        device_name=body.device_name,
        os_version=body.os_version,
    )
    return {"registered": device is not None}


def main() -> None:
    """Entry point for running the app."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    uvicorn.run(
        "stayops.app:app",
        host=get_setting("server", "host", "127.0.0.1"),
        port=get_setting("server", "port", 8000),
        reload=False,
    )


if __name__ == "__main__":
    main()
