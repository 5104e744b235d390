"""Sign-in state, profile loading and the wait for account approval."""

from __future__ import annotations

import logging
from enum import Enum

from apscheduler.schedulers.base import BaseScheduler

from stayops.backend import Backend
from stayops.config import get_setting
from stayops.events import Event, EventBus, EventType
from stayops.exceptions import BackendError, ValidationError
from stayops.models.profile import UserProfile, UserRole
from stayops.modules.base import ScreenManager

logger = logging.getLogger(__name__)

CREATE_PROFILE_FUNCTION = "create-profile"


class AccessState(str, Enum):
    LOGGED_OUT = "logged_out"
    PENDING_APPROVAL = "pending_approval"
    READY = "ready"


class AuthManager(ScreenManager):
    """Session and profile of the person using the app."""

    def __init__(self, backend: Backend, events: EventBus | None = None) -> None:
        super().__init__(backend, events)
        self.is_authenticated = False
        self.user_profile: UserProfile | None = None

    @property
    def access_state(self) -> AccessState:
        if not self.is_authenticated:
            return AccessState.LOGGED_OUT
        if self.user_profile is None or not self.user_profile.is_verified:
            return AccessState.PENDING_APPROVAL
        return AccessState.READY

    @property
    def role(self) -> UserRole | None:
        return self.user_profile.role if self.user_profile else None

    def check_auth_status(self) -> bool:
        """Pick up an existing session, if any."""
        try:
            session = self.backend.session()
        except BackendError:
            logger.exception("Error reading session")
            session = None
        if session is None:
            self.is_authenticated = False
            return False
        self.load_user_profile()
        self.is_authenticated = True
        return True

    def sign_in(self, email: str, password: str) -> bool:
        self.is_loading = True
        self.error_message = None
        try:
            self.backend.sign_in(email, password)
        except BackendError as exc:
            logger.warning("Sign in failed for %s: %s", email, exc)
            self.error_message = str(exc)
            self.is_authenticated = False
            return False
        finally:
            self.is_loading = False
        # A missing profile still counts as signed in; the user waits for approval
        self.load_user_profile()
        self.is_authenticated = True
        return True

    def sign_up(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        requested_role: UserRole,
    ) -> bool:
        """Create the account and request a profile; approval happens remotely."""
        if not first_name.strip() or not last_name.strip():
            raise ValidationError("First and last name are required")

        self.is_loading = True
        self.error_message = None
        try:
            user_id = self.backend.sign_up(email, password)
            self.backend.invoke(CREATE_PROFILE_FUNCTION, {
                "user_id": user_id,
                "first_name": first_name,
                "last_name": last_name,
                "requested_role": UserRole(requested_role).value,
            })
        except BackendError as exc:
            logger.warning("Sign up failed for %s: %s", email, exc)
            self.error_message = str(exc)
            return False
        finally:
            self.is_loading = False
        logger.info("Signed up %s, awaiting verification and approval", email)
        self.is_authenticated = False
        return True

    def sign_out(self) -> bool:
        try:
            self.backend.sign_out()
        except BackendError as exc:
            self.error_message = str(exc)
            return False
        self.is_authenticated = False
        self.user_profile = None
        return True

    def load_user_profile(self) -> UserProfile | None:
        try:
            user_id = self.backend.current_user_id()
            row = self.backend.fetch_one(
                self.backend.table("profiles").select("*").eq("id", user_id)
            )
        except BackendError:
            logger.exception("Error loading profile")
            self.user_profile = None
            return None
        self.user_profile = UserProfile.from_row(row) if row else None
        if self.user_profile is not None:
            logger.info(
                "Loaded profile for user %s: verified=%s role=%s",
                user_id,
                self.user_profile.is_verified,
                self.role.value if self.role else None,
            )
        return self.user_profile


class ApprovalWatcher:
    """Re-reads the profile on an interval until an admin approves it."""

    def __init__(
        self,
        auth: AuthManager,
        scheduler: BaseScheduler,
        seconds: float | None = None,
        job_id: str = "approval_poll",
    ) -> None:
        self.auth = auth
        self.scheduler = scheduler
        self.job_id = job_id
        self.seconds = seconds or get_setting("scheduler", "approval_poll_seconds", 5)

    @property
    def is_running(self) -> bool:
        return self.scheduler.get_job(self.job_id) is not None

    def start(self) -> None:
        if self.poll() or self.is_running:
            return
        self.scheduler.add_job(
            self.poll,
            "interval",
            seconds=self.seconds,
            id=self.job_id,
            name="Approval Poll",
            replace_existing=True,
        )
        logger.info("Polling for approval every %ss", self.seconds)

    def poll(self) -> bool:
        """Refresh once; returns True when polling is finished."""
        if self.auth.access_state == AccessState.LOGGED_OUT:
            self.stop()
            return True
        self.auth.load_user_profile()
        if self.auth.access_state != AccessState.READY:
            return False
        profile = self.auth.user_profile
        self.auth.events.publish(Event(
            event_type=EventType.PROFILE_APPROVED,
            data={
                "user_id": str(profile.id),
                "role": profile.role.value if profile.role else None,
            },
        ))
        self.stop()
        return True

    def stop(self) -> None:
        if self.is_running:
            self.scheduler.remove_job(self.job_id)
