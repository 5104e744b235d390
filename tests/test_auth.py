"""Tests for sign-in state and the approval watcher."""

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from stayops.backend import Backend
from stayops.events import EventType
from stayops.exceptions import ValidationError
from stayops.models.profile import UserRole
from stayops.modules.auth import AccessState, ApprovalWatcher, AuthManager
from stayops.scheduler import create_scheduler, watch_for_approval
from tests.fixtures.fake_supabase import USER_ID, FakeAuthError, FakeClient, FakeFunctionsError


@pytest.fixture
def scheduler():
    """A scheduler that is never started; jobs stay pending."""
    return BackgroundScheduler()


class TestAuthManager:
    def test_existing_session(self, backend, as_role):
        as_role("owner")
        auth = AuthManager(backend)

        assert auth.check_auth_status() is True
        assert auth.access_state is AccessState.READY
        assert auth.role is UserRole.OWNER

    def test_no_session(self):
        auth = AuthManager(Backend(FakeClient(user_id=None)))

        assert auth.check_auth_status() is False
        assert auth.access_state is AccessState.LOGGED_OUT
        assert auth.role is None

    def test_sign_in_unverified(self, backend, as_role):
        as_role("cleaning_staff", is_verified=False)
        auth = AuthManager(backend)

        assert auth.sign_in("pat@example.com", "secret") is True
        assert auth.is_authenticated
        assert auth.access_state is AccessState.PENDING_APPROVAL

    def test_sign_in_without_profile_waits_for_approval(self, backend):
        auth = AuthManager(backend)

        assert auth.sign_in("pat@example.com", "secret") is True
        assert auth.user_profile is None
        assert auth.access_state is AccessState.PENDING_APPROVAL

    def test_sign_in_failure(self, client, backend):
        client.auth.sign_in_error = FakeAuthError("Invalid login credentials")
        auth = AuthManager(backend)

        assert auth.sign_in("pat@example.com", "wrong") is False
        assert "Invalid login credentials" in auth.error_message
        assert auth.access_state is AccessState.LOGGED_OUT

    def test_sign_up_requests_profile(self, client, backend):
        auth = AuthManager(backend)

        assert auth.sign_up("new@example.com", "secret", "Sam", "Sweep", UserRole.CLEANING_STAFF) is True

        assert client.functions.calls == [("create-profile", {
            "user_id": client.auth.new_user_id,
            "first_name": "Sam",
            "last_name": "Sweep",
            "requested_role": "cleaning_staff",
        })]
        assert auth.is_authenticated is False

    def test_sign_up_requires_names(self, client, backend):
        auth = AuthManager(backend)
        with pytest.raises(ValidationError):
            auth.sign_up("new@example.com", "secret", "Sam", " ", UserRole.OWNER)
        assert client.functions.calls == []

    def test_sign_up_profile_failure(self, client, backend):
        client.functions.errors["create-profile"] = FakeFunctionsError("duplicate")
        auth = AuthManager(backend)

        assert auth.sign_up("new@example.com", "secret", "Sam", "Sweep", UserRole.OWNER) is False
        assert auth.error_message

    def test_sign_out(self, client, backend, as_role):
        as_role("owner")
        auth = AuthManager(backend)
        auth.check_auth_status()

        assert auth.sign_out() is True
        assert auth.access_state is AccessState.LOGGED_OUT
        assert client.auth.get_session() is None


class TestApprovalWatcher:
    def test_polls_until_approved(self, backend, as_role, scheduler, event_bus):
        as_role("property_manager", is_verified=False)
        received = []
        event_bus.subscribe(EventType.PROFILE_APPROVED, received.append)
        auth = AuthManager(backend, event_bus)
        auth.check_auth_status()
        watcher = ApprovalWatcher(auth, scheduler, seconds=5)

        watcher.start()
        assert watcher.is_running
        assert watcher.poll() is False

        as_role("property_manager", is_verified=True)
        assert watcher.poll() is True

        assert not watcher.is_running
        assert auth.access_state is AccessState.READY
        assert received[0].data == {"user_id": USER_ID, "role": "property_manager"}

    def test_already_approved_does_not_schedule(self, backend, as_role, scheduler):
        as_role("owner")
        auth = AuthManager(backend)
        auth.check_auth_status()
        watcher = ApprovalWatcher(auth, scheduler)

        watcher.start()

        assert not watcher.is_running
        assert scheduler.get_jobs() == []

    def test_stops_when_signed_out(self, backend, as_role, scheduler):
        as_role("owner", is_verified=False)
        auth = AuthManager(backend)
        auth.check_auth_status()
        watcher = ApprovalWatcher(auth, scheduler)
        watcher.start()

        auth.sign_out()

        assert watcher.poll() is True
        assert not watcher.is_running

    def test_watch_for_approval_uses_per_user_job(self, backend, as_role):
        as_role("owner", is_verified=False)
        auth = AuthManager(backend)
        auth.check_auth_status()
        scheduler = create_scheduler()

        watcher = watch_for_approval(auth, scheduler, USER_ID)

        assert watcher.job_id == f"approval_poll:{USER_ID}"
        assert scheduler.get_job(watcher.job_id) is not None
