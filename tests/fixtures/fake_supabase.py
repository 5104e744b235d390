"""In-memory stand-in for the Supabase client, plus row builders."""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any

from supabase import AuthError, FunctionsError

from stayops.timeutils import to_iso

USER_ID = "11111111-1111-1111-1111-111111111111"


class FakeAuthError(AuthError):
    def __init__(self, message: str) -> None:
        Exception.__init__(self, message)
        self.message = message


class FakeFunctionsError(FunctionsError):
    def __init__(self, message: str) -> None:
        Exception.__init__(self, message)
        self.message = message


def _matches(value: Any, expected: Any) -> bool:
    if value == expected:
        return True
    return value is not None and str(value) == str(expected)


class FakeQuery:
    """Records PostgREST builder calls and applies them to in-memory rows."""

    def __init__(self, client: FakeClient, table: str) -> None:
        self.client = client
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.on_conflict: str | None = None
        self.filters: list = []
        self.ordering: list[tuple[str, bool]] = []
        self.max_rows: int | None = None
        self.columns = "*"

    # --- Builder ---

    def select(self, columns: str = "*"):
        self.columns = columns
        return self

    def insert(self, data):
        self.op, self.payload = "insert", data
        return self

    def update(self, data):
        self.op, self.payload = "update", data
        return self

    def upsert(self, data, on_conflict: str = ""):
        self.op, self.payload, self.on_conflict = "upsert", data, on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def is_(self, column, value):
        self.filters.append(("is", column, value))
        return self

    def gte(self, column, value):
        self.filters.append(("gte", column, value))
        return self

    def lt(self, column, value):
        self.filters.append(("lt", column, value))
        return self

    def order(self, column, desc: bool = False):
        self.ordering.append((column, desc))
        return self

    def limit(self, count: int):
        self.max_rows = count
        return self

    # --- Execution ---

    def _keep(self, row: dict) -> bool:
        for kind, column, value in self.filters:
            current = row.get(column)
            if kind == "eq" and not _matches(current, value):
                return False
            if kind == "in" and not any(_matches(current, v) for v in value):
                return False
            if kind == "is" and value == "null" and current is not None:
                return False
            if kind == "gte" and (current is None or str(current) < str(value)):
                return False
            if kind == "lt" and (current is None or str(current) >= str(value)):
                return False
        return True

    def execute(self):
        self.client.executed.append(self)
        error = self.client.errors.get((self.table, self.op)) or self.client.errors.get((self.table, None))
        if error is not None:
            raise error

        rows = self.client.tables.setdefault(self.table, [])
        if self.op == "insert":
            new = [dict(r) for r in (self.payload if isinstance(self.payload, list) else [self.payload])]
            for row in new:
                row.setdefault("id", str(uuid.uuid4()))
            rows.extend(new)
            return SimpleNamespace(data=copy.deepcopy(new))
        if self.op == "upsert":
            row = dict(self.payload)
            for i, existing in enumerate(rows):
                if self.on_conflict and existing.get(self.on_conflict) == row.get(self.on_conflict):
                    rows[i] = row
                    break
            else:
                rows.append(row)
            return SimpleNamespace(data=[copy.deepcopy(row)])

        selected = [r for r in rows if self._keep(r)]
        if self.op == "update":
            for row in selected:
                row.update(self.payload)
            return SimpleNamespace(data=copy.deepcopy(selected))
        if self.op == "delete":
            self.client.tables[self.table] = [r for r in rows if r not in selected]
            return SimpleNamespace(data=copy.deepcopy(selected))

        for column, desc in reversed(self.ordering):
            selected.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
        if self.max_rows is not None:
            selected = selected[: self.max_rows]
        return SimpleNamespace(data=copy.deepcopy(selected))


class FakeAuth:
    def __init__(self, user_id: str | None = USER_ID) -> None:
        self.current = self._session(user_id) if user_id else None
        self.sign_in_error: Exception | None = None
        self.sign_up_error: Exception | None = None
        self.new_user_id = "22222222-2222-2222-2222-222222222222"

    @staticmethod
    def _session(user_id: str):
        return SimpleNamespace(
            user=SimpleNamespace(id=user_id),
            access_token="access-token",
            refresh_token="refresh-token",
        )

    def get_session(self):
        return self.current

    def set_session(self, access_token, refresh_token):
        self.current = self._session(USER_ID)

    def sign_in_with_password(self, credentials):
        if self.sign_in_error is not None:
            raise self.sign_in_error
        self.current = self._session(USER_ID)
        return SimpleNamespace(session=self.current, user=self.current.user)

    def sign_up(self, credentials):
        if self.sign_up_error is not None:
            raise self.sign_up_error
        return SimpleNamespace(user=SimpleNamespace(id=self.new_user_id), session=None)

    def sign_out(self):
        self.current = None


class FakeFunctions:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []
        self.errors: dict[str, Exception] = {}

    def invoke(self, function_name, invoke_options=None):
        body = (invoke_options or {}).get("body")
        self.calls.append((function_name, body))
        if function_name in self.errors:
            raise self.errors[function_name]
        return b"{}"


class FakeBucket:
    def __init__(self, storage: FakeStorage, name: str) -> None:
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.storage.error is not None:
            raise self.storage.error
        self.storage.uploads.append((self.name, path, file, file_options))
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://test.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self) -> None:
        self.uploads: list[tuple] = []
        self.error: Exception | None = None

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeClient:
    """Enough of ``supabase.Client`` for the screen managers."""

    def __init__(self, user_id: str | None = USER_ID) -> None:
        self.tables: dict[str, list[dict]] = {}
        self.errors: dict[tuple[str, str | None], Exception] = {}
        self.executed: list[FakeQuery] = []
        self.auth = FakeAuth(user_id)
        self.functions = FakeFunctions()
        self.storage = FakeStorage()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, *rows: dict) -> None:
        self.tables.setdefault(table, []).extend(rows)

    def fail(self, table: str, exc: Exception, op: str | None = None) -> None:
        self.errors[(table, op)] = exc


# --- Row builders ---

def new_id() -> str:
    return str(uuid.uuid4())


def ts(dt: datetime) -> str:
    return to_iso(dt)


def property_row(**overrides) -> dict:
    row = {
        "id": new_id(),
        "name": "Three Suns Beach House",
        "short_name": None,
        "address": "1 Ocean Dr",
        "airbnb_listing_id": None,
        "ical_url": None,
        "status": "vacant_ready",
    }
    row.update(overrides)
    return row


def reservation_row(property_id: str, check_in: datetime, check_out: datetime, **overrides) -> dict:
    row = {
        "id": new_id(),
        "property_id": property_id,
        "airbnb_reservation_id": None,
        "guest_name": "Jane Guest",
        "guest_count": 4,
        "check_in": ts(check_in),
        "check_out": ts(check_out),
        "status": "confirmed",
    }
    row.update(overrides)
    return row


def schedule_row(property_id: str, start: datetime, end: datetime | None = None, **overrides) -> dict:
    row = {
        "id": new_id(),
        "property_id": property_id,
        "reservation_id": None,
        "cleaner_id": USER_ID,
        "scheduled_start": ts(start),
        "scheduled_end": ts(end) if end else None,
        "status": "scheduled",
        "completed_at": None,
    }
    row.update(overrides)
    return row


def checklist_row(property_id: str, checklist_type: str | None = "inspection", **overrides) -> dict:
    row = {
        "id": new_id(),
        "property_id": property_id,
        "reservation_id": None,
        "manager_id": USER_ID,
        "items": {},
        "completed_at": None,
        "property_status": None,
        "checklist_type": checklist_type,
    }
    row.update(overrides)
    return row


def report_row(property_id: str, **overrides) -> dict:
    row = {
        "id": new_id(),
        "property_id": property_id,
        "reporter_id": USER_ID,
        "title": "Leaking faucet",
        "description": "Kitchen sink drips",
        "severity": "medium",
        "status": "reported",
        "photos": [],
        "created_at": ts(datetime.now(timezone.utc)),
        "report_type": "maintenance",
        "location": None,
        "resolved_at": None,
    }
    row.update(overrides)
    return row


def profile_row(user_id: str = USER_ID, role: str | None = "property_manager", **overrides) -> dict:
    row = {
        "id": user_id,
        "first_name": "Pat",
        "last_name": "Manager",
        "role": role,
        "is_verified": True,
        "verified_at": None,
        "requested_role": role,
    }
    row.update(overrides)
    return row


def notification_row(sent_at: datetime, type: str = "cleaning_scheduled", **overrides) -> dict:
    row = {
        "id": new_id(),
        "user_id": USER_ID,
        "title": "Cleaning scheduled",
        "body": "A cleaning was scheduled.",
        "type": type,
        "related_id": None,
        "is_read": False,
        "sent_at": ts(sent_at),
        "is_important": False,
    }
    row.update(overrides)
    return row


def hours(n: float) -> timedelta:
    return timedelta(hours=n)
