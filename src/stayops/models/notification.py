"""In-app notifications and push-notification device registrations."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import field_validator

from stayops.models.base import Record


class AppNotification(Record):
    id: UUID
    user_id: UUID
    title: str
    body: str
    type: str
    related_id: UUID | None = None
    is_read: bool = False
    sent_at: datetime
    is_important: bool = False

    @field_validator("is_read", "is_important", mode="before")
    @classmethod
    def _null_is_false(cls, value):
        return False if value is None else value

    def with_read(self, is_read: bool) -> AppNotification:
        return self.model_copy(update={"is_read": is_read})


class Device(Record):
    user_id: UUID
    push_token: str
    platform: str = "ios"
    notifications_enabled: bool = True
    device_name: str | None = None
    os_version: str | None = None
