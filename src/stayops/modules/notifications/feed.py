"""Notification feed: loading, read state, deletion, filters and date grouping."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from uuid import UUID

from stayops.backend import Backend
from stayops.config import get_setting
from stayops.events import Event, EventBus, EventType
from stayops.exceptions import BackendError
from stayops.models.notification import AppNotification
from stayops.modules.base import ScreenManager
from stayops.timeutils import format_day_title, format_medium, local, start_of_day, utcnow, week_bounds

logger = logging.getLogger(__name__)


class NotificationFilter(str, Enum):
    ALL = "all"
    CLEANING = "cleaning"
    RESERVATIONS = "reservations"
    CHECKLISTS = "checklists"
    DAMAGE = "damage"

    @property
    def display_name(self) -> str:
        return self.value.title()


_FILTER_KEYWORDS: dict[NotificationFilter, tuple[str, ...]] = {
    NotificationFilter.CLEANING: ("cleaning",),
    NotificationFilter.RESERVATIONS: ("reservation", "guest"),
    NotificationFilter.CHECKLISTS: ("checklist",),
    NotificationFilter.DAMAGE: ("damage", "maintenance"),
}


def filter_notifications(
    notifications: list[AppNotification],
    selected: NotificationFilter = NotificationFilter.ALL,
) -> list[AppNotification]:
    selected = NotificationFilter(selected)
    if selected == NotificationFilter.ALL:
        return list(notifications)
    keywords = _FILTER_KEYWORDS[selected]
    return [n for n in notifications if any(k in n.type for k in keywords)]


# --- Dates ---

def date_section(sent_at: datetime, now: datetime | None = None) -> str:
    """Today / Yesterday / weekday name this week / ``Month YYYY``."""
    title = _group_title(sent_at, now or utcnow())
    if title == "This Week":
        return f"{local(sent_at):%A}"
    return title


def formatted_date(sent_at: datetime) -> str:
    return format_medium(sent_at)


def time_ago(sent_at: datetime, now: datetime | None = None) -> str:
    """Abbreviated relative time, e.g. ``5 min. ago``."""
    now = now or utcnow()
    seconds = int((now - sent_at).total_seconds())
    if seconds < 0:
        return "just now"
    for size, unit in (
        (365 * 86400, "yr."),
        (30 * 86400, "mo."),
        (7 * 86400, "wk."),
        (86400, "day"),
        (3600, "hr."),
        (60, "min."),
    ):
        if seconds >= size:
            count = seconds // size
            if unit == "day" and count != 1:
                unit = "days"
            return f"{count} {unit} ago"
    return f"{seconds} sec. ago"


@dataclass
class NotificationGroup:
    title: str
    subtitle: str | None
    notifications: list[AppNotification] = field(default_factory=list)


def _group_title(sent_at: datetime, now: datetime) -> str:
    today = start_of_day(now)
    day = start_of_day(sent_at)
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    week_start, week_end = week_bounds(now)
    if week_start <= local(sent_at) < week_end:
        return "This Week"
    return f"{local(sent_at):%B %Y}"


def group_by_section(notifications: list[AppNotification], now: datetime | None = None) -> list[NotificationGroup]:
    """Group by display-timezone day buckets, newest group first.

    Each group's subtitle is the ``Weekday, Mon D`` of the first notification
    placed in it.
    """
    now = now or utcnow()
    groups: dict[str, NotificationGroup] = {}
    for notification in notifications:
        title = _group_title(notification.sent_at, now)
        if title not in groups:
            groups[title] = NotificationGroup(title, format_day_title(notification.sent_at))
        groups[title].notifications.append(notification)

    for group in groups.values():
        group.notifications.sort(key=lambda n: n.sent_at, reverse=True)
    return sorted(groups.values(), key=lambda g: g.notifications[0].sent_at, reverse=True)


# --- Body text ---

_CHECK_IN_RE = re.compile(r"\s*Check-in:\s*[^.]*(?:\.|$)", re.IGNORECASE)
_CHECK_OUT_RE = re.compile(r"\s*Check-out:\s*[^.]*(?:\.|$)", re.IGNORECASE)

_BODY_DATE_FORMATS = ("%b %d, %Y at %I:%M %p", "%B %d, %Y at %I:%M %p")


def strip_check_times(text: str) -> str:
    """Drop ``Check-in: ...`` / ``Check-out: ...`` sentences from a body."""
    cleaned = _CHECK_IN_RE.sub("", text)
    cleaned = _CHECK_OUT_RE.sub("", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    return re.sub(r"\.+$", "", cleaned)


def _to_display_time(text: str) -> str | None:
    for fmt in _BODY_DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
        loc = local(parsed)
        hour = loc.hour % 12 or 12
        return f"{loc:%m/%d/%Y} at {hour}:{loc.minute:02d} {'AM' if loc.hour < 12 else 'PM'}"
    return None


def extract_date_info(text: str, prefix: str) -> str | None:
    """Find ``{prefix}: <date>`` in a body and show the UTC date in local time.

    Text that is not a recognised date is returned as found.
    """
    escaped = re.escape(prefix)
    for pattern in (rf"{escaped}:\s*([^.]*)", rf"{escaped}\s+([^.]*)"):
        match = re.search(pattern, text, re.IGNORECASE)
        if not match:
            continue
        extracted = re.sub(r"\.$", "", match.group(1).strip()).strip()
        return _to_display_time(extracted) or extracted
    return None


# --- Manager ---

class NotificationManager(ScreenManager):
    """Backs the Notifications tab."""

    def __init__(self, backend: Backend, events: EventBus | None = None) -> None:
        super().__init__(backend, events)
        self.notifications: list[AppNotification] = []
        self.selected_filter = NotificationFilter.ALL

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.is_read)

    def _publish_unread(self) -> None:
        self.events.publish(Event(
            event_type=EventType.NOTIFICATIONS_UPDATED,
            data={"unread_count": self.unread_count},
        ))

    def load_notifications(self, limit: int | None = None) -> list[AppNotification]:
        token = self._begin()
        self.is_loading = True
        try:
            user_id = self.backend.current_user_id()
            rows = self.backend.fetch(
                self.backend.table("notifications")
                .select("*")
                .eq("user_id", user_id)
                .order("sent_at", desc=True)
                .limit(limit or get_setting("notifications", "feed_limit", 100))
            )
        except BackendError:
            if self._is_current(token):
                logger.exception("Error loading notifications")
            return self.notifications
        finally:
            self.is_loading = False

        if not self._is_current(token):
            return self.notifications
        self.notifications = AppNotification.from_rows(rows)
        logger.info("Loaded %d notifications (%d unread)", len(self.notifications), self.unread_count)
        self._publish_unread()
        return self.notifications

    def _index_of(self, notification_id: UUID) -> int | None:
        for i, n in enumerate(self.notifications):
            if n.id == notification_id:
                return i
        return None

    def set_read_status(self, notification_id: UUID, is_read: bool) -> None:
        index = self._index_of(notification_id)
        if index is None:
            return
        previous = self.notifications[index]
        if previous.is_read == is_read:
            return

        self.notifications[index] = previous.with_read(is_read)
        try:
            self.backend.fetch(
                self.backend.table("notifications")
                .update({"is_read": is_read})
                .eq("id", str(notification_id))
            )
        except BackendError:
            logger.exception("Error updating notification read status")
            revert = self._index_of(notification_id)
            if revert is not None:
                self.notifications[revert] = previous
            return
        self._publish_unread()

    def mark_all_read(self) -> None:
        for notification in [n for n in self.notifications if not n.is_read]:
            self.set_read_status(notification.id, True)

    def delete_notification(self, notification_id: UUID) -> None:
        index = self._index_of(notification_id)
        if index is None:
            return
        removed = self.notifications.pop(index)
        try:
            self.backend.fetch(
                self.backend.table("notifications").delete().eq("id", str(notification_id))
            )
        except BackendError:
            logger.exception("Error deleting notification")
            self.notifications.insert(min(index, len(self.notifications)), removed)
            return
        self._publish_unread()

    @property
    def filtered(self) -> list[AppNotification]:
        return filter_notifications(self.notifications, self.selected_filter)

    def grouped(self, now: datetime | None = None) -> list[NotificationGroup]:
        return group_by_section(self.filtered, now)


class UnreadBadge:
    """Holds the latest unread count published by the feed."""

    def __init__(self, events: EventBus) -> None:
        self.count = 0
        self._events = events
        events.subscribe(EventType.NOTIFICATIONS_UPDATED, self._on_updated)

    def _on_updated(self, event: Event) -> None:
        self.count = int(event.data.get("unread_count", 0))

    def close(self) -> None:
        self._events.unsubscribe(EventType.NOTIFICATIONS_UPDATED, self._on_updated)
