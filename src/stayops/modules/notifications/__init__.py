from stayops.modules.notifications.devices import DeviceRegistrar
from stayops.modules.notifications.feed import (
    NotificationFilter,
    NotificationGroup,
    NotificationManager,
    UnreadBadge,
    date_section,
    extract_date_info,
    filter_notifications,
    formatted_date,
    group_by_section,
    strip_check_times,
    time_ago,
)

__all__ = [
    "DeviceRegistrar",
    "NotificationFilter",
    "NotificationGroup",
    "NotificationManager",
    "UnreadBadge",
    "date_section",
    "extract_date_info",
    "filter_notifications",
    "formatted_date",
    "group_by_section",
    "strip_check_times",
    "time_ago",
]
