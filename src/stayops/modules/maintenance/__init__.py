from stayops.modules.maintenance.recurring import RecurringTaskManager, split_by_due_date
from stayops.modules.maintenance.reports import (
    MaintenanceManager,
    can_update_status,
    sort_by_severity,
)

__all__ = [
    "MaintenanceManager",
    "RecurringTaskManager",
    "can_update_status",
    "sort_by_severity",
    "split_by_due_date",
]
