"""Recurring maintenance tasks attached to a property."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from stayops.backend import Backend
from stayops.events import EventBus
from stayops.exceptions import BackendError
from stayops.models.maintenance import RecurrencePattern, RecurringTask
from stayops.modules.base import ScreenManager
from stayops.timeutils import local, to_iso, utcnow

logger = logging.getLogger(__name__)


def split_by_due_date(tasks: list[RecurringTask], today: date) -> tuple[list[RecurringTask], list[RecurringTask]]:
    """(now due, upcoming), each ordered by due date. Undated tasks are dropped."""
    dated = sorted((t for t in tasks if t.due_date is not None), key=lambda t: t.due_date)
    now_due = [t for t in dated if t.due_date <= today]
    upcoming = [t for t in dated if t.due_date > today]
    return now_due, upcoming


class RecurringTaskManager(ScreenManager):
    def __init__(self, backend: Backend, events: EventBus | None = None) -> None:
        super().__init__(backend, events)
        self.now_due: list[RecurringTask] = []
        self.upcoming: list[RecurringTask] = []

    def load_tasks(self, property_id: UUID, today: date | None = None) -> None:
        self.is_loading = True
        try:
            rows = self.backend.fetch(
                self.backend.table("recurring_tasks").select("*").eq("property_id", str(property_id))
            )
        except BackendError:
            logger.exception("Error loading recurring tasks")
            return
        finally:
            self.is_loading = False
        self.now_due, self.upcoming = split_by_due_date(
            RecurringTask.from_rows(rows), today or local(utcnow()).date()
        )

    def _replace(self, task: RecurringTask) -> None:
        self.now_due = [task if t.id == task.id else t for t in self.now_due]
        self.upcoming = [task if t.id == task.id else t for t in self.upcoming]

    def set_completed(self, task: RecurringTask, completed: bool) -> bool:
        """Tick or untick a task; the local copy reverts if the update fails."""
        completed_at = utcnow().replace(microsecond=0) if completed else None
        self._replace(task.model_copy(update={"completed_at": completed_at}))
        try:
            self.backend.fetch(
                self.backend.table("recurring_tasks")
                .update({"completed_at": to_iso(completed_at) if completed_at else None})
                .eq("id", str(task.id))
            )
        except BackendError:
            logger.exception("Error toggling task %s", task.id)
            self._replace(task)
            return False
        return True

    def create_task(
        self,
        property_id: UUID,
        title: str,
        due_date: date,
        recurrence_pattern: RecurrencePattern = RecurrencePattern.ONE_TIME,
    ) -> bool:
        self.error_message = None
        try:
            self.backend.fetch(
                self.backend.table("recurring_tasks").insert({
                    "property_id": str(property_id),
                    "title": title,
                    "due_date": due_date.isoformat(),
                    "recurrence_pattern": RecurrencePattern(recurrence_pattern).value,
                    "created_by": self.backend.current_user_id(),
                })
            )
        except BackendError as exc:
            logger.exception("Error creating recurring task")
            self.error_message = f"Failed to create task: {exc}"
            return False
        return True
