"""Pending checklists per role and their completion through remote functions."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from stayops.backend import Backend
from stayops.events import Event, EventBus, EventType
from stayops.exceptions import BackendError, RemoteFunctionError
from stayops.models.checklist import (
    MANAGER_CHECKLIST_TYPES,
    Checklist,
    ChecklistPropertyStatus,
    ChecklistType,
)
from stayops.models.profile import UserRole
from stayops.models.property import Property
from stayops.models.reservation import Reservation, ReservationStatus
from stayops.modules.base import ScreenManager
from stayops.timeutils import utcnow

logger = logging.getLogger(__name__)

CLEANING_FUNCTION = "complete-cleaning-checklist"
MANAGER_FUNCTION = "complete-manager-checklist"
SUPPLIES_FUNCTION = "complete-supplies-checklist"

AUTH_FAILED_MESSAGE = "Authentication failed. Please sign out and sign in again."


def checked_out_checklists(
    checklists: list[Checklist],
    reservations: dict[UUID, Reservation],
    now: datetime | None = None,
) -> list[Checklist]:
    """Pending cleaning checklists whose confirmed reservation has checked out."""
    now = now or utcnow()
    result = []
    for checklist in checklists:
        if checklist.reservation_id is None:
            continue
        reservation = reservations.get(checklist.reservation_id)
        if reservation is None:
            continue
        if reservation.status == ReservationStatus.CONFIRMED and reservation.check_out < now:
            result.append(checklist)
    return result


def properties_with_pending(properties: list[Property], checklists: list[Checklist]) -> list[Property]:
    """Properties that have at least one of ``checklists``, in the order given."""
    pending = {c.property_id for c in checklists}
    return [p for p in properties if p.id in pending]


class ChecklistManager(ScreenManager):
    """Backs the Checklists screen and the per-type completion forms."""

    def __init__(self, backend: Backend, events: EventBus | None = None) -> None:
        super().__init__(backend, events)
        self.checklists: list[Checklist] = []
        self.user_role: UserRole | None = None

    def _pending(self):
        return self.backend.table("checklists").select("*").is_("completed_at", "null")

    # --- Loading ---

    def load_checklists(self) -> list[Checklist]:
        """Pending checklists relevant to the signed-in user's role."""
        token = self._begin()
        self.is_loading = True
        try:
            try:
                role = self.current_role()
                query = self._pending()
                if role == UserRole.CLEANING_STAFF:
                    query = query.eq("checklist_type", ChecklistType.CLEANING.value)
                elif role == UserRole.PROPERTY_MANAGER:
                    query = query.in_("checklist_type", [t.value for t in MANAGER_CHECKLIST_TYPES])
                rows = self.backend.fetch(query)
                self.user_role = role
            except BackendError:
                logger.exception("Error loading checklists, falling back to all pending")
                try:
                    rows = self.backend.fetch(self._pending())
                except BackendError:
                    logger.exception("Error loading all checklists")
                    return self.checklists
            if self._is_current(token):
                self.checklists = Checklist.from_rows(rows)
        finally:
            self.is_loading = False
        return self.checklists

    def load_after_checkout_cleaning_checklists(self) -> list[Checklist]:
        """Pending cleaning checklists for stays that have already ended."""
        token = self._begin()
        self.is_loading = True
        try:
            rows = self.backend.fetch(
                self._pending().eq("checklist_type", ChecklistType.CLEANING.value)
            )
            pending = Checklist.from_rows(rows)
            reservation_ids = sorted({str(c.reservation_id) for c in pending if c.reservation_id})
            reservations: dict[UUID, Reservation] = {}
            if reservation_ids:
                res_rows = self.backend.fetch(
                    self.backend.table("reservations").select("*").in_("id", reservation_ids)
                )
                reservations = {r.id: r for r in Reservation.from_rows(res_rows)}
        except BackendError:
            logger.exception("Error loading cleaning checklists")
            return self.checklists
        finally:
            self.is_loading = False

        if self._is_current(token):
            self.checklists = checked_out_checklists(pending, reservations)
        return self.checklists

    def manager_checklists_for_property(self, property_id: UUID) -> dict[ChecklistType, Checklist]:
        """First pending inspection/supplies/maintenance checklist of a property."""
        try:
            rows = self.backend.fetch(
                self._pending()
                .eq("property_id", str(property_id))
                .in_("checklist_type", [t.value for t in MANAGER_CHECKLIST_TYPES])
            )
        except BackendError:
            logger.exception("Error loading checklists for property %s", property_id)
            return {}
        found: dict[ChecklistType, Checklist] = {}
        for checklist in Checklist.from_rows(rows):
            if checklist.checklist_type is not None:
                found.setdefault(checklist.checklist_type, checklist)
        return found

    # --- Completion ---

    def complete_cleaning(
        self,
        checklist: Checklist,
        items: dict[str, bool],
        cleaning_schedule_id: UUID | None = None,
    ) -> bool:
        """Submit a cleaning checklist; the property becomes ready for use."""
        body: dict[str, Any] = {
            "checklist_id": str(checklist.id),
            "items": items,
            "property_status_after_cleaning": ChecklistPropertyStatus.READY.value,
        }
        if cleaning_schedule_id is not None:
            body["cleaning_schedule_id"] = str(cleaning_schedule_id)
        return self._complete_cleaning(checklist.id, checklist.property_id, body)

    def submit_ad_hoc_cleaning(self, property_id: UUID, items: dict[str, bool]) -> bool:
        """Record a cleaning that had no pending checklist, then complete it."""
        self.error_message = None
        try:
            user_id = self.backend.current_user_id()
            created = self.backend.fetch(
                self.backend.table("checklists").insert({
                    "property_id": str(property_id),
                    "checklist_type": ChecklistType.CLEANING.value,
                    "items": items,
                    "manager_id": user_id,
                })
            )
        except BackendError as exc:
            logger.exception("Error creating cleaning checklist for property %s", property_id)
            self.error_message = f"Failed to submit checklist: {exc}"
            return False
        if not created:
            self.error_message = "Failed to submit checklist: no checklist was created"
            return False

        checklist = Checklist.from_row(created[0])
        return self._complete_cleaning(checklist.id, property_id, {
            "checklist_id": str(checklist.id),
            "items": items,
            "property_status_after_cleaning": ChecklistPropertyStatus.READY.value,
        })

    def _complete_cleaning(self, checklist_id: UUID, property_id: UUID, body: dict[str, Any]) -> bool:
        self.error_message = None
        self.is_loading = True
        try:
            self.backend.invoke(CLEANING_FUNCTION, body)
        except RemoteFunctionError:
            logger.exception("Error submitting checklist %s", checklist_id)
            self.error_message = AUTH_FAILED_MESSAGE
            return False
        except BackendError as exc:
            logger.exception("Error submitting checklist %s", checklist_id)
            self.error_message = f"Failed to submit checklist: {exc}"
            return False
        finally:
            self.is_loading = False
        self._completed(checklist_id, property_id, ChecklistType.CLEANING)
        return True

    def complete_manager(
        self,
        checklist: Checklist,
        items: dict[str, bool],
        property_status: ChecklistPropertyStatus,
    ) -> bool:
        """Submit an inspection or maintenance checklist."""
        return self._complete(checklist, MANAGER_FUNCTION, {
            "checklist_id": str(checklist.id),
            "items": items,
            "property_status": ChecklistPropertyStatus(property_status).value,
        })

    def complete_supplies(self, checklist: Checklist, items: dict[str, bool]) -> bool:
        """Submit a supplies checklist; checked items are the ones to order."""
        try:
            user_id = self.backend.current_user_id()
        except BackendError as exc:
            self.error_message = f"Failed to submit checklist: {exc}"
            return False
        return self._complete(checklist, SUPPLIES_FUNCTION, {
            "checklist_id": str(checklist.id),
            "completed_by_user_id": user_id,
            "items": items,
            "items_to_order": sorted(name for name, checked in items.items() if checked),
        })

    def _complete(self, checklist: Checklist, function_name: str, body: dict[str, Any]) -> bool:
        self.error_message = None
        self.is_loading = True
        try:
            self.backend.invoke(function_name, body)
        except BackendError as exc:
            logger.exception("Error submitting checklist %s", checklist.id)
            self.error_message = f"Failed to submit checklist: {exc}"
            return False
        finally:
            self.is_loading = False
        self._completed(checklist.id, checklist.property_id, checklist.checklist_type)
        return True

    def _completed(self, checklist_id: UUID, property_id: UUID, checklist_type: ChecklistType | None) -> None:
        logger.info("Completed checklist %s", checklist_id)
        self.checklists = [c for c in self.checklists if c.id != checklist_id]
        self.events.publish(Event(
            event_type=EventType.CHECKLIST_COMPLETED,
            data={
                "checklist_id": str(checklist_id),
                "property_id": str(property_id),
                "checklist_type": checklist_type.value if checklist_type else None,
            },
        ))
